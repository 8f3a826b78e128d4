import re
from typing import Dict, Iterable, List

URL_RE = re.compile(r'https?://[^\s]+')
MENTION_RE = re.compile(r'@(\w+)')


def find_links(text: str) -> List[str]:
    return URL_RE.findall(text or '')


def parse_mentions(text: str) -> List[str]:
    """Mention handles in order of appearance, without the ``@``, deduplicated.

    Handles inside URLs are ignored (``https://x.com/@someone``).
    """
    handles = []
    for part in URL_RE.split(text or ''):
        for handle in MENTION_RE.findall(part):
            if handle.lower() not in (h.lower() for h in handles):
                handles.append(handle)
    return handles


def mention_handle(display_name: str) -> str:
    return re.sub(r'\s+', '', display_name or '').lower()


def resolve_mentions(text: str, members: Iterable) -> List[int]:
    """Map ``@name`` handles to user ids of the given memberships."""
    by_handle: Dict[str, int] = {}
    for m in members:
        handle = mention_handle(m.display_name)
        if handle:
            by_handle.setdefault(handle, m.user_id)
    ids = []
    for handle in parse_mentions(text):
        uid = by_handle.get(handle.lower())
        if uid is not None and uid not in ids:
            ids.append(uid)
    return ids
