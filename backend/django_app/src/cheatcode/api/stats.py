"""Completion scores for the weekly grid, the leaderboard and yearly stats."""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from cheatcode.weeks import iso_weeks_of_year

# Pending suggestions and info notes are not something you can fail at.
UNSCORED_STATUSES = frozenset(['suggested', 'info'])


def tally(tasks: Iterable) -> Dict[str, int]:
    completed = total = 0
    for t in tasks:
        if t.status in UNSCORED_STATUSES:
            continue
        total += 1
        if t.status == 'completed':
            completed += 1
    return {"completed": completed, "total": total}


def score(tasks: Iterable) -> float:
    counts = tally(tasks)
    if not counts["total"]:
        return 0.0
    return counts["completed"] / counts["total"] * 100


def leaderboard(members: Iterable, tasks: Iterable) -> List[dict]:
    """Rank memberships by their score over ``tasks`` (already one week)."""
    by_owner = defaultdict(list)
    for t in tasks:
        by_owner[t.createdBy_id].append(t)
    rows = []
    for m in members:
        owned = by_owner.get(m.user_id, [])
        counts = tally(owned)
        rows.append({
            "userId": str(m.user_id),
            "name": m.display_name,
            "color": m.display_color,
            "completed": counts["completed"],
            "total": counts["total"],
            "score": round(score(owned), 2),
        })
    rows.sort(key=lambda r: (-r["score"], r["name"].lower()))
    return rows


def yearly(members: Iterable, tasks: Iterable, year: int) -> List[dict]:
    """Per-member score for every ISO week of ``year``.

    ``average`` only counts weeks in which the member had scored tasks, so an
    idle week does not drag it down; it is None when there were none at all.
    """
    weeks = iso_weeks_of_year(year)
    grouped = defaultdict(lambda: defaultdict(list))
    for t in tasks:
        grouped[t.createdBy_id][t.weekId].append(t)
    rows = []
    for m in members:
        per_week = grouped.get(m.user_id, {})
        scores: Dict[str, float] = {}
        active: List[float] = []
        for week_id in weeks:
            owned = per_week.get(week_id, [])
            s = round(score(owned), 2)
            scores[week_id] = s
            if tally(owned)["total"]:
                active.append(s)
        average: Optional[float] = round(sum(active) / len(active), 2) if active else None
        rows.append({
            "userId": str(m.user_id),
            "name": m.display_name,
            "color": m.display_color,
            "weeks": scores,
            "average": average,
        })
    return rows
