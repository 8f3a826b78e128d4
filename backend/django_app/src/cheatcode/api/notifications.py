import json
import logging

from django.conf import settings
from pywebpush import WebPushException, webpush

from cheatcode.api.models import PushSubscription

logger = logging.getLogger(__name__)

GONE_STATUSES = (404, 410)


def push_configured() -> bool:
    return bool(settings.WEB_PUSH_PRIVATE_KEY)


def _subscription_info(sub):
    return {"endpoint": sub.endpoint, "keys": {"p256dh": sub.p256dh, "auth": sub.auth}}


def send_user_notification(user, notification: dict) -> dict:
    """Push ``notification`` to every subscription of ``user``.

    Subscriptions the push service reports as gone are deleted. Returns
    counts of sent, expired and failed deliveries; never raises for a single
    bad endpoint.
    """
    result = {"sent": 0, "expired": 0, "failed": 0}
    if not push_configured():
        logger.debug("push not configured, dropping notification for user=%s", user.pk)
        return result
    payload = json.dumps(notification)
    for sub in PushSubscription.objects.filter(user=user):
        try:
            webpush(
                subscription_info=_subscription_info(sub),
                data=payload,
                vapid_private_key=settings.WEB_PUSH_PRIVATE_KEY,
                vapid_claims={"sub": settings.WEB_PUSH_SUBJECT},
                ttl=settings.WEB_PUSH_TTL,
            )
            result["sent"] += 1
        except WebPushException as e:
            status = getattr(e.response, 'status_code', None)
            if status in GONE_STATUSES:
                logger.info("removing expired push subscription id=%s user=%s", sub.pk, user.pk)
                sub.delete()
                result["expired"] += 1
            else:
                logger.warning("push to user=%s failed: %s", user.pk, e)
                result["failed"] += 1
        except Exception:
            logger.exception("push to user=%s subscription id=%s failed", user.pk, sub.pk)
            result["failed"] += 1
    return result


def notify_quietly(user, title: str, body: str, **data) -> None:
    """Fire-and-forget variant used after writes; failures are only logged."""
    notification = {"title": title, "body": body}
    if data:
        notification["data"] = {k: str(v) for k, v in data.items()}
    try:
        send_user_notification(user, notification)
    except Exception:
        logger.exception("unexpected error notifying user=%s", user.pk)
