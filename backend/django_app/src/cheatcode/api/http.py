import functools
import json
import logging

from django.http import JsonResponse

from cheatcode.api.models import Group, Membership
from cheatcode.weeks import WeekError, get_current_iso_week, parse_iso_week

logger = logging.getLogger(__name__)


def read_json(request) -> dict:
    try:
        body = json.loads(request.body or b"{}")
    except Exception:
        body = {}
    return body if isinstance(body, dict) else {}


def error(message, status, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def invalid(serializer):
    return error("Invalid input", 400, fields=serializer.errors)


def api_login_required(view):
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error("Unauthorized", 401)
        return view(request, *args, **kwargs)
    return wrapper


def member_group(user, group_id):
    """Return ``(group, membership, None)`` or ``(None, None, error_response)``."""
    try:
        group = Group.objects.get(pk=group_id)
    except Group.DoesNotExist:
        return None, None, error("Group not found", 404)
    try:
        membership = group.memberships.select_related('user__profile').get(user=user, active=True)
    except Membership.DoesNotExist:
        logger.warning("user=%s is not a member of group=%s", user.pk, group_id)
        return None, None, error("Not a member of this group", 403)
    return group, membership, None


def week_param(request, name='week'):
    """Week id from the query string, defaulting to the current week."""
    week_id = request.GET.get(name) or get_current_iso_week()
    try:
        parse_iso_week(week_id)
    except WeekError as e:
        return None, error(str(e), 400)
    return week_id, None
