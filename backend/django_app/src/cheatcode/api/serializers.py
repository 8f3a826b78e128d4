from django.conf import settings
from rest_framework import serializers

from cheatcode.api.text import find_links
from cheatcode.weeks import (
    WeekError, WeekOutOfRange, format_date_range, get_current_iso_week, get_day_labels, get_relative_iso_week,
    get_week_date_range, parse_iso_week,
)

HEX_COLOR = r'^#[0-9a-fA-F]{6}$'


class WeekIdField(serializers.CharField):
    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            parse_iso_week(value)
        except WeekError as e:
            raise serializers.ValidationError(str(e))
        return value


class RegisterSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, trim_whitespace=False)
    pendingInvite = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ProfileSerializer(serializers.Serializer):
    displayName = serializers.CharField(max_length=settings.CHEATCODE_DISPLAY_NAME_MAX)
    color = serializers.RegexField(HEX_COLOR)


class PreferencesSerializer(serializers.Serializer):
    pinnedGroup = serializers.CharField(required=False, allow_null=True)
    tutorialSeen = serializers.BooleanField(required=False)


class GroupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)


class ColorSerializer(serializers.Serializer):
    color = serializers.RegexField(HEX_COLOR, allow_null=True)


class TaskCreateSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=500)
    day = serializers.IntegerField(min_value=0, max_value=6)
    weekId = WeekIdField(required=False)
    group = serializers.CharField(required=False, allow_null=True)
    memberId = serializers.CharField(required=False, allow_null=True)
    status = serializers.ChoiceField(['not-done', 'info'], required=False)


class TaskUpdateSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=500, required=False)
    status = serializers.ChoiceField(['not-done', 'completed', 'postponed', 'info'], required=False)
    day = serializers.IntegerField(min_value=0, max_value=6, required=False)


class CommentSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000)
    weekId = WeekIdField(required=False)
    taskId = serializers.CharField(required=False, allow_null=True)


class NotificationSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    body = serializers.CharField(max_length=1000, allow_blank=True)
    data = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class NotifySerializer(serializers.Serializer):
    userId = serializers.CharField()
    notification = NotificationSerializer()


# Outbound payloads

def _neighbour(week_id, offset):
    try:
        return get_relative_iso_week(week_id, offset)
    except WeekOutOfRange:
        return None


def week_json(week_id):
    start, end = get_week_date_range(week_id)
    return {
        "weekId": week_id,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "label": format_date_range(week_id),
        "days": get_day_labels(week_id),
        "previousWeek": _neighbour(week_id, -1),
        "nextWeek": _neighbour(week_id, 1),
        "isCurrent": week_id == get_current_iso_week(),
    }


def _iso(dt):
    return dt.isoformat() if dt else None


def task_json(t):
    return {
        "id": t.id,
        "text": t.text,
        "status": t.status,
        "day": t.day,
        "createdBy": str(t.createdBy_id),
        "createdAt": _iso(t.createdAt),
        "weekId": t.weekId,
        "suggestedBy": str(t.suggestedBy_id) if t.suggestedBy_id else None,
        "timerStartedAt": _iso(t.timerStartedAt),
        "elapsedSeconds": t.elapsedSeconds,
        "isGlobal": t.is_global,
        "group": t.group_id,
    }


def member_json(m):
    return {
        "id": str(m.user_id),
        "name": m.display_name,
        "color": m.display_color,
        "joinedAt": _iso(m.joinedAt),
    }


def group_json(g, members=None):
    members = list(members if members is not None else g.active_members())
    return {
        "id": g.id,
        "name": g.name,
        "createdBy": str(g.createdBy_id) if g.createdBy_id else None,
        "createdAt": _iso(g.createdAt),
        "members": [member_json(m) for m in members],
        "memberUids": {str(uid): active for uid, active in g.memberships.values_list('user_id', 'active')},
    }


def comment_json(c):
    return {
        "id": c.id,
        "text": c.text,
        "userId": str(c.user_id),
        "userName": c.userName,
        "userColor": c.userColor,
        "taskId": c.task_id,
        "mentions": [str(uid) for uid in c.mentions],
        "links": find_links(c.text),
        "createdAt": _iso(c.createdAt),
        "weekId": c.weekId,
    }


def profile_json(user):
    p = user.profile
    return {
        "uid": str(user.id),
        "email": user.email,
        "displayName": p.displayName,
        "color": p.color,
        "profileCompleted": p.profileCompleted,
        "pinnedGroup": p.pinnedGroup_id,
        "tutorialSeen": p.tutorialSeen,
        "deletedGroups": list(p.deletedGroups),
        "groups": list(user.memberships.filter(active=True).values_list('group_id', flat=True)),
    }
