import logging
from collections import defaultdict

from django.conf import settings
from django.db.models import Q
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from cheatcode.api import groups as group_ops
from cheatcode.api import stats
from cheatcode.api.http import api_login_required, error, invalid, member_group, read_json, week_param
from cheatcode.api.models import Comment, Group, Task
from cheatcode.api.notifications import notify_quietly
from cheatcode.api.serializers import (
    ColorSerializer, CommentSerializer, GroupSerializer, comment_json, group_json, member_json, task_json, week_json,
)
from cheatcode.api.text import resolve_mentions
from cheatcode.weeks import get_current_iso_week, iso_weeks_of_year

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def groups(request):
    if request.method == 'GET':
        return JsonResponse({"groups": [group_json(g) for g in group_ops.user_groups(request.user)]})
    body = read_json(request)
    name = settings.CHEATCODE_DEFAULT_GROUP_NAME
    if body.get('name') is not None:
        s = GroupSerializer(data=body)
        if not s.is_valid():
            return invalid(s)
        name = s.validated_data['name']
    group = group_ops.create_group(request.user, name)
    return JsonResponse({"id": group.id, "group": group_json(group)}, status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT"])
@api_login_required
def group_detail(request, group_id: str):
    group, _, err = member_group(request.user, group_id)
    if err:
        return err
    if request.method == 'PUT':
        s = GroupSerializer(data=read_json(request))
        if not s.is_valid():
            return invalid(s)
        group.name = s.validated_data['name']
        group.save(update_fields=['name'])
        logger.info("group=%s renamed by user=%s", group.pk, request.user.pk)
    return JsonResponse({"group": group_json(group)})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def leave(request, group_id: str):
    group, _, err = member_group(request.user, group_id)
    if err:
        return err
    group_ops.leave_group(request.user, group)
    return JsonResponse({"ok": True})


@csrf_exempt
@require_http_methods(["PUT"])
@api_login_required
def member_color(request, group_id: str):
    group, membership, err = member_group(request.user, group_id)
    if err:
        return err
    s = ColorSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    membership.color = s.validated_data['color']
    membership.save(update_fields=['color'])
    return JsonResponse({"ok": True, "member": member_json(membership)})


@csrf_exempt
@require_http_methods(["GET", "POST"])
def invite(request, code: str):
    try:
        group = Group.objects.get(pk=code)
    except Group.DoesNotExist:
        return error("Invalid invite link. The group may no longer exist.", 404)
    if request.method == 'GET':
        return JsonResponse({"group": {"id": group.id, "name": group.name, "memberCount": group.active_members().count()}})
    if not request.user.is_authenticated:
        # The client keeps the code and retries after sign-in.
        return error("Unauthorized", 401, pendingInvite=group.id)
    joined = group_ops.join_group(request.user, group)
    return JsonResponse({"ok": True, "alreadyMember": not joined, "group": group_json(group)})


@require_http_methods(["GET"])
@api_login_required
def week_grid(request, group_id: str):
    group, _, err = member_group(request.user, group_id)
    if err:
        return err
    week_id, err = week_param(request)
    if err:
        return err
    members = list(group.active_members())
    by_owner = defaultdict(list)
    for t in _member_tasks(group, members).filter(weekId=week_id):
        by_owner[t.createdBy_id].append(t)

    rows = []
    for m in members:
        owned = sorted(by_owner.get(m.user_id, []), key=lambda t: (t.day, t.createdAt))
        rows.append({
            **member_json(m),
            "tasks": [task_json(t) for t in owned],
            "score": round(stats.score(owned), 2),
        })
    return JsonResponse({
        "group": {"id": group.id, "name": group.name},
        **week_json(week_id),
        "members": rows,
    })


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def comments(request, group_id: str):
    group, membership, err = member_group(request.user, group_id)
    if err:
        return err
    if request.method == 'GET':
        week_id, err = week_param(request)
        if err:
            return err
        qs = Comment.objects.filter(group=group, weekId=week_id)
        task_id = request.GET.get('task')
        if task_id:
            qs = qs.filter(task_id=task_id)
        return JsonResponse({"weekId": week_id, "comments": [comment_json(c) for c in qs]})

    s = CommentSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    data = s.validated_data
    task = None
    if data.get('taskId'):
        task = Task.objects.filter(pk=data['taskId'], group=group).first()
        if task is None:
            return error("Task not found in this group", 404)
    week_id = data.get('weekId') or (task.weekId if task else get_current_iso_week())
    members = list(group.active_members())
    profile = group_ops.ensure_profile(request.user)
    c = Comment.objects.create(
        group=group,
        user=request.user,
        userName=profile.displayName or 'Anonymous',
        userColor=membership.color or profile.color or settings.CHEATCODE_COMMENT_COLOR,
        task=task,
        text=data['text'],
        mentions=resolve_mentions(data['text'], members),
        weekId=week_id,
    )
    logger.info("comment=%s in group=%s by user=%s", c.pk, group.pk, request.user.pk)
    for m in members:
        if m.user_id in c.mentions and m.user_id != request.user.pk:
            notify_quietly(
                m.user, f"{c.userName} mentioned you", c.text,
                groupId=group.pk, commentId=c.id, weekId=week_id,
            )
    return JsonResponse({"id": c.id, "comment": comment_json(c)}, status=201)


def _member_tasks(group, members):
    """Group tasks plus the members' personal tasks, as shown in the grid."""
    member_ids = [m.user_id for m in members]
    return Task.objects.filter(Q(group=group) | Q(group__isnull=True), createdBy_id__in=member_ids)


@require_http_methods(["GET"])
@api_login_required
def weekly_stats(request, group_id: str):
    group, _, err = member_group(request.user, group_id)
    if err:
        return err
    week_id, err = week_param(request)
    if err:
        return err
    members = list(group.active_members())
    tasks = _member_tasks(group, members).filter(weekId=week_id)
    return JsonResponse({"weekId": week_id, "leaderboard": stats.leaderboard(members, tasks)})


@require_http_methods(["GET"])
@api_login_required
def yearly_stats(request, group_id: str):
    group, _, err = member_group(request.user, group_id)
    if err:
        return err
    try:
        year = int(request.GET.get('year') or get_current_iso_week()[:4])
    except ValueError:
        return error("year must be an integer", 400)
    if not 1 <= year <= 9999:
        return error("year out of range", 400)
    members = list(group.active_members())
    tasks = _member_tasks(group, members).filter(weekId__in=iso_weeks_of_year(year))
    return JsonResponse({"year": year, "weeks": iso_weeks_of_year(year), "members": stats.yearly(members, tasks, year)})
