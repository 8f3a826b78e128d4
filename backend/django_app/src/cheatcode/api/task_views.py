import logging

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from cheatcode.api.http import api_login_required, error, invalid, member_group, read_json, week_param
from cheatcode.api.models import STATUS_CYCLE, Membership, Task
from cheatcode.api.notifications import notify_quietly
from cheatcode.api.serializers import TaskCreateSerializer, TaskUpdateSerializer, task_json
from cheatcode.weeks import get_current_iso_week

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def tasks(request):
    if request.method == 'GET':
        week_id, err = week_param(request)
        if err:
            return err
        group_id = request.GET.get('group')
        if group_id:
            group, _, err = member_group(request.user, group_id)
            if err:
                return err
            qs = Task.objects.filter(group=group, createdBy=request.user, weekId=week_id)
        else:
            qs = Task.objects.filter(group__isnull=True, createdBy=request.user, weekId=week_id)
        return JsonResponse({"weekId": week_id, "tasks": [task_json(t) for t in qs]})

    s = TaskCreateSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    data = s.validated_data
    week_id = data.get('weekId') or get_current_iso_week()
    group_id = data.get('group')
    member_id = data.get('memberId')

    if not group_id:
        if member_id and member_id != str(request.user.pk):
            return error("Global tasks can only be added for yourself", 400)
        t = Task.objects.create(
            createdBy=request.user, text=data['text'], day=data['day'], weekId=week_id,
            status=data.get('status') or 'not-done',
        )
        logger.info("global task=%s created by user=%s", t.pk, request.user.pk)
        return JsonResponse({"id": t.id, "task": task_json(t)}, status=201)

    group, membership, err = member_group(request.user, group_id)
    if err:
        return err
    if not member_id or member_id == str(request.user.pk):
        t = Task.objects.create(
            group=group, createdBy=request.user, text=data['text'], day=data['day'], weekId=week_id,
            status=data.get('status') or 'not-done',
        )
        logger.info("task=%s created in group=%s by user=%s", t.pk, group.pk, request.user.pk)
        return JsonResponse({"id": t.id, "task": task_json(t)}, status=201)

    # Adding to someone else's row is a suggestion they have to accept.
    try:
        assignee = group.memberships.select_related('user').get(user_id=int(member_id), active=True)
    except (ValueError, Membership.DoesNotExist):
        return error("Member not found in this group", 404)
    t = Task.objects.create(
        group=group, createdBy=assignee.user, suggestedBy=request.user, text=data['text'],
        day=data['day'], weekId=week_id, status='suggested',
    )
    logger.info("task=%s suggested to user=%s by user=%s", t.pk, assignee.user_id, request.user.pk)
    notify_quietly(
        assignee.user, "New task suggestion",
        f"{membership.display_name} suggested: {t.text}",
        groupId=group.pk, taskId=t.id, weekId=week_id,
    )
    return JsonResponse({"id": t.id, "task": task_json(t)}, status=201)


def _visible_task(user, task_id):
    """Return ``(task, None)`` if ``user`` may see the task, else ``(None, response)``."""
    try:
        t = Task.objects.select_related('group').get(pk=task_id)
    except Task.DoesNotExist:
        return None, error("Task not found", 404)
    if t.is_global:
        if t.createdBy_id != user.pk:
            return None, error("Task not found", 404)
    elif not t.group.is_member(user):
        return None, error("Not a member of this group", 403)
    return t, None


def _owned_task(user, task_id):
    t, err = _visible_task(user, task_id)
    if err:
        return None, err
    if t.createdBy_id != user.pk:
        logger.warning("user=%s tried to modify task=%s owned by user=%s", user.pk, t.pk, t.createdBy_id)
        return None, error("Only the task owner can do this", 403)
    return t, None


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@api_login_required
def task_detail(request, task_id: str):
    if request.method == 'GET':
        t, err = _visible_task(request.user, task_id)
        if err:
            return err
        return JsonResponse({"task": task_json(t)})

    if request.method == 'DELETE':
        t, err = _visible_task(request.user, task_id)
        if err:
            return err
        withdrawing = t.is_pending_suggestion and t.suggestedBy_id == request.user.pk
        if t.createdBy_id != request.user.pk and not withdrawing:
            return error("Only the task owner can do this", 403)
        t.delete()
        logger.info("task=%s deleted by user=%s", task_id, request.user.pk)
        return JsonResponse({"ok": True})

    t, err = _owned_task(request.user, task_id)
    if err:
        return err
    if t.is_pending_suggestion:
        return error("Accept the suggestion before editing it", 409)
    s = TaskUpdateSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    fields = list(s.validated_data)
    for name, value in s.validated_data.items():
        setattr(t, name, value)
    if fields:
        t.save(update_fields=fields)
    return JsonResponse({"ok": True, "task": task_json(t)})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def cycle_status(request, task_id: str):
    t, err = _owned_task(request.user, task_id)
    if err:
        return err
    if t.status not in STATUS_CYCLE:
        return error(f"Tasks with status {t.status!r} do not cycle", 409)
    t.status = STATUS_CYCLE[t.status]
    t.save(update_fields=['status'])
    return JsonResponse({"ok": True, "task": task_json(t)})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def accept_suggestion(request, task_id: str):
    t, err = _owned_task(request.user, task_id)
    if err:
        return err
    if not t.is_pending_suggestion:
        return error("Task is not a pending suggestion", 409)
    t.status = 'not-done'
    t.suggestedBy = None
    t.save(update_fields=['status', 'suggestedBy'])
    logger.info("suggestion task=%s accepted by user=%s", t.pk, request.user.pk)
    return JsonResponse({"ok": True, "task": task_json(t)})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def reject_suggestion(request, task_id: str):
    t, err = _owned_task(request.user, task_id)
    if err:
        return err
    if not t.is_pending_suggestion:
        return error("Task is not a pending suggestion", 409)
    t.delete()
    logger.info("suggestion task=%s rejected by user=%s", task_id, request.user.pk)
    return JsonResponse({"ok": True})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def timer(request, task_id: str, action: str):
    t, err = _owned_task(request.user, task_id)
    if err:
        return err
    now = timezone.now()
    if action == 'start':
        if not t.start_timer(now):
            return error("Timer already running", 409)
    elif action == 'stop':
        if not t.stop_timer(now):
            return error("Timer is not running", 409)
    else:
        return error("Unknown timer action", 404)
    t.save(update_fields=['timerStartedAt', 'elapsedSeconds'])
    return JsonResponse({"ok": True, "task": task_json(t)})
