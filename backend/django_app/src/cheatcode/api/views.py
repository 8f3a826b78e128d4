import logging

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from cheatcode.api import groups as group_ops
from cheatcode.api.http import api_login_required, error, invalid, read_json
from cheatcode.api.models import Group, PushSubscription
from cheatcode.api.notifications import push_configured, send_user_notification
from cheatcode.api.serializers import (
    NotifySerializer, PreferencesSerializer, ProfileSerializer, RegisterSerializer, profile_json, week_json,
)
from cheatcode.weeks import WeekError, get_iso_week_for_month

logger = logging.getLogger(__name__)

SERVICE_NAME = 'cheatcode-backend'


@require_http_methods(["GET"])
def healthz(request):
    return JsonResponse({"ok": True})


@require_http_methods(["GET"])
def ping(request):
    return JsonResponse({"ok": True, "service": SERVICE_NAME})


def _user_json(user):
    profile = group_ops.ensure_profile(user)
    return {"id": str(user.id), "email": user.username, "needsProfileSetup": not profile.profileCompleted}


@csrf_exempt
@require_http_methods(["POST"])
def register(request):
    s = RegisterSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    email = s.validated_data['email'].lower()
    if User.objects.filter(username=email).exists():
        return error("Email already registered", 409)
    pending = s.validated_data.get('pendingInvite') or ''
    invite_group = Group.objects.filter(pk=pending).first() if pending else None

    with transaction.atomic():
        user = User.objects.create_user(username=email, email=email, password=s.validated_data['password'])
        group_ops.ensure_profile(user)
        if invite_group is not None:
            group_ops.join_group(user, invite_group)
        else:
            if pending:
                logger.info("ignoring unknown pending invite %r for user=%s", pending, user.pk)
            group_ops.create_starter_group(user)

    login(request, user)
    logger.info("registered user=%s", user.pk)
    return JsonResponse({"ok": True, "user": _user_json(user)})


@csrf_exempt
@require_http_methods(["POST"])
def login_view(request):
    body = read_json(request)
    email = (body.get('email') or '').strip().lower()
    password = body.get('password') or ''
    user = authenticate(request, username=email, password=password)
    if user is None:
        return error("Invalid credentials", 401)
    login(request, user)
    return JsonResponse({"ok": True, "user": _user_json(user)})


@csrf_exempt
@require_http_methods(["POST"])
def logout_view(request):
    logout(request)
    return JsonResponse({"ok": True})


@require_http_methods(["GET"])
def me(request):
    if request.user.is_authenticated:
        return JsonResponse({"user": _user_json(request.user)})
    return JsonResponse({"user": None})


@csrf_exempt
@require_http_methods(["GET", "PUT"])
@api_login_required
def profile(request):
    user = request.user
    p = group_ops.ensure_profile(user)
    if request.method == 'GET':
        return JsonResponse({"profile": profile_json(user)})
    s = ProfileSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    color = s.validated_data['color']
    # Colors are picked once, at profile setup.
    if p.profileCompleted and p.color and p.color.lower() != color.lower():
        return error("Color cannot be changed", 409)
    p.displayName = s.validated_data['displayName']
    p.color = color
    p.profileCompleted = True
    p.save(update_fields=['displayName', 'color', 'profileCompleted'])
    logger.info("profile completed user=%s", user.pk)
    return JsonResponse({"ok": True, "profile": profile_json(user)})


@csrf_exempt
@require_http_methods(["PUT"])
@api_login_required
def preferences(request):
    s = PreferencesSerializer(data=read_json(request))
    if not s.is_valid():
        return invalid(s)
    p = group_ops.ensure_profile(request.user)
    fields = []
    if 'pinnedGroup' in s.validated_data:
        group_id = s.validated_data['pinnedGroup']
        if group_id and not request.user.memberships.filter(group_id=group_id, active=True).exists():
            return error("Not a member of this group", 403)
        p.pinnedGroup_id = group_id or None
        fields.append('pinnedGroup')
    if 'tutorialSeen' in s.validated_data:
        p.tutorialSeen = s.validated_data['tutorialSeen']
        fields.append('tutorialSeen')
    if fields:
        p.save(update_fields=fields)
    return JsonResponse({"ok": True, "profile": profile_json(request.user)})


@require_http_methods(["GET"])
def week_info(request, week_id: str):
    try:
        return JsonResponse(week_json(week_id))
    except WeekError as e:
        return error(str(e), 400)


@require_http_methods(["GET"])
def week_for_month(request):
    try:
        year = int(request.GET.get('year', ''))
        month = int(request.GET.get('month', ''))
    except ValueError:
        return error("year and month required", 400)
    try:
        return JsonResponse(week_json(get_iso_week_for_month(year, month)))
    except WeekError as e:
        return error(str(e), 400)


@require_http_methods(["GET"])
def vapid_public_key(request):
    key = settings.WEB_PUSH_PUBLIC_KEY
    if not key:
        return error("Push not configured", 503)
    return JsonResponse({"key": key})


@csrf_exempt
@require_http_methods(["POST", "DELETE"])
@api_login_required
def push_subscribe(request):
    body = read_json(request)
    endpoint = (body.get('endpoint') or '').strip()
    if not endpoint:
        return error("endpoint required", 400)
    if request.method == 'DELETE':
        PushSubscription.objects.filter(user=request.user, endpoint=endpoint).delete()
        return JsonResponse({"ok": True})
    keys = body.get('keys') or {}
    p256dh = keys.get('p256dh') or ''
    auth = keys.get('auth') or ''
    if not p256dh or not auth:
        return error("keys.p256dh and keys.auth required", 400)
    sub, created = PushSubscription.objects.get_or_create(user=request.user, endpoint=endpoint, defaults={'p256dh': p256dh, 'auth': auth})
    if not created:
        sub.p256dh = p256dh
        sub.auth = auth
        sub.save()
    return JsonResponse({"ok": True})


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def notify(request):
    s = NotifySerializer(data=read_json(request))
    if not s.is_valid():
        return error("Missing fields", 400, fields=s.errors)
    if not push_configured():
        return error("Push not configured", 503)
    try:
        target = User.objects.get(pk=int(s.validated_data['userId']))
    except (ValueError, User.DoesNotExist):
        return error("User not found", 404)
    if target != request.user and not group_ops.share_group(request.user, target):
        logger.warning("user=%s tried to notify non-groupmate user=%s", request.user.pk, target.pk)
        return error("Not allowed", 403)
    result = send_user_notification(target, dict(s.validated_data['notification']))
    if result["failed"] and not result["sent"]:
        logger.error("all push deliveries failed for user=%s", target.pk)
        return error("Failed to send notification", 500, **result)
    return JsonResponse({"success": True, **result})
