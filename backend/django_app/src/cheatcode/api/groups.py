import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from cheatcode.api.models import Group, Membership, Profile, Task
from cheatcode.weeks import day_index, get_current_iso_week

logger = logging.getLogger(__name__)


def ensure_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


@transaction.atomic
def create_group(user, name=None) -> Group:
    group = Group.objects.create(name=name or settings.CHEATCODE_DEFAULT_GROUP_NAME, createdBy=user)
    Membership.objects.create(group=group, user=user)
    logger.info("group=%s created by user=%s", group.pk, user.pk)
    return group


@transaction.atomic
def create_starter_group(user, today=None) -> Group:
    """First group of a new account, seeded with an "Invite a friend" task."""
    today = today or timezone.localdate()
    group = create_group(user)
    Task.objects.create(
        group=group,
        createdBy=user,
        text=settings.CHEATCODE_STARTER_TASK,
        status='not-done',
        day=day_index(today),
        weekId=get_current_iso_week(today),
    )
    return group


@transaction.atomic
def join_group(user, group) -> bool:
    """Add ``user`` to ``group``; returns False when already an active member."""
    membership, created = Membership.objects.get_or_create(group=group, user=user)
    if not created and membership.active:
        return False
    if not created:
        membership.active = True
        membership.joinedAt = timezone.now()
        membership.save(update_fields=['active', 'joinedAt'])
    profile = ensure_profile(user)
    if group.pk in profile.deletedGroups:
        profile.deletedGroups = [g for g in profile.deletedGroups if g != group.pk]
        profile.save(update_fields=['deletedGroups'])
    logger.info("user=%s joined group=%s", user.pk, group.pk)
    return True


@transaction.atomic
def leave_group(user, group) -> bool:
    updated = Membership.objects.filter(group=group, user=user, active=True).update(active=False)
    if not updated:
        return False
    profile = ensure_profile(user)
    if group.pk not in profile.deletedGroups:
        profile.deletedGroups = profile.deletedGroups + [group.pk]
    if profile.pinnedGroup_id == group.pk:
        profile.pinnedGroup = None
    profile.save(update_fields=['deletedGroups', 'pinnedGroup'])
    logger.info("user=%s left group=%s", user.pk, group.pk)
    return True


def user_groups(user):
    """Active groups of ``user``, pinned group first, then by join date."""
    memberships = Membership.objects.filter(user=user, active=True).select_related('group').order_by('joinedAt', 'id')
    groups = [m.group for m in memberships]
    pinned = ensure_profile(user).pinnedGroup_id
    return sorted(groups, key=lambda g: g.pk != pinned)


def share_group(a, b) -> bool:
    return Membership.objects.filter(user=a, active=True, group__memberships__user=b, group__memberships__active=True).exists()
