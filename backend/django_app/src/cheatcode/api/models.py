import uuid

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string

TASK_STATUSES = ['not-done', 'completed', 'postponed', 'suggested', 'info']
STATUS_CYCLE = {
    'not-done': 'completed',
    'completed': 'postponed',
    'postponed': 'not-done',
    # Info items drop back into the cycle as plain tasks.
    'info': 'not-done',
}


def _task_id():
    return str(uuid.uuid4())


def _group_id():
    return get_random_string(10)


class Group(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=_group_id)
    name = models.CharField(max_length=100)
    createdBy = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='created_groups')
    createdAt = models.DateTimeField(default=timezone.now)

    def active_members(self):
        return self.memberships.filter(active=True).select_related('user', 'user__profile').order_by('joinedAt', 'id')

    def is_member(self, user) -> bool:
        return self.memberships.filter(user=user, active=True).exists()

    def __str__(self):
        return self.name


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    displayName = models.CharField(max_length=20, blank=True, default='')
    color = models.CharField(max_length=7, blank=True, null=True)
    profileCompleted = models.BooleanField(default=False)
    pinnedGroup = models.ForeignKey(Group, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    tutorialSeen = models.BooleanField(default=False)
    deletedGroups = models.JSONField(default=list, blank=True)

    def __str__(self):
        return self.displayName or self.user.username


class Membership(models.Model):
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='memberships')
    active = models.BooleanField(default=True)
    color = models.CharField(max_length=7, blank=True, null=True)
    joinedAt = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ('group', 'user')

    @property
    def display_name(self) -> str:
        profile = getattr(self.user, 'profile', None)
        return (profile and profile.displayName) or 'User'

    @property
    def display_color(self) -> str:
        profile = getattr(self.user, 'profile', None)
        return self.color or (profile and profile.color) or settings.CHEATCODE_DEFAULT_COLOR


class Task(models.Model):
    id = models.CharField(primary_key=True, max_length=64, default=_task_id)
    # null group: the owner's personal ("global") collection
    group = models.ForeignKey(Group, on_delete=models.CASCADE, null=True, blank=True, related_name='tasks')
    createdBy = models.ForeignKey(User, on_delete=models.CASCADE, related_name='tasks')
    suggestedBy = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='suggested_tasks')
    text = models.CharField(max_length=500)
    status = models.CharField(max_length=16, default='not-done', choices=[(s, s) for s in TASK_STATUSES])
    day = models.PositiveSmallIntegerField()  # 0-6, Monday-Sunday
    weekId = models.CharField(max_length=8, db_index=True)  # YYYY-Www
    createdAt = models.DateTimeField(default=timezone.now)
    timerStartedAt = models.DateTimeField(null=True, blank=True)
    elapsedSeconds = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['createdAt', 'id']

    @property
    def is_global(self) -> bool:
        return self.group_id is None

    @property
    def is_pending_suggestion(self) -> bool:
        return self.status == 'suggested'

    def start_timer(self, now=None) -> bool:
        if self.timerStartedAt is not None:
            return False
        self.timerStartedAt = now or timezone.now()
        return True

    def stop_timer(self, now=None) -> bool:
        if self.timerStartedAt is None:
            return False
        now = now or timezone.now()
        elapsed = int((now - self.timerStartedAt).total_seconds())
        self.elapsedSeconds = (self.elapsedSeconds or 0) + max(elapsed, 0)
        self.timerStartedAt = None
        return True

    def __str__(self):
        return self.text


class Comment(models.Model):
    id = models.CharField(primary_key=True, max_length=64, default=_task_id)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='comments')
    userName = models.CharField(max_length=20)
    userColor = models.CharField(max_length=7)
    task = models.ForeignKey(Task, on_delete=models.SET_NULL, null=True, blank=True, related_name='comments')
    text = models.TextField()
    mentions = models.JSONField(default=list, blank=True)
    weekId = models.CharField(max_length=8, db_index=True)
    createdAt = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-createdAt']


class PushSubscription(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='push_subs')
    endpoint = models.TextField()
    p256dh = models.TextField()
    auth = models.TextField()

    class Meta:
        unique_together = ('user', 'endpoint')
