"""Tests for cheatcode.api.models: task timer and member colors."""

from datetime import timedelta

import pytest
from django.utils import timezone

from cheatcode.api.models import Membership, Task


@pytest.fixture
def task(alice, group):
    return Task.objects.create(group=group, createdBy=alice, text="Run 5k", day=0, weekId="2024-W10")


def test_new_task_defaults(task):
    assert task.status == "not-done"
    assert task.elapsedSeconds == 0
    assert task.timerStartedAt is None
    assert not task.is_global
    assert len(task.id) == 36


def test_global_task(alice):
    t = Task.objects.create(createdBy=alice, text="Read", day=3, weekId="2024-W10")
    assert t.is_global


def test_timer_accumulates_elapsed_seconds(task):
    start = timezone.now()
    assert task.start_timer(start)
    assert not task.start_timer(start)
    assert task.stop_timer(start + timedelta(seconds=90, milliseconds=700))
    assert task.elapsedSeconds == 90
    assert task.timerStartedAt is None

    assert task.start_timer(start + timedelta(minutes=10))
    task.stop_timer(start + timedelta(minutes=11))
    assert task.elapsedSeconds == 150


def test_stop_without_start(task):
    assert not task.stop_timer()
    assert task.elapsedSeconds == 0


def test_member_color_falls_back_to_profile_then_default(group, alice, settings):
    m = Membership.objects.get(group=group, user=alice)
    assert m.display_color == "#FF0000"
    m.color = "#ABCDEF"
    assert m.display_color == "#ABCDEF"
    m.color = None
    m.user.profile.color = None
    assert m.display_color == settings.CHEATCODE_DEFAULT_COLOR


def test_member_display_name(group, alice):
    m = Membership.objects.get(group=group, user=alice)
    assert m.display_name == "Alice"
