"""Tests for the group comment feed."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from cheatcode.api.models import Comment, Task

pytestmark = pytest.mark.django_db

WEEK = "2024-W10"
URL = '/api/groups/{}/comments'


def post_comment(client, group, **body):
    return client.post(URL.format(group.id), body, content_type='application/json')


@pytest.fixture
def task(alice, group):
    return Task.objects.create(group=group, createdBy=alice, text="Stretch", day=1, weekId=WEEK)


def test_post_comment_snapshots_author(alice_client, group):
    r = post_comment(alice_client, group, text="  Nice work  ", weekId=WEEK)
    assert r.status_code == 201
    c = r.json()["comment"]
    assert c["text"] == "Nice work"
    assert c["userName"] == "Alice"
    assert c["userColor"] == "#FF0000"
    assert c["taskId"] is None
    assert c["weekId"] == WEEK


def test_group_color_override_is_used(alice_client, alice, group):
    group.memberships.filter(user=alice).update(color="#ABCDEF")
    c = post_comment(alice_client, group, text="hi", weekId=WEEK).json()["comment"]
    assert c["userColor"] == "#ABCDEF"


def test_fallbacks_for_incomplete_profile(client, carol, group, settings):
    from cheatcode.api.groups import join_group
    carol.profile.displayName = ""
    carol.profile.color = None
    carol.profile.save()
    join_group(carol, group)
    client.force_login(carol)
    c = post_comment(client, group, text="hi", weekId=WEEK).json()["comment"]
    assert c["userName"] == "Anonymous"
    assert c["userColor"] == settings.CHEATCODE_COMMENT_COLOR


def test_comment_on_task_inherits_week(alice_client, group, task):
    c = post_comment(alice_client, group, text="how did it go?", taskId=task.id).json()["comment"]
    assert c["taskId"] == task.id
    assert c["weekId"] == WEEK


def test_comment_on_foreign_task(alice_client, carol, group):
    from cheatcode.api.groups import create_group
    other = create_group(carol, "Other")
    foreign = Task.objects.create(group=other, createdBy=carol, text="secret", day=0, weekId=WEEK)
    assert post_comment(alice_client, group, text="hi", taskId=foreign.id).status_code == 404


def test_empty_comment(alice_client, group):
    assert post_comment(alice_client, group, text="   ").status_code == 400


def test_week_id_must_use_ascii_digits(alice_client, group):
    r = post_comment(alice_client, group, text="hi", weekId="\u0662\u0660\u0662\u0664-W10")
    assert r.status_code == 400
    assert not Comment.objects.exists()


def test_links_are_extracted(alice_client, group):
    c = post_comment(alice_client, group, text="route: https://maps.example/run", weekId=WEEK).json()["comment"]
    assert c["links"] == ["https://maps.example/run"]


def test_mentions_notify_mentioned_members(alice_client, alice, bob, group):
    with patch('cheatcode.api.group_views.notify_quietly') as notify:
        r = post_comment(alice_client, group, text="@bob @alice @nobody keep going", weekId=WEEK)
    c = r.json()["comment"]
    assert c["mentions"] == [str(bob.id), str(alice.id)]
    notify.assert_called_once()
    assert notify.call_args.args[0] == bob
    assert notify.call_args.args[1] == "Alice mentioned you"


def test_list_newest_first_and_filter_by_task(alice_client, bob_client, group, task):
    post_comment(alice_client, group, text="first", weekId=WEEK)
    post_comment(bob_client, group, text="on task", taskId=task.id)
    post_comment(alice_client, group, text="other week", weekId="2024-W11")
    base = timezone.now()
    for offset, text in enumerate(["first", "on task", "other week"]):
        Comment.objects.filter(text=text).update(createdAt=base + timedelta(seconds=offset))

    listed = alice_client.get(f'{URL.format(group.id)}?week={WEEK}').json()["comments"]
    assert [c["text"] for c in listed] == ["on task", "first"]

    only_task = alice_client.get(f'{URL.format(group.id)}?week={WEEK}&task={task.id}').json()["comments"]
    assert [c["text"] for c in only_task] == ["on task"]


def test_non_member(client, carol, group):
    client.force_login(carol)
    assert client.get(URL.format(group.id)).status_code == 403
