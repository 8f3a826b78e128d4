"""Tests for groups, invites, the weekly grid and stats endpoints."""

import pytest

from cheatcode.api.groups import create_group, join_group
from cheatcode.api.models import Membership, Task

pytestmark = pytest.mark.django_db

WEEK = "2024-W10"


def add_task(owner, group, status="not-done", day=0, week=WEEK, **kw):
    return Task.objects.create(group=group, createdBy=owner, text=f"{status} task", status=status, day=day, weekId=week, **kw)


class TestGroups:
    def test_list_groups_with_members(self, alice_client, group, alice, bob):
        groups = alice_client.get('/api/groups').json()["groups"]
        assert [g["id"] for g in groups] == [group.id]
        g = groups[0]
        assert [m["name"] for m in g["members"]] == ["Alice", "Bob"]
        assert g["memberUids"] == {str(alice.id): True, str(bob.id): True}

    def test_pinned_group_listed_first(self, alice_client, alice, group):
        second = create_group(alice, 'Book club')
        alice.profile.pinnedGroup = second
        alice.profile.save()
        ids = [g["id"] for g in alice_client.get('/api/groups').json()["groups"]]
        assert ids == [second.id, group.id]

    def test_create_group_default_name(self, alice_client):
        r = alice_client.post('/api/groups', {}, content_type='application/json')
        assert r.status_code == 201
        assert r.json()["group"]["name"] == 'New Group (click to change)'
        assert len(r.json()["id"]) == 10

    def test_create_group_with_name(self, alice_client):
        r = alice_client.post('/api/groups', {"name": "Runners"}, content_type='application/json')
        assert r.json()["group"]["name"] == "Runners"

    def test_rename(self, bob_client, group):
        r = bob_client.put(f'/api/groups/{group.id}', {"name": "Lifters"}, content_type='application/json')
        assert r.status_code == 200
        group.refresh_from_db()
        assert group.name == "Lifters"

    def test_rename_requires_name(self, bob_client, group):
        r = bob_client.put(f'/api/groups/{group.id}', {"name": ""}, content_type='application/json')
        assert r.status_code == 400

    def test_non_member_is_forbidden(self, client, carol, group):
        client.force_login(carol)
        assert client.get(f'/api/groups/{group.id}').status_code == 403
        assert client.get(f'/api/groups/{group.id}/week').status_code == 403

    def test_unknown_group(self, alice_client):
        assert alice_client.get('/api/groups/doesnotexist').status_code == 404

    def test_anonymous(self, client, group):
        assert client.get('/api/groups').status_code == 401

    def test_leave(self, bob_client, bob, group):
        bob.profile.pinnedGroup = group
        bob.profile.save()
        assert bob_client.post(f'/api/groups/{group.id}/leave').status_code == 200
        m = Membership.objects.get(group=group, user=bob)
        assert m.active is False
        bob.profile.refresh_from_db()
        assert bob.profile.deletedGroups == [group.id]
        assert bob.profile.pinnedGroup is None
        assert bob_client.get('/api/groups').json()["groups"] == []
        assert bob_client.get(f'/api/groups/{group.id}').status_code == 403

    def test_left_member_shows_false_in_member_uids(self, alice_client, bob, group):
        Membership.objects.filter(group=group, user=bob).update(active=False)
        g = alice_client.get(f'/api/groups/{group.id}').json()["group"]
        assert g["memberUids"][str(bob.id)] is False
        assert len(g["members"]) == 1

    def test_member_color_override(self, bob_client, group):
        r = bob_client.put(f'/api/groups/{group.id}/color', {"color": "#ABCDEF"}, content_type='application/json')
        assert r.status_code == 200
        assert r.json()["member"]["color"] == "#ABCDEF"
        r = bob_client.put(f'/api/groups/{group.id}/color', {"color": None}, content_type='application/json')
        assert r.json()["member"]["color"] == "#00FF00"


class TestInvite:
    def test_preview(self, client, group):
        body = client.get(f'/api/invite/{group.id}').json()
        assert body["group"] == {"id": group.id, "name": "Gym buddies", "memberCount": 2}

    def test_unknown_code(self, client):
        assert client.get('/api/invite/unknown').status_code == 404

    def test_join_requires_login(self, client, group):
        r = client.post(f'/api/invite/{group.id}')
        assert r.status_code == 401
        assert r.json()["pendingInvite"] == group.id

    def test_join(self, client, carol, group):
        client.force_login(carol)
        r = client.post(f'/api/invite/{group.id}')
        assert r.status_code == 200
        assert r.json()["alreadyMember"] is False
        assert group.is_member(carol)

    def test_join_twice(self, bob_client, group):
        assert bob_client.post(f'/api/invite/{group.id}').json()["alreadyMember"] is True

    def test_rejoin_after_leaving(self, bob_client, bob, group):
        bob_client.post(f'/api/groups/{group.id}/leave')
        r = bob_client.post(f'/api/invite/{group.id}')
        assert r.json()["alreadyMember"] is False
        bob.profile.refresh_from_db()
        assert bob.profile.deletedGroups == []


class TestWeekGrid:
    def test_grid(self, alice_client, alice, bob, group):
        add_task(alice, group, "completed", day=0)
        add_task(alice, group, "not-done", day=2)
        add_task(bob, group, "postponed", day=1)
        add_task(bob, group, "completed", day=1, week="2024-W11")
        Task.objects.create(createdBy=alice, text="personal", day=4, weekId=WEEK)

        body = alice_client.get(f'/api/groups/{group.id}/week?week={WEEK}').json()
        assert body["weekId"] == WEEK
        assert body["start"] == "2024-03-04"
        assert body["end"] == "2024-03-10"
        assert body["label"] == "March 4 - March 10"
        assert body["previousWeek"] == "2024-W09"
        assert body["nextWeek"] == "2024-W11"
        assert len(body["days"]) == 7

        rows = {r["name"]: r for r in body["members"]}
        assert [t["day"] for t in rows["Alice"]["tasks"]] == [0, 2, 4]
        assert rows["Alice"]["tasks"][-1]["isGlobal"] is True
        assert rows["Alice"]["score"] == pytest.approx(33.33)
        assert rows["Bob"]["score"] == 0.0
        assert len(rows["Bob"]["tasks"]) == 1

    def test_invalid_week(self, alice_client, group):
        r = alice_client.get(f'/api/groups/{group.id}/week?week=2024-W60')
        assert r.status_code == 400

    def test_defaults_to_current_week(self, alice_client, group):
        from cheatcode.weeks import get_current_iso_week
        body = alice_client.get(f'/api/groups/{group.id}/week').json()
        assert body["weekId"] == get_current_iso_week()
        assert body["isCurrent"] is True


class TestStats:
    def test_weekly_leaderboard(self, alice_client, alice, bob, group):
        add_task(alice, group, "completed")
        add_task(alice, group, "not-done")
        add_task(bob, group, "completed")
        add_task(bob, group, "suggested", suggestedBy=alice)
        board = alice_client.get(f'/api/groups/{group.id}/stats?week={WEEK}').json()["leaderboard"]
        assert [(r["name"], r["score"]) for r in board] == [("Bob", 100.0), ("Alice", 50.0)]

    def test_other_groups_do_not_count(self, alice_client, alice, carol, group):
        other = create_group(carol, 'Other')
        join_group(alice, other)
        add_task(alice, other, "not-done")
        add_task(alice, group, "completed")
        board = alice_client.get(f'/api/groups/{group.id}/stats?week={WEEK}').json()["leaderboard"]
        assert board[0]["name"] == "Alice"
        assert board[0]["total"] == 1

    def test_yearly(self, alice_client, alice, group):
        add_task(alice, group, "completed", week="2024-W01")
        add_task(alice, group, "not-done", week="2024-W02")
        add_task(alice, group, "completed", week="2023-W52")
        body = alice_client.get(f'/api/groups/{group.id}/stats/yearly?year=2024').json()
        assert body["year"] == 2024
        assert len(body["weeks"]) == 52
        alice_row = next(m for m in body["members"] if m["name"] == "Alice")
        assert alice_row["weeks"]["2024-W01"] == 100.0
        assert alice_row["weeks"]["2024-W02"] == 0.0
        assert alice_row["average"] == 50.0

    def test_yearly_bad_year(self, alice_client, group):
        assert alice_client.get(f'/api/groups/{group.id}/stats/yearly?year=abc').status_code == 400
        assert alice_client.get(f'/api/groups/{group.id}/stats/yearly?year=0').status_code == 400
