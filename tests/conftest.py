"""Shared fixtures: users with completed profiles and a group they share."""

import pytest
from django.contrib.auth.models import User

from cheatcode.api.groups import create_group, ensure_profile, join_group


def make_user(email, name=None, color=None):
    user = User.objects.create_user(username=email, email=email, password='correct-horse-battery')
    profile = ensure_profile(user)
    if name:
        profile.displayName = name
        profile.color = color or '#112233'
        profile.profileCompleted = True
        profile.save()
    return user


@pytest.fixture
def alice(db):
    return make_user('alice@example.com', 'Alice', '#FF0000')


@pytest.fixture
def bob(db):
    return make_user('bob@example.com', 'Bob', '#00FF00')


@pytest.fixture
def carol(db):
    return make_user('carol@example.com', 'Carol', '#0000FF')


@pytest.fixture
def group(alice, bob):
    g = create_group(alice, 'Gym buddies')
    join_group(bob, g)
    return g


@pytest.fixture
def alice_client(client, alice):
    client.force_login(alice)
    return client


@pytest.fixture
def bob_client(bob):
    from django.test import Client
    c = Client()
    c.force_login(bob)
    return c


@pytest.fixture
def push_enabled(settings):
    settings.WEB_PUSH_PRIVATE_KEY = 'test-private-key'
    settings.WEB_PUSH_PUBLIC_KEY = 'test-public-key'
    return settings
