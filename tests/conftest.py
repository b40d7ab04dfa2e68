"""Shared fixtures for the chat core tests."""

from __future__ import annotations

import types

import pytest

from concord.app import ChatApp
from concord.config import Settings
from concord.core.permissions import Role
from concord.data.models import ChannelKind

from .helpers import PASSWORD, TickingClock, channel_named, switch


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def app(clock: TickingClock) -> ChatApp:
    return ChatApp(Settings(), clock=clock)


@pytest.fixture
def world(app: ChatApp) -> types.SimpleNamespace:
    """alice owns "Home"; bob and carol are plain members; dave is an outsider."""
    for name in ("alice", "bob", "carol", "dave"):
        assert app.register(name, PASSWORD, Role.MEMBER).ok
    switch(app, "alice")
    server_id = app.create_server("Home", "Alice's place").value
    server = app.store.get_server(server_id)
    for name in ("bob", "carol"):
        switch(app, name)
        assert app.join_by_invite(server.invite_code).ok
    switch(app, "alice")
    general = channel_named(server, "general")
    voice = channel_named(server, "General Voice")
    assert general.kind is ChannelKind.TEXT
    assert voice.kind is ChannelKind.VOICE
    return types.SimpleNamespace(
        app=app,
        server=server,
        sid=server_id,
        general=general,
        voice=voice,
        user=app.store.user_by_name,
    )
