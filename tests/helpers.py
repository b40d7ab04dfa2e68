"""Helpers shared by the test modules."""

from __future__ import annotations

from concord.app import ChatApp
from concord.data.models import Channel, Server

PASSWORD = "pw1"


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


def switch(app: ChatApp, username: str, password: str = PASSWORD) -> None:
    """Make ``username`` the active session user."""
    if app.store.session is not None:
        assert app.logout().ok
    assert app.login(username, password).ok


def channel_named(server: Server, name: str) -> Channel:
    channel = server.channel_named(name)
    assert channel is not None
    return channel
