"""In-memory application state for users, servers and direct messages."""

from __future__ import annotations

import datetime
import secrets
import string
from collections.abc import Callable
from datetime import UTC

from ..config import Settings
from ..core.models import Session
from ..core.results import InvariantViolation
from .models import (
    Channel,
    ChannelKind,
    DMKey,
    Message,
    Server,
    TextSpec,
    User,
    VoiceSpec,
    new_id,
)

INVITE_ALPHABET = string.ascii_uppercase + string.digits


def utc_now() -> float:
    return datetime.datetime.now(tz=UTC).timestamp()


class ChatStore:
    """Explicit state object shared by the engines.

    Nothing here is global: every engine receives the store it works on, and
    a fresh store is a fresh world.  Collections returned by the lookup
    helpers are the live ones; callers must treat them as read-only and go
    through the engines to mutate.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = utc_now,
    ) -> None:
        self.settings = settings or Settings()
        self.clock = clock
        self.users: dict[str, User] = {}
        # ``_usernames`` maps the lower-cased username to the user id so that
        # lookups are case-insensitive while the original spelling is kept.
        self._usernames: dict[str, str] = {}
        self.servers: dict[str, Server] = {}
        self.invites: dict[str, str] = {}  # invite code -> server id
        self.direct_messages: dict[DMKey, list[Message]] = {}
        self.session: Session | None = None

    def now(self) -> float:
        return self.clock()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def add_user(self, user: User) -> None:
        self.users[user.user_id] = user
        self._usernames[user.username.lower()] = user.user_id

    def username_taken(self, username: str) -> bool:
        return username.strip().lower() in self._usernames

    def user_by_name(self, username: str | None) -> User | None:
        if not username:
            return None
        user_id = self._usernames.get(username.strip().lower())
        return self.users.get(user_id) if user_id else None

    def get_user(self, user_id: str | None) -> User | None:
        return self.users.get(user_id) if user_id else None

    @property
    def current_user(self) -> User | None:
        if self.session is None:
            return None
        return self.users.get(self.session.user_id)

    # ------------------------------------------------------------------
    # Servers and invites
    # ------------------------------------------------------------------
    def get_server(self, server_id: str | None) -> Server | None:
        return self.servers.get(server_id) if server_id else None

    def new_invite_code(self) -> str:
        """Return an unused invite code, retrying on collision."""
        length = self.settings.invite_code_length
        while True:
            code = "".join(secrets.choice(INVITE_ALPHABET) for _ in range(length))
            if code not in self.invites:
                return code

    def server_for_invite(self, code: str) -> Server | None:
        server_id = self.invites.get(code.strip().upper())
        return self.servers.get(server_id) if server_id else None

    def install_invite(self, server: Server, code: str) -> None:
        """Point ``code`` at ``server``, dropping the server's previous code."""
        self.invites.pop(server.invite_code, None)
        server.invite_code = code
        self.invites[code] = server.server_id

    def new_channel(self, server: Server, name: str, kind: ChannelKind) -> Channel:
        if kind is ChannelKind.TEXT:
            spec: TextSpec | VoiceSpec = TextSpec(max_length=self.settings.text_max_length)
        else:
            spec = VoiceSpec(capacity=self.settings.voice_capacity)
        channel = Channel(
            channel_id=new_id(),
            name=name,
            server_id=server.server_id,
            kind=kind,
            spec=spec,
            created_ts=self.now(),
        )
        server.channels.append(channel)
        return channel

    # ------------------------------------------------------------------
    # Direct messages
    # ------------------------------------------------------------------
    def thread(self, key: DMKey) -> list[Message]:
        return self.direct_messages.get(key, [])

    def thread_for_append(self, key: DMKey) -> list[Message]:
        return self.direct_messages.setdefault(key, [])

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------
    def check_invariants(self) -> None:
        """Raise :class:`InvariantViolation` if the state is inconsistent."""
        seen_codes: set[str] = set()
        for server in self.servers.values():
            sid = server.server_id
            if server.owner_id not in server.members:
                raise InvariantViolation(f"owner of {sid} is not a member")
            if server.owner_id in server.banned:
                raise InvariantViolation(f"owner of {sid} is banned")
            if server.banned & server.members.keys():
                raise InvariantViolation(f"members and bans overlap in {sid}")
            if self.invites.get(server.invite_code) != sid:
                raise InvariantViolation(f"invite code of {sid} does not resolve")
            if server.invite_code in seen_codes:
                raise InvariantViolation(f"invite code of {sid} is shared")
            seen_codes.add(server.invite_code)
            names = [c.name.lower() for c in server.channels]
            if len(names) != len(set(names)):
                raise InvariantViolation(f"duplicate channel names in {sid}")
        if set(self.invites) != seen_codes:
            raise InvariantViolation("stale invite codes present")
        for user in self.users.values():
            for friend_id in user.friends:
                friend = self.users.get(friend_id)
                if friend is None or user.user_id not in friend.friends:
                    raise InvariantViolation(f"asymmetric friendship for {user.user_id}")
