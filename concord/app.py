"""Session-bound facade over the chat engines.

:class:`ChatApp` is the single coordinating object a presentation layer talks
to.  It owns one :class:`~concord.data.store.ChatStore` and the engines built
on it, and it resolves the acting user from the active session so callers
only pass the arguments of the operation itself.

Lifecycle: construct it (optionally from :class:`~concord.config.Settings`),
drive it with sequential calls, and call :meth:`close` to end the active
session.  Every call returns an ``Ok`` or an ``Err``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .adapters.base import Authenticator
from .config import Settings, load_settings
from .core.models import Session
from .core.permissions import Role
from .core.results import Result
from .data.models import ChannelKind, User
from .data.store import ChatStore, utc_now
from .engines import IdentityStore, MembershipEngine, MessagingEngine, PresenceEngine
from .logging_config import LOGGER_NAME, setup_logging


class ChatApp:
    def __init__(
        self,
        settings: Settings | None = None,
        authenticator: Authenticator | None = None,
        clock: Callable[[], float] = utc_now,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = ChatStore(self.settings, clock=clock)
        self.identity = IdentityStore(self.store, authenticator)
        self.presence = PresenceEngine(self.store)
        self.membership = MembershipEngine(self.store, self.presence)
        self.messaging = MessagingEngine(self.store)
        # handlers are left to the embedding program; see from_env
        self.log = logger or logging.getLogger(LOGGER_NAME)
        if self.settings.seed_demo:
            from .demo import seed_demo

            seed_demo(self)

    @classmethod
    def from_env(cls, authenticator: Authenticator | None = None) -> ChatApp:
        """Build an application from ``CONCORD_*`` environment variables.

        This is the entry point that installs the stdout log handler, at the
        level named by ``CONCORD_LOG_LEVEL``.
        """
        settings = load_settings()
        return cls(settings, authenticator, logger=setup_logging(settings.log_level))

    @property
    def me(self) -> User | None:
        return self.store.current_user

    def close(self) -> None:
        if self.store.session is not None:
            self.logout()
        self.log.info("Chat application closed")

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    def register(self, username: str, password: str, role: Role | str | None = None) -> Result:
        return self.identity.register(username, password, role)

    def login(self, username: str, password: str) -> Result:
        return self.identity.login(username, password)

    def logout(self, session: Session | None = None) -> Result:
        return self.identity.logout(session)

    def current_user(self) -> User | None:
        return self.me

    def add_friend(self, username: str) -> Result:
        return self.identity.add_friend(self.me, username)

    def remove_friend(self, username: str) -> Result:
        return self.identity.remove_friend(self.me, username)

    def friends_of(self, user: User | None = None) -> Result:
        return self.identity.friends_of(user or self.me)

    def profile(self) -> Result:
        return self.identity.profile(self.me)

    def online_users(self) -> list[User]:
        return self.identity.online_users()

    # ------------------------------------------------------------------
    # Servers
    # ------------------------------------------------------------------
    def create_server(self, name: str, description: str = "") -> Result:
        return self.membership.create_server(self.me, name, description)

    def delete_server(self, server_id: str) -> Result:
        return self.membership.delete_server(self.me, server_id)

    def join_by_invite(self, code: str) -> Result:
        return self.membership.join_by_invite(self.me, code)

    def leave_server(self, server_id: str) -> Result:
        return self.membership.leave(self.me, server_id)

    def kick(self, server_id: str, username: str) -> Result:
        return self.membership.kick(self.me, server_id, username)

    def ban(self, server_id: str, username: str) -> Result:
        return self.membership.ban(self.me, server_id, username)

    def unban(self, server_id: str, username: str) -> Result:
        return self.membership.unban(self.me, server_id, username)

    def set_role(self, server_id: str, username: str, role: Role | str) -> Result:
        return self.membership.set_role(self.me, server_id, username, role)

    def regenerate_invite(self, server_id: str) -> Result:
        return self.membership.regenerate_invite(self.me, server_id)

    def servers_of(self, user: User | None = None) -> Result:
        return self.membership.servers_of(user or self.me)

    def server_info(self, server_id: str) -> Result:
        return self.membership.server_info(self.me, server_id)

    def select_server(self, server_id: str) -> Result:
        return self.membership.select_server(self.me, server_id)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------
    def create_text_channel(self, server_id: str, name: str) -> Result:
        return self.membership.create_channel(self.me, server_id, name, ChannelKind.TEXT)

    def create_voice_channel(self, server_id: str, name: str) -> Result:
        return self.membership.create_channel(self.me, server_id, name, ChannelKind.VOICE)

    def delete_channel(self, server_id: str, channel_id: str) -> Result:
        return self.membership.delete_channel(self.me, server_id, channel_id)

    def channel_history(self, server_id: str, channel_id: str) -> Result:
        return self.messaging.history(self.me, server_id, channel_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    def send_message(self, server_id: str, channel_id: str, content: str) -> Result:
        return self.messaging.send_message(self.me, server_id, channel_id, content)

    def edit_message(
        self, server_id: str, channel_id: str, message_id: str, content: str
    ) -> Result:
        return self.messaging.edit_message(self.me, server_id, channel_id, message_id, content)

    def delete_message(self, server_id: str, channel_id: str, message_id: str) -> Result:
        return self.messaging.delete_message(self.me, server_id, channel_id, message_id)

    def search_messages(self, server_id: str, channel_id: str, keyword: str) -> Result:
        return self.messaging.search_messages(self.me, server_id, channel_id, keyword)

    def mute_user(self, server_id: str, channel_id: str, username: str) -> Result:
        return self.messaging.mute_user(self.me, server_id, channel_id, username)

    def unmute_user(self, server_id: str, channel_id: str, username: str) -> Result:
        return self.messaging.unmute_user(self.me, server_id, channel_id, username)

    def send_direct_message(self, username: str, content: str) -> Result:
        return self.messaging.send_direct_message(self.me, username, content)

    def direct_messages_with(self, username: str) -> Result:
        return self.messaging.direct_messages_with(self.me, username)

    # ------------------------------------------------------------------
    # Voice
    # ------------------------------------------------------------------
    def connect_voice(self, server_id: str, channel_id: str) -> Result:
        return self.presence.connect(self.me, server_id, channel_id)

    def disconnect_voice(self, server_id: str, channel_id: str) -> Result:
        return self.presence.disconnect(self.me, server_id, channel_id)

    def voice_action(self, server_id: str, channel_id: str, action: str) -> Result:
        return self.presence.act(self.me, server_id, channel_id, action)

    def set_voice_limit(self, server_id: str, channel_id: str, capacity: int) -> Result:
        return self.presence.set_capacity(self.me, server_id, channel_id, capacity)

    def lock_voice_channel(self, server_id: str, channel_id: str) -> Result:
        return self.presence.set_locked(self.me, server_id, channel_id, True)

    def unlock_voice_channel(self, server_id: str, channel_id: str) -> Result:
        return self.presence.set_locked(self.me, server_id, channel_id, False)


__all__ = ["ChatApp"]
