"""Servers, membership, roles, bans, invite codes and channel layout."""

from __future__ import annotations

import logging

from ..core.models import ServerInfo
from ..core.permissions import Capability, Role
from ..core.results import Reason, Result, fail, ok
from ..data.models import ChannelKind, Server, User, new_id
from ..data.store import ChatStore
from .access import require_capability, require_member, require_owner, require_user
from .presence import PresenceEngine

log = logging.getLogger(__name__)

DEFAULT_TEXT_CHANNEL = "general"
DEFAULT_VOICE_CHANNEL = "General Voice"


class MembershipEngine:
    """Mutates server membership and structure.

    Two invariants hold after every call: the owner is always a member, and
    the member and ban sets never overlap.
    """

    def __init__(self, store: ChatStore, presence: PresenceEngine) -> None:
        self.store = store
        self.presence = presence

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _server(self, server_id: str) -> Result:
        server = self.store.get_server(server_id)
        if server is None:
            return fail(Reason.SERVER_NOT_FOUND, "Server not found.")
        return ok(server)

    def _target(self, username: str) -> Result:
        target = self.store.user_by_name(username)
        if target is None:
            return fail(Reason.USER_NOT_FOUND, f"User '{username}' not found.")
        return ok(target)

    def _detach(self, server: Server, user: User, reason: str) -> None:
        """Drop ``user`` from ``server`` everywhere it is referenced."""
        self.presence.drop_from_server(user, server)
        server.members.pop(user.user_id, None)
        user.leave_server(server.server_id)
        log.info("%s removed from %s (%s)", user.username, server.name, reason)

    # ------------------------------------------------------------------
    # Server lifecycle
    # ------------------------------------------------------------------
    def create_server(self, actor: User | None, name: str, description: str = "") -> Result:
        err = require_user(actor)
        if err:
            return err
        name = (name or "").strip()
        if not name:
            return fail(Reason.EMPTY_NAME, "Server name cannot be empty.")

        server = Server(
            server_id=new_id(),
            name=name,
            owner_id=actor.user_id,
            invite_code="",
            description=(description or "").strip(),
            created_ts=self.store.now(),
        )
        server.members[actor.user_id] = Role.ADMIN
        self.store.servers[server.server_id] = server
        self.store.install_invite(server, self.store.new_invite_code())
        self.store.new_channel(server, DEFAULT_TEXT_CHANNEL, ChannelKind.TEXT)
        self.store.new_channel(server, DEFAULT_VOICE_CHANNEL, ChannelKind.VOICE)
        actor.join_server(server.server_id)
        log.info("%s created server %s (%s)", actor.username, name, server.server_id)
        return ok(server.server_id)

    def delete_server(self, actor: User | None, server_id: str) -> Result:
        err = require_user(actor)
        if err:
            return err
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_owner(actor, server, "delete the server")
        if err:
            return err

        for member_id in list(server.members):
            member = self.store.get_user(member_id)
            if member is not None:
                member.leave_server(server.server_id)
        for user in self.store.users.values():
            if user.current_server == server.server_id:
                user.current_server = None
        self.store.invites.pop(server.invite_code, None)
        del self.store.servers[server.server_id]
        server.channels.clear()
        log.info("%s deleted server %s", actor.username, server.name)
        return ok(server.server_id)

    def servers_of(self, user: User | None) -> Result:
        err = require_user(user)
        if err:
            return err
        servers = [self.store.servers[sid] for sid in user.servers if sid in self.store.servers]
        return ok(servers)

    def server_info(self, actor: User | None, server_id: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_member(actor, server)
        if err:
            return err
        return ok(ServerInfo.of(server, self.store.users))

    def select_server(self, actor: User | None, server_id: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_member(actor, server)
        if err:
            return err
        actor.current_server = server.server_id
        return ok(server.server_id)

    # ------------------------------------------------------------------
    # Invites and membership
    # ------------------------------------------------------------------
    def join_by_invite(self, actor: User | None, code: str) -> Result:
        err = require_user(actor)
        if err:
            return err
        code = (code or "").strip().upper()
        if len(code) != self.store.settings.invite_code_length or not code.isalnum():
            return fail(Reason.INVALID_CODE, "Invalid invite code.")
        server = self.store.server_for_invite(code)
        if server is None:
            return fail(Reason.INVITE_NOT_FOUND, "Invalid invite code.")
        # Bans are checked before membership is attempted.
        if actor.user_id in server.banned:
            log.warning("Banned user %s tried to rejoin %s", actor.username, server.name)
            return fail(Reason.BANNED, "You are banned from this server.")
        if not server.add_member(actor.user_id):
            return fail(Reason.ALREADY_MEMBER, "You are already a member of this server.")
        actor.join_server(server.server_id)
        log.info("%s joined %s", actor.username, server.name)
        return ok(server.server_id)

    def leave(self, actor: User | None, server_id: str) -> Result:
        err = require_user(actor)
        if err:
            return err
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        if actor.user_id == server.owner_id:
            return fail(
                Reason.OWNER_CANNOT_LEAVE,
                "Server owner cannot leave the server. Delete the server instead.",
            )
        if not server.is_member(actor.user_id):
            return fail(Reason.NOT_MEMBER, "You are not a member of this server.")
        self._detach(server, actor, "left")
        return ok(server.server_id)

    def regenerate_invite(self, actor: User | None, server_id: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        if actor is None or actor.user_id != server.owner_id:
            err = require_capability(actor, server, Capability.MANAGE_USERS)
            if err:
                return err
        code = self.store.new_invite_code()
        self.store.install_invite(server, code)
        log.info("Invite code for %s regenerated", server.name)
        return ok(code)

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------
    def kick(self, actor: User | None, server_id: str, target_username: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_capability(actor, server, Capability.KICK_USERS)
        if err:
            return err
        res = self._target(target_username)
        if not res.ok:
            return res
        target: User = res.value
        if not server.is_member(target.user_id):
            return fail(Reason.NOT_MEMBER, "User is not a member of this server.")
        if target.user_id == server.owner_id:
            return fail(Reason.TARGET_IS_OWNER, "Cannot kick the server owner.")
        self._detach(server, target, f"kicked by {actor.username}")
        return ok(target.user_id)

    def ban(self, actor: User | None, server_id: str, target_username: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_capability(actor, server, Capability.BAN_USERS)
        if err:
            return err
        res = self._target(target_username)
        if not res.ok:
            return res
        target: User = res.value
        if target.user_id == server.owner_id:
            return fail(Reason.TARGET_IS_OWNER, "Cannot ban the server owner.")
        if server.is_member(target.user_id):
            self._detach(server, target, f"banned by {actor.username}")
        server.ban(target.user_id)
        log.info("%s banned %s from %s", actor.username, target.username, server.name)
        return ok(target.user_id)

    def unban(self, actor: User | None, server_id: str, target_username: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_capability(actor, server, Capability.BAN_USERS)
        if err:
            return err
        res = self._target(target_username)
        if not res.ok:
            return res
        target: User = res.value
        if target.user_id not in server.banned:
            return fail(Reason.NOT_BANNED, f"{target.username} is not banned.")
        server.banned.discard(target.user_id)
        log.info("%s unbanned %s from %s", actor.username, target.username, server.name)
        return ok(target.user_id)

    def set_role(
        self, actor: User | None, server_id: str, target_username: str, role: Role | str
    ) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_owner(actor, server, "change user roles")
        if err:
            return err
        res = self._target(target_username)
        if not res.ok:
            return res
        target: User = res.value
        if not server.is_member(target.user_id):
            return fail(Reason.NOT_MEMBER, "User is not a member of this server.")
        parsed = role if isinstance(role, Role) else Role.parse(role)
        if parsed is None:
            return fail(Reason.INVALID_ROLE, "Invalid role. Valid roles: ADMIN, MODERATOR, MEMBER.")
        if target.user_id == server.owner_id:
            return fail(Reason.TARGET_IS_OWNER, "The owner's role cannot be changed.")
        server.members[target.user_id] = parsed
        log.info("%s set %s's role in %s to %s", actor.username, target.username, server.name, parsed.value)
        return ok(parsed)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------
    def create_channel(
        self, actor: User | None, server_id: str, name: str, kind: ChannelKind
    ) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_capability(actor, server, Capability.CREATE_CHANNELS)
        if err:
            return err
        name = (name or "").strip()
        if not name:
            return fail(Reason.EMPTY_NAME, "Channel name cannot be empty.")
        if server.channel_named(name) is not None:
            return fail(Reason.CHANNEL_NAME_TAKEN, "A channel with that name already exists.")
        channel = self.store.new_channel(server, name, kind)
        log.info("%s created %s channel %s in %s", actor.username, kind.value, name, server.name)
        return ok(channel.channel_id)

    def delete_channel(self, actor: User | None, server_id: str, channel_id: str) -> Result:
        res = self._server(server_id)
        if not res.ok:
            return res
        server: Server = res.value
        err = require_member(actor, server)
        if err:
            return err
        channel = server.find_channel(channel_id)
        if channel is None:
            return fail(Reason.CHANNEL_NOT_FOUND, "Channel not found.")
        err = require_capability(actor, server, Capability.DELETE_CHANNELS)
        if err:
            return err
        server.channels.remove(channel)
        log.info("%s deleted channel %s in %s", actor.username, channel.name, server.name)
        return ok(channel.channel_id)

