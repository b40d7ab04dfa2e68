"""Access control shared by every engine.

Checks run in a fixed order: authentication, then server membership, then
capability.  Each helper returns an :class:`~concord.core.results.Err` when the
check fails and ``None`` when the caller may proceed.

Effective capabilities are the union of the user's global role table and the
table of their per-server role, which grants only mute for moderators.  Server
ownership is a separate, absolute tier handled by :func:`require_owner`.
"""

from __future__ import annotations

import logging

from ..core.permissions import Capability, capabilities
from ..core.results import Err, Reason, Result, fail, ok
from ..data.models import Server, User
from ..data.store import ChatStore

log = logging.getLogger(__name__)


def effective_capabilities(user: User, server: Server | None = None) -> frozenset[Capability]:
    server_role = server.role_of(user.user_id) if server is not None else None
    return capabilities(user.role, server_role)


def can(user: User, capability: Capability, server: Server | None = None) -> bool:
    return capability in effective_capabilities(user, server)


def require_user(actor: User | None) -> Err | None:
    if actor is None:
        return fail(Reason.NOT_AUTHENTICATED, "You must be logged in.")
    return None


def require_member(actor: User | None, server: Server) -> Err | None:
    err = require_user(actor)
    if err:
        return err
    if not server.is_member(actor.user_id):
        return fail(Reason.NOT_MEMBER, "You are not a member of this server.")
    return None


def require_capability(
    actor: User | None, server: Server, capability: Capability
) -> Err | None:
    err = require_member(actor, server)
    if err:
        return err
    if not can(actor, capability, server):
        log.warning(
            "Denied %s to %s in server %s",
            capability.value,
            actor.username,
            server.server_id,
        )
        return fail(
            Reason.UNAUTHORIZED,
            f"You don't have permission to {capability.value.replace('_', ' ')}.",
        )
    return None


def require_owner(actor: User | None, server: Server, action: str) -> Err | None:
    err = require_user(actor)
    if err:
        return err
    if actor.user_id != server.owner_id:
        log.warning("Denied owner-only %s to %s", action, actor.username)
        return fail(Reason.UNAUTHORIZED, f"Only the server owner can {action}.")
    return None


def may_moderate_message(actor: User, sender_id: str, server: Server) -> bool:
    """Authors may always touch their own messages; moderators anyone's."""
    return actor.user_id == sender_id or can(actor, Capability.DELETE_MESSAGES, server)


def resolve_channel(store: ChatStore, actor: User | None, server_id: str, channel_id: str) -> Result:
    """Look up a channel the actor may see.

    Returns ``Ok((server, channel))`` once the actor is authenticated, the
    server exists, the actor is a member and the channel belongs to it.
    """
    err = require_user(actor)
    if err:
        return err
    server = store.get_server(server_id)
    if server is None:
        return fail(Reason.SERVER_NOT_FOUND, "Server not found.")
    err = require_member(actor, server)
    if err:
        return err
    channel = server.find_channel(channel_id)
    if channel is None:
        return fail(Reason.CHANNEL_NOT_FOUND, "Channel not found.")
    return ok((server, channel))
