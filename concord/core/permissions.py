"""Role variants and the capability tokens each one grants."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    MEMBER = "MEMBER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: str | None) -> Role | None:
        """Return the role named by ``value`` (case-insensitive) or ``None``."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class Capability(str, Enum):
    CREATE_CHANNELS = "create_channels"
    DELETE_CHANNELS = "delete_channels"
    MANAGE_CHANNELS = "manage_channels"
    MANAGE_USERS = "manage_users"
    DELETE_MESSAGES = "delete_messages"
    BAN_USERS = "ban_users"
    MUTE_USERS = "mute_users"
    KICK_USERS = "kick_users"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.MEMBER: frozenset(),
    Role.MODERATOR: frozenset(
        {
            Capability.MUTE_USERS,
            Capability.KICK_USERS,
            Capability.DELETE_MESSAGES,
            Capability.MANAGE_CHANNELS,
        }
    ),
    Role.ADMIN: frozenset(Capability),
}


# A role held inside one server grants less than the same global role: a
# server moderator may only mute, while a server admin holds everything.
SERVER_ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.MEMBER: frozenset(),
    Role.MODERATOR: frozenset({Capability.MUTE_USERS}),
    Role.ADMIN: frozenset(Capability),
}


def capabilities(global_role: Role, server_role: Role | None = None) -> frozenset[Capability]:
    """Capabilities from the global role plus those of a per-server role."""
    granted = ROLE_CAPABILITIES[global_role]
    if server_role is not None:
        granted = granted | SERVER_ROLE_CAPABILITIES[server_role]
    return granted


__all__ = [
    "Capability",
    "ROLE_CAPABILITIES",
    "Role",
    "SERVER_ROLE_CAPABILITIES",
    "capabilities",
]
