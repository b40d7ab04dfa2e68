"""Discriminated results returned by every chat operation.

Business-rule violations are never raised.  Each operation returns either an
:class:`Ok` carrying its payload or an :class:`Err` naming the condition that
stopped it, so the presentation layer can render the reason however it likes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    """Broad error categories used to group :class:`Reason` values."""

    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    STATE_CONFLICT = "state_conflict"


class Reason(str, Enum):
    """Named error conditions."""

    NOT_AUTHENTICATED = "not_authenticated"
    ALREADY_LOGGED_IN = "already_logged_in"

    USER_NOT_FOUND = "user_not_found"
    SERVER_NOT_FOUND = "server_not_found"
    CHANNEL_NOT_FOUND = "channel_not_found"
    MESSAGE_NOT_FOUND = "message_not_found"
    INVITE_NOT_FOUND = "invite_not_found"
    NOT_FRIENDS = "not_friends"
    NOT_BANNED = "not_banned"

    BAD_CREDENTIAL = "bad_credential"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_MEMBER = "not_member"
    BANNED = "banned"

    USERNAME_TAKEN = "username_taken"
    CHANNEL_NAME_TAKEN = "channel_name_taken"
    ALREADY_MEMBER = "already_member"
    ALREADY_FRIENDS = "already_friends"

    EMPTY_NAME = "empty_name"
    EMPTY_CONTENT = "empty_content"
    WEAK_PASSWORD = "weak_password"
    INVALID_ROLE = "invalid_role"
    INVALID_CODE = "invalid_code"
    INVALID_LIMIT = "invalid_limit"
    TOO_LONG = "too_long"
    SELF_TARGET = "self_target"
    WRONG_CHANNEL_KIND = "wrong_channel_kind"

    OWNER_CANNOT_LEAVE = "owner_cannot_leave"
    TARGET_IS_OWNER = "target_is_owner"
    MUTED = "muted"
    LOCKED = "locked"
    FULL = "full"
    ALREADY_CONNECTED = "already_connected"
    NOT_CONNECTED = "not_connected"
    SESSION_MISMATCH = "session_mismatch"


REASON_KINDS: dict[Reason, ErrorKind] = {
    Reason.NOT_AUTHENTICATED: ErrorKind.NOT_AUTHENTICATED,
    Reason.SESSION_MISMATCH: ErrorKind.NOT_AUTHENTICATED,
    Reason.ALREADY_LOGGED_IN: ErrorKind.STATE_CONFLICT,
    Reason.USER_NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.SERVER_NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.CHANNEL_NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.MESSAGE_NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.INVITE_NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.NOT_FRIENDS: ErrorKind.NOT_FOUND,
    Reason.NOT_BANNED: ErrorKind.NOT_FOUND,
    Reason.BAD_CREDENTIAL: ErrorKind.UNAUTHORIZED,
    Reason.UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    Reason.FORBIDDEN: ErrorKind.UNAUTHORIZED,
    Reason.NOT_MEMBER: ErrorKind.UNAUTHORIZED,
    Reason.BANNED: ErrorKind.UNAUTHORIZED,
    Reason.USERNAME_TAKEN: ErrorKind.CONFLICT,
    Reason.CHANNEL_NAME_TAKEN: ErrorKind.CONFLICT,
    Reason.ALREADY_MEMBER: ErrorKind.CONFLICT,
    Reason.ALREADY_FRIENDS: ErrorKind.CONFLICT,
    Reason.EMPTY_NAME: ErrorKind.INVALID_INPUT,
    Reason.EMPTY_CONTENT: ErrorKind.INVALID_INPUT,
    Reason.WEAK_PASSWORD: ErrorKind.INVALID_INPUT,
    Reason.INVALID_ROLE: ErrorKind.INVALID_INPUT,
    Reason.INVALID_CODE: ErrorKind.INVALID_INPUT,
    Reason.INVALID_LIMIT: ErrorKind.INVALID_INPUT,
    Reason.TOO_LONG: ErrorKind.INVALID_INPUT,
    Reason.SELF_TARGET: ErrorKind.INVALID_INPUT,
    Reason.WRONG_CHANNEL_KIND: ErrorKind.INVALID_INPUT,
    Reason.OWNER_CANNOT_LEAVE: ErrorKind.STATE_CONFLICT,
    Reason.TARGET_IS_OWNER: ErrorKind.STATE_CONFLICT,
    Reason.MUTED: ErrorKind.STATE_CONFLICT,
    Reason.LOCKED: ErrorKind.STATE_CONFLICT,
    Reason.FULL: ErrorKind.STATE_CONFLICT,
    Reason.ALREADY_CONNECTED: ErrorKind.STATE_CONFLICT,
    Reason.NOT_CONNECTED: ErrorKind.STATE_CONFLICT,
}


class Ok(BaseModel):
    """Successful outcome.  ``value`` holds the operation's payload."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[True] = True
    value: Any = None


class Err(BaseModel):
    """Failed outcome naming the business rule that was violated."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    reason: Reason
    message: str = ""

    @property
    def kind(self) -> ErrorKind:
        return REASON_KINDS[self.reason]


Result = Ok | Err


class InvariantViolation(RuntimeError):
    """Raised when the in-memory state breaks one of its own invariants."""


def ok(value: Any = None) -> Ok:
    return Ok(value=value)


def fail(reason: Reason, message: str = "") -> Err:
    return Err(reason=reason, message=message)


__all__ = [
    "Err",
    "ErrorKind",
    "InvariantViolation",
    "Ok",
    "REASON_KINDS",
    "Reason",
    "Result",
    "fail",
    "ok",
]
