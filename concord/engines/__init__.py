"""Engines that mutate the chat state after passing access control."""

from .identity import IdentityStore
from .membership import MembershipEngine
from .messaging import MessageSearch, MessagingEngine
from .presence import PresenceEngine

__all__ = [
    "IdentityStore",
    "MembershipEngine",
    "MessageSearch",
    "MessagingEngine",
    "PresenceEngine",
]
