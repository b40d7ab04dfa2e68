"""Pluggable collaborators used by the chat core."""

from .base import Authenticator
from .hashing import WerkzeugAuthenticator

__all__ = ["Authenticator", "WerkzeugAuthenticator"]
