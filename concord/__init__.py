"""Core package for Concord.

This module exposes the application facade, the result types and the role
tables so that consumers of the package can simply import them from
``concord``.
"""

from .app import ChatApp
from .config import Settings, load_settings
from .core.permissions import Capability, Role
from .core.results import Err, ErrorKind, Ok, Reason

__all__ = [
    "Capability",
    "ChatApp",
    "Err",
    "ErrorKind",
    "Ok",
    "Reason",
    "Role",
    "Settings",
    "load_settings",
]
