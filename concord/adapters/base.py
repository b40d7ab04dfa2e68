"""Base interface for credential verification."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Authenticator(ABC):
    """Opaque password capability used by the identity store."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """Return a stored representation of ``password``."""

    @abstractmethod
    def verify(self, password: str, stored: str) -> bool:
        """Return ``True`` if ``password`` matches the ``stored`` value."""
