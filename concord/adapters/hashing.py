"""Werkzeug-backed implementation of :class:`~concord.adapters.base.Authenticator`.

Stored values are werkzeug password hashes (``pbkdf2:sha256`` with a 16
character salt), so the method and salt travel with the hash.
"""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from .base import Authenticator


class WerkzeugAuthenticator(Authenticator):
    """Hash passwords with :func:`werkzeug.security.generate_password_hash`."""

    def __init__(self, method: str = "pbkdf2:sha256", salt_length: int = 16) -> None:
        self.method = method
        self.salt_length = salt_length

    def hash_password(self, password: str) -> str:
        return generate_password_hash(password, method=self.method, salt_length=self.salt_length)

    def verify(self, password: str, stored: str) -> bool:
        if not stored:
            return False
        try:
            return check_password_hash(stored, password)
        except ValueError:
            # unknown or malformed hash method
            return False
