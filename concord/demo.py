"""Demo accounts and a demo server for trying the application out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .core.permissions import Role

if TYPE_CHECKING:  # pragma: no cover
    from .app import ChatApp

log = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin", "admin123", Role.ADMIN),
    ("moderator", "mod123", Role.MODERATOR),
    ("user", "user123", Role.MEMBER),
)
DEMO_SERVER = "Demo Server"


def seed_demo(app: ChatApp) -> str | None:
    """Register the demo users and a server owned by ``admin``.

    Returns the demo server id, or ``None`` if the accounts already exist.
    No session is left open.
    """
    for username, password, role in DEMO_USERS:
        if not app.register(username, password, role).ok:
            log.info("Demo data already present; skipping")
            return None
    admin = app.store.user_by_name("admin")
    res = app.membership.create_server(admin, DEMO_SERVER, "A demo server for testing")
    log.info("Seeded demo users and %s", DEMO_SERVER)
    return res.value
