"""User accounts, the single active session and friendships."""

from __future__ import annotations

import logging

from ..adapters.base import Authenticator
from ..adapters.hashing import WerkzeugAuthenticator
from ..core.models import FriendInfo, Session, UserProfile
from ..core.permissions import Role
from ..core.results import Reason, Result, fail, ok
from ..data.models import User, new_id
from ..data.store import ChatStore
from .access import require_user

log = logging.getLogger(__name__)


class IdentityStore:
    """Registration, login/logout and the symmetric friend relation.

    Exactly one session may be active at a time.
    """

    def __init__(self, store: ChatStore, authenticator: Authenticator | None = None) -> None:
        self.store = store
        self.authenticator = authenticator or WerkzeugAuthenticator()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def register(self, username: str, password: str, role: Role | str | None = None) -> Result:
        name = (username or "").strip()
        if not name:
            return fail(Reason.EMPTY_NAME, "Username cannot be empty.")
        minimum = self.store.settings.min_password_length
        if password is None or len(password) < minimum:
            return fail(
                Reason.WEAK_PASSWORD,
                f"Password must be at least {minimum} characters long.",
            )
        if role is None:
            parsed: Role | None = Role.MEMBER
        elif isinstance(role, Role):
            parsed = role
        else:
            parsed = Role.parse(role)
        if parsed is None:
            return fail(Reason.INVALID_ROLE, "Valid roles: ADMIN, MODERATOR, MEMBER.")
        if self.store.username_taken(name):
            return fail(Reason.USERNAME_TAKEN, "Username already exists.")

        now = self.store.now()
        user = User(
            user_id=new_id(),
            username=name,
            password_hash=self.authenticator.hash_password(password),
            role=parsed,
            created_ts=now,
            last_seen=now,
        )
        self.store.add_user(user)
        log.info("Registered %s as %s", name, parsed.value)
        return ok(user.user_id)

    def login(self, username: str, password: str) -> Result:
        current = self.store.current_user
        if current is not None:
            return fail(Reason.ALREADY_LOGGED_IN, f"Already logged in as {current.username}.")
        user = self.store.user_by_name(username)
        if user is None:
            return fail(Reason.USER_NOT_FOUND, "User not found.")
        if not self.authenticator.verify(password or "", user.password_hash):
            log.warning("Failed login for %s", user.username)
            return fail(Reason.BAD_CREDENTIAL, "Invalid password.")

        now = self.store.now()
        user.online = True
        user.last_seen = now
        session = Session(user_id=user.user_id, username=user.username, started_ts=now)
        self.store.session = session
        log.info("%s logged in", user.username)
        return ok(session)

    def logout(self, session: Session | None = None) -> Result:
        active = self.store.session
        user = self.store.current_user
        if active is None or user is None:
            return fail(Reason.NOT_AUTHENTICATED, "No user is currently logged in.")
        if session is not None and session.token != active.token:
            return fail(Reason.SESSION_MISMATCH, "That session is no longer active.")

        user.online = False
        user.last_seen = self.store.now()
        self.store.session = None
        log.info("%s logged out", user.username)
        return ok(user.user_id)

    def online_users(self) -> list[User]:
        return [u for u in self.store.users.values() if u.online]

    # ------------------------------------------------------------------
    # Friends
    # ------------------------------------------------------------------
    def _friend_target(self, actor: User | None, target_username: str) -> Result:
        err = require_user(actor)
        if err:
            return err
        target = self.store.user_by_name(target_username)
        if target is None:
            return fail(Reason.USER_NOT_FOUND, f"User '{target_username}' not found.")
        if target.user_id == actor.user_id:
            return fail(Reason.SELF_TARGET, "You cannot befriend yourself.")
        return ok(target)

    def add_friend(self, actor: User | None, target_username: str) -> Result:
        res = self._friend_target(actor, target_username)
        if not res.ok:
            return res
        target: User = res.value
        if target.user_id in actor.friends:
            return fail(Reason.ALREADY_FRIENDS, f"{target.username} is already your friend.")
        actor.friends.add(target.user_id)
        target.friends.add(actor.user_id)
        log.info("%s and %s are now friends", actor.username, target.username)
        return ok(target.user_id)

    def remove_friend(self, actor: User | None, target_username: str) -> Result:
        res = self._friend_target(actor, target_username)
        if not res.ok:
            return res
        target: User = res.value
        if target.user_id not in actor.friends:
            return fail(Reason.NOT_FRIENDS, f"{target.username} is not your friend.")
        actor.friends.discard(target.user_id)
        target.friends.discard(actor.user_id)
        log.info("%s and %s are no longer friends", actor.username, target.username)
        return ok(target.user_id)

    def friends_of(self, user: User | None) -> Result:
        err = require_user(user)
        if err:
            return err
        friends = []
        for friend_id in user.friends:
            friend = self.store.get_user(friend_id)
            if friend is not None:
                friends.append(
                    FriendInfo(
                        user_id=friend.user_id,
                        username=friend.username,
                        online=friend.online,
                    )
                )
        friends.sort(key=lambda f: f.username.lower())
        return ok(friends)

    def profile(self, user: User | None) -> Result:
        res = self.friends_of(user)
        if not res.ok:
            return res
        return ok(
            UserProfile(
                user_id=user.user_id,
                username=user.username,
                role=user.role,
                online=user.online,
                last_seen=user.last_seen,
                server_count=len(user.servers),
                friends=res.value,
            )
        )
