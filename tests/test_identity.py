"""Tests for registration, sessions and friendships."""

from concord.core.models import Session
from concord.core.permissions import Role
from concord.core.results import ErrorKind, Reason

from .helpers import PASSWORD, switch


def test_register_validates_input(app) -> None:
    assert app.register("", "secret").reason is Reason.EMPTY_NAME
    assert app.register("   ", "secret").reason is Reason.EMPTY_NAME
    res = app.register("alice", "pw")
    assert res.reason is Reason.WEAK_PASSWORD
    assert res.kind is ErrorKind.INVALID_INPUT
    assert app.register("alice", "pw1", "overlord").reason is Reason.INVALID_ROLE


def test_register_rejects_duplicate_usernames_case_insensitively(app) -> None:
    first = app.register("Alice", PASSWORD)
    assert first.ok
    res = app.register("aLiCe", "another")
    assert res.reason is Reason.USERNAME_TAKEN
    assert res.kind is ErrorKind.CONFLICT
    assert app.store.user_by_name("ALICE").user_id == first.value


def test_register_assigns_role_variants(app) -> None:
    app.register("admin", PASSWORD, "admin")
    app.register("mod", PASSWORD, Role.MODERATOR)
    app.register("plain", PASSWORD)
    assert app.store.user_by_name("admin").role is Role.ADMIN
    assert app.store.user_by_name("mod").role is Role.MODERATOR
    assert app.store.user_by_name("plain").role is Role.MEMBER


def test_password_is_not_stored_in_clear(app) -> None:
    app.register("alice", PASSWORD)
    user = app.store.user_by_name("alice")
    assert user.password_hash != PASSWORD
    assert app.identity.authenticator.verify(PASSWORD, user.password_hash)


def test_login_flow(app) -> None:
    app.register("alice", PASSWORD)
    app.register("bob", PASSWORD)

    assert app.login("nobody", PASSWORD).reason is Reason.USER_NOT_FOUND
    assert app.login("alice", "wrong").reason is Reason.BAD_CREDENTIAL
    assert app.current_user() is None

    res = app.login("ALICE", PASSWORD)
    assert res.ok
    session = res.value
    assert isinstance(session, Session)
    assert app.current_user().username == "alice"
    assert app.current_user().online is True

    # one session process-wide
    assert app.login("bob", PASSWORD).reason is Reason.ALREADY_LOGGED_IN


def test_logout(app, clock) -> None:
    app.register("alice", PASSWORD)
    assert app.logout().reason is Reason.NOT_AUTHENTICATED

    session = app.login("alice", PASSWORD).value
    stale = Session(user_id=session.user_id, username="alice", started_ts=0.0)
    assert app.logout(stale).reason is Reason.SESSION_MISMATCH

    before = clock.now
    assert app.logout(session).ok
    user = app.store.user_by_name("alice")
    assert user.online is False
    assert user.last_seen > before
    assert app.current_user() is None


def test_operations_require_a_session(app) -> None:
    app.register("alice", PASSWORD)
    for res in (
        app.add_friend("alice"),
        app.create_server("Home"),
        app.join_by_invite("ABCDEFGH"),
        app.send_direct_message("alice", "hi"),
        app.friends_of(),
    ):
        assert res.kind is ErrorKind.NOT_AUTHENTICATED


def test_friendship_is_symmetric(app) -> None:
    app.register("alice", PASSWORD)
    app.register("bob", PASSWORD)
    switch(app, "alice")

    assert app.add_friend("bob").ok
    alice = app.store.user_by_name("alice")
    bob = app.store.user_by_name("bob")
    assert bob.user_id in alice.friends
    assert alice.user_id in bob.friends
    assert app.add_friend("BOB").reason is Reason.ALREADY_FRIENDS

    friends = app.friends_of().value
    assert [f.username for f in friends] == ["bob"]
    assert [f.username for f in app.friends_of(bob).value] == ["alice"]

    assert app.remove_friend("bob").ok
    assert alice.friends == set() and bob.friends == set()
    assert app.remove_friend("bob").reason is Reason.NOT_FRIENDS
    app.store.check_invariants()


def test_friendship_rejects_self_and_unknown(app) -> None:
    app.register("alice", PASSWORD)
    switch(app, "alice")
    assert app.add_friend("Alice").reason is Reason.SELF_TARGET
    assert app.add_friend("ghost").reason is Reason.USER_NOT_FOUND


def test_profile_and_online_users(app) -> None:
    app.register("alice", PASSWORD, Role.MODERATOR)
    app.register("bob", PASSWORD)
    switch(app, "alice")
    app.add_friend("bob")
    app.create_server("Home")

    profile = app.profile().value
    assert profile.role is Role.MODERATOR
    assert profile.server_count == 1
    assert profile.friend_count == 1
    assert profile.friends[0].online is False
    assert [u.username for u in app.online_users()] == ["alice"]
