import pytest

from concord.core.permissions import (
    ROLE_CAPABILITIES,
    SERVER_ROLE_CAPABILITIES,
    Capability,
    Role,
    capabilities,
)
from concord.core.results import REASON_KINDS, Err, ErrorKind, Ok, Reason, fail, ok


def test_every_reason_has_a_kind():
    assert set(REASON_KINDS) == set(Reason)


def test_results_are_discriminated():
    good = ok(42)
    bad = fail(Reason.BANNED, "You are banned from this server.")
    assert isinstance(good, Ok) and good.ok is True and good.value == 42
    assert isinstance(bad, Err) and bad.ok is False
    assert bad.kind is ErrorKind.UNAUTHORIZED
    assert fail(Reason.FULL).kind is ErrorKind.STATE_CONFLICT


def test_results_are_frozen():
    res = fail(Reason.FULL)
    with pytest.raises(Exception):
        res.reason = Reason.LOCKED


def test_role_capability_table():
    assert ROLE_CAPABILITIES[Role.MEMBER] == frozenset()
    assert ROLE_CAPABILITIES[Role.ADMIN] == frozenset(Capability)
    moderator = ROLE_CAPABILITIES[Role.MODERATOR]
    assert Capability.KICK_USERS in moderator
    assert Capability.MUTE_USERS in moderator
    assert Capability.BAN_USERS not in moderator
    assert Capability.CREATE_CHANNELS not in moderator


def test_capabilities_union():
    assert capabilities(Role.MEMBER) == frozenset()
    assert capabilities(Role.MODERATOR, Role.MEMBER) == ROLE_CAPABILITIES[Role.MODERATOR]
    assert capabilities(Role.MEMBER, Role.ADMIN) == frozenset(Capability)


def test_server_moderator_only_mutes():
    assert SERVER_ROLE_CAPABILITIES[Role.MODERATOR] == {Capability.MUTE_USERS}
    assert capabilities(Role.MEMBER, Role.MODERATOR) == {Capability.MUTE_USERS}
    assert Capability.KICK_USERS not in capabilities(Role.MEMBER, Role.MODERATOR)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("admin", Role.ADMIN),
        (" Moderator ", Role.MODERATOR),
        ("MEMBER", Role.MEMBER),
        ("owner", None),
        ("", None),
        (None, None),
    ],
)
def test_role_parse(raw, expected):
    assert Role.parse(raw) is expected
