from concord.app import ChatApp
from concord.config import Settings
from concord.core.permissions import Role
from concord.demo import DEMO_SERVER, seed_demo

from .helpers import TickingClock


def test_seed_demo_on_startup():
    app = ChatApp(Settings(seed_demo=True), clock=TickingClock())
    assert app.me is None
    admin = app.store.user_by_name("admin")
    assert admin.role is Role.ADMIN
    assert app.store.user_by_name("moderator").role is Role.MODERATOR
    assert app.store.user_by_name("user").role is Role.MEMBER

    (server,) = app.store.servers.values()
    assert server.name == DEMO_SERVER
    assert server.owner_id == admin.user_id

    assert app.login("moderator", "mod123").ok
    assert app.join_by_invite(server.invite_code).ok
    app.store.check_invariants()


def test_seed_demo_twice_is_skipped():
    app = ChatApp(Settings(seed_demo=True), clock=TickingClock())
    assert seed_demo(app) is None
    assert len(app.store.servers) == 1
