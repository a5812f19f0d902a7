from __future__ import annotations

from datetime import timedelta

import pytest

from src.ot_dashboard.ot_dashboard.core.constants import SESSION_EXPIRES_KEY, TOKEN_KEY, USERNAME_KEY
from src.ot_dashboard.ot_dashboard.core.enums import SessionPhase
from src.ot_dashboard.ot_dashboard.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from src.ot_dashboard.ot_dashboard.session.manager import SessionManager
from src.ot_dashboard.ot_dashboard.session.sources import WriteInterceptSource
from src.ot_dashboard.ot_dashboard.session.store import MemorySessionStore
from src.ot_dashboard.ot_dashboard.users.service import AuthService, UserService


@pytest.fixture
def store():
    return WriteInterceptSource(MemorySessionStore({"theme": "dark"}))


@pytest.fixture
def auth(repos, store, scheduler):
    service = AuthService(repos.auth, store)
    manager = SessionManager(store, scheduler, on_logout=service.logout)
    manager.watch(store)
    service.attach_session(manager)
    return service, manager


def test_login_persists_token_and_arms_timers(auth, store, repos, fixed_now):
    service, manager = auth
    repos.auth.session_expires = (fixed_now + timedelta(minutes=30)).isoformat()

    user = service.login("admin", "secret")

    assert user.is_admin
    assert store.get(TOKEN_KEY) == "tok-1"
    assert store.get(USERNAME_KEY) == "admin"
    assert manager.phase == SessionPhase.SCHEDULED
    assert service.is_logged_in()


def test_login_rejects_bad_credentials(auth, store):
    service, _ = auth

    with pytest.raises(AuthenticationError):
        service.login("admin", "wrong")
    with pytest.raises(ValidationError):
        service.login("", "secret")
    assert store.get(TOKEN_KEY) is None


def test_logout_clears_even_when_backend_fails(auth, store, repos, fixed_now):
    service, manager = auth
    repos.auth.session_expires = (fixed_now + timedelta(minutes=30)).isoformat()
    service.login("admin", "secret")
    repos.auth.fail_logout = True

    service.logout()

    assert repos.auth.logout_tokens == ["tok-1"]
    assert store.keys() == []
    assert manager.phase == SessionPhase.IDLE


def test_logout_clears_locally_before_backend_is_told(repos, store, scheduler, fixed_now):
    deferred = []
    service = AuthService(repos.auth, store, background=deferred.append)
    manager = SessionManager(store, scheduler, on_logout=service.logout)
    manager.watch(store)
    service.attach_session(manager)
    repos.auth.session_expires = (fixed_now + timedelta(minutes=30)).isoformat()
    service.login("admin", "secret")

    manager.logout()

    assert store.get(TOKEN_KEY) is None
    assert manager.phase == SessionPhase.IDLE
    assert scheduler.pending == []
    assert repos.auth.logout_calls == 0

    deferred.pop()()
    assert repos.auth.logout_tokens == ["tok-1"]


def test_logout_without_token_skips_backend(auth, repos):
    service, _ = auth

    service.logout()

    assert repos.auth.logout_calls == 0


def test_session_expiry_logs_out(auth, store, repos, scheduler, fixed_now):
    service, manager = auth
    repos.auth.session_expires = (fixed_now + timedelta(minutes=2)).isoformat()
    service.login("admin", "secret")

    scheduler.advance(115)

    assert repos.auth.logout_calls == 1
    assert store.get(TOKEN_KEY) is None
    assert manager.phase == SessionPhase.IDLE
    assert scheduler.pending == []


def test_restore_drops_rejected_token(auth, store, repos):
    service, _ = auth
    store.set(TOKEN_KEY, "stale")
    store.set(SESSION_EXPIRES_KEY, "2099-01-01T00:00:00Z")
    repos.auth.reject_profile = True

    assert service.restore() is None
    assert store.get(TOKEN_KEY) is None
    assert store.get(SESSION_EXPIRES_KEY) is None


def test_profile_requires_login(auth):
    service, _ = auth
    with pytest.raises(AuthenticationError):
        service.profile()


def test_user_admin_rules(repos, admin, clerk):
    users = UserService(repos.users)

    with pytest.raises(AuthorizationError):
        users.list_users(current_user=clerk)
    with pytest.raises(ValidationError):
        users.register(current_user=admin, username="new", email="n@x.io", password="123")
    with pytest.raises(ValidationError):
        users.delete(current_user=admin, record_id=admin.record_id)

    users.register(current_user=admin, username="new", email="n@x.io", password="123456", can_approve=True)
    users.delete(current_user=admin, record_id=clerk.record_id)

    assert repos.users.registered[0]["can_approve"] is True
    assert repos.users.get_by_id(clerk.record_id) is None
