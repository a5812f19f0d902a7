from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import SESSION_EXPIRES_KEY, TOKEN_KEY, USERNAME_KEY
from ..core.exceptions import ApiError, AuthenticationError, AuthorizationError, ValidationError
from ..session.manager import SessionManager
from ..session.store import SessionStore
from .model import User
from .repository import AuthGateway, UserRepository

logger = logging.getLogger(__name__)


def require_admin(user: Optional[User]) -> None:
    if not user or not user.is_admin:
        raise AuthorizationError("Admin privileges required")


def require_approver(user: Optional[User]) -> None:
    if not user or not user.has_ot_privilege:
        raise AuthorizationError("Approval privileges required")


class AuthService:
    """Use case: login / logout / profile against the backend.

    The session store is the single place the token and expiry live; writing
    to it is what (re)arms the session timers.
    """

    def __init__(
        self,
        gateway: AuthGateway,
        store: SessionStore,
        session: Optional[SessionManager] = None,
        *,
        background: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        self._gateway = gateway
        self._store = store
        self._session = session
        self._background = background or (lambda fn: fn())

    def attach_session(self, session: SessionManager) -> None:
        self._session = session

    def login(self, username: str, password: str) -> User:
        username = require_non_empty(username, "Username")
        require_non_empty(password, "Password")

        result = self._gateway.login(username, password)
        self._store.set(TOKEN_KEY, result.token)
        self._store.set(SESSION_EXPIRES_KEY, result.session_expires)
        self._store.set(USERNAME_KEY, result.user.username or username)
        logger.info("User %s logged in, session expires %s", username, result.session_expires)
        return result.user

    def is_logged_in(self) -> bool:
        return bool(self._store.get(TOKEN_KEY))

    def current_username(self) -> Optional[str]:
        return self._store.get(USERNAME_KEY)

    def profile(self) -> User:
        if not self.is_logged_in():
            raise AuthenticationError("Not logged in")
        return self._gateway.profile()

    def restore(self) -> Optional[User]:
        """Boot-time check of a persisted token; drops it when the backend rejects it."""
        if not self.is_logged_in():
            return None
        try:
            user = self._gateway.profile()
        except AuthenticationError as e:
            logger.warning("Stored session rejected: %s", e)
            self._store.remove(TOKEN_KEY)
            self._store.remove(SESSION_EXPIRES_KEY)
            return None
        except ApiError as e:
            logger.warning("Could not verify stored session: %s", e)
            return None
        self._store.set(USERNAME_KEY, user.username)
        return user

    def logout(self, message: str = "Logged out.") -> None:
        """Tear down the local session now and tell the backend in the background."""
        token = self._store.get(TOKEN_KEY)
        if self._session is not None:
            self._session.cancel()
        self._store.clear()
        logger.info(message)
        if token:
            self._background(lambda: self._notify_backend_logout(token))

    def _notify_backend_logout(self, token: str) -> None:
        try:
            self._gateway.logout(token)
        except ApiError as e:
            logger.warning("Backend logout failed, local session already cleared: %s", e)


class UserService:
    """Use case: manage dashboard accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self, *, current_user: User) -> Sequence[User]:
        require_admin(current_user)
        return self._users.list_all()

    def register(
        self,
        *,
        current_user: User,
        username: str,
        email: str,
        password: str,
        is_admin: bool = False,
        can_approve: bool = False,
    ) -> None:
        require_admin(current_user)
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Password", 6)
        self._users.register(
            username=username,
            email=email,
            password=password,
            is_admin=bool(is_admin),
            can_approve=bool(can_approve),
        )

    def update(
        self,
        *,
        current_user: User,
        record_id: str,
        username: str,
        email: str,
        is_admin: bool,
        can_approve: bool,
    ) -> None:
        require_admin(current_user)
        existing = self._users.get_by_id(record_id)
        if not existing:
            raise ValidationError("User not found")
        self._users.update(
            record_id,
            User(
                username=require_non_empty(username, "Username"),
                email=(email or "").strip(),
                name=existing.name,
                is_admin=bool(is_admin),
                can_approve=bool(can_approve),
                record_id=record_id,
            ),
        )

    def delete(self, *, current_user: User, record_id: str) -> None:
        require_admin(current_user)
        if current_user.record_id and current_user.record_id == record_id:
            raise ValidationError("You cannot delete your own account")
        self._users.delete(record_id)
