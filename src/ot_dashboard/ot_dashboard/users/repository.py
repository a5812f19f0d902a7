from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LoginResult, User


class UserRepository(Protocol):
    """Admin user management on the backend."""

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[User]:
        raise NotImplementedError

    def register(self, *, username: str, email: str, password: str, is_admin: bool, can_approve: bool) -> None:
        raise NotImplementedError

    def update(self, record_id: str, user: User) -> None:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError


class AuthGateway(Protocol):
    """Token issuance lives on the backend; this is only the calling side."""

    def login(self, username: str, password: str) -> LoginResult:
        raise NotImplementedError

    def logout(self, token: Optional[str] = None) -> None:
        raise NotImplementedError

    def profile(self) -> User:
        raise NotImplementedError
