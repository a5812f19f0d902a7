from __future__ import annotations

from typing import Optional, Sequence

from ..api.client import ApiClient
from ..core.exceptions import ApiError, AuthenticationError
from .model import LoginResult, User
from .repository import AuthGateway, UserRepository


class RestUserRepository(UserRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_all(self) -> Sequence[User]:
        return [User.from_payload(r) for r in self._api.get_json("/users/") or []]

    def get_by_id(self, record_id: str) -> Optional[User]:
        try:
            data = self._api.get_json(f"/users/{record_id}")
        except ApiError as e:
            if e.status == 404:
                return None
            raise
        return User.from_payload(data) if data else None

    def register(self, *, username: str, email: str, password: str, is_admin: bool, can_approve: bool) -> None:
        self._api.post_json(
            "/auth/register",
            {
                "username": username,
                "email": email,
                "password": password,
                "isAdmin": is_admin,
                "canApprove": can_approve,
            },
        )

    def update(self, record_id: str, user: User) -> None:
        self._api.put_json(f"/users/{record_id}", user.to_payload())

    def delete(self, record_id: str) -> None:
        self._api.delete(f"/users/{record_id}")


class RestAuthGateway(AuthGateway):
    def __init__(self, api: ApiClient):
        self._api = api

    def login(self, username: str, password: str) -> LoginResult:
        try:
            data = self._api.post_json("/auth/login", {"username": username, "password": password})
        except ApiError as e:
            if e.status in (400, 401, 403):
                raise AuthenticationError(str(e)) from e
            raise
        if not isinstance(data, dict) or not data.get("token"):
            raise AuthenticationError("Login response did not contain a token")
        return LoginResult(
            token=str(data["token"]),
            session_expires=str(data.get("sessionExpires") or ""),
            user=User.from_payload(data),
        )

    def logout(self, token: Optional[str] = None) -> None:
        self._api.post_json("/auth/logout", token=token)

    def profile(self) -> User:
        try:
            return User.from_payload(self._api.get_json("/auth/profile") or {})
        except ApiError as e:
            if e.status == 401:
                raise AuthenticationError("Session is no longer valid") from e
            raise
