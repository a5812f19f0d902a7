from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class User:
    """Dashboard account as returned by the backend profile/users endpoints."""

    username: str
    email: str = ""
    name: str = ""
    is_admin: bool = False
    can_approve: bool = False
    record_id: Optional[str] = None

    @property
    def has_ot_privilege(self) -> bool:
        return self.is_admin or self.can_approve

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            name=str(data.get("name") or ""),
            is_admin=bool(data.get("isAdmin", False)),
            can_approve=bool(data.get("canApprove", False)),
            record_id=data.get("_id") or data.get("id"),
        )

    def to_payload(self) -> dict:
        return {
            "username": self.username,
            "email": self.email,
            "isAdmin": self.is_admin,
            "canApprove": self.can_approve,
        }


@dataclass(frozen=True)
class LoginResult:
    token: str
    session_expires: str
    user: User
