from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is gone."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ApiError(DomainError):
    """Raised when the overtime backend answers with an error or is unreachable."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
