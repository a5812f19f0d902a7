from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Optional

from flask import Flask, g, jsonify, request

from ..core.enums import SessionPhase
from ..core.exceptions import ApiError, AuthenticationError, AuthorizationError, DomainError, ValidationError
from ..users.model import User

if TYPE_CHECKING:
    from ..container import Container

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ApiError, 502),
)


def ok(data: Any = None, *, status: int = 200, **extra):
    body = {"success": True, **extra}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def request_data() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def register_error_handlers(app: Flask) -> None:
    def handle_domain_error(e: DomainError):
        for exc_type, status in ERROR_STATUS:
            if isinstance(e, exc_type):
                return fail(str(e), status)
        logger.error("Unhandled domain error: %s", e)
        return fail(str(e), 400)

    app.register_error_handler(DomainError, handle_domain_error)
    app.register_error_handler(404, lambda _e: fail("Not found", 404))
    app.register_error_handler(405, lambda _e: fail("Method not allowed", 405))


def session_active(container: "Container") -> bool:
    """Token present and the expiry timers armed for it."""
    if not container.auth_service.is_logged_in():
        return False
    manager = container.session_manager
    container.runtime.call(manager.sync)
    phase = container.runtime.call(lambda: manager.phase)
    return phase in (SessionPhase.SCHEDULED, SessionPhase.WARNING)


def login_required(container: "Container"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not session_active(container):
                return fail("Please log in to continue", 401)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user(container: "Container") -> User:
    """Backend profile of the logged-in user, fetched once per request."""
    user: Optional[User] = g.get("current_user")
    if user is None:
        user = container.auth_service.profile()
        g.current_user = user
    return user
