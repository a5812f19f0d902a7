from __future__ import annotations

from flask import Flask

from ..common.http import current_user, login_required, ok, request_data
from ..container import Container
from ..core.constants import SESSION_EXPIRES_KEY
from .model import User


def _user_json(user: User) -> dict:
    return {
        "_id": user.record_id,
        "username": user.username,
        "email": user.email,
        "name": user.display_name,
        "isAdmin": user.is_admin,
        "canApprove": user.can_approve,
    }


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    runtime = container.runtime
    manager = container.session_manager

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request_data()
        user = auth.login(data.get("username", ""), data.get("password", ""))
        return ok(_user_json(user), sessionExpires=container.store.get(SESSION_EXPIRES_KEY))

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        runtime.call(manager.logout)
        return ok(message="Logged out")

    @app.route("/auth/profile", methods=["GET"], endpoint="profile")
    @login_required(container)
    def profile():
        return ok(_user_json(current_user(container)))

    @app.route("/auth/session", methods=["GET"], endpoint="session_status")
    def session_status():
        def snapshot() -> dict:
            manager.sync()
            return {
                "phase": manager.phase.value,
                "secondsLeft": manager.seconds_left,
                "expiresAt": manager.expires_at.isoformat() if manager.expires_at else None,
                "warnAt": manager.warn_at.isoformat() if manager.warn_at else None,
                "autoLogoutAt": manager.auto_logout_at.isoformat() if manager.auto_logout_at else None,
            }

        state = runtime.call(snapshot)
        return ok(state, loggedIn=auth.is_logged_in(), username=auth.current_username())

    @app.route("/auth/session/events", methods=["POST"], endpoint="session_event")
    def session_event():
        """Storage event relayed from another context sharing the session store."""
        key = request_data().get("key")
        handled = container.storage_events.dispatch(key)
        return ok(handled=handled)

    # ---- user management ----

    @app.route("/users", methods=["GET"], endpoint="list_users")
    @login_required(container)
    def list_users():
        users = container.user_service.list_users(current_user=current_user(container))
        return ok([_user_json(u) for u in users])

    @app.route("/users", methods=["POST"], endpoint="register_user")
    @login_required(container)
    def register_user():
        data = request_data()
        container.user_service.register(
            current_user=current_user(container),
            username=data.get("username", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            is_admin=bool(data.get("isAdmin", False)),
            can_approve=bool(data.get("canApprove", False)),
        )
        return ok(message="User registered", status=201)

    @app.route("/users/<record_id>", methods=["PUT"], endpoint="update_user")
    @login_required(container)
    def update_user(record_id: str):
        data = request_data()
        container.user_service.update(
            current_user=current_user(container),
            record_id=record_id,
            username=data.get("username", ""),
            email=data.get("email", ""),
            is_admin=bool(data.get("isAdmin", False)),
            can_approve=bool(data.get("canApprove", False)),
        )
        return ok(message="User updated")

    @app.route("/users/<record_id>", methods=["DELETE"], endpoint="delete_user")
    @login_required(container)
    def delete_user(record_id: str):
        container.user_service.delete(current_user=current_user(container), record_id=record_id)
        return ok(message="User deleted")
