from __future__ import annotations

from flask import Flask

from ..common.http import current_user, login_required, ok, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    triple_ot = container.tripleot_service

    @app.route("/tripleot", methods=["GET"], endpoint="list_tripleot")
    @login_required(container)
    def list_tripleot():
        return ok([{"_id": r.record_id, **r.to_payload()} for r in triple_ot.list_dates()])

    @app.route("/tripleot", methods=["POST"], endpoint="add_tripleot")
    @login_required(container)
    def add_tripleot():
        data = request_data()
        triple_ot.add(current_user=current_user(container), raw_date=data.get("date"), description=data.get("description"))
        return ok(message="Triple OT date added", status=201)

    @app.route("/tripleot/<record_id>", methods=["PUT"], endpoint="update_tripleot")
    @login_required(container)
    def update_tripleot(record_id: str):
        data = request_data()
        triple_ot.update(
            current_user=current_user(container),
            record_id=record_id,
            raw_date=data.get("date"),
            description=data.get("description"),
        )
        return ok(message="Triple OT date updated")

    @app.route("/tripleot/<record_id>", methods=["DELETE"], endpoint="delete_tripleot")
    @login_required(container)
    def delete_tripleot(record_id: str):
        triple_ot.delete(current_user=current_user(container), record_id=record_id)
        return ok(message="Triple OT date deleted")
