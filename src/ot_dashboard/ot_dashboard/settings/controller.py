from __future__ import annotations

from flask import Flask

from ..common.http import current_user, login_required, ok, request_data
from ..container import Container
from ..overtime.calculator import ShiftRules


def _rules_json(rules: ShiftRules) -> dict:
    return {
        "weekdayOTStart": dict(rules.weekday_ot_start),
        "saturdayShiftHours": dict(rules.saturday_shift_hours),
        "defaultOTStart": rules.default_ot_start,
        "defaultSaturdayHours": rules.default_saturday_hours,
    }


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/settings/reasons", methods=["GET"], endpoint="list_reasons")
    @login_required(container)
    def list_reasons():
        return ok([{"_id": r.record_id, "option": r.option} for r in settings.list_reasons()])

    @app.route("/settings/reasons", methods=["POST"], endpoint="add_reason")
    @login_required(container)
    def add_reason():
        settings.add_reason(current_user=current_user(container), option=request_data().get("option", ""))
        return ok(message="Reason added", status=201)

    @app.route("/settings/reasons/<record_id>", methods=["DELETE"], endpoint="delete_reason")
    @login_required(container)
    def delete_reason(record_id: str):
        settings.delete_reason(current_user=current_user(container), record_id=record_id)
        return ok(message="Reason deleted")

    @app.route("/settings/shift-rules", methods=["GET"], endpoint="get_shift_rules")
    @login_required(container)
    def get_shift_rules():
        return ok(_rules_json(settings.shift_rules()))

    @app.route("/settings/shift-rules", methods=["PUT"], endpoint="save_shift_rules")
    @login_required(container)
    def save_shift_rules():
        data = request_data()
        settings.save_shift_rules(
            current_user=current_user(container),
            weekday_ot_start=data.get("weekdayOTStart"),
            saturday_shift_hours=data.get("saturdayShiftHours"),
        )
        return ok(_rules_json(settings.shift_rules()), message="Shift rules saved")

    @app.route("/settings/shift-rules", methods=["DELETE"], endpoint="reset_shift_rules")
    @login_required(container)
    def reset_shift_rules():
        settings.reset_shift_rules(current_user=current_user(container))
        return ok(message="Shift rules reset")
