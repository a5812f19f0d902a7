from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Mapping, Optional

from flask import Flask, request

from ..common.http import current_user, login_required, ok, request_data
from ..common.validators import require_iso_date
from ..container import Container
from ..core.exceptions import ValidationError
from .audit_model import OvertimeAuditLog
from .model import OvertimeEntry

FIELD_ALIASES = {"employeeNumber": "employee_number", "noOT": "no_ot"}


def _field(name: str) -> str:
    return FIELD_ALIASES.get(name, name)


def _draft_row(data: Mapping[str, Any]) -> OvertimeEntry:
    if not isinstance(data, Mapping):
        raise ValidationError("Row must be an object")
    try:
        entry = OvertimeEntry.from_payload(data)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid row: {e}")
    return replace(entry, auto=bool(data.get("auto", True)), no_ot=bool(data.get("noOT", data.get("no_ot", False))))


def _row_json(entry: OvertimeEntry, errors: Optional[dict] = None) -> dict:
    body = entry.to_payload()
    body.update(_id=entry.entry_id, auto=entry.auto, noOT=entry.no_ot)
    if errors is not None:
        body["errors"] = errors
    return body


def _audit_json(log: OvertimeAuditLog) -> dict:
    return {
        "_id": log.record_id,
        "action": log.action,
        "performedBy": log.performed_by,
        "details": dict(log.details),
        "createdAt": log.created_at.isoformat() if log.created_at else None,
    }


def _optional_day(value: Optional[str], field_name: str):
    return require_iso_date(value, field_name) if value else None


def register(app: Flask, container: Container) -> None:
    service = container.overtime_service
    audit = container.overtime_audit_service

    @app.route("/overtime", methods=["GET"], endpoint="list_overtime")
    @login_required(container)
    def list_overtime():
        day = _optional_day(request.args.get("date"), "Date")
        week = _optional_day(request.args.get("week"), "Week")
        if week is not None:
            grouped = service.entries_for_week(week)
            return ok({d.isoformat(): [_row_json(e) for e in rows] for d, rows in grouped.items()})
        status = request.args.get("status")
        if status:
            entries = service.entries_with_status(status)
            if day is not None:
                entries = [e for e in entries if e.work_date == day]
        else:
            entries = service.entries_for_day(day) if day is not None else service.list_entries()
        return ok([_row_json(e) for e in entries])

    @app.route("/overtime/pending", methods=["GET"], endpoint="pending_overtime")
    @login_required(container)
    def pending_overtime():
        pending = service.pending_entries(current_user=current_user(container))
        return ok({"pending": [_row_json(e) for e in pending], "count": len(pending)})

    @app.route("/overtime/audit", methods=["GET"], endpoint="overtime_audit")
    @login_required(container)
    def overtime_audit():
        logs = audit.list_logs(current_user=current_user(container), search=request.args.get("search"))
        return ok([_audit_json(log) for log in logs])

    @app.route("/overtime/rows/compute", methods=["POST"], endpoint="compute_row")
    @login_required(container)
    def compute_row():
        """Apply one edit (``field``/``value``) to a draft row, or recompute the whole row."""
        data = request_data()
        row = _draft_row(data.get("row") or {})
        work_date = _optional_day(data.get("date"), "Date")
        field_name = data.get("field")
        if field_name:
            row = service.apply_change(row, _field(field_name), data.get("value"), work_date=work_date)
        else:
            row = service.compute_row(row, work_date)
        return ok(_row_json(row, service.row_errors(row)))

    @app.route("/overtime/save", methods=["POST"], endpoint="save_overtime")
    @login_required(container)
    def save_overtime():
        data = request_data()
        rows = [_draft_row(r) for r in data.get("rows") or []]
        outcome = service.save_day(
            rows,
            work_date=_optional_day(data.get("date"), "Date"),
            performed_by=current_user(container).username,
            overwrite=bool(data.get("overwrite", False)),
        )
        return ok(asdict(outcome), message="Overtime saved")

    @app.route("/overtime/<entry_id>", methods=["PUT"], endpoint="edit_overtime")
    @login_required(container)
    def edit_overtime(entry_id: str):
        changes = {_field(k): v for k, v in request_data().items()}
        entry = service.edit(current_user=current_user(container), entry_id=entry_id, changes=changes)
        return ok(_row_json(entry), message="Overtime updated")

    @app.route("/overtime/<entry_id>", methods=["DELETE"], endpoint="delete_overtime")
    @login_required(container)
    def delete_overtime(entry_id: str):
        service.delete(current_user=current_user(container), entry_id=entry_id)
        return ok(message="Overtime deleted")

    @app.route("/overtime/<entry_id>/approve", methods=["POST"], endpoint="approve_overtime")
    @login_required(container)
    def approve_overtime(entry_id: str):
        data = request_data()
        service.approve(
            current_user=current_user(container),
            entry_id=entry_id,
            approvedot=data.get("approvedot"),
            reason=data.get("reason"),
        )
        return ok(message="Overtime approved")

    @app.route("/overtime/<entry_id>/reject", methods=["POST"], endpoint="reject_overtime")
    @login_required(container)
    def reject_overtime(entry_id: str):
        service.reject(current_user=current_user(container), entry_id=entry_id, reason=request_data().get("reason"))
        return ok(message="Overtime rejected")

    @app.route("/overtime/<entry_id>/status", methods=["PUT"], endpoint="overtime_status")
    @login_required(container)
    def overtime_status(entry_id: str):
        service.set_status(
            current_user=current_user(container),
            entry_id=entry_id,
            status=str(request_data().get("status") or ""),
        )
        return ok(message="Status updated")
