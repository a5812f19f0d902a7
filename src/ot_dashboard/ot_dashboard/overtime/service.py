from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import AbstractSet, Any, Optional, Sequence

from ..common.datetime_utils import week_start
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError
from ..employees.service import EmployeeService
from ..settings.service import SettingsService
from ..tripleot.service import TripleOTService
from ..users.model import User
from ..users.service import require_admin, require_approver
from .calculator import ShiftRules, clear_for_no_ot, compute_night, compute_overtime
from .audit_model import OvertimeAuditLog
from .audit_repository import OvertimeAuditRepository
from .model import OvertimeEntry
from .repository import OvertimeRepository

logger = logging.getLogger(__name__)

CALC_FIELDS = frozenset({"shift", "intime", "outtime"})
CLOCK_FIELDS = frozenset({"intime", "outtime"})
TEXT_FIELDS = frozenset({"employee_number", "shift", "intime", "outtime", "reason"})
HOUR_FIELDS = frozenset({"normalot", "doubleot", "tripleot"})
REQUIRED_FIELDS = ("employee_number", "shift", "intime", "outtime", "reason")


@dataclass
class SaveOutcome:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    no_ot: list[str] = field(default_factory=list)


def _to_hours(value: Any, field_name: str) -> float:
    try:
        hours = float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if hours < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return hours


class OvertimeService:
    """Use cases around overtime entries: draft row editing, saving a day, approval."""

    def __init__(
        self,
        overtime: OvertimeRepository,
        employees: EmployeeService,
        triple_ot: TripleOTService,
        settings: SettingsService,
    ):
        self._overtime = overtime
        self._employees = employees
        self._triple_ot = triple_ot
        self._settings = settings

    # ---- calculation context ----

    def calculation_context(self) -> tuple[frozenset[date], ShiftRules]:
        return self._triple_ot.date_set(), self._settings.shift_rules()

    # ---- draft rows ----

    def apply_change(
        self,
        row: OvertimeEntry,
        field_name: str,
        value: Any,
        *,
        work_date: Optional[date],
        triple_dates: Optional[AbstractSet[date]] = None,
        rules: Optional[ShiftRules] = None,
    ) -> OvertimeEntry:
        """Apply one edit to a draft row and refresh the derived fields."""
        if field_name == "no_ot":
            if bool(value):
                return clear_for_no_ot(row)
            return replace(row, no_ot=False)

        if field_name in TEXT_FIELDS:
            updated = replace(row, **{field_name: str(value or "").strip()})
        elif field_name in HOUR_FIELDS:
            updated = replace(row, **{field_name: _to_hours(value, field_name)})
        elif field_name == "auto":
            updated = replace(row, auto=bool(value))
        else:
            raise ValidationError(f"Unknown field: {field_name}")

        if field_name == "employee_number":
            updated = replace(updated, name=self._employees.name_for(updated.employee_number))

        if field_name in CLOCK_FIELDS:
            updated = replace(updated, night=compute_night(updated.intime, updated.outtime))

        if updated.auto and field_name in CALC_FIELDS:
            if triple_dates is None or rules is None:
                ctx_dates, ctx_rules = self.calculation_context()
                triple_dates = ctx_dates if triple_dates is None else triple_dates
                rules = ctx_rules if rules is None else rules
            updated = compute_overtime(updated, work_date, triple_dates, rules)
        return updated

    def compute_row(self, row: OvertimeEntry, work_date: Optional[date]) -> OvertimeEntry:
        """Recompute every derived field of a full draft row."""
        if row.no_ot:
            return clear_for_no_ot(row)
        row = replace(row, night=compute_night(row.intime, row.outtime))
        if not row.auto:
            return row
        triple_dates, rules = self.calculation_context()
        return compute_overtime(row, work_date, triple_dates, rules)

    @staticmethod
    def row_errors(row: OvertimeEntry) -> dict[str, bool]:
        errors = {name: not getattr(row, name).strip() for name in REQUIRED_FIELDS}
        if row.no_ot:
            errors.update(shift=False, intime=False, outtime=False, reason=False)
        return errors

    def validate_rows(self, rows: Sequence[OvertimeEntry]) -> list[dict[str, bool]]:
        return [self.row_errors(r) for r in rows]

    # ---- saving ----

    def save_day(
        self,
        rows: Sequence[OvertimeEntry],
        *,
        work_date: Optional[date],
        performed_by: Optional[str],
        overwrite: bool = False,
    ) -> SaveOutcome:
        """Post the draft rows of one day as Pending entries.

        An entry that already exists for the same employee and day is only
        overwritten when ``overwrite`` is set; "No OT" rows are always posted.
        """
        if work_date is None:
            raise ValidationError("Please select a day first")
        if not rows:
            raise ValidationError("No entries to save")

        invalid = sorted({name for errors in self.validate_rows(rows) for name, bad in errors.items() if bad})
        if invalid:
            raise ValidationError(f"Please fill all fields for all rows: {', '.join(invalid)}")

        for row in rows:
            if not (row.name or self._employees.name_for(row.employee_number)):
                raise ValidationError(f"Unknown employee: {row.employee_number}")

        existing = {
            e.employee_number: e for e in self._overtime.list_all() if e.work_date == work_date
        }
        outcome = SaveOutcome()

        for row in rows:
            if row.no_ot:
                self._overtime.create_no_ot(
                    employee_number=row.employee_number,
                    work_date=work_date,
                    performed_by=performed_by,
                )
                outcome.no_ot.append(row.employee_number)
                continue

            name = row.name or self._employees.name_for(row.employee_number)
            entry = replace(row, name=name, work_date=work_date, status=OvertimeStatus.PENDING)
            duplicate = existing.get(row.employee_number)

            if duplicate is None:
                self._overtime.create(entry, performed_by=performed_by)
                outcome.created.append(row.employee_number)
            elif overwrite and duplicate.entry_id:
                self._overtime.update(duplicate.entry_id, entry.to_payload(), performed_by=performed_by)
                outcome.updated.append(row.employee_number)
            else:
                logger.info("Skipped existing overtime for %s on %s", row.employee_number, work_date)
                outcome.skipped.append(row.employee_number)

        logger.info(
            "Saved overtime for %s: created=%d updated=%d skipped=%d no_ot=%d",
            work_date, len(outcome.created), len(outcome.updated), len(outcome.skipped), len(outcome.no_ot),
        )
        return outcome

    # ---- listing ----

    def list_entries(self) -> Sequence[OvertimeEntry]:
        return self._overtime.list_all()

    def entries_for_day(self, day: date) -> list[OvertimeEntry]:
        return [e for e in self._overtime.list_all() if e.work_date == day]

    def entries_with_status(self, status: str) -> list[OvertimeEntry]:
        try:
            wanted = OvertimeStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status: {status}")
        return [e for e in self._overtime.list_all() if e.status == wanted]

    def pending_entries(self, *, current_user: User) -> list[OvertimeEntry]:
        """Approval queue: every Pending entry, oldest day first."""
        require_approver(current_user)
        pending = self.entries_with_status(OvertimeStatus.PENDING.value)
        return sorted(pending, key=lambda e: (e.work_date or date.min, e.employee_number))

    def entries_for_week(self, day: date) -> dict[date, list[OvertimeEntry]]:
        start = week_start(day)
        days = [start + timedelta(days=i) for i in range(7)]
        grouped: dict[date, list[OvertimeEntry]] = {d: [] for d in days}
        for entry in self._overtime.list_all():
            if entry.work_date in grouped:
                grouped[entry.work_date].append(entry)
        return grouped

    def _get(self, entry_id: str) -> OvertimeEntry:
        for entry in self._overtime.list_all():
            if entry.entry_id == entry_id:
                return entry
        raise ValidationError("Overtime entry not found")

    # ---- approval & edits ----

    def approve(
        self,
        *,
        current_user: User,
        entry_id: str,
        approvedot: Optional[Any] = None,
        reason: Optional[str] = None,
    ) -> None:
        require_approver(current_user)
        entry = self._get(entry_id)
        hours = entry.total_hours if approvedot in (None, "") else _to_hours(approvedot, "Approved OT")
        self._overtime.approve(
            entry_id,
            approvedot=hours,
            reason=(reason or "").strip() or entry.reason,
            performed_by=current_user.username,
        )

    def reject(self, *, current_user: User, entry_id: str, reason: Optional[str] = None) -> None:
        require_approver(current_user)
        self._get(entry_id)
        self._overtime.reject(entry_id, reason=(reason or "").strip() or None, performed_by=current_user.username)

    def set_status(self, *, current_user: User, entry_id: str, status: str) -> None:
        try:
            new_status = OvertimeStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status: {status}")
        if new_status == OvertimeStatus.APPROVED:
            self.approve(current_user=current_user, entry_id=entry_id)
        elif new_status == OvertimeStatus.REJECTED:
            self.reject(current_user=current_user, entry_id=entry_id)
        else:
            require_approver(current_user)
            self._overtime.update(entry_id, {"status": new_status.value}, performed_by=current_user.username)

    def edit(self, *, current_user: User, entry_id: str, changes: dict[str, Any]) -> OvertimeEntry:
        """Admin edit of a saved entry; approved entries are locked."""
        require_admin(current_user)
        entry = self._get(entry_id)
        if entry.status == OvertimeStatus.APPROVED:
            raise ValidationError("Approved entries cannot be edited")

        triple_dates, rules = self.calculation_context()
        updated = replace(entry, auto=True)
        for name, value in changes.items():
            if name == "approvedot":
                updated = replace(updated, approvedot=_to_hours(value, "Approved OT"))
                continue
            updated = self.apply_change(
                updated, name, value, work_date=entry.work_date, triple_dates=triple_dates, rules=rules
            )

        payload = updated.to_payload()
        payload.setdefault("approvedot", 0)
        self._overtime.update(entry_id, payload, performed_by=current_user.username)
        return updated

    def delete(self, *, current_user: User, entry_id: str) -> None:
        require_admin(current_user)
        self._overtime.delete(entry_id, performed_by=current_user.username)


class OvertimeAuditService:
    """Read side of the backend's overtime audit trail (admin)."""

    def __init__(self, audit_logs: OvertimeAuditRepository):
        self._audit_logs = audit_logs

    def list_logs(self, *, current_user: User, search: Optional[str] = None) -> list[OvertimeAuditLog]:
        require_admin(current_user)
        logs = list(self._audit_logs.list_all())
        text = (search or "").strip()
        if text:
            logs = [log for log in logs if log.matches(text)]
        return sorted(
            logs,
            key=lambda log: log.created_at.timestamp() if log.created_at else 0.0,
            reverse=True,
        )
