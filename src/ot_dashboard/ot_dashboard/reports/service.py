from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_month
from ..common.validators import require_iso_date
from ..core.exceptions import ValidationError
from ..employees.service import EmployeeService
from ..overtime.model import OvertimeEntry
from ..overtime.repository import OvertimeRepository
from ..users.model import User
from .model import DownloadLog, ExcelExport, OvertimeTotals, ReportData
from .repository import DownloadLogRepository

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "date",
    "employee_number",
    "name",
    "shift",
    "intime",
    "outtime",
    "reason",
    "normalot",
    "doubleot",
    "tripleot",
    "night",
    "status",
    "approvedot",
]


def _report_row(e: OvertimeEntry) -> dict:
    return {
        "date": e.work_date.isoformat() if e.work_date else "",
        "employee_number": e.employee_number,
        "name": e.name,
        "shift": e.shift,
        "intime": e.intime,
        "outtime": e.outtime,
        "reason": e.reason,
        "normalot": e.normalot,
        "doubleot": e.doubleot,
        "tripleot": e.tripleot,
        "night": e.night.value,
        "status": e.status.value,
        "approvedot": "" if e.approvedot is None else e.approvedot,
    }


def _totals(entries: Iterable[OvertimeEntry]) -> OvertimeTotals:
    normal = double = triple = 0.0
    for e in entries:
        normal += e.normalot
        double += e.doubleot
        triple += e.tripleot
    return OvertimeTotals(normal=normal, double=double, triple=triple)


def _check_month(month: Optional[str]) -> str:
    if not month:
        raise ValidationError("Month is required")
    try:
        parse_month(month)
    except ValueError:
        raise ValidationError("Month must be YYYY-MM")
    return month


class OvertimeReportService:
    """Read-side views over the overtime entries plus the Excel export audit."""

    def __init__(
        self,
        overtime: OvertimeRepository,
        download_logs: DownloadLogRepository,
        employees: Optional[EmployeeService] = None,
        *,
        today: Callable[[], date] = lambda: now_utc().date(),
    ):
        self._overtime = overtime
        self._download_logs = download_logs
        self._employees = employees
        self._today = today

    # ---- filtering ----

    def _in_month(self, month: str) -> list[OvertimeEntry]:
        # prefix match on the ISO date string
        return [
            e for e in self._overtime.list_all()
            if e.work_date is not None and e.work_date.isoformat()[:7] == month
        ]

    def _in_range(self, start: date, end: date) -> list[OvertimeEntry]:
        return [
            e for e in self._overtime.list_all()
            if e.work_date is not None and start <= e.work_date <= end
        ]

    @staticmethod
    def _build(entries: Sequence[OvertimeEntry]) -> ReportData:
        rows: list[dict] = []
        by_employee: dict[str, list[dict]] = {}
        for e in sorted(entries, key=lambda x: (x.work_date, x.employee_number)):
            row = _report_row(e)
            rows.append(row)
            if e.employee_number:
                by_employee.setdefault(e.employee_number, []).append(row)
        return ReportData(rows=rows, by_employee=by_employee, summary=_totals(entries))

    # ---- views ----

    def month_view(self, month: Optional[str]) -> ReportData:
        """Entries of one "YYYY-MM" month grouped by employee number."""
        return self._build(self._in_month(_check_month(month)))

    def range_view(self, start_s: Optional[str], end_s: Optional[str]) -> ReportData:
        start = require_iso_date(start_s, "Start date")
        end = require_iso_date(end_s, "End date")
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._build(self._in_range(start, end))

    def breakdown(
        self,
        *,
        month: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[dict]:
        """Normal/double/triple totals for the pie chart.

        Filters by month when given, else by the inclusive range when both ends
        are given, else over every entry.
        """
        if month:
            entries = self._in_month(_check_month(month))
        elif start and end:
            entries = self._in_range(require_iso_date(start, "Start date"), require_iso_date(end, "End date"))
        else:
            entries = list(self._overtime.list_all())
        return _totals(entries).as_pie()

    def dashboard_stats(self) -> dict:
        today = self._today()
        yesterday = today - timedelta(days=1)
        entries = self._overtime.list_all()
        today_count = sum(1 for e in entries if e.work_date == today)
        yesterday_count = sum(1 for e in entries if e.work_date == yesterday)
        employees = len(self._employees.list_employees()) if self._employees else 0
        change = today_count - yesterday_count
        return {
            "total_employees": employees,
            "overtime_today": today_count,
            "overtime_change": abs(change),
            "overtime_trend": "up" if change >= 0 else "down",
        }

    # ---- excel export ----

    def export_excel(self, *, current_user: User, start_s: Optional[str], end_s: Optional[str]) -> ExcelExport:
        if not start_s or not end_s:
            raise ValidationError("Please select both start and end dates")
        start = require_iso_date(start_s, "Start date")
        end = require_iso_date(end_s, "End date")
        if end < start:
            raise ValidationError("End date must not be before start date")

        content = self._overtime.export_excel(start=start, end=end)
        self._download_logs.create(
            DownloadLog(
                start_date=start,
                end_date=end,
                downloaded_at=now_utc(),
                username=current_user.username,
                user_id=current_user.record_id,
            )
        )
        logger.info("%s exported overtime %s..%s", current_user.username, start, end)
        return ExcelExport(filename=f"Overtime_{start.isoformat()}_to_{end.isoformat()}.xlsx", content=content)

    def list_download_logs(self) -> list[DownloadLog]:
        return sorted(
            self._download_logs.list_all(),
            key=lambda log: log.downloaded_at.timestamp() if log.downloaded_at else 0.0,
            reverse=True,
        )
