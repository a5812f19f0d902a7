from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date
from ..core.enums import NightFlag, OvertimeStatus

logger = logging.getLogger(__name__)


def _night_flag(value: Any) -> NightFlag:
    if not value:
        return NightFlag.NO
    try:
        return NightFlag(value)
    except ValueError:
        logger.warning("Unknown night flag %r from backend, using %s", value, NightFlag.NO.value)
        return NightFlag.NO


def _status(value: Any) -> OvertimeStatus:
    if not value:
        return OvertimeStatus.PENDING
    try:
        return OvertimeStatus(value)
    except ValueError:
        logger.warning("Unknown overtime status %r from backend, using %s", value, OvertimeStatus.PENDING.value)
        return OvertimeStatus.PENDING


@dataclass(frozen=True)
class OvertimeHours:
    """Result of the overtime calculation for one entry."""

    normal: float
    double: float
    triple: float
    night: NightFlag


@dataclass(frozen=True)
class OvertimeEntry:
    """Overtime record as exchanged with the backend.

    ``auto`` and ``no_ot`` only live on draft rows while they are being edited.
    """

    employee_number: str
    work_date: Optional[date] = None
    name: str = ""
    shift: str = ""
    intime: str = ""
    outtime: str = ""
    reason: str = ""
    normalot: float = 0.0
    doubleot: float = 0.0
    tripleot: float = 0.0
    night: NightFlag = NightFlag.NO
    status: OvertimeStatus = OvertimeStatus.PENDING
    approvedot: Optional[float] = None
    entry_id: Optional[str] = None
    auto: bool = True
    no_ot: bool = False

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "OvertimeEntry":
        raw_date = data.get("date")
        approved = data.get("approvedot")
        employee = data.get("employee") or {}
        return cls(
            employee_number=str(data.get("employeeNumber") or employee.get("employeeNumber") or ""),
            work_date=parse_iso_date(str(raw_date)) if raw_date else None,
            name=str(data.get("name") or employee.get("name") or ""),
            shift=str(data.get("shift") or ""),
            intime=str(data.get("intime") or ""),
            outtime=str(data.get("outtime") or ""),
            reason=str(data.get("reason") or ""),
            normalot=float(data.get("normalot") or 0),
            doubleot=float(data.get("doubleot") or 0),
            tripleot=float(data.get("tripleot") or 0),
            night=_night_flag(data.get("night")),
            status=_status(data.get("status")),
            approvedot=float(approved) if approved is not None else None,
            entry_id=data.get("_id") or data.get("id"),
            no_ot=bool(data.get("noOT", False)),
        )

    def to_payload(self) -> dict:
        payload = {
            "employeeNumber": self.employee_number,
            "name": self.name,
            "shift": self.shift,
            "intime": self.intime,
            "outtime": self.outtime,
            "reason": self.reason,
            "normalot": self.normalot,
            "doubleot": self.doubleot,
            "tripleot": self.tripleot,
            "night": self.night.value,
            "status": self.status.value,
        }
        if self.work_date is not None:
            payload["date"] = self.work_date.isoformat()
        if self.approvedot is not None:
            payload["approvedot"] = self.approvedot
        return payload

    @property
    def total_hours(self) -> float:
        return self.normalot + self.doubleot + self.tripleot
