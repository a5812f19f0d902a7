from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..api.client import ApiClient
from .model import OvertimeEntry
from .repository import OvertimeRepository


class RestOvertimeRepository(OvertimeRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    @staticmethod
    def _with_user(data: dict, performed_by: Optional[str]) -> dict:
        return {**data, "performedBy": performed_by}

    def list_all(self) -> Sequence[OvertimeEntry]:
        rows = self._api.get_json("/overtime") or []
        return [OvertimeEntry.from_payload(r) for r in rows]

    def create(self, entry: OvertimeEntry, *, performed_by: Optional[str]) -> Optional[str]:
        created = self._api.post_json("/overtime", self._with_user(entry.to_payload(), performed_by))
        if isinstance(created, dict):
            return created.get("_id") or created.get("id")
        return None

    def create_no_ot(self, *, employee_number: str, work_date: date, performed_by: Optional[str]) -> None:
        self._api.post_json(
            "/overtime",
            self._with_user({"employeeNumber": employee_number, "noOT": True, "date": work_date.isoformat()}, performed_by),
        )

    def update(self, entry_id: str, changes: dict, *, performed_by: Optional[str]) -> None:
        self._api.put_json(f"/overtime/{entry_id}", self._with_user(changes, performed_by))

    def approve(self, entry_id: str, *, approvedot: float, reason: Optional[str], performed_by: Optional[str]) -> None:
        self._api.put_json(
            f"/overtime/{entry_id}/approve",
            self._with_user({"approvedot": approvedot, "reason": reason}, performed_by),
        )

    def reject(self, entry_id: str, *, reason: Optional[str], performed_by: Optional[str]) -> None:
        self._api.put_json(f"/overtime/{entry_id}/reject", self._with_user({"reason": reason}, performed_by))

    def delete(self, entry_id: str, *, performed_by: Optional[str]) -> None:
        self._api.delete(f"/overtime/{entry_id}", self._with_user({}, performed_by))

    def export_excel(self, *, start: date, end: date) -> bytes:
        return self._api.get_bytes(
            "/overtime/export",
            params={"startDate": start.isoformat(), "endDate": end.isoformat()},
        )
