from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import OvertimeEntry


class OvertimeRepository(Protocol):
    """Overtime records owned by the backend.

    Mutations carry ``performed_by`` so the backend can keep its audit trail.
    """

    def list_all(self) -> Sequence[OvertimeEntry]:
        raise NotImplementedError

    def create(self, entry: OvertimeEntry, *, performed_by: Optional[str]) -> Optional[str]:
        raise NotImplementedError

    def create_no_ot(self, *, employee_number: str, work_date: date, performed_by: Optional[str]) -> None:
        raise NotImplementedError

    def update(self, entry_id: str, changes: dict, *, performed_by: Optional[str]) -> None:
        raise NotImplementedError

    def approve(self, entry_id: str, *, approvedot: float, reason: Optional[str], performed_by: Optional[str]) -> None:
        raise NotImplementedError

    def reject(self, entry_id: str, *, reason: Optional[str], performed_by: Optional[str]) -> None:
        raise NotImplementedError

    def delete(self, entry_id: str, *, performed_by: Optional[str]) -> None:
        raise NotImplementedError

    def export_excel(self, *, start: date, end: date) -> bytes:
        raise NotImplementedError
