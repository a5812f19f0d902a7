from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_iso_date
from ..users.model import User
from ..users.service import require_admin
from .model import TripleOTDate
from .repository import TripleOTRepository


class TripleOTService:
    def __init__(self, records: TripleOTRepository):
        self._records = records

    def list_dates(self) -> Sequence[TripleOTDate]:
        return sorted(self._records.list_all(), key=lambda r: r.date)

    def date_set(self) -> frozenset[date]:
        return frozenset(r.date for r in self._records.list_all())

    @staticmethod
    def _build(raw_date: Optional[str], description: Optional[str]) -> TripleOTDate:
        return TripleOTDate(date=require_iso_date(raw_date, "Date"), description=(description or "").strip())

    def add(self, *, current_user: User, raw_date: Optional[str], description: Optional[str] = "") -> None:
        require_admin(current_user)
        self._records.create(self._build(raw_date, description))

    def update(self, *, current_user: User, record_id: str, raw_date: Optional[str], description: Optional[str] = "") -> None:
        require_admin(current_user)
        self._records.update(record_id, self._build(raw_date, description))

    def delete(self, *, current_user: User, record_id: str) -> None:
        require_admin(current_user)
        self._records.delete(record_id)
