from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date


@dataclass(frozen=True)
class TripleOTDate:
    """Admin-configured date on which all worked hours are paid at triple rate."""

    date: date
    description: str = ""
    record_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "TripleOTDate":
        return cls(
            date=parse_iso_date(str(data["date"])),
            description=str(data.get("description") or ""),
            record_id=data.get("_id") or data.get("id"),
        )

    def to_payload(self) -> dict:
        return {"date": self.date.isoformat(), "description": self.description}
