from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date, parse_iso_instant


@dataclass(frozen=True)
class DownloadLog:
    """One Excel export, kept for the export audit page."""

    start_date: date
    end_date: date
    downloaded_at: Optional[datetime] = None
    username: str = ""
    user_id: Optional[str] = None
    record_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DownloadLog":
        user = data.get("user") or {}
        if not isinstance(user, Mapping):
            user = {"_id": user}
        return cls(
            start_date=parse_iso_date(str(data["startDate"])),
            end_date=parse_iso_date(str(data["endDate"])),
            downloaded_at=parse_iso_instant(str(data.get("downloadedAt") or "")),
            username=str(user.get("username") or ""),
            user_id=user.get("_id") or data.get("userId"),
            record_id=data.get("_id") or data.get("id"),
        )

    def to_payload(self) -> dict:
        return {
            "userId": self.user_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "downloadedAt": self.downloaded_at.isoformat() if self.downloaded_at else None,
        }


@dataclass(frozen=True)
class OvertimeTotals:
    normal: float = 0.0
    double: float = 0.0
    triple: float = 0.0

    @property
    def total(self) -> float:
        return self.normal + self.double + self.triple

    def as_pie(self) -> list[dict]:
        return [
            {"name": "Normal OT", "value": self.normal},
            {"name": "Double OT", "value": self.double},
            {"name": "Triple OT", "value": self.triple},
        ]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    by_employee: dict[str, list[dict]]
    summary: OvertimeTotals


@dataclass(frozen=True)
class ExcelExport:
    filename: str
    content: bytes
