from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class OvertimeReason:
    option: str
    record_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "OvertimeReason":
        return cls(option=str(data.get("option") or ""), record_id=data.get("_id") or data.get("id"))


@dataclass(frozen=True)
class ShiftRuleConfig:
    """Admin overrides for the per-shift OT tables, keyed by shift code."""

    weekday_ot_start: dict[str, float] = field(default_factory=dict)
    saturday_shift_hours: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]]) -> "ShiftRuleConfig":
        data = data or {}
        return cls(
            weekday_ot_start={str(k): float(v) for k, v in (data.get("weekdayOTStart") or {}).items()},
            saturday_shift_hours={str(k): float(v) for k, v in (data.get("saturdayShiftHours") or {}).items()},
        )

    def to_payload(self) -> dict:
        return {"weekdayOTStart": dict(self.weekday_ot_start), "saturdayShiftHours": dict(self.saturday_shift_hours)}
