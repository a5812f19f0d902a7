from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_instant


@dataclass(frozen=True)
class OvertimeAuditLog:
    """One CREATE / UPDATE / DELETE / APPROVE / REJECT recorded by the backend."""

    action: str
    performed_by: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    record_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "OvertimeAuditLog":
        details = data.get("details")
        return cls(
            action=str(data.get("action") or "").upper(),
            performed_by=str(data.get("performedBy") or ""),
            details=details if isinstance(details, Mapping) else {},
            created_at=parse_iso_instant(str(data.get("createdAt") or "")),
            record_id=data.get("_id") or data.get("id"),
        )

    def matches(self, text: str) -> bool:
        needle = text.lower()
        return (
            needle in self.action.lower()
            or needle in self.performed_by.lower()
            or needle in json.dumps(self.details, default=str).lower()
        )
