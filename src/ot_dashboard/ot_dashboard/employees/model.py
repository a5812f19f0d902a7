from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Employee:
    employee_number: str
    name: str
    phone: str = ""
    record_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Employee":
        return cls(
            employee_number=str(data.get("employeeNumber") or ""),
            name=str(data.get("name") or ""),
            phone=str(data.get("phone") or ""),
            record_id=data.get("_id") or data.get("id"),
        )

    def to_payload(self) -> dict:
        return {"employeeNumber": self.employee_number, "name": self.name, "phone": self.phone}
