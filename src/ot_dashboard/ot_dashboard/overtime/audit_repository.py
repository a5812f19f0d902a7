from __future__ import annotations

from typing import Protocol, Sequence

from .audit_model import OvertimeAuditLog


class OvertimeAuditRepository(Protocol):
    def list_all(self) -> Sequence[OvertimeAuditLog]:
        raise NotImplementedError
