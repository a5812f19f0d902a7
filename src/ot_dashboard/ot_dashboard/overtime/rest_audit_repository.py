from __future__ import annotations

from typing import Sequence

from ..api.client import ApiClient
from .audit_model import OvertimeAuditLog
from .audit_repository import OvertimeAuditRepository


class RestOvertimeAuditRepository(OvertimeAuditRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_all(self) -> Sequence[OvertimeAuditLog]:
        return [OvertimeAuditLog.from_payload(r) for r in self._api.get_json("/overtime-audit") or []]
