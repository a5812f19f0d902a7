from __future__ import annotations

from typing import Optional, Sequence

from ..api.client import ApiClient
from .model import OvertimeReason, ShiftRuleConfig
from .repository import SettingsRepository


class RestSettingsRepository(SettingsRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_reasons(self) -> Sequence[OvertimeReason]:
        return [OvertimeReason.from_payload(r) for r in self._api.get_json("/settings/overtime-reasons") or []]

    def add_reason(self, option: str) -> None:
        self._api.post_json("/settings/overtime-reasons", {"option": option})

    def delete_reason(self, record_id: str) -> None:
        self._api.delete(f"/settings/overtime-reasons/{record_id}")

    def get_shift_rules(self) -> Optional[ShiftRuleConfig]:
        data = self._api.get_json("/settings/overtime-configs/all")
        if isinstance(data, list):
            data = data[0] if data else None
        return ShiftRuleConfig.from_payload(data) if data else None

    def save_shift_rules(self, config: ShiftRuleConfig, *, exists: bool) -> None:
        if exists:
            self._api.put_json("/settings/overtime-configs/update", config.to_payload())
        else:
            self._api.post_json("/settings/overtime-configs/create", config.to_payload())

    def delete_shift_rules(self) -> None:
        self._api.delete("/settings/overtime-configs/delete")
