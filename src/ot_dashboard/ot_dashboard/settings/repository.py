from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import OvertimeReason, ShiftRuleConfig


class SettingsRepository(Protocol):
    def list_reasons(self) -> Sequence[OvertimeReason]:
        raise NotImplementedError

    def add_reason(self, option: str) -> None:
        raise NotImplementedError

    def delete_reason(self, record_id: str) -> None:
        raise NotImplementedError

    def get_shift_rules(self) -> Optional[ShiftRuleConfig]:
        raise NotImplementedError

    def save_shift_rules(self, config: ShiftRuleConfig, *, exists: bool) -> None:
        raise NotImplementedError

    def delete_shift_rules(self) -> None:
        raise NotImplementedError
