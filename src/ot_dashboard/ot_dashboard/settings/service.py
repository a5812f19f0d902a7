from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import ApiError, ValidationError
from ..overtime.calculator import ShiftRules
from ..users.model import User
from ..users.service import require_admin
from .model import OvertimeReason, ShiftRuleConfig
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def _hours_table(values: Optional[Mapping[str, object]], field_name: str) -> dict[str, float]:
    table: dict[str, float] = {}
    for shift, raw in (values or {}).items():
        shift = require_non_empty(str(shift), "Shift")
        try:
            hours = float(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} for {shift} must be a number")
        if not 0 <= hours <= 24:
            raise ValidationError(f"{field_name} for {shift} must be between 0 and 24")
        table[shift] = hours
    return table


class SettingsService:
    def __init__(self, settings: SettingsRepository, *, base_rules: Optional[ShiftRules] = None):
        self._settings = settings
        self._base_rules = base_rules or ShiftRules.default()

    # ---- overtime reasons ----

    def list_reasons(self) -> Sequence[OvertimeReason]:
        return self._settings.list_reasons()

    def add_reason(self, *, current_user: User, option: str) -> None:
        require_admin(current_user)
        option = require_non_empty(option, "Reason")
        if any(r.option.lower() == option.lower() for r in self._settings.list_reasons()):
            raise ValidationError("Reason already exists")
        self._settings.add_reason(option)

    def delete_reason(self, *, current_user: User, record_id: str) -> None:
        require_admin(current_user)
        self._settings.delete_reason(record_id)

    # ---- shift rules ----

    def shift_rules(self) -> ShiftRules:
        """Configured tables layered over the defaults; defaults when unavailable."""
        try:
            config = self._settings.get_shift_rules()
        except ApiError as e:
            logger.warning("Shift configuration unavailable, using defaults: %s", e)
            return self._base_rules
        if not config:
            return self._base_rules
        return self._base_rules.with_overrides(
            weekday_ot_start=config.weekday_ot_start,
            saturday_shift_hours=config.saturday_shift_hours,
        )

    def save_shift_rules(
        self,
        *,
        current_user: User,
        weekday_ot_start: Optional[Mapping[str, object]],
        saturday_shift_hours: Optional[Mapping[str, object]],
    ) -> ShiftRuleConfig:
        require_admin(current_user)
        config = ShiftRuleConfig(
            weekday_ot_start=_hours_table(weekday_ot_start, "OT start"),
            saturday_shift_hours=_hours_table(saturday_shift_hours, "Saturday hours"),
        )
        exists = self._settings.get_shift_rules() is not None
        self._settings.save_shift_rules(config, exists=exists)
        return config

    def reset_shift_rules(self, *, current_user: User) -> None:
        require_admin(current_user)
        self._settings.delete_shift_rules()
