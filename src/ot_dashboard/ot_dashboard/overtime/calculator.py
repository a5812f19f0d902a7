"""Overtime hours calculation.

Pure functions over clock strings, a shift code and a calendar date. Nothing in
here raises for partial input: an entry whose clock times, shift or date are not
filled in yet is simply returned unchanged.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import AbstractSet, Callable, Mapping, Optional

from ..core.constants import (
    DEFAULT_SATURDAY_SHIFT_HOURS,
    DEFAULT_WEEKDAY_OT_START,
    FALLBACK_OT_START,
    FALLBACK_SATURDAY_HOURS,
    NIGHT_THRESHOLD_HOURS,
    NO_OT_REASON,
)
from ..core.enums import DayType, NightFlag
from .model import OvertimeEntry, OvertimeHours


@dataclass(frozen=True)
class ShiftRules:
    """Per-shift tables used by the weekday and Saturday rules."""

    weekday_ot_start: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEEKDAY_OT_START))
    saturday_shift_hours: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_SATURDAY_SHIFT_HOURS))
    default_ot_start: float = FALLBACK_OT_START
    default_saturday_hours: float = FALLBACK_SATURDAY_HOURS

    @classmethod
    def default(cls) -> "ShiftRules":
        return cls()

    def with_overrides(
        self,
        *,
        weekday_ot_start: Optional[Mapping[str, float]] = None,
        saturday_shift_hours: Optional[Mapping[str, float]] = None,
    ) -> "ShiftRules":
        """Layer admin-configured entries over the current tables."""
        return replace(
            self,
            weekday_ot_start={**self.weekday_ot_start, **(weekday_ot_start or {})},
            saturday_shift_hours={**self.saturday_shift_hours, **(saturday_shift_hours or {})},
        )

    def ot_start_for(self, shift: str) -> float:
        return float(self.weekday_ot_start.get(shift, self.default_ot_start))

    def saturday_hours_for(self, shift: str) -> float:
        return float(self.saturday_shift_hours.get(shift, self.default_saturday_hours))


def floor_to_quarter(hours: float) -> float:
    """Round down to the nearest 0.25 h; partial quarter hours are not paid."""
    return math.floor(hours * 4) / 4


def parse_clock(value: Optional[str]) -> Optional[float]:
    """Parse "HH:MM" into fractional hours since midnight, None if not usable."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours + minutes / 60


def classify_day(day: date) -> DayType:
    weekday = day.weekday()
    if weekday == 6:
        return DayType.SUNDAY
    if weekday == 5:
        return DayType.SATURDAY
    return DayType.WEEKDAY


def _weekday_rule(intime: float, outtime: float, shift: str, rules: ShiftRules) -> tuple[float, float]:
    return floor_to_quarter(max(0.0, outtime - rules.ot_start_for(shift))), 0.0


def _saturday_rule(intime: float, outtime: float, shift: str, rules: ShiftRules) -> tuple[float, float]:
    shift_end = intime + rules.saturday_hours_for(shift)
    return floor_to_quarter(max(0.0, outtime - shift_end)), 0.0


def _sunday_rule(intime: float, outtime: float, shift: str, rules: ShiftRules) -> tuple[float, float]:
    return 0.0, floor_to_quarter(max(0.0, outtime - intime))


# (normal, double) per day type
RATE_RULES: dict[DayType, Callable[[float, float, str, ShiftRules], tuple[float, float]]] = {
    DayType.WEEKDAY: _weekday_rule,
    DayType.SATURDAY: _saturday_rule,
    DayType.SUNDAY: _sunday_rule,
}


def _clock_span(intime: Optional[str], outtime: Optional[str]) -> Optional[tuple[float, float]]:
    start = parse_clock(intime)
    end = parse_clock(outtime)
    if start is None or end is None:
        return None
    if end < start:
        end += 24
    return start, end


def _night_flag(outtime: float) -> NightFlag:
    return NightFlag.YES if outtime > NIGHT_THRESHOLD_HOURS else NightFlag.NO


def compute_night(intime: Optional[str], outtime: Optional[str]) -> NightFlag:
    span = _clock_span(intime, outtime)
    if span is None:
        return NightFlag.NO
    return _night_flag(span[1])


def compute_hours(
    intime: Optional[str],
    outtime: Optional[str],
    shift: Optional[str],
    work_date: Optional[date],
    triple_dates: AbstractSet[date] = frozenset(),
    rules: Optional[ShiftRules] = None,
) -> Optional[OvertimeHours]:
    """Bucket the worked span into normal/double/triple hours.

    Returns None until clock times, shift and date are all present.
    """
    span = _clock_span(intime, outtime)
    if span is None or not shift or work_date is None:
        return None

    rules = rules or ShiftRules.default()
    start, end = span

    normal, double = RATE_RULES[classify_day(work_date)](start, end, shift, rules)
    triple = 0.0
    if work_date in triple_dates:
        triple = floor_to_quarter(end - start)
        normal = 0.0
        double = 0.0

    return OvertimeHours(normal=normal, double=double, triple=triple, night=_night_flag(end))


def compute_overtime(
    entry: OvertimeEntry,
    work_date: Optional[date],
    triple_dates: AbstractSet[date] = frozenset(),
    rules: Optional[ShiftRules] = None,
) -> OvertimeEntry:
    hours = compute_hours(entry.intime, entry.outtime, entry.shift, work_date, triple_dates, rules)
    if hours is None:
        return entry
    return replace(
        entry,
        normalot=hours.normal,
        doubleot=hours.double,
        tripleot=hours.triple,
        night=hours.night,
    )


def clear_for_no_ot(entry: OvertimeEntry) -> OvertimeEntry:
    return replace(
        entry,
        shift="",
        intime="",
        outtime="",
        reason=NO_OT_REASON,
        normalot=0.0,
        doubleot=0.0,
        tripleot=0.0,
        night=NightFlag.NO,
        auto=False,
        no_ot=True,
    )
