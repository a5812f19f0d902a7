from __future__ import annotations

from enum import Enum


class OvertimeStatus(str, Enum):
    """Approval state of an overtime entry as stored by the backend."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class NightFlag(str, Enum):
    YES = "Yes"
    NO = "No"


class DayType(str, Enum):
    """Rate-rule classification of a calendar date."""

    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class SessionPhase(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    WARNING = "warning"
    LOGGED_OUT = "logged_out"
