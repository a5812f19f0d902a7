"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SESSION_EXPIRES_KEY = "sessionExpires"
TOKEN_KEY = "token"
USERNAME_KEY = "username"

WARN_BEFORE_SECONDS = 60
AUTO_LOGOUT_BEFORE_SECONDS = 5
POLL_INTERVAL_SECONDS = 2
COUNTDOWN_TICK_SECONDS = 1

DEFAULT_WEEKDAY_OT_START = {"6:30am": 15.5, "8:30am": 17.5}
DEFAULT_SATURDAY_SHIFT_HOURS = {"6:30am": 5.0, "8:30am": 4.0}
FALLBACK_OT_START = 17.5
FALLBACK_SATURDAY_HOURS = 5.0

NIGHT_THRESHOLD_HOURS = 21.0
NO_OT_REASON = "No OT"

DEFAULT_API_TIMEOUT = 20
