SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

API_BASE_URL = "http://backend.test/api"
API_TIMEOUT = 5

# In-memory store when empty
SESSION_STORE_PATH = ""
SESSION_WARN_BEFORE_SECONDS = 60
SESSION_AUTO_LOGOUT_BEFORE_SECONDS = 5
SESSION_POLL_SECONDS = 2

WEEKDAY_OT_START = {}
SATURDAY_SHIFT_HOURS = {}

LOG_LEVEL = "WARNING"
LOG_FILE = None
