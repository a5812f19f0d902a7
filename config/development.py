import os

from config import env_hours_table

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "20"))

# Shared between dashboard processes, like browser storage between tabs
SESSION_STORE_PATH = os.getenv("SESSION_STORE_PATH", "instance/session.json")
SESSION_WARN_BEFORE_SECONDS = float(os.getenv("SESSION_WARN_BEFORE_SECONDS", "60"))
SESSION_AUTO_LOGOUT_BEFORE_SECONDS = float(os.getenv("SESSION_AUTO_LOGOUT_BEFORE_SECONDS", "5"))
SESSION_POLL_SECONDS = float(os.getenv("SESSION_POLL_SECONDS", "2"))

WEEKDAY_OT_START = env_hours_table("WEEKDAY_OT_START")
SATURDAY_SHIFT_HOURS = env_hours_table("SATURDAY_SHIFT_HOURS")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "logs/ot_dashboard.log")
