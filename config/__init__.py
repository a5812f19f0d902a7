import json
import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module, development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_hours_table(name: str) -> dict:
    """Shift table override given as JSON, e.g. {"6:30am": 15.5}."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return {}
    return {str(k): float(v) for k, v in json.loads(raw).items()}
