"""
Inner — Simple Configuration
All config lives in ~/.inner/config.json
"""
import json
import logging
from pathlib import Path

import pytz

logger = logging.getLogger("innerfield.config")

CONFIG_DIR = Path.home() / ".inner"
CONFIG_FILE = CONFIG_DIR / "config.json"
STATE_FILE = CONFIG_DIR / "state.json"
LOGS_DIR = CONFIG_DIR / "logs"

# Defaults
DEFAULT_CONFIG = {
    "timezone": "UTC",
    # Time lines only speak inside [start, end) local hours
    "allowed_hour_start": 7,
    "allowed_hour_end": 23,
    "nudge_cooldown_days": 7,
    "log_level": "INFO",
}


def ensure_dirs():
    """Create all required directories."""
    for d in [CONFIG_DIR, LOGS_DIR]:
        d.mkdir(parents=True, exist_ok=True)


def load_config() -> dict:
    """Load config from ~/.inner/config.json."""
    ensure_dirs()
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Config unreadable, using defaults: %s", e)
            return DEFAULT_CONFIG.copy()
        if not isinstance(stored, dict):
            logger.warning("Config is not a JSON object, using defaults")
            return DEFAULT_CONFIG.copy()
        # Merge with defaults (adds any new keys)
        return {**DEFAULT_CONFIG, **stored}
    return DEFAULT_CONFIG.copy()


def save_config(config: dict):
    """Save config to ~/.inner/config.json."""
    ensure_dirs()
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


def _int_setting(config: dict, key: str) -> int:
    try:
        return int(config.get(key, DEFAULT_CONFIG[key]))
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, using %s", key, config.get(key), DEFAULT_CONFIG[key])
        return DEFAULT_CONFIG[key]


def get_timezone(config: dict):
    """Return the configured pytz timezone, UTC if the name is unknown."""
    name = config.get("timezone") or "UTC"
    if not isinstance(name, str):
        logger.warning("Timezone %r is not a name, falling back to UTC", name)
        return pytz.utc
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return pytz.utc


def get_allowed_hours(config: dict) -> tuple[int, int]:
    """(start, end) of the local window in which time lines may speak."""
    return _int_setting(config, "allowed_hour_start"), _int_setting(config, "allowed_hour_end")


def get_nudge_cooldown_days(config: dict) -> int:
    """Minimum days between two reflective nudges."""
    return max(0, _int_setting(config, "nudge_cooldown_days"))
