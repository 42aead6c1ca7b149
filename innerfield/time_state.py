"""
Inner — Persisted Time State
One record per installation describing when the user last opened the app,
their day streak, this week's cadence and when time lines were last shown.

The record is versioned. ``load_state`` is the only way in: it reads the
current key, falls back to the legacy v1 blob (camelCase keys written by the
first mobile release) only when the current key is absent, backfills missing
fields and drops anything it cannot read. Any storage or parse failure yields
an empty record.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

logger = logging.getLogger("innerfield.time_state")

STATE_KEY = "inner.time.state.v2"
LEGACY_STATE_KEY = "inner.time.state.v1"
SCHEMA_VERSION = 2

THRESHOLD_IDS = (
    "return.next_day",
    "return.after_gap",
    "return.after_week",
    "return.after_21",
    "streak.3",
    "streak.7",
    "streak.14",
    "streak.21",
    "week.5",
)

# v1 field name -> v2 field name
_LEGACY_FIELDS = {
    "lastOpenAt": "last_open_at",
    "lastDate": "last_date",
    "streak": "streak",
    "weekStart": "week_start",
    "weekCount": "week_count",
    "lastTimeLineAt": "last_time_line_at",
    "lastTimeLineDate": "last_time_line_date",
    "shown": "shown",
    "lastBigTimeLineAt": "last_big_time_line_at",
    "lastBigTimeLineDate": "last_big_time_line_date",
}


@dataclass
class TimeState:
    # last open
    last_open_at: Optional[int] = None  # ms
    last_date: Optional[str] = None  # YYYY-MM-DD (local)

    # consecutive calendar days with at least one open
    streak: Optional[int] = None

    # weekly cadence (Mon–Sun)
    week_start: Optional[str] = None  # local Monday
    week_count: Optional[int] = None

    # rate limit for time lines
    last_time_line_at: Optional[int] = None
    last_time_line_date: Optional[str] = None

    # threshold id -> local date key it last fired
    shown: dict[str, str] = field(default_factory=dict)

    # quiet period after rare lines
    last_big_time_line_at: Optional[int] = None
    last_big_time_line_date: Optional[str] = None

    version: int = SCHEMA_VERSION

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_dict(cls, raw: dict) -> "TimeState":
        return cls(**migrate(raw))

    def is_empty(self) -> bool:
        return self == TimeState()


def _as_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_date_key(value) -> Optional[str]:
    """``value`` if it is a real calendar date as YYYY-MM-DD."""
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return None
    return value


def migrate(raw: dict) -> dict:
    """Bring any stored blob up to the current schema.

    Returns keyword arguments for ``TimeState``. Unknown keys, unknown
    threshold ids and values of the wrong type are dropped.
    """
    if not isinstance(raw, dict):
        return {}

    version = _as_int(raw.get("version"))
    if version is None:
        camel = any(k in raw for k, v in _LEGACY_FIELDS.items() if k != v)
        version = 1 if camel else SCHEMA_VERSION
    if version < 2:
        raw = {_LEGACY_FIELDS[k]: v for k, v in raw.items() if k in _LEGACY_FIELDS}
        logger.info("Migrating time state v%d -> v%d", version, SCHEMA_VERSION)

    shown_raw = raw.get("shown") if isinstance(raw.get("shown"), dict) else {}
    shown = {
        tid: day
        for tid, day in shown_raw.items()
        if tid in THRESHOLD_IDS and _as_date_key(day)
    }

    streak = _as_int(raw.get("streak"))
    week_count = _as_int(raw.get("week_count"))

    return {
        "last_open_at": _as_int(raw.get("last_open_at")),
        "last_date": _as_date_key(raw.get("last_date")),
        "streak": streak if streak is not None and streak >= 1 else None,
        "week_start": _as_date_key(raw.get("week_start")),
        "week_count": week_count if week_count is not None and week_count >= 1 else None,
        "last_time_line_at": _as_int(raw.get("last_time_line_at")),
        "last_time_line_date": _as_date_key(raw.get("last_time_line_date")),
        "shown": shown,
        "last_big_time_line_at": _as_int(raw.get("last_big_time_line_at")),
        "last_big_time_line_date": _as_date_key(raw.get("last_big_time_line_date")),
        "version": SCHEMA_VERSION,
    }


def _parse_blob(raw: str, key: str) -> Optional[dict]:
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Time state unreadable (%s): %s", key, e)
        return None
    return parsed if isinstance(parsed, dict) else None


def load_state(store) -> TimeState:
    """Load and migrate the persisted record. Never raises.

    The legacy record is only consulted when the current key is absent; an
    unreadable current record means an empty state.
    """
    key = STATE_KEY
    try:
        raw = store.get(key)
        if raw is None:
            key = LEGACY_STATE_KEY
            raw = store.get(key)
    except Exception as e:
        logger.warning("Time state read failed (%s): %s", key, e)
        return TimeState()
    if not raw:
        return TimeState()
    blob = _parse_blob(raw, key)
    if blob is None:
        return TimeState()
    return TimeState.from_dict(blob)


def save_state(store, state: TimeState) -> bool:
    """Persist ``state``. Failures are logged, never raised.

    Once the current record is written the legacy record is superseded and
    removed.
    """
    try:
        store.set(STATE_KEY, state.to_json())
    except Exception as e:
        logger.warning("Time state write failed: %s", e)
        return False
    try:
        store.remove(LEGACY_STATE_KEY)
    except Exception as e:
        logger.warning("Legacy time state remove failed: %s", e)
    return True


def clear_state(store) -> None:
    """Remove the record (current and legacy keys)."""
    for key in (STATE_KEY, LEGACY_STATE_KEY):
        try:
            store.remove(key)
        except Exception as e:
            logger.warning("Time state remove failed (%s): %s", key, e)
