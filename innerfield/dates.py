"""
Inner — Clock & Local Dates
Everything day-shaped (streaks, weeks, cooldowns) is compared by local
date key ("YYYY-MM-DD") in an explicit timezone, never by raw elapsed time.
Timestamps are epoch milliseconds throughout.
"""
import time
from datetime import date, datetime, timedelta

import pytz

DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000


def now_ms() -> int:
    """Wall clock, epoch milliseconds."""
    return int(time.time() * 1000)


def resolve_tz(tz):
    """Accept a pytz timezone, any tzinfo, an IANA name, or None (UTC)."""
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def to_local(ms: int, tz) -> datetime:
    """Aware datetime for ``ms`` in ``tz``."""
    return datetime.fromtimestamp(ms / 1000, resolve_tz(tz))


def to_ms(dt: datetime, tz=None) -> int:
    """Epoch ms for ``dt``. Naive values are read as local time in ``tz``."""
    if dt.tzinfo is None:
        zone = resolve_tz(tz)
        if hasattr(zone, "localize"):
            dt = zone.localize(dt)
        else:
            dt = dt.replace(tzinfo=zone)
    return int(dt.timestamp() * 1000)


def local_date_key(ms: int, tz) -> str:
    """Local YYYY-MM-DD (not UTC)."""
    return to_local(ms, tz).strftime("%Y-%m-%d")


def local_hour(ms: int, tz) -> int:
    return to_local(ms, tz).hour


def parse_date_key(key: str) -> date:
    return datetime.strptime(key, "%Y-%m-%d").date()


def diff_days(a_key: str, b_key: str) -> int:
    """a - b in whole calendar days."""
    return (parse_date_key(a_key) - parse_date_key(b_key)).days


def week_start_key(ms: int, tz) -> str:
    """Local date key of the Monday starting the week that contains ``ms``."""
    day = to_local(ms, tz).date()
    monday = day - timedelta(days=day.weekday())
    return monday.strftime("%Y-%m-%d")


def days_between(a_ms: int, b_ms: int) -> int:
    """Whole 24h periods from a to b, never negative."""
    return max(0, int((b_ms - a_ms) // DAY_MS))
