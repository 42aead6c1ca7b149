"""
Inner — Time Engine
Gives the app a gentle sense of time (streaks + weekly cadence) without
gamification. Each ``tick`` is one app open / screen focus.

Architecture:
  - Every tick updates the persisted streak and weekly count, even when
    nothing is said
  - At most one threshold line per local day, and never within 42 hours
    of the previous one
  - Thresholds are checked in priority order, rarest first; each id has
    its own cooldown
  - Lines only speak inside the allowed local hours, stay quiet for a few
    days after a big moment, and even then only pass a probability gate

Construct one engine per process and inject the store, timezone, clock and
random source.
"""
import logging
import random
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from innerfield.dates import HOUR_MS, diff_days, local_date_key, local_hour, now_ms, resolve_tz, week_start_key
from innerfield.time_state import THRESHOLD_IDS, TimeState, clear_state, load_state, save_state

logger = logging.getLogger("innerfield.time_engine")

# ── Constants ───────────────────────────────────────────────

MIN_HOURS_BETWEEN_LINES = 42
ALLOWED_HOUR_START = 7   # 7am
ALLOWED_HOUR_END = 23    # 11pm
BASE_FIRE_PROBABILITY = 0.18
BIG_MOMENT_SILENCE_DAYS = 4

GAP_DAYS_TRIGGER = 3     # "welcome back" after 3+ days away
GAP_DAYS_WEEK = 7
GAP_DAYS_21 = 21

WEEK_SESSIONS_5 = 5

BIG_MOMENTS = ("return.after_21", "streak.21")

COPY = {
    "return.next_day": "You returned. The field remembers.",
    "return.after_gap": "Welcome back. Begin gently.",
    "return.after_week": "A week away. The door opens the same.",
    "return.after_21": "It has been a while. Enter softly.",

    "streak.3": "Three days in rhythm. Your nervous system is learning the way.",
    "streak.7": "A week of steadiness. Now clarity comes easier.",
    "streak.14": "Two weeks of return. The signal is stronger.",
    "streak.21": "Twenty-one days. A new baseline is forming.",

    "week.5": "Your practice has weight now.",
}

# Days before the same id may fire again
COOLDOWN_DAYS = {
    "return.after_21": 14,
    "return.after_week": 14,
    "return.after_gap": 7,
    "streak.21": 30,
    "streak.14": 30,
    "streak.7": 30,
    "streak.3": 30,
    "week.5": 14,
    "return.next_day": 7,
}

# Salience: rarer moments surface more readily once eligible
SALIENCE = {
    "return.after_21": 0.35,
    "return.after_week": 0.28,
    "return.after_gap": 0.20,
    "streak.21": 0.30,
    "streak.14": 0.22,
    "streak.7": 0.18,
    "streak.3": 0.12,
    "week.5": 0.18,
    "return.next_day": 0.08,
}

# (exact streak, threshold id), highest first
STREAK_MILESTONES = (
    (21, "streak.21"),
    (14, "streak.14"),
    (7, "streak.7"),
    (3, "streak.3"),
)


@dataclass
class TickResult:
    message: Optional[str]
    threshold_id: Optional[str]
    state: TimeState


# ════════════════════════════════════════════════════════════
#  GATES
# ════════════════════════════════════════════════════════════

def can_show_line(now: int, state: TimeState, today: str) -> bool:
    """Hard caps: once per calendar day and a minimum gap in hours."""
    if state.last_time_line_date and state.last_time_line_date == today:
        return False
    if state.last_time_line_at is not None:
        hours_since = (now - state.last_time_line_at) / HOUR_MS
        if hours_since < MIN_HOURS_BETWEEN_LINES:
            return False
    return True


def shown_recently(state: TimeState, threshold_id: str, today: str) -> bool:
    last = state.shown.get(threshold_id)
    if not last:
        return False
    days = diff_days(today, last)
    return 0 <= days < COOLDOWN_DAYS[threshold_id]


def in_allowed_hours(hour: int, start: int = ALLOWED_HOUR_START, end: int = ALLOWED_HOUR_END) -> bool:
    if start <= end:
        return start <= hour < end
    # window wraps midnight
    return hour >= start or hour < end


def is_big_moment(threshold_id: str) -> bool:
    return threshold_id in BIG_MOMENTS


def in_big_moment_silence(state: TimeState, today: str) -> bool:
    if not state.last_big_time_line_date:
        return False
    quiet_days = diff_days(today, state.last_big_time_line_date)
    return 0 <= quiet_days < BIG_MOMENT_SILENCE_DAYS


def compute_probability(
    threshold_id: str,
    days_since_last: Optional[int],
    days_since_last_line: Optional[int],
    streak: Optional[int],
    week_count: Optional[int],
) -> float:
    """Chance that an eligible line actually speaks."""
    p = BASE_FIRE_PROBABILITY

    # Long silence leans toward speaking, a recent line toward quiet
    if days_since_last_line is not None:
        if days_since_last_line >= 14:
            p += 0.10
        elif days_since_last_line >= 10:
            p += 0.08
        elif days_since_last_line >= 7:
            p += 0.06
        elif days_since_last_line <= 3:
            p -= 0.06
        elif days_since_last_line <= 5:
            p -= 0.03

    p += SALIENCE.get(threshold_id, 0.0)

    if days_since_last is not None:
        if days_since_last >= 21:
            p += 0.08
        elif days_since_last >= 7:
            p += 0.06
        elif days_since_last >= 3:
            p += 0.04
    if streak is not None:
        if streak >= 21:
            p += 0.06
        elif streak >= 14:
            p += 0.05
        elif streak >= 7:
            p += 0.04
    if week_count is not None and week_count >= WEEK_SESSIONS_5:
        p += 0.03

    ceiling = 0.95 if is_big_moment(threshold_id) else 0.70
    return min(ceiling, max(0.05, p))


# ════════════════════════════════════════════════════════════
#  BOOKKEEPING
# ════════════════════════════════════════════════════════════

def update_streak(state: TimeState, days_since_last: Optional[int]) -> None:
    if days_since_last is None:
        # first ever open
        state.streak = 1
    elif days_since_last == 1:
        state.streak = (state.streak or 1) + 1
    elif days_since_last > 1:
        state.streak = 1
    elif state.streak is None:
        state.streak = 1


def update_week(state: TimeState, week_start: str, prev_date: Optional[str], today: str) -> None:
    if state.week_start != week_start:
        state.week_start = week_start
        state.week_count = 1
    elif prev_date is None:
        state.week_count = 1
    elif diff_days(today, prev_date) > 0:
        # counted once per calendar day
        state.week_count = (state.week_count or 0) + 1
    elif state.week_count is None:
        state.week_count = 1


def choose_threshold(state: TimeState, days_since_last: Optional[int], today: str) -> Optional[str]:
    """First eligible id in priority order: returns, streaks, week, next day."""
    if days_since_last is not None:
        if days_since_last >= GAP_DAYS_21 and not shown_recently(state, "return.after_21", today):
            return "return.after_21"
        if days_since_last >= GAP_DAYS_WEEK and not shown_recently(state, "return.after_week", today):
            return "return.after_week"
        if days_since_last >= GAP_DAYS_TRIGGER and not shown_recently(state, "return.after_gap", today):
            return "return.after_gap"

    if state.streak is not None:
        for length, tid in STREAK_MILESTONES:
            if state.streak == length and not shown_recently(state, tid, today):
                return tid

    if state.week_count == WEEK_SESSIONS_5 and not shown_recently(state, "week.5", today):
        return "week.5"

    if days_since_last == 1 and not shown_recently(state, "return.next_day", today):
        return "return.next_day"

    return None


# ════════════════════════════════════════════════════════════
#  ENGINE
# ════════════════════════════════════════════════════════════

class TimeEngine:
    """Streak + cadence tracker with a rate-limited threshold gate."""

    def __init__(
        self,
        store,
        tz=None,
        clock: Callable[[], int] = now_ms,
        rng: Callable[[], float] = random.random,
        allowed_hours: tuple[int, int] = (ALLOWED_HOUR_START, ALLOWED_HOUR_END),
    ):
        self.store = store
        self.tz = resolve_tz(tz)
        self.clock = clock
        self.rng = rng
        self.allowed_hours = allowed_hours
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, store, config: dict, **kwargs) -> "TimeEngine":
        from innerfield.config import get_allowed_hours, get_timezone

        return cls(store, tz=get_timezone(config), allowed_hours=get_allowed_hours(config), **kwargs)

    def tick(self, now: Optional[int] = None) -> TickResult:
        """Evaluate time-based thresholds. Call on app open / screen focus."""
        with self._lock:
            return self._tick(self.clock() if now is None else now)

    def _tick(self, now: int) -> TickResult:
        today = local_date_key(now, self.tz)
        state = load_state(self.store)

        prev_date = state.last_date
        days_since_last = diff_days(today, prev_date) if prev_date else None
        days_since_last_line = (
            diff_days(today, state.last_time_line_date) if state.last_time_line_date else None
        )

        update_streak(state, days_since_last)
        update_week(state, week_start_key(now, self.tz), prev_date, today)

        state.last_open_at = now
        state.last_date = today

        if not can_show_line(now, state, today):
            logger.debug("Tick %s: rate limited", today)
            return self._silent(state)

        chosen = choose_threshold(state, days_since_last, today)
        if chosen is None:
            return self._silent(state)

        if not in_allowed_hours(local_hour(now, self.tz), *self.allowed_hours):
            logger.info("Time line %s held back: outside allowed hours", chosen)
            return self._silent(state)

        if in_big_moment_silence(state, today):
            logger.info("Time line %s held back: quiet after big moment", chosen)
            return self._silent(state)

        p = compute_probability(
            chosen,
            days_since_last=days_since_last,
            days_since_last_line=days_since_last_line,
            streak=state.streak,
            week_count=state.week_count,
        )
        draw = self.rng()
        if not draw < p:
            logger.info("Time line %s eligible but not drawn (p=%.2f)", chosen, p)
            return self._silent(state)

        state.last_time_line_at = now
        state.last_time_line_date = today
        state.shown[chosen] = today
        if is_big_moment(chosen):
            state.last_big_time_line_at = now
            state.last_big_time_line_date = today

        save_state(self.store, state)
        logger.info("Time line fired [%s] streak=%s week=%s", chosen, state.streak, state.week_count)
        return TickResult(message=COPY[chosen], threshold_id=chosen, state=state)

    def _silent(self, state: TimeState) -> TickResult:
        save_state(self.store, state)
        return TickResult(message=None, threshold_id=None, state=state)

    def get_state(self) -> TimeState:
        return load_state(self.store)

    def reset(self) -> None:
        """Forget all time history. Debug / testing only."""
        with self._lock:
            clear_state(self.store)
        logger.info("Time state reset")

    @staticmethod
    def dev_force(threshold_id: str) -> str:
        """Copy for ``threshold_id`` without touching state (UI testing)."""
        if threshold_id not in THRESHOLD_IDS:
            raise ValueError(f"Unknown threshold id: {threshold_id!r}")
        return COPY[threshold_id]
