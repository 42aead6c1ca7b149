"""
Inner — Reflective Nudges
Picks one gentle line that acknowledges how long the user has been holding
their current intention(s).

Selection is deterministic: the same intention, stage, weekly bucket (or
explicit seed) and day count always land on the same line, so the text never
flickers between re-renders. Callers persist ``NudgeResult.key`` or the
shown-at timestamp themselves (see intentions.py).
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from innerfield.dates import DAY_MS, days_between, now_ms
from innerfield.nudge_library import ACKNOWLEDGE, INVITE, MIXED, REFLECT, candidates

logger = logging.getLogger("innerfield.nudges")

DEFAULT_COOLDOWN_DAYS = 7
BUCKET_MS = 7 * DAY_MS

# Stage thresholds, in whole days since the intention state began
ACKNOWLEDGE_DAYS = 3
REFLECT_DAYS = 7
INVITE_DAYS = 14


@dataclass(frozen=True)
class NudgeResult:
    category: str  # "mixed" for zero or 2+ intentions
    stage: str
    text: str
    key: str  # stable; store it as "last shown"


def stage_for_days(days: int) -> Optional[str]:
    if days >= INVITE_DAYS:
        return INVITE
    if days >= REFLECT_DAYS:
        return REFLECT
    if days >= ACKNOWLEDGE_DAYS:
        return ACKNOWLEDGE
    return None


def stable_hash(text: str) -> int:
    """Polynomial rolling hash, base 31, wrapped to an unsigned 32-bit int."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


def hash_to_index(text: str, mod: int) -> int:
    if mod <= 0:
        return 0
    return stable_hash(text) % mod


def normalize_intentions(intentions: Optional[Iterable[str]]) -> str:
    """Collapse the selection into exactly one category."""
    distinct: list[str] = []
    for raw in intentions or ():
        if not raw:
            continue
        key = str(raw).strip().lower()
        if key and key not in distinct:
            distinct.append(key)
    if len(distinct) == 1:
        return distinct[0]
    # None selected is treated as neutral, same as a blend
    return MIXED


def get_nudge(
    intentions: Optional[Iterable[str]],
    intention_set_at: int,
    last_shown_at: Optional[int] = None,
    cooldown_days: int = DEFAULT_COOLDOWN_DAYS,
    now: Optional[int] = None,
    seed: Optional[int] = None,
) -> Optional[NudgeResult]:
    """Pick a nudge for the current intention state, or None.

    Args:
        intentions: 0-2 selected intention ids
        intention_set_at: ms when the current intention state began
        last_shown_at: ms when a nudge was last displayed
        cooldown_days: minimum whole days between two nudges
        now: ms, defaults to the wall clock
        seed: replaces the weekly bucket as the variation key
    """
    if now is None:
        now = now_ms()

    if last_shown_at is not None:
        since_shown = days_between(last_shown_at, now)
        if since_shown < cooldown_days:
            logger.debug("Nudge on cooldown (%d/%d days)", since_shown, cooldown_days)
            return None

    category = normalize_intentions(intentions)
    days_in_state = days_between(intention_set_at, now)

    stage = stage_for_days(days_in_state)
    if stage is None:
        return None

    options = candidates(category, stage)
    if not options:
        logger.debug("No nudge copy for %s/%s", category, stage)
        return None

    bucket = seed if seed is not None else int(now // BUCKET_MS)
    pick_key = f"{category}:{stage}:{bucket}:{days_in_state}"
    text = options[hash_to_index(pick_key, len(options))]

    return NudgeResult(category=category, stage=stage, text=text, key=pick_key)
