"""
Inner — Intentions
The user holds up to two intentions at a time. This module keeps the
selection, when that selection began, and when a reflective nudge was last
shown, so ``get_nudge`` can be called with everything it needs.
"""
import json
import logging
from typing import Iterable, Optional

from innerfield.dates import now_ms
from innerfield.nudge_library import INTENTIONS
from innerfield.nudges import DEFAULT_COOLDOWN_DAYS, NudgeResult, get_nudge

logger = logging.getLogger("innerfield.intentions")

INTENTIONS_KEY = "inner.intentions.v1"
INTENTION_SET_AT_KEY = "inner.intentions.setAt.v1"
LAST_NUDGE_SHOWN_AT_KEY = "inner.nudges.lastShownAt.v1"

MAX_INTENTIONS = 2


def normalize_selection(keys: Optional[Iterable]) -> list[str]:
    """Lowercase, drop unknown ids and duplicates, keep at most two."""
    if not keys or isinstance(keys, str):
        return []
    out: list[str] = []
    for raw in keys:
        if len(out) >= MAX_INTENTIONS:
            break
        key = str(raw).strip().lower()
        if key in INTENTIONS and key not in out:
            out.append(key)
    return out


def format_intentions(keys: list[str]) -> str:
    """UI label, e.g. "Calm & Expansion"."""
    titled = [k[:1].upper() + k[1:] for k in keys]
    if not titled:
        return ""
    if len(titled) == 1:
        return titled[0]
    return f"{titled[0]} & {titled[1]}"


def has_intention(keys: list[str], target: str) -> bool:
    return target in keys


def _parse_ms(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return int(value)


class IntentionStore:
    """Intention selection and nudge bookkeeping over a key-value store.

    Every read degrades to "unknown" and every write is best-effort, the
    same as the time state.
    """

    def __init__(self, store, clock=now_ms):
        self.store = store
        self.clock = clock

    # ── Storage helpers ─────────────────────────────────────

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as e:
            logger.warning("Read failed (%s): %s", key, e)
            return None

    def _set(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except Exception as e:
            logger.warning("Write failed (%s): %s", key, e)

    def _remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as e:
            logger.warning("Remove failed (%s): %s", key, e)

    # ── Intentions ──────────────────────────────────────────

    def set_intentions(self, keys, now: Optional[int] = None) -> list[str]:
        """Store up to two intentions. Extra or unknown items are ignored.

        The set-at timestamp only moves when the selection actually changes
        (or was never recorded), so re-saving the same choice keeps the
        timeline running. An empty selection clears both.
        """
        normalized = normalize_selection(keys)
        if not normalized:
            self.clear_intentions()
            return []

        next_str = json.dumps(normalized)
        prev_str = self._get(INTENTIONS_KEY)
        prev_set_at = self._get(INTENTION_SET_AT_KEY)
        changed = not prev_str or prev_str != next_str

        self._set(INTENTIONS_KEY, next_str)
        if changed or not prev_set_at:
            stamp = self.clock() if now is None else now
            self._set(INTENTION_SET_AT_KEY, str(stamp))
            logger.info("Intentions set: %s", format_intentions(normalized))
        return normalized

    def get_intentions(self) -> list[str]:
        raw = self._get(INTENTIONS_KEY)
        if not raw:
            return []
        try:
            return normalize_selection(json.loads(raw))
        except (json.JSONDecodeError, TypeError):
            return []

    def get_intention_set_at(self) -> Optional[int]:
        return _parse_ms(self._get(INTENTION_SET_AT_KEY))

    def clear_intentions(self) -> None:
        self._remove(INTENTIONS_KEY)
        self._remove(INTENTION_SET_AT_KEY)

    # ── Nudge cooldown ──────────────────────────────────────

    def set_last_nudge_shown_at(self, ts: int) -> None:
        self._set(LAST_NUDGE_SHOWN_AT_KEY, str(int(ts)))

    def get_last_nudge_shown_at(self) -> Optional[int]:
        return _parse_ms(self._get(LAST_NUDGE_SHOWN_AT_KEY))

    def clear_last_nudge_shown_at(self) -> None:
        self._remove(LAST_NUDGE_SHOWN_AT_KEY)

    def mark_nudge_shown(self, now: Optional[int] = None) -> int:
        stamp = self.clock() if now is None else now
        self.set_last_nudge_shown_at(stamp)
        return stamp

    def current_nudge(
        self,
        now: Optional[int] = None,
        seed: Optional[int] = None,
        cooldown_days: Optional[int] = None,
    ) -> Optional[NudgeResult]:
        """Nudge for the stored selection, or None if there is no timeline yet."""
        set_at = self.get_intention_set_at()
        if set_at is None:
            return None
        return get_nudge(
            self.get_intentions(),
            set_at,
            last_shown_at=self.get_last_nudge_shown_at(),
            cooldown_days=DEFAULT_COOLDOWN_DAYS if cooldown_days is None else cooldown_days,
            now=self.clock() if now is None else now,
            seed=seed,
        )
