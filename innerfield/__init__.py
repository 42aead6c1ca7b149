"""
Inner — Time & Nudge Engine
Streaks, weekly cadence and rare time lines, plus deterministic reflective
nudges for the user's current intentions.
"""
from innerfield.intentions import IntentionStore
from innerfield.nudges import NudgeResult, get_nudge
from innerfield.storage import JsonFileStore, MemoryStore
from innerfield.time_engine import TickResult, TimeEngine
from innerfield.time_state import TimeState

__version__ = "1.0.0"

__all__ = [
    "IntentionStore",
    "JsonFileStore",
    "MemoryStore",
    "NudgeResult",
    "TickResult",
    "TimeEngine",
    "TimeState",
    "get_nudge",
]
