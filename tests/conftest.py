"""Shared fixtures: in-memory store, fixed timezone, forced random source."""
from datetime import datetime

import pytest
import pytz

from innerfield import config as cfg
from innerfield.dates import to_ms
from innerfield.storage import MemoryStore
from innerfield.time_engine import TimeEngine

TZ_NAME = "Europe/Berlin"


class FailingStore:
    """Every operation raises, like a broken disk."""

    def get(self, key):
        raise OSError("disk gone")

    def set(self, key, value):
        raise OSError("disk gone")

    def remove(self, key):
        raise OSError("disk gone")


@pytest.fixture
def tz():
    return pytz.timezone(TZ_NAME)


@pytest.fixture
def at(tz):
    """at(2025, 3, 3, 9) -> epoch ms for that local wall time."""
    def _at(year, month, day, hour=9, minute=0):
        return to_ms(datetime(year, month, day, hour, minute), tz)
    return _at


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def make_engine(store, tz):
    """Engine over the shared store; ``draw`` is what the random source returns."""
    def _make(draw=0.0, **kwargs):
        return TimeEngine(store, tz=tz, rng=lambda: draw, **kwargs)
    return _make


@pytest.fixture
def inner_home(tmp_path, monkeypatch):
    """Point the config module at a temporary ~/.inner."""
    home = tmp_path / ".inner"
    monkeypatch.setattr(cfg, "CONFIG_DIR", home)
    monkeypatch.setattr(cfg, "CONFIG_FILE", home / "config.json")
    monkeypatch.setattr(cfg, "STATE_FILE", home / "state.json")
    monkeypatch.setattr(cfg, "LOGS_DIR", home / "logs")
    return home
