"""Global pytest fixtures and configuration."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from memory_core.config import get_core_settings  # noqa: E402
from memory_core.memory import MemoryKeyValueStore, MessageStore  # noqa: E402
from memory_core.memory.factory import reset_store  # noqa: E402
from memory_server.config import get_server_settings  # noqa: E402


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(kv, clock) -> MessageStore:
    """Initialized message store over the in-memory backend."""
    message_store = MessageStore(kv, clock=clock)
    message_store.initialize()
    yield message_store
    message_store.close()


@pytest.fixture()
def memory_backend(monkeypatch):
    """Point the store factory at the in-memory backend."""
    monkeypatch.setenv("MEMORY_BACKEND", "memory")
    get_core_settings.cache_clear()
    get_server_settings.cache_clear()
    reset_store()
    yield
    reset_store()
    get_core_settings.cache_clear()
    get_server_settings.cache_clear()
