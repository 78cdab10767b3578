# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from db.engine import build_engine, init_models
from db.session import make_session_factory
from services.memory_store import MemoryStore


class FakeClock:
    """Strictly increasing UTC timestamps, one second apart."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'memories.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory, clock) -> MemoryStore:
    return MemoryStore(session_factory, clock=clock)


@pytest.fixture
async def broken_store(tmp_path):
    """A store whose database has no tables, so every statement fails."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    yield MemoryStore(make_session_factory(engine))
    await engine.dispose()
