"""
Shared test fixtures.

Sets environment variables before any ramadan_tracker import so the module
level engine, log directory and API key point at test-safe values.
"""
import os
import tempfile

os.environ.setdefault("TRACKER_DATABASE_URL", "sqlite://")
os.environ.setdefault("TRACKER_LOG_DIR", tempfile.gettempdir())
os.environ.setdefault("TRACKER_API_KEY", "test-api-key")

import pytest
from datetime import date, datetime, timedelta, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ramadan_tracker.database import Base
from ramadan_tracker import models  # noqa: F401 - registers tables
from ramadan_tracker.repositories.storage_repository import MemoryStorageBackend
from ramadan_tracker.services.date_service import DateService
from ramadan_tracker.services.record_store import DailyRecordStore
from ramadan_tracker.services.remote_client import SyncResult

# 2026-03-10 16:00 UTC is 12:00 on 2026-03-10 in the tracker calendar
FIXED_NOW = datetime(2026, 3, 10, 16, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def date_service():
    return DateService(now=lambda: FIXED_NOW)


@pytest.fixture
def today():
    return date(2026, 3, 10)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def memory_backend():
    return MemoryStorageBackend()


@pytest.fixture
def store(memory_backend):
    return DailyRecordStore(memory_backend)


def seed_day(store, day, *keys):
    """Set the given checklist flags true for day"""
    for key in keys:
        store.set_flag(day, key, True)


@pytest.fixture
def seed():
    return seed_day


class FakeRemote:
    """In-memory remote store recording every call"""

    def __init__(self):
        self.rows = []
        self.puts = []
        self.fetch_calls = 0
        self.fail_fetch = False
        self.fail_put = False
        self.fetch_gate = None

    async def fetch_rows(self):
        self.fetch_calls += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fail_fetch:
            return SyncResult.failure("HTTP 503")
        return SyncResult.success(list(self.rows))

    async def put_row(self, day, record):
        if self.fail_put:
            return SyncResult.failure("connection refused")
        self.puts.append((day, record))
        return SyncResult.success({"success": True})


@pytest.fixture
def fake_remote():
    return FakeRemote()
