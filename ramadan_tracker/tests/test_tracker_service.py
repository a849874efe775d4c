"""
Tests for TrackerService and session wiring.

Tests cover:
1. Today's record, progress and streak
2. Writes always land on today
3. Unknown categories ignored without raising
4. All-days summary for calendars
5. Profile stats (tracked, perfect and per-item day counts)
6. create_session wiring, including unavailable storage
"""
import pytest
from datetime import date, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ramadan_tracker import bootstrap
from ramadan_tracker.bootstrap import create_session
from ramadan_tracker.constants import CHECKLIST_KEYS, PERFECT_BONUS, POINT_VALUES
from ramadan_tracker.repositories.storage_repository import MemoryStorageBackend, SqlStorageBackend
from ramadan_tracker.services.tracker_service import TrackerService


@pytest.fixture
def tracker(store, date_service):
    return TrackerService(store, date_service)


class TestReads:
    """Tests for read-side operations"""

    def test_checklist(self, tracker):
        assert tracker.checklist == ("fasted", "quran", "dhikr", "prayer", "masjid")

    def test_today_record_defaults(self, tracker):
        assert tracker.today_record() == {key: False for key in CHECKLIST_KEYS}

    def test_today_progress(self, tracker):
        tracker.set_flag("fasted", True)
        tracker.set_flag("prayer", True)

        progress = tracker.today_progress()

        assert progress.completed == 2
        assert progress.total == 5
        assert progress.percentage == 40

    def test_current_streak(self, tracker, store, yesterday, seed):
        seed(store, yesterday, "fasted", "quran", "dhikr")
        seed(store, yesterday - timedelta(days=1), "fasted", "quran", "dhikr")

        assert tracker.current_streak() == 2

    def test_today_points(self, tracker):
        for key in CHECKLIST_KEYS:
            tracker.set_flag(key, True)

        points = tracker.today_points()

        assert points.total == sum(POINT_VALUES.values()) + PERFECT_BONUS

    def test_lifetime_total(self, tracker):
        tracker.set_flag("fasted", True)

        assert tracker.lifetime_total().total == POINT_VALUES["fasted"]

    def test_all_days(self, tracker, store, seed):
        seed(store, date(2026, 3, 2), "fasted", "quran")
        seed(store, date(2026, 3, 1), "fasted")

        days = tracker.all_days()

        assert [d.date for d in days] == [date(2026, 3, 1), date(2026, 3, 2)]
        assert [d.completed for d in days] == [1, 2]
        assert all(d.total == 5 for d in days)

    def test_get_record_for_any_date(self, tracker, store, seed):
        seed(store, date(2026, 3, 1), "masjid")

        assert tracker.get_record(date(2026, 3, 1))["masjid"] is True


class TestProfileStats:
    """Tests for profile_stats"""

    def test_empty_store(self, tracker):
        stats = tracker.profile_stats()

        assert stats.tracked_days == 0
        assert stats.perfect_days == 0
        assert stats.item_totals == {key: 0 for key in CHECKLIST_KEYS}

    def test_counts_across_days(self, tracker, store, seed):
        seed(store, date(2026, 3, 1), *CHECKLIST_KEYS)
        seed(store, date(2026, 3, 2), "fasted", "quran")
        seed(store, date(2026, 3, 3), "fasted")
        store.merge_detail(date(2026, 3, 4), "dhikr", {"count": 33})

        stats = tracker.profile_stats()

        assert stats.tracked_days == 3
        assert stats.perfect_days == 1
        assert stats.item_totals["fasted"] == 3
        assert stats.item_totals["quran"] == 2
        assert stats.item_totals["dhikr"] == 1
        assert stats.item_totals["masjid"] == 1

    def test_unknown_keys_not_counted(self, tracker, store):
        store.set_flag(date(2026, 3, 1), "taraweeh", True)

        stats = tracker.profile_stats()

        assert stats.tracked_days == 0
        assert "taraweeh" not in stats.item_totals


class TestWrites:
    """Tests for write-side operations"""

    def test_toggle_writes_today(self, tracker, store, today):
        tracker.toggle("quran")

        assert store.get(today)["quran"] is True
        assert [day for day, _ in store.all_dates()] == [today]

    def test_toggle_twice_clears(self, tracker):
        tracker.toggle("quran")
        record = tracker.toggle("quran")

        assert record["quran"] is False

    def test_unknown_category_is_ignored(self, tracker, store):
        record = tracker.toggle("taraweeh")

        assert "taraweeh" not in record
        assert len(store) == 0

    def test_set_flag_unknown_category_is_ignored(self, tracker, store):
        tracker.set_flag("sleep", True)

        assert len(store) == 0

    def test_merge_detail_today(self, tracker, today, store):
        tracker.merge_detail("dhikr", {"count": 33})
        tracker.merge_detail("dhikr", {"sessions": 1})

        assert store.get(today)["dhikr_data"] == {"count": 33, "sessions": 1}


class TestCreateSession:
    """Tests for bootstrap.create_session"""

    def test_local_only_without_remote(self, monkeypatch):
        monkeypatch.delenv("TRACKER_REMOTE_URL", raising=False)

        session = create_session(backend=MemoryStorageBackend())

        assert session.sync is None
        assert session.tracker.store is session.store

    def test_with_remote(self, fake_remote):
        session = create_session(backend=MemoryStorageBackend(), remote=fake_remote)

        assert session.sync is not None
        assert session.sync.remote is fake_remote

    def test_remote_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRACKER_REMOTE_URL", "http://tracker.test")

        session = create_session(backend=MemoryStorageBackend(), user_id="user-1")

        assert session.sync is not None

    def test_unavailable_database_runs_in_memory(self, monkeypatch, tmp_path, date_service):
        broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'tracker.db'}")
        monkeypatch.setattr(bootstrap, "engine", broken)
        monkeypatch.setattr(bootstrap, "SessionLocal", sessionmaker(bind=broken))
        monkeypatch.delenv("TRACKER_REMOTE_URL", raising=False)

        session = create_session(date_service=date_service)
        session.tracker.set_flag("fasted", True)

        assert session.tracker.today_record()["fasted"] is True
        assert session.sync is None

    def test_sql_backend(self, session_factory):
        session = create_session(backend=SqlStorageBackend(session_factory))
        session.store.set_flag(date(2026, 3, 1), "fasted", True)

        reloaded = create_session(backend=SqlStorageBackend(session_factory))

        assert reloaded.store.get(date(2026, 3, 1))["fasted"] is True
