"""
Tracker service.
Read/write surface for the presentation layer: today's checklist, progress,
streak, points, lifetime level and the full history snapshot.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from ramadan_tracker.constants import CHECKLIST_KEYS
from ramadan_tracker.exceptions import TrackerException
from ramadan_tracker.records import DailyRecord, count_true_flags, is_perfect_day, require_checklist_key
from ramadan_tracker.schemas import DaySummary, LifetimeTotal, PointsBreakdown, ProfileStats, TodayProgress
from ramadan_tracker.services.date_service import DateService
from ramadan_tracker.services.points_service import PointsService
from ramadan_tracker.services.record_store import DailyRecordStore
from ramadan_tracker.services.streak_service import StreakService

logger = logging.getLogger("ramadan_tracker.tracker")


class TrackerService:
    """Service exposing tracker reads and writes to the UI"""

    def __init__(self, store: DailyRecordStore, date_service: Optional[DateService] = None):
        self.store = store
        self.date_service = date_service or DateService()
        self.streak_service = StreakService(store, self.date_service)
        self.points_service = PointsService(store, self.streak_service)

    @property
    def checklist(self) -> Tuple[str, ...]:
        return CHECKLIST_KEYS

    # Reads

    def get_record(self, target_date: date) -> DailyRecord:
        return self.store.get(target_date)

    def today_record(self) -> DailyRecord:
        return self.store.get(self.date_service.today())

    def today_progress(self) -> TodayProgress:
        """Checklist items done today out of five"""
        completed = count_true_flags(self.today_record())
        total = len(CHECKLIST_KEYS)
        return TodayProgress(
            completed=completed,
            total=total,
            percentage=round(completed / total * 100)
        )

    def current_streak(self) -> int:
        return self.streak_service.current_streak()

    def today_points(self) -> PointsBreakdown:
        return self.points_service.today_points()

    def lifetime_total(self) -> LifetimeTotal:
        return self.points_service.lifetime_total()

    def all_days(self) -> List[DaySummary]:
        """Per-day completion counts, sorted by date, for calendars and heatmaps"""
        return [
            DaySummary(date=day, completed=count_true_flags(record), total=len(CHECKLIST_KEYS))
            for day, record in self.store.all_dates()
        ]

    def profile_stats(self) -> ProfileStats:
        """Tracked days, perfect days and per-item totals across all stored days"""
        records = [record for _, record in self.store.all_dates()]
        return ProfileStats(
            tracked_days=sum(1 for record in records if count_true_flags(record) > 0),
            perfect_days=sum(1 for record in records if is_perfect_day(record)),
            item_totals={
                key: sum(1 for record in records if record.get(key))
                for key in CHECKLIST_KEYS
            }
        )

    def snapshot(self) -> List[Tuple[date, DailyRecord]]:
        return self.store.all_dates()

    # Writes (always today)

    def toggle(self, category: str) -> DailyRecord:
        """Flip one checklist flag for today. Unknown categories are ignored."""
        try:
            require_checklist_key(category)
        except TrackerException as e:
            logger.warning(f"Toggle ignored: {e}")
            return self.today_record()
        return self.store.toggle(self.date_service.today(), category)

    def set_flag(self, category: str, value: bool) -> DailyRecord:
        """Set one checklist flag for today. Unknown categories are ignored."""
        try:
            require_checklist_key(category)
        except TrackerException as e:
            logger.warning(f"Set flag ignored: {e}")
            return self.today_record()
        return self.store.set_flag(self.date_service.today(), category, value)

    def merge_detail(self, category: str, payload: Dict[str, Any]) -> DailyRecord:
        """Merge a detail payload into today's record for one category"""
        return self.store.merge_detail(self.date_service.today(), category, payload)
