"""
Streak evaluation.
Counts consecutive days meeting the completion threshold.
"""
from datetime import date, timedelta
from typing import Dict, List, Tuple

from ramadan_tracker.constants import MIN_FOR_STREAK, MAX_STREAK_LOOKBACK
from ramadan_tracker.records import DailyRecord, count_true_flags
from ramadan_tracker.services.date_service import DateService


def is_day_kept(record: DailyRecord) -> bool:
    """A day counts toward a streak when at least MIN_FOR_STREAK flags are set"""
    return count_true_flags(record) >= MIN_FOR_STREAK


def streak_ending_at(
    records: Dict[date, DailyRecord],
    last_day: date,
    max_days: int = MAX_STREAK_LOOKBACK
) -> int:
    """
    Count consecutive kept calendar days walking backward from last_day.

    Args:
        records: Records keyed by date
        last_day: First day checked (walk goes backward from here)
        max_days: Lookback bound

    Returns:
        Number of consecutive kept days
    """
    streak = 0
    day = last_day
    while streak < max_days:
        if not is_day_kept(records.get(day, {})):
            break
        streak += 1
        day -= timedelta(days=1)
    return streak


def streak_before_index(snapshot: List[Tuple[date, DailyRecord]], index: int) -> int:
    """
    Streak accumulated strictly before snapshot[index].

    Walks the sorted stored days preceding index, not the wall-clock
    calendar, so the result depends on the record set alone.
    """
    streak = 0
    for j in range(index - 1, -1, -1):
        if not is_day_kept(snapshot[j][1]):
            break
        streak += 1
    return streak


class StreakService:
    """Service for streak calculations over a record store"""

    def __init__(self, store, date_service: DateService = None):
        self.store = store
        self.date_service = date_service or DateService()

    def current_streak(self) -> int:
        """
        Consecutive kept days ending yesterday.

        Today is still in progress and never counts.
        """
        yesterday = self.date_service.offset(-1)
        return streak_ending_at(self.store.snapshot(), yesterday)

    def streak_as_of(self, target_date: date) -> int:
        """Consecutive kept days ending the day before target_date"""
        return streak_ending_at(self.store.snapshot(), target_date - timedelta(days=1))
