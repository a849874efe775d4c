"""
Points calculation service.
Handles per-day points (base, streak multiplier, perfect-day bonus),
lifetime totals and the level curve.
"""
import math
from datetime import date
from typing import List, Optional, Tuple

from ramadan_tracker.constants import (
    CHECKLIST_KEYS,
    POINT_VALUES,
    PERFECT_BONUS,
    STREAK_MULTIPLIERS,
    DEFAULT_MULTIPLIER,
    LEVELS,
)
from ramadan_tracker.records import DailyRecord, normalize_record, is_perfect_day
from ramadan_tracker.schemas import PointsBreakdown, Level, LifetimeTotal
from ramadan_tracker.services.streak_service import streak_before_index


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3), unlike Python's round()"""
    return int(math.floor(value + 0.5))


def get_multiplier(streak_days: int) -> float:
    """
    Streak multiplier: highest qualifying threshold wins.

    21+ -> 2.0, 14+ -> 1.8, 7+ -> 1.5, 3+ -> 1.2, else 1.0
    """
    for min_days, multiplier in STREAK_MULTIPLIERS:
        if streak_days >= min_days:
            return multiplier
    return DEFAULT_MULTIPLIER


def calc_category_points(record: DailyRecord) -> dict:
    """Points earned per checklist key for flags set true"""
    record = normalize_record(record)
    return {key: POINT_VALUES[key] if record.get(key) else 0 for key in CHECKLIST_KEYS}


def calculate_day_points(record: DailyRecord, streak_days: int) -> PointsBreakdown:
    """
    Calculate points for one day.

    Formula: total = round(base × multiplier) + bonus

    Args:
        record: Daily record (malformed records count as empty)
        streak_days: Streak accumulated strictly before that day

    Returns:
        Points breakdown
    """
    categories = calc_category_points(record)
    base = sum(categories.values())

    # Untouched day: no multiplier, no bonus
    if base == 0:
        return PointsBreakdown(total=0, base=0, multiplier=DEFAULT_MULTIPLIER, bonus=0, categories=categories)

    multiplier = get_multiplier(streak_days or 0)
    bonus = PERFECT_BONUS if is_perfect_day(record) else 0
    total = round_half_up(base * multiplier) + bonus

    return PointsBreakdown(
        total=total,
        base=base,
        multiplier=multiplier,
        bonus=bonus,
        categories=categories
    )


def _to_level(entry: dict) -> Level:
    return Level(**entry)


def get_level(points: int) -> Level:
    """Highest level whose threshold is at or below points"""
    for entry in LEVELS:
        if points >= entry["min_points"]:
            return _to_level(entry)
    return _to_level(LEVELS[-1])


def get_next_level(points: int) -> Optional[Level]:
    """Lowest level strictly above points, or None at the top"""
    for entry in reversed(LEVELS):
        if entry["min_points"] > points:
            return _to_level(entry)
    return None


def calculate_progress(points: int, level: Level, next_level: Optional[Level]) -> int:
    """Percent of the way from the current level to the next"""
    if next_level is None:
        return 100
    span = next_level.min_points - level.min_points
    progress = round_half_up(100 * (points - level.min_points) / span)
    return max(0, min(100, progress))


def calculate_total_points(snapshot: List[Tuple[date, DailyRecord]]) -> LifetimeTotal:
    """
    Lifetime total over a date-sorted snapshot.

    Each day's multiplier uses the streak from strictly earlier stored days,
    so the total is reproducible from the record set alone.
    """
    ordered = sorted(snapshot, key=lambda item: item[0])
    total = 0
    for index, (_, record) in enumerate(ordered):
        streak = streak_before_index(ordered, index)
        total += calculate_day_points(record, streak).total

    level = get_level(total)
    next_level = get_next_level(total)

    return LifetimeTotal(
        total=total,
        level=level,
        next_level=next_level,
        progress=calculate_progress(total, level, next_level)
    )


class PointsService:
    """Service for points derived from a record store"""

    def __init__(self, store, streak_service):
        self.store = store
        self.streak_service = streak_service

    def day_points(self, target_date: date) -> PointsBreakdown:
        """
        Points for one date, using the calendar streak ending the day before.

        Lifetime totals walk stored days instead, so after a gap this can
        differ from what calculate_total_points credits for the same date.
        """
        record = self.store.get(target_date)
        streak = self.streak_service.streak_as_of(target_date)
        return calculate_day_points(record, streak)

    def today_points(self) -> PointsBreakdown:
        """Today's points; today's multiplier uses the streak ending yesterday"""
        record = self.store.get(self.streak_service.date_service.today())
        return calculate_day_points(record, self.streak_service.current_streak())

    def lifetime_total(self) -> LifetimeTotal:
        return calculate_total_points(self.store.all_dates())
