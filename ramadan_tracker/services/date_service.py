"""
Calendar date resolution.
Resolves "today" and day offsets in a fixed civil calendar (UTC-4, no DST),
independent of the host timezone.
"""
from datetime import datetime, timedelta, timezone, date
from typing import Callable, Optional, Union

from ramadan_tracker.constants import CALENDAR_UTC_OFFSET_HOURS
from ramadan_tracker.exceptions import InvalidDateException

CALENDAR_TZ = timezone(timedelta(hours=CALENDAR_UTC_OFFSET_HOURS))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Union[str, date]) -> date:
    """
    Parse a YYYY-MM-DD calendar date.

    Args:
        value: ISO date string or date object

    Returns:
        Parsed date

    Raises:
        InvalidDateException: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        raise InvalidDateException(str(value))


def format_date(value: date) -> str:
    """Format a date as the YYYY-MM-DD storage key"""
    return value.isoformat()


class DateService:
    """Service for calendar date operations"""

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or _utc_now

    def now(self) -> datetime:
        """Current wall-clock time in the fixed calendar timezone"""
        current = self._now()
        if current.tzinfo is None:
            # Naive clocks are taken as UTC
            current = current.replace(tzinfo=timezone.utc)
        return current.astimezone(CALENDAR_TZ)

    def today(self) -> date:
        """
        Get today's date in the fixed civil calendar.

        Example: at 2026-03-02 02:00 UTC it is still 2026-03-01 in UTC-4.
        """
        return self.now().date()

    def offset(self, delta_days: int) -> date:
        """Get the date delta_days from today (negative = past)"""
        return self.today() + timedelta(days=delta_days)

    def current_hour(self) -> int:
        """Current hour (0-23) in the fixed calendar"""
        return self.now().hour
