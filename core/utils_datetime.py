"""
DateTime utilities for the restaurant's local clock.
Business hours are stored as HH:MM strings; reservations as timezone-aware instants.
"""
from datetime import datetime, timedelta, date, time
from typing import Optional, Tuple, Union
import re
import pytz

from core.settings import settings


# Timezone configuration
TIMEZONE = pytz.timezone(settings.restaurant_timezone)

MINUTES_PER_DAY = 24 * 60

HHMM_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?')


def get_current_datetime() -> datetime:
    """Get current datetime in the restaurant timezone."""
    return datetime.now(TIMEZONE)


def get_current_date() -> date:
    """Get today's date on the restaurant clock."""
    return get_current_datetime().date()


def parse_hhmm(value: Union[str, time, None]) -> Optional[int]:
    """
    Parse a wall-clock value into minutes since midnight.

    Accepts "H:MM", "HH:MM", "HH:MM:SS" and datetime.time objects.
    "24:00" is accepted as end of day.

    Returns:
        Minutes since midnight, or None if the value is not a time
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    match = HHMM_PATTERN.match(str(value))
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    if minute >= 60:
        return None
    if hour > 24 or (hour == 24 and minute != 0):
        return None
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hhmm(value: Union[str, time, None]) -> Optional[str]:
    """Normalize a wall-clock value to zero-padded HH:MM, or None."""
    minutes = parse_hhmm(value)
    if minutes is None:
        return None
    return format_hhmm(minutes)


def ensure_aware(dt: datetime) -> datetime:
    """Localize naive datetimes to the restaurant timezone; convert aware ones."""
    if dt.tzinfo is None:
        return TIMEZONE.localize(dt)
    return dt.astimezone(TIMEZONE)


def combine_local(day: date, hhmm: Union[str, int]) -> datetime:
    """
    Build an aware datetime from a date and a wall-clock time.

    Args:
        day: Calendar date
        hhmm: HH:MM string or minutes since midnight

    Returns:
        datetime localized to the restaurant timezone
    """
    minutes = hhmm if isinstance(hhmm, int) else parse_hhmm(hhmm)
    if minutes is None:
        raise ValueError(f"Invalid time of day: {hhmm!r}")
    naive = datetime.combine(day, time(0, 0)) + timedelta(minutes=minutes)
    return TIMEZONE.localize(naive)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return the first and last instant of a calendar day on the restaurant clock."""
    start = TIMEZONE.localize(datetime.combine(day, time(0, 0)))
    end = TIMEZONE.localize(datetime.combine(day, time(23, 59, 59, 999999)))
    return start, end


def sunday_based_weekday(day: date) -> int:
    """Weekday number with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def parse_iso_date(value: str) -> Optional[date]:
    """Parse YYYY-MM-DD, returning None on malformed input."""
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None
