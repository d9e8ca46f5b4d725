from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from ..core.exceptions import ValidationError

SATURDAY = 5
SUNDAY = 6


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)")


def parse_time_of_day(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into a time of day."""
    v = (value or "").strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Invalid time (HH:MM)")


def minutes_since_midnight(value: time) -> int:
    # Seconds are ignored: attendance is recorded to the minute.
    return value.hour * 60 + value.minute


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def weekday_count(year: int, month: int) -> int:
    """Number of Monday-Friday days in the month."""
    start, end = month_bounds(year, month)
    return sum(1 for n in range(end.day) if (start + timedelta(days=n)).weekday() < SATURDAY)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
