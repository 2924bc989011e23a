"""Calendar-day helpers shared by the streak engine, heatmap and freeze logic."""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from devtracker.errors import FutureDateError, InvalidDateError

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_YEAR = 2000
MAX_YEAR = 2100


def parse_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string (or pass through a date)."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def to_iso(value: str | date) -> str:
    """Format a date as YYYY-MM-DD."""
    return parse_date(value).isoformat()


def is_iso_date(value: object) -> bool:
    """True if value is a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def check_date_format(value: object) -> date:
    """Parse a YYYY-MM-DD date with a year in 2000-2100.

    Raises InvalidDateError otherwise.
    """
    if not is_iso_date(value):
        raise InvalidDateError()
    parsed = parse_date(value)
    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise InvalidDateError("Invalid date format or out of range")
    return parsed


def validate_date(value: str, today: str | date, allow_future: bool = False) -> str:
    """Check a YYYY-MM-DD date in 2000-2100 and, unless allowed, not after today.

    Raises InvalidDateError (FutureDateError for a well-formed future date).
    """
    parsed = check_date_format(value)
    if not allow_future and parsed > parse_date(today):
        raise FutureDateError("Date cannot be in the future")
    return to_iso(parsed)


def days_between(later: str | date, earlier: str | date) -> int:
    """Whole calendar days from earlier to later (negative if reversed)."""
    return (parse_date(later) - parse_date(earlier)).days


def shift(value: str | date, days: int) -> str:
    """Return the ISO date `days` after value (use a negative count to go back)."""
    return (parse_date(value) + timedelta(days=days)).isoformat()


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        return 0
    return calendar.monthrange(year, month)[1]


def month_name(month: int) -> str:
    """Full English month name: 1 -> 'January'."""
    return calendar.month_name[month]


def days_left_in_year(today: str | date) -> int:
    """Days remaining in today's year, today included (Dec 31 -> 1)."""
    day = parse_date(today)
    return days_between(date(day.year, 12, 31), day) + 1
