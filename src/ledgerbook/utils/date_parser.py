"""Date parsing utilities.

Relative phrases ("last month", "end of month") and CLI period names
("last-month") are resolved against a reference day so callers and tests
can pin "today".
"""

import calendar
import re
from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

SUPPORTED_PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def _period_start(unit: str, today: date, back: int = 0) -> Optional[date]:
    """First day of the week, month or year ``back`` units before ``today``'s."""
    if unit == "week":
        return today - timedelta(days=today.weekday() + 7 * back)
    if unit == "month":
        return today.replace(day=1) - relativedelta(months=back)
    if unit == "year":
        return today.replace(month=1, day=1) - relativedelta(years=back)
    return None


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2025-10-15", "October 15, 2025") and relative
    ones: "today", "yesterday", "tomorrow", "this week|month|year",
    "last week|month|year", "end of month" and "end of last month".

    Args:
        date_str: Date string in various formats
        today: Reference date for relative expressions (defaults to today)

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    offsets = {"yesterday": -1, "today": 0, "tomorrow": 1}
    if text in offsets:
        return today + timedelta(days=offsets[text])

    qualifier, _, unit = text.partition(" ")
    if qualifier in ("this", "last"):
        start = _period_start(unit, today, back=1 if qualifier == "last" else 0)
        if start is not None:
            return start
    if text == "end of month":
        return month_end(today)
    if text == "end of last month":
        return today.replace(day=1) - timedelta(days=1)

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_end(day: date) -> date:
    """Return the last day of the month containing ``day``."""
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing ``day``."""
    return day.replace(day=1), month_end(day)


def format_month(day: date) -> str:
    """Return the YYYY-MM key for a date."""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month(month: str) -> date:
    """Parse a YYYY-MM key into the first day of that month.

    Raises:
        ValueError: If the key is malformed or the month is out of range
    """
    match = _MONTH_PATTERN.match(month.strip()) if month else None
    if match is None:
        raise ValueError(f"Invalid month '{month}': expected YYYY-MM")
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError(f"Invalid month '{month}': month must be 01-12")
    return date(year, month_number, 1)


def previous_month(day: date) -> date:
    """Return the first day of the month before the one containing ``day``."""
    return day.replace(day=1) - relativedelta(months=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods run up to ``today``; "last-*" periods cover the whole
    previous week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    qualifier, _, unit = period.strip().lower().partition("-")

    if qualifier in ("this", "last"):
        start = _period_start(unit, today, back=1 if qualifier == "last" else 0)
        if start is not None:
            if qualifier == "this":
                return (start, today)
            return (start, _period_start(unit, today) - timedelta(days=1))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: {', '.join(SUPPORTED_PERIODS)}"
    )
