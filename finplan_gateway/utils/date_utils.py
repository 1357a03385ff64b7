"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timezone


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative if end is earlier)"""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def years_between(start: date, end: date) -> float:
    return months_between(start, end) / 12


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how timestamps are persisted"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
