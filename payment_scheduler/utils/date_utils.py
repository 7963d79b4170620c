"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Tuple


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)"""
    return (end - start).days


def add_days(from_date: date, days: int) -> date:
    """Shift a calendar date by a number of days"""
    return from_date + timedelta(days=days)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month (inclusive)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
