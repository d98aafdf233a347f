"""Date arithmetic for relative date keywords."""

import calendar as _calendar
from datetime import datetime, timedelta
from typing import Optional

from .language import RelativeDate, RelativeDateKind
from .models import Weekday
from .utils.datetime import start_of_day

# Gregorian calendar with Monday as the first day of the week.
DEFAULT_CALENDAR = _calendar.Calendar(firstweekday=_calendar.MONDAY)


def days_in_month(year: int, month: int, cal: Optional[_calendar.Calendar] = None) -> int:
    """Number of days in a month according to the calendar's layout."""
    cal = cal or DEFAULT_CALENDAR
    return max(cal.itermonthdays(year, month))


def add_months(date: datetime, months: int, cal: Optional[_calendar.Calendar] = None) -> datetime:
    """Add months to a date, clamping the day to the end of the target month."""
    month = date.month - 1 + months
    year = date.year + month // 12
    month = month % 12 + 1
    day = min(date.day, days_in_month(year, month, cal))
    return date.replace(year=year, month=month, day=day)


def next_weekday(weekday: Weekday, reference: datetime) -> datetime:
    """Start of the next ``weekday`` strictly after the reference day (1-7 days ahead)."""
    days_ahead = (int(weekday) - reference.weekday()) % 7
    if days_ahead == 0:
        days_ahead = 7
    return start_of_day(reference) + timedelta(days=days_ahead)


def resolve_relative_date(modifier: RelativeDate, reference: datetime,
                          cal: Optional[_calendar.Calendar] = None) -> datetime:
    """Resolve a relative date modifier against a reference time."""
    today = start_of_day(reference)
    kind = modifier.kind

    if kind == RelativeDateKind.TODAY:
        return today
    if kind == RelativeDateKind.TOMORROW:
        return today + timedelta(days=1)
    if kind == RelativeDateKind.DAY_AFTER_TOMORROW:
        return today + timedelta(days=2)
    if kind == RelativeDateKind.NEXT_WEEKDAY:
        return next_weekday(modifier.weekday, reference)
    if kind == RelativeDateKind.NEXT_WEEK:
        return today + timedelta(weeks=1)
    if kind == RelativeDateKind.NEXT_MONTH:
        return add_months(today, 1, cal)
    if kind == RelativeDateKind.NEXT_YEAR:
        return add_months(today, 12, cal)
    if kind == RelativeDateKind.DAYS_OFFSET:
        return today + timedelta(days=modifier.days)

    raise ValueError(f"Unsupported relative date modifier: {modifier!r}")
