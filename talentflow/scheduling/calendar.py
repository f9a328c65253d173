"""
Business-day calendar.

Pure functions over date-only values and a holiday set. A business day is a
weekday (Monday through Friday) that is not in the holiday set. Nothing here
touches the database.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Collection, FrozenSet, List

from talentflow.datetime_utils import to_date_only
from talentflow.scheduling.config import SchedulingConfig


@dataclass(frozen=True)
class BusinessDayWindow:
    """Result of add_business_days_inclusive."""
    start: date
    end: date
    skipped_holidays: FrozenSet[date] = field(default_factory=frozenset)


def is_working_day(day: date, holidays: Collection[date]) -> bool:
    """Monday through Friday and not a holiday."""
    day = to_date_only(day)
    if SchedulingConfig.is_weekend(day.weekday()):
        return False
    return day not in holidays


def add_business_days_inclusive(start: date, n: int, holidays: Collection[date]) -> BusinessDayWindow:
    """
    Span n business days starting at start, counting the start as day 1.

    A start on a weekend or holiday is first moved forward to the next
    business day; holidays passed while moving are recorded. From the adjusted
    start, days are counted skipping weekends and holidays (holidays skipped
    are recorded) until n business days have been counted.

    Args:
        start: First candidate day
        n: Business days to span. Values below 1 are treated as 1.
        holidays: Non-working dates

    Returns:
        BusinessDayWindow: adjusted start, last counted day and every holiday skipped
    """
    n = SchedulingConfig.normalize_sla(n)
    current = to_date_only(start)
    skipped = set()

    # Move the start onto a business day
    while not is_working_day(current, holidays):
        if current in holidays:
            skipped.add(current)
        current += timedelta(days=1)

    window_start = current
    counted = 1
    while counted < n:
        current += timedelta(days=1)
        if SchedulingConfig.is_weekend(current.weekday()):
            continue
        if current in holidays:
            skipped.add(current)
            continue
        counted += 1

    return BusinessDayWindow(start=window_start, end=current, skipped_holidays=frozenset(skipped))


def list_dates_inclusive(start: date, end: date) -> List[date]:
    """Every calendar day from start to end, both included. Empty if end < start."""
    start = to_date_only(start)
    end = to_date_only(end)
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def list_business_days_inclusive(start: date, end: date, holidays: Collection[date]) -> List[date]:
    return [day for day in list_dates_inclusive(start, end) if is_working_day(day, holidays)]


def list_business_days_after(after: date, end: date, holidays: Collection[date]) -> List[date]:
    """Business days strictly after `after`, up to and including `end`."""
    return list_business_days_inclusive(to_date_only(after) + timedelta(days=1), end, holidays)


def count_business_days_inclusive(start: date, end: date, holidays: Collection[date]) -> int:
    """
    Number of business days between start and end, both included.

    Returns 0 when end precedes start.
    """
    return len(list_business_days_inclusive(start, end, holidays))
