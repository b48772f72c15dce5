"""Calendar helpers shared by the domain models."""
import calendar
from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Timezone-aware current time used for entity timestamps."""
    return datetime.now(timezone.utc)


def add_months(value: date, months: int, overflow: bool = False) -> date:
    """Shift ``value`` by a number of calendar months.

    By default the day is clamped to the last day of the target month, so
    ``add_months(date(2024, 8, 31), 6)`` is ``date(2025, 2, 28)``. With
    ``overflow=True`` the surplus days spill into the following month
    instead and the same call gives ``date(2025, 3, 3)``.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    if overflow:
        return value.replace(year=year, month=month, day=1) + timedelta(days=value.day - 1)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_years(value: date, years: int, overflow: bool = False) -> date:
    """Shift ``value`` by whole years.

    Feb 29 becomes Feb 28 in a common year, or Mar 1 with ``overflow``.
    """
    return add_months(value, years * 12, overflow=overflow)


def age_on(birth_date: date, today: date) -> int:
    """Completed years between ``birth_date`` and ``today``."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def fractional_years_between(start: date, end: date) -> float:
    """Years between two dates, counted by calendar month.

    Days are ignored: September 2021 to March 2025 is 3.5 years whatever
    the day of month.
    """
    return (end.year - start.year) + (end.month - start.month) / 12
