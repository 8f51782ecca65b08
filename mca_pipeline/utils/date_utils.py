"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import List

from mca_pipeline.domain.exceptions import InvalidInputError

ONE_DAY = timedelta(days=1)


def require_datetime(name: str, value: object) -> datetime:
    """Return value unchanged, or raise InvalidInputError when it is not a datetime"""
    if not isinstance(value, datetime):
        raise InvalidInputError(f"{name} must be a datetime, got {value!r}")
    return value


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Full days elapsed from start to end, floored, never negative (clock skew)"""
    days = (to_utc(end) - to_utc(start)) // ONE_DAY
    return max(0, days)


def subtract_months(value: datetime, months: int) -> datetime:
    """Same day-of-month N months earlier, clamped to the shorter month's end"""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_business_days(from_date: date, days: int) -> date:
    """Add business days to a date, skipping weekends (holidays not considered)"""
    current = from_date
    remaining = days
    while remaining > 0:
        current += ONE_DAY
        if current.weekday() < 5:
            remaining -= 1
    return current


def generate_business_days(start: date, count: int) -> List[date]:
    """First `count` business days on or after start"""
    if count <= 0:
        return []
    first = start if start.weekday() < 5 else add_business_days(start, 1)
    days = [first]
    while len(days) < count:
        days.append(add_business_days(days[-1], 1))
    return days
