# app/core.py

from datetime import datetime, date, time, timedelta, timezone
from typing import List, Union
from zoneinfo import ZoneInfo

from app import config


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    # half-open: [a, b) and [c, d) overlap iff a < d and c < b
    return start_a < end_b and start_b < end_a


def business_tz() -> ZoneInfo:
    return ZoneInfo(config.BUSINESS_TIMEZONE)


def to_utc(dt: datetime) -> datetime:
    """Normalize to naive UTC, the storage form. Naive input is taken as UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc).astimezone(business_tz())


def local_day(value: Union[date, datetime]) -> date:
    # Plain dates are already calendar days; timestamps go through the business timezone
    if isinstance(value, datetime):
        return to_local(to_utc(value)).date()
    return value


def local_hour_utc(day: date, hour: int) -> datetime:
    return to_utc(datetime.combine(day, time(hour), tzinfo=business_tz()))


def day_bounds_utc(day: date):
    start = to_utc(datetime.combine(day, time.min, tzinfo=business_tz()))
    end = to_utc(datetime.combine(day + timedelta(days=1), time.min, tzinfo=business_tz()))
    return start, end


def days_touched(start: datetime, end: datetime) -> List[date]:
    first = local_day(start)
    # end is exclusive
    last = local_day(end - timedelta(microseconds=1)) if end > start else first
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)