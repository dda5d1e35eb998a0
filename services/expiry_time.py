"""
Expiry time evaluation.

Pure helpers shared by the alert composer and the query policies. The
reference instant is always passed in so callers (and tests) control "now".
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Callable, Union
from zoneinfo import ZoneInfo

from domain.enums import ExpiryStatus

SOON_WINDOW_DAYS = 2

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)

DateLike = Union[date, datetime]


def _as_datetime(value: DateLike, reference: datetime) -> datetime:
    """Date-only expiries mean midnight at the start of that day, in the reference's timezone."""
    if isinstance(value, datetime):
        if value.tzinfo is None and reference.tzinfo is not None:
            return value.replace(tzinfo=reference.tzinfo)
        return value
    return datetime.combine(value, time.min, tzinfo=reference.tzinfo)


def days_until(reference_time: datetime, expiry_date: DateLike) -> int:
    """Whole days from reference to expiry, rounded up (a partial day counts as a day)."""
    delta = _as_datetime(expiry_date, reference_time) - reference_time
    return math.ceil(delta / _DAY)


def expiry_status(reference_time: datetime, expiry_date: DateLike) -> ExpiryStatus:
    """Classify an item as expired, expiring soon (0-2 days) or fresh."""
    diff = days_until(reference_time, expiry_date)
    if diff < 0:
        return ExpiryStatus.EXPIRED
    if diff <= SOON_WINDOW_DAYS:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.FRESH


def is_expiring_soon(reference_time: datetime, expiry_date: DateLike) -> bool:
    return expiry_status(reference_time, expiry_date) == ExpiryStatus.EXPIRING_SOON


def time_left_phrase(reference_time: datetime, expiry_date: DateLike) -> str:
    """
    Human readable time left, e.g. "in 2 days", "in 1 hour" or "expired".

    Days and hours are truncated, so 1 day 23 hours reads "in 1 day".
    """
    remaining = _as_datetime(expiry_date, reference_time) - reference_time
    if remaining <= timedelta(0):
        return "expired"

    days = remaining // _DAY
    hours = (remaining % _DAY) // _HOUR
    if days > 0:
        return f"in {days} day{'s' if days > 1 else ''}"
    return f"in {hours} hour{'s' if hours != 1 else ''}"


def make_clock(tz_name: str) -> Callable[[], datetime]:
    """Clock returning the current instant in the named timezone."""
    zone = ZoneInfo(tz_name)
    return lambda: datetime.now(zone)
