"""
Timezone Utilities.

All instants are persisted as naive UTC datetimes. These helpers convert
between that storage form and a user's local wall clock, and compute the UTC
bounds of a local calendar day.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

import pytz

from tracker.config import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware or naive datetime to naive UTC.

    Naive inputs are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_zone(name: Optional[str]):
    """Resolve an IANA zone name, falling back to the default zone."""
    if name:
        try:
            return pytz.timezone(name)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone {name!r}, falling back to {DEFAULT_TIMEZONE}")
    try:
        return pytz.timezone(DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def to_local(value: datetime, tz) -> datetime:
    """Project a stored UTC instant onto the zone's wall clock (aware)."""
    return pytz.utc.localize(to_utc_naive(value)).astimezone(tz)


def from_local(wall_clock: datetime, tz) -> datetime:
    """Convert a naive local wall-clock time in ``tz`` to naive UTC."""
    localized = tz.localize(wall_clock.replace(tzinfo=None))
    return localized.astimezone(pytz.utc).replace(tzinfo=None)


def local_date(value: Optional[datetime], tz) -> Optional[date]:
    """Local calendar day of a stored UTC instant."""
    if value is None:
        return None
    return to_local(value, tz).date()


def day_bounds_utc(day: date, tz) -> Tuple[datetime, datetime]:
    """UTC ``[start, end)`` covering the local calendar day ``day``."""
    start = from_local(datetime.combine(day, time.min), tz)
    end = from_local(datetime.combine(day + timedelta(days=1), time.min), tz)
    return start, end


def day_stamp(day: date, tz) -> datetime:
    """UTC instant whose local date is ``day`` (the start of that day)."""
    return day_bounds_utc(day, tz)[0]
