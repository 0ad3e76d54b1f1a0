"""Calendar arithmetic for recurring tasks."""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz

from tracker.schemas.recurrence import Frequency, RecurrencePattern
from tracker.utils.timeutils import from_local, to_local, to_utc_naive

logger = logging.getLogger(__name__)


def add_months(value: datetime, months: int) -> datetime:
    """Same day ``months`` calendar months later, clamped to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    max_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, max_day))


def shift(value: datetime, frequency: Frequency, interval: int, tz=pytz.utc) -> Optional[datetime]:
    """
    Advance a stored UTC instant by ``interval`` units on the local wall clock.

    Args:
        value: Naive UTC instant
        frequency: Unit to advance by
        interval: Number of units
        tz: Zone whose wall clock the arithmetic runs on

    Returns:
        The advanced naive UTC instant, or None for an unsupported frequency
    """
    wall_clock = to_local(value, tz).replace(tzinfo=None)

    if frequency == Frequency.DAILY:
        wall_clock = wall_clock + timedelta(days=interval)
    elif frequency == Frequency.WEEKLY:
        wall_clock = wall_clock + timedelta(weeks=interval)
    elif frequency == Frequency.MONTHLY:
        wall_clock = add_months(wall_clock, interval)
    elif frequency == Frequency.YEARLY:
        wall_clock = add_months(wall_clock, 12 * interval)
    else:
        return None

    return from_local(wall_clock, tz)


def calculate_next_occurrence(
    from_date: datetime, pattern: RecurrencePattern, tz=pytz.utc
) -> Optional[datetime]:
    """
    Single-step advance used when materializing the next occurrence.

    Applies the pattern's time-of-day override and end date.

    Returns:
        The next naive UTC instant, or None when the series has ended
    """
    next_date = shift(from_date, pattern.frequency, pattern.interval, tz)
    if next_date is None:
        return None

    if pattern.hour_minute:
        hours, minutes = pattern.hour_minute
        wall_clock = to_local(next_date, tz).replace(
            tzinfo=None, hour=hours, minute=minutes, second=0, microsecond=0
        )
        next_date = from_local(wall_clock, tz)

    end_date = to_utc_naive(pattern.end_date)
    if end_date is not None and next_date > end_date:
        logger.info(f"Recurrence ended: next date {next_date} is past end date {end_date}")
        return None

    return next_date
