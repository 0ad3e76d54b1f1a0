"""
Occurrence Projector.

Expands a recurring task into virtual future occurrences for calendar and
schedule views. Read-only: nothing here touches the database.
"""

from datetime import datetime
from typing import List

import pytz

from tracker.config import MAX_PROJECTION_ITERATIONS
from tracker.models.task import Task
from tracker.schemas.recurrence import Frequency
from tracker.schemas.task import TaskResponse, VirtualOccurrence
from tracker.services.recurrence import shift
from tracker.utils.timeutils import local_date, to_utc_naive

# Frequencies the projector walks; anything else stops the projection
PROJECTED_FREQUENCIES = (Frequency.DAILY, Frequency.WEEKLY, Frequency.MONTHLY)


def virtual_occurrence_id(anchor_id, candidate: datetime, tz=pytz.utc) -> str:
    """Stable id for the virtual occurrence of ``anchor_id`` at ``candidate``."""
    return f"{anchor_id}-recurring-{local_date(candidate, tz).isoformat()}"


def project_occurrences(
    anchor: Task,
    window_start: datetime,
    window_end: datetime,
    tz=pytz.utc,
) -> List[VirtualOccurrence]:
    """
    Project the virtual occurrences of a recurring task inside a window.

    Args:
        anchor: The persisted occurrence the series is projected from
        window_start: Inclusive lower bound
        window_end: Exclusive upper bound
        tz: Zone whose wall clock the recurrence advances on

    Returns:
        Virtual occurrences ordered by date, excluding the anchor's own date
    """
    if not anchor.is_recurring or anchor.scheduled_date is None:
        return []

    pattern = anchor.pattern
    if pattern is None:
        return []

    window_start = to_utc_naive(window_start)
    window_end = to_utc_naive(window_end)
    original = anchor.scheduled_date
    base = TaskResponse.model_validate(anchor).model_dump(exclude={"id", "scheduled_date", "is_virtual"})

    occurrences: List[VirtualOccurrence] = []
    cursor = original
    iterations = 0

    while cursor < window_end and iterations < MAX_PROJECTION_ITERATIONS:
        iterations += 1

        if cursor >= window_start and cursor != original:
            occurrences.append(
                VirtualOccurrence(
                    **base,
                    id=virtual_occurrence_id(anchor.id, cursor, tz),
                    scheduled_date=cursor,
                )
            )

        if pattern.frequency not in PROJECTED_FREQUENCIES:
            break
        cursor = shift(cursor, pattern.frequency, pattern.interval, tz)
        if cursor is None:
            break

    return occurrences
