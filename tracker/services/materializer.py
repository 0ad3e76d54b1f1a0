"""
Occurrence Materializer.

Persists the literal next occurrence of a recurring task, together with
date-shifted clones of its sub-tasks, when the current occurrence is completed.
"""

import logging
from datetime import timedelta
from typing import Optional

import pytz
from sqlmodel import Session, select

from tracker.models.task import Task
from tracker.services.recurrence import calculate_next_occurrence
from tracker.utils.metrics import metrics_collector
from tracker.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class OccurrenceMaterializer:
    """Creates the successor row of a completed recurring occurrence.

    Runs inside the caller's completion transaction: rows are added and
    flushed, never committed here.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_successor(self, task_id: int) -> Optional[Task]:
        statement = select(Task).where(Task.recurring_parent_id == task_id)
        return self.session.exec(statement).first()

    def materialize_next(self, completed: Task, tz=pytz.utc) -> Optional[Task]:
        """
        Create the next occurrence of a completed recurring task.

        Args:
            completed: The occurrence that was just completed
            tz: Owning user's zone; recurrence advances on its wall clock

        Returns:
            The new occurrence, or None when the series does not continue
        """
        if not completed.is_recurring or completed.parent_id is not None:
            return None

        pattern = completed.pattern
        if pattern is None:
            logger.info(f"Task {completed.id} has no usable recurrence pattern, not materializing")
            return None

        existing = self.get_successor(completed.id)
        if existing is not None:
            logger.info(f"Task {completed.id} already has successor {existing.id}")
            return None

        base_date = completed.scheduled_date or completed.completed_at or utcnow()
        next_date = calculate_next_occurrence(base_date, pattern, tz)
        if next_date is None:
            return None
        if next_date <= base_date:
            logger.warning(
                f"Next occurrence {next_date} of task {completed.id} does not advance past {base_date}"
            )
            return None

        now = utcnow()
        successor = Task(
            user_id=completed.user_id,
            title=completed.title,
            description=completed.description,
            priority=completed.priority,
            scheduled_date=next_date,
            duration=completed.duration,
            area_id=completed.area_id,
            tags=list(completed.tags) if completed.tags else completed.tags,
            is_completed=False,
            completed_at=None,
            is_recurring=True,
            recurring_pattern=completed.recurring_pattern,
            recurring_parent_id=completed.id,
            recurring_streak=completed.recurring_streak,
            longest_recurring_streak=completed.longest_recurring_streak,
            last_recurring_completion_date=completed.last_recurring_completion_date,
            parent_id=completed.parent_id,
            depth=completed.depth,
            order=completed.order,
            created_at=now,
            updated_at=now,
        )
        self.session.add(successor)
        self.session.flush()

        cloned = self._clone_children(completed, successor, next_date - base_date)

        metrics_collector.occurrence_materialized()
        logger.info(
            f"Created next occurrence of task {completed.id}: new task {successor.id} "
            f"at {next_date} with {cloned} sub-task(s)"
        )
        return successor

    def _clone_children(self, source: Task, target: Task, offset: timedelta) -> int:
        """Clone the sub-tree under ``source`` beneath ``target``, shifted by ``offset``."""
        statement = select(Task).where(Task.parent_id == source.id).order_by(Task.order)
        children = self.session.exec(statement).all()

        count = 0
        now = utcnow()
        for child in children:
            clone = Task(
                user_id=child.user_id,
                title=child.title,
                description=child.description,
                priority=child.priority,
                scheduled_date=child.scheduled_date + offset if child.scheduled_date else None,
                duration=child.duration,
                area_id=child.area_id,
                tags=list(child.tags) if child.tags else child.tags,
                is_completed=False,
                completed_at=None,
                is_recurring=False,
                recurring_pattern=None,
                parent_id=target.id,
                depth=target.depth + 1,
                order=child.order,
                created_at=now,
                updated_at=now,
            )
            self.session.add(clone)
            self.session.flush()
            count += 1 + self._clone_children(child, clone, offset)
        return count
