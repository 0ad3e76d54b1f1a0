"""
Streak Synchronizer.

Keeps a user's "consecutive fully-completed day" streak current as tasks are
created, completed and uncompleted, and extends per-series streaks when a
recurring occurrence is completed on its due day.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session

from tracker.models.task import Task
from tracker.services.task_store import TaskStore
from tracker.utils.logger import get_logger
from tracker.utils.metrics import metrics_collector
from tracker.utils.timeutils import day_bounds_utc, day_stamp, get_zone, local_date, to_local, utcnow

logger = get_logger("tracker.streaks")


class StreakService:
    """Daily and per-series streak bookkeeping."""

    def __init__(self, session: Session):
        self.session = session
        self.store = TaskStore(session)

    def sync_daily_streak(self, user_id: str, now: Optional[datetime] = None, commit: bool = True) -> None:
        """
        Re-evaluate today's credit for a user.

        All of today's scheduled tasks complete and today not yet credited: +1.
        Today credited but no longer fully complete: -1 and roll the check date
        back to yesterday so today can be credited again later. Anything else
        is a no-op, so this is safe to call after every task mutation.

        Args:
            user_id: Owner of the mutated task
            now: Current naive UTC instant (injectable for tests)
            commit: Commit the session when the user row changed
        """
        user = self.store.get_user(user_id)
        if user is None:
            logger.warning("Streak sync for unknown user", user_id=user_id)
            return

        now = now or utcnow()
        tz = get_zone(user.timezone)
        today = to_local(now, tz).date()
        start, end = day_bounds_utc(today, tz)

        scheduled = self.store.get_tasks_in_range(user.id, start, end)
        if not scheduled:
            return

        all_complete = all(task.is_completed for task in scheduled)
        already_credited = local_date(user.last_streak_check_date, tz) == today

        if all_complete and not already_credited:
            user.current_streak += 1
            user.longest_streak = max(user.longest_streak, user.current_streak)
            user.last_streak_check_date = now
            metrics_collector.streak_credited()
            logger.info("Credited day", user_id=user.id, day=today, streak=user.current_streak)
        elif not all_complete and already_credited:
            user.current_streak = max(0, user.current_streak - 1)
            user.last_streak_check_date = day_stamp(today - timedelta(days=1), tz)
            metrics_collector.streak_reverted()
            logger.info("Reverted day credit", user_id=user.id, day=today, streak=user.current_streak)
        else:
            return

        user.updated_at = utcnow()
        self.session.add(user)
        if commit:
            self.session.commit()

    def on_recurring_completion(self, occurrence: Task) -> bool:
        """
        Extend a series streak when an occurrence is completed on its due day.

        Days are compared in the owning user's timezone. Early or late
        completions leave the streak alone; missed occurrences are reset by the
        nightly reconciler.

        Returns:
            True if the streak was extended
        """
        if not occurrence.is_recurring or occurrence.scheduled_date is None or occurrence.completed_at is None:
            return False

        user = self.store.get_user(occurrence.user_id)
        tz = get_zone(user.timezone if user else None)

        if local_date(occurrence.scheduled_date, tz) != local_date(occurrence.completed_at, tz):
            return False

        occurrence.recurring_streak += 1
        occurrence.longest_recurring_streak = max(
            occurrence.longest_recurring_streak, occurrence.recurring_streak
        )
        occurrence.last_recurring_completion_date = occurrence.completed_at
        self.session.add(occurrence)
        return True
