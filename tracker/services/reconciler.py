"""
Nightly Reconciler.

Fallback pass run by the midnight sweep for the local day that has just ended.
Credits days the immediate synchronizer missed, breaks streaks for days left
incomplete, and resets the series streak of recurring occurrences that stayed
incomplete through their due day.
"""

from datetime import date

from sqlmodel import Session

from tracker.services.task_store import TaskStore
from tracker.utils.logger import get_logger
from tracker.utils.timeutils import day_bounds_utc, day_stamp, get_zone, local_date, utcnow

logger = get_logger("tracker.reconciler")


class NightlyReconciler:
    """Per-user, per-day streak reconciliation.

    Methods only stage changes; pass ``commit=True`` or commit the session to
    apply them. The sweep commits both passes for a user at once.
    """

    def __init__(self, session: Session):
        self.session = session
        self.store = TaskStore(session)

    def reconcile_day(self, user_id: str, day: date, commit: bool = False) -> str:
        """
        Settle the daily streak for one local calendar day.

        Args:
            user_id: User to reconcile
            day: Local calendar day that has ended

        Returns:
            Outcome: missing-user, already-processed, empty, credited or reset
        """
        user = self.store.get_user(user_id)
        if user is None:
            return "missing-user"

        tz = get_zone(user.timezone)
        if local_date(user.last_streak_check_date, tz) == day:
            return "already-processed"

        start, end = day_bounds_utc(day, tz)
        scheduled = self.store.get_tasks_in_range(user.id, start, end)

        if not scheduled:
            outcome = "empty"
        elif all(task.is_completed for task in scheduled):
            user.current_streak += 1
            user.longest_streak = max(user.longest_streak, user.current_streak)
            outcome = "credited"
        else:
            user.current_streak = 0
            outcome = "reset"

        user.last_streak_check_date = day_stamp(day, tz)
        user.updated_at = utcnow()
        self.session.add(user)
        if commit:
            self.session.commit()

        logger.info("Reconciled day", user_id=user.id, day=day, outcome=outcome, streak=user.current_streak)
        return outcome

    def reconcile_recurring_series(self, user_id: str, day: date, commit: bool = False) -> int:
        """
        Reset the series streak of recurring occurrences missed on ``day``.

        Returns:
            Number of occurrences reset
        """
        user = self.store.get_user(user_id)
        if user is None:
            return 0

        tz = get_zone(user.timezone)
        start, end = day_bounds_utc(day, tz)
        missed = self.store.get_tasks_in_range(
            user.id, start, end, is_completed=False, is_recurring=True
        )

        for task in missed:
            task.recurring_streak = 0
            task.updated_at = utcnow()
            self.session.add(task)

        if commit:
            self.session.commit()

        if missed:
            logger.info("Reset missed series streaks", user_id=user.id, day=day, occurrences=len(missed))
        return len(missed)
