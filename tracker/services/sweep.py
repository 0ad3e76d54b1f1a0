"""
Midnight Window Sweep.

Driven by an external timer every SWEEP_INTERVAL_MINUTES. For each user whose
local clock is within the midnight window, reconciles the local day before
today, at most once per local day. Pure function of ``now`` and the stored
users: there is no in-process timer.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlmodel import Session, select

from tracker.config import MIDNIGHT_WINDOW_MINUTES, SWEEP_INTERVAL_MINUTES
from tracker.models.user import User
from tracker.schemas.streak import SweepResult, SweepUserResult
from tracker.services.reconciler import NightlyReconciler
from tracker.utils.logger import get_logger
from tracker.utils.metrics import metrics_collector
from tracker.utils.timeutils import get_zone, local_date, to_local, to_utc_naive, utcnow

logger = get_logger("tracker.sweep")


def validate_sweep_window(interval_minutes: int, window_minutes: int) -> None:
    """
    Ensure the midnight window is wide enough for the polling cadence.

    The window spans ``2 * window_minutes + 1`` minute slots around midnight;
    every user is caught by at least one tick only if that is no narrower than
    the interval between ticks.

    Raises:
        ValueError: If the window cannot be guaranteed to catch every user
    """
    if interval_minutes <= 0 or window_minutes < 0:
        raise ValueError("Sweep interval must be positive and window non-negative")
    if window_minutes >= 12 * 60:
        raise ValueError("Midnight window must be shorter than twelve hours")
    if 2 * window_minutes + 1 < interval_minutes:
        raise ValueError(
            f"Midnight window of +/-{window_minutes} minutes is too narrow for a "
            f"{interval_minutes} minute sweep interval; widen it to at least "
            f"+/-{interval_minutes // 2} minutes"
        )


def in_midnight_window(local_time: datetime, window_minutes: int = MIDNIGHT_WINDOW_MINUTES) -> bool:
    """True for local times in [24:00 - window, 24:00) or [00:00, 00:00 + window]."""
    minute_of_day = local_time.hour * 60 + local_time.minute
    return minute_of_day >= 24 * 60 - window_minutes or minute_of_day <= window_minutes


class MidnightWindowSweep:
    """Dispatches the nightly reconciler for users crossing local midnight."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        interval_minutes: int = SWEEP_INTERVAL_MINUTES,
        window_minutes: int = MIDNIGHT_WINDOW_MINUTES,
    ):
        validate_sweep_window(interval_minutes, window_minutes)
        self.session_factory = session_factory
        self.interval_minutes = interval_minutes
        self.window_minutes = window_minutes

    def _load_users(self):
        with self.session_factory() as session:
            statement = select(User.id, User.timezone, User.last_streak_check_date)
            return list(session.exec(statement).all())

    @metrics_collector.time_operation("sweep_duration_seconds")
    def sweep(self, now_utc: datetime) -> SweepResult:
        """
        Run one sweep tick.

        Args:
            now_utc: Current instant (aware, or naive UTC)

        Returns:
            Batch result listing every dispatched user and its outcome
        """
        now = to_utc_naive(now_utc)
        metrics_collector.sweep_started()
        result = SweepResult(timestamp=now)

        for user_id, timezone_name, last_check in self._load_users():
            try:
                tz = get_zone(timezone_name)
                local_now = to_local(now, tz)
                if not in_midnight_window(local_now, self.window_minutes):
                    continue

                today = local_now.date()
                if local_date(last_check, tz) == today:
                    result.skipped += 1
                    continue

                self._reconcile_user(user_id, today - timedelta(days=1))
                result.results.append(
                    SweepUserResult(user_id=user_id, timezone=timezone_name, status="processed")
                )
                metrics_collector.sweep_user_processed()
            except Exception as e:
                logger.exception(
                    "Error checking streaks for user",
                    user_id=user_id,
                    timezone=timezone_name,
                    error=str(e),
                )
                result.results.append(
                    SweepUserResult(user_id=user_id, timezone=timezone_name, status="error", error=str(e))
                )
                metrics_collector.sweep_user_error()

        result.processed = len(result.results)
        logger.info(
            "Midnight sweep finished",
            processed=result.processed,
            skipped=result.skipped,
            errors=sum(1 for r in result.results if r.status == "error"),
        )
        return result

    def _reconcile_user(self, user_id: str, day) -> None:
        """Reconcile both streak kinds for one user in a single transaction."""
        with self.session_factory() as session:
            try:
                reconciler = NightlyReconciler(session)
                reconciler.reconcile_day(user_id, day)
                reconciler.reconcile_recurring_series(user_id, day)
                session.commit()
            except Exception:
                session.rollback()
                raise


def run_sweep(session_factory: Callable[[], Session], now_utc: Optional[datetime] = None) -> SweepResult:
    """Convenience entry point for the cron endpoint."""
    return MidnightWindowSweep(session_factory).sweep(now_utc or utcnow())
