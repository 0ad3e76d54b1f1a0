# tests/test_streaks.py

from datetime import datetime

import pytz

from tracker.services.streaks import StreakService
from tracker.services.task_service import TaskService
from tracker.utils.timeutils import local_date

NEW_YORK = pytz.timezone("America/New_York")

# 12:00 EDT on 2024-06-10
NOON = datetime(2024, 6, 10, 16, 0)


def test_streak_credited_once_when_all_of_today_is_complete(session, make_user, make_task) -> None:
    user = make_user("America/New_York")
    done = make_task(user, "Done", scheduled_date=datetime(2024, 6, 10, 13, 0), is_completed=True,
                     completed_at=datetime(2024, 6, 10, 14, 0))
    pending = make_task(user, "Pending", scheduled_date=datetime(2024, 6, 10, 20, 0))
    streaks = StreakService(session)

    streaks.sync_daily_streak(user.id, now=NOON)
    assert user.current_streak == 0

    TaskService(session).complete_task(pending.id, user.id, now=NOON)
    session.refresh(user)
    assert user.current_streak == 1
    assert user.longest_streak == 1

    streaks.sync_daily_streak(user.id, now=NOON)
    streaks.sync_daily_streak(user.id, now=NOON)
    session.refresh(user)
    assert user.current_streak == 1
    assert user.longest_streak == 1
    assert done.is_completed is True


def test_today_uses_local_day_bounds(session, make_user, make_task) -> None:
    user = make_user("America/New_York")
    # 22:00 EDT on June 10, already June 11 in UTC
    make_task(user, "Late evening", scheduled_date=datetime(2024, 6, 11, 2, 0))
    # 23:00 EDT on June 9, June 10 in UTC
    make_task(user, "Yesterday", scheduled_date=datetime(2024, 6, 10, 3, 0), is_completed=True)
    make_task(user, "Morning", scheduled_date=datetime(2024, 6, 10, 13, 0), is_completed=True)

    StreakService(session).sync_daily_streak(user.id, now=NOON)

    session.refresh(user)
    assert user.current_streak == 0


def test_empty_day_is_a_no_op(session, make_user) -> None:
    user = make_user("America/New_York", current_streak=3, longest_streak=3)

    StreakService(session).sync_daily_streak(user.id, now=NOON)

    session.refresh(user)
    assert user.current_streak == 3
    assert user.last_streak_check_date is None


def test_uncompleting_reverts_credit_and_allows_recredit(session, make_user, make_task) -> None:
    user = make_user("America/New_York", current_streak=3, longest_streak=5)
    task = make_task(user, scheduled_date=datetime(2024, 6, 10, 13, 0))
    service = TaskService(session)

    service.complete_task(task.id, user.id, now=NOON)
    session.refresh(user)
    assert (user.current_streak, user.longest_streak) == (4, 5)
    assert local_date(user.last_streak_check_date, NEW_YORK) == datetime(2024, 6, 10).date()

    service.uncomplete_task(task.id, user.id, now=NOON)
    session.refresh(user)
    assert (user.current_streak, user.longest_streak) == (3, 5)
    assert local_date(user.last_streak_check_date, NEW_YORK) == datetime(2024, 6, 9).date()

    service.complete_task(task.id, user.id, now=NOON)
    session.refresh(user)
    assert (user.current_streak, user.longest_streak) == (4, 5)


def test_adding_an_open_task_after_credit_reverts(session, make_user, make_task) -> None:
    user = make_user("UTC")
    make_task(user, scheduled_date=datetime(2024, 6, 10, 9), is_completed=True)
    streaks = StreakService(session)

    streaks.sync_daily_streak(user.id, now=datetime(2024, 6, 10, 12))
    session.refresh(user)
    assert user.current_streak == 1

    make_task(user, scheduled_date=datetime(2024, 6, 10, 15))
    streaks.sync_daily_streak(user.id, now=datetime(2024, 6, 10, 12, 5))
    session.refresh(user)
    assert user.current_streak == 0
    assert user.longest_streak == 1


def test_revert_never_goes_negative(session, make_user, make_task) -> None:
    user = make_user("UTC", current_streak=0, longest_streak=2,
                     last_streak_check_date=datetime(2024, 6, 10, 8))
    make_task(user, scheduled_date=datetime(2024, 6, 10, 15))

    StreakService(session).sync_daily_streak(user.id, now=datetime(2024, 6, 10, 12))

    session.refresh(user)
    assert user.current_streak == 0
    assert user.longest_streak == 2


def test_longest_streak_is_monotonic(session, make_user, make_task) -> None:
    user = make_user("UTC")
    service = TaskService(session)
    seen = []

    for day in range(1, 6):
        task = make_task(user, scheduled_date=datetime(2024, 6, day, 9))
        now = datetime(2024, 6, day, 10)
        service.complete_task(task.id, user.id, now=now)
        session.refresh(user)
        seen.append(user.longest_streak)
        if day == 3:
            service.uncomplete_task(task.id, user.id, now=now)
            session.refresh(user)
            seen.append(user.longest_streak)

    assert seen == sorted(seen)
    assert user.longest_streak >= user.current_streak


def test_sync_for_unknown_user_is_ignored(session) -> None:
    StreakService(session).sync_daily_streak("nobody", now=NOON)


def test_series_streak_compares_days_in_user_timezone(session, make_user, make_task) -> None:
    user = make_user("America/New_York")
    # 23:30 EDT June 10, completed 21:00 EDT June 10: same local day, different UTC days
    task = make_task(user, pattern={"frequency": "daily", "interval": 1},
                     scheduled_date=datetime(2024, 6, 11, 3, 30), is_completed=True,
                     completed_at=datetime(2024, 6, 11, 1, 0))

    assert StreakService(session).on_recurring_completion(task) is True
    assert task.recurring_streak == 1
    assert task.longest_recurring_streak == 1


def test_series_streak_ignores_early_completion(session, make_user, make_task) -> None:
    user = make_user("UTC")
    task = make_task(user, pattern={"frequency": "daily", "interval": 1},
                     scheduled_date=datetime(2024, 6, 11, 9), is_completed=True,
                     completed_at=datetime(2024, 6, 10, 22), recurring_streak=3, longest_recurring_streak=3)

    assert StreakService(session).on_recurring_completion(task) is False
    assert task.recurring_streak == 3


def test_sync_failure_does_not_fail_the_mutation(session, make_user, make_task, monkeypatch) -> None:
    user = make_user("UTC")
    task = make_task(user, scheduled_date=datetime(2024, 6, 10, 9))

    def explode(*args, **kwargs):
        raise RuntimeError("streak store unavailable")

    monkeypatch.setattr(StreakService, "sync_daily_streak", explode)

    result = TaskService(session).complete_task(task.id, user.id, now=datetime(2024, 6, 10, 10))

    assert result.task.is_completed is True
    session.refresh(task)
    assert task.is_completed is True
