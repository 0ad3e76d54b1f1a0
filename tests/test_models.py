# tests/test_models.py

from datetime import datetime

from sqlmodel import Session

from tracker.models.task import Task
from tracker.models.user import User


def test_naive_utc_datetimes_round_trip(engine, make_user, make_task) -> None:
    user = make_user("America/New_York", last_streak_check_date=datetime(2024, 6, 10, 4))
    task = make_task(user, scheduled_date=datetime(2024, 6, 10, 13, 30),
                     is_completed=True, completed_at=datetime(2024, 6, 10, 14))

    with Session(engine) as fresh:
        stored = fresh.get(Task, task.id)
        owner = fresh.get(User, user.id)

        assert stored.scheduled_date == datetime(2024, 6, 10, 13, 30)
        assert stored.scheduled_date.tzinfo is None
        assert stored.completed_at == datetime(2024, 6, 10, 14)
        assert stored.created_at.tzinfo is None
        assert owner.last_streak_check_date == datetime(2024, 6, 10, 4)
        assert owner.last_streak_check_date.tzinfo is None
