# tests/conftest.py

import os
import tempfile
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Configuration is read at import time; point the app at a scratch database first.
_tmp_dir = tempfile.mkdtemp()
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmp_dir, 'app.db')}")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

from tracker.models.task import Task  # noqa: E402
from tracker.models.user import User  # noqa: E402
from tracker.schemas.recurrence import RecurrencePattern  # noqa: E402


@pytest.fixture()
def engine(tmp_path: Path):
    """File-backed SQLite so separate sessions get separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tracker.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def session_factory(engine):
    return lambda: Session(engine)


@pytest.fixture()
def make_user(session):
    def _make(timezone: str = "UTC", **kwargs) -> User:
        user = User(timezone=timezone, **kwargs)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_task(session):
    def _make(user: User, title: str = "Task", pattern=None, **kwargs) -> Task:
        if isinstance(pattern, dict):
            pattern = RecurrencePattern.model_validate(pattern).to_json()
        is_recurring = kwargs.pop("is_recurring", pattern is not None)
        task = Task(
            user_id=user.id,
            title=title,
            is_recurring=is_recurring,
            recurring_pattern=pattern,
            **kwargs,
        )
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    return _make
