"""Database configuration for the task tracker."""
import logging
from typing import Callable, Generator

from sqlalchemy import event
from sqlmodel import Session, create_engine

from tracker.config import DATABASE_URL

logger = logging.getLogger(__name__)

IS_SQLITE = DATABASE_URL.startswith("sqlite")

if IS_SQLITE:
    logger.info("Using SQLite database: %s", DATABASE_URL)
else:
    logger.info("Using PostgreSQL database")

# SQLite connections are shared across the request threadpool
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def get_session_factory() -> Callable[[], Session]:
    """Dependency returning a callable that opens a fresh session.

    The midnight sweep isolates every user in a session of its own.
    """
    return lambda: Session(engine)
