"""Initialize database tables."""
import logging

from sqlmodel import SQLModel

from tracker.db.config import engine
from tracker.models.task import Task  # noqa: F401
from tracker.models.user import User  # noqa: F401

logger = logging.getLogger(__name__)


def init_db():
    """Create all tables in the database."""
    logger.info("Creating all tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Tables created successfully.")


if __name__ == "__main__":
    init_db()
