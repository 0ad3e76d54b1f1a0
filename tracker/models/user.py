"""User model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional
import uuid

from tracker.utils.timeutils import utcnow


class User(SQLModel, table=True):
    """User entity owning tasks and a daily completion streak."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True
    )
    email: Optional[str] = Field(default=None, index=True, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    timezone: str = Field(default="UTC", max_length=64)  # IANA zone name

    # Consecutive fully-completed local days
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)  # high-water mark, never decremented
    # Most recent local day already credited/processed, as a UTC instant
    last_streak_check_date: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
