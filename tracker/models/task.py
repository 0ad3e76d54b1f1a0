"""Task model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from datetime import datetime
from typing import List, Optional

from tracker.schemas.recurrence import RecurrencePattern, parse_pattern
from tracker.utils.timeutils import utcnow


class Task(SQLModel, table=True):
    """A dated (possibly recurring) task occurrence.

    The same row type serves as recurring template and concrete occurrence:
    every materialized successor points back at the row it was created from
    through ``recurring_parent_id`` and carries its own copy of the pattern.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(
        sa_column=Column(String, ForeignKey("user.id", ondelete="CASCADE"), index=True)
    )
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: int = Field(default=3, ge=1, le=4)  # 1 = vital ... 4 = someday
    scheduled_date: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime)  # naive UTC
    duration: Optional[int] = Field(default=None)  # minutes
    area_id: Optional[str] = Field(default=None, max_length=64)
    tags: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    is_completed: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Recurrence
    is_recurring: bool = Field(default=False)
    recurring_pattern: Optional[str] = Field(default=None, sa_column=Column(Text))  # JSON blob
    recurring_parent_id: Optional[int] = Field(default=None, foreign_key="task.id", index=True)
    recurring_streak: int = Field(default=0)
    longest_recurring_streak: int = Field(default=0)
    last_recurring_completion_date: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Sub-task hierarchy
    parent_id: Optional[int] = Field(default=None, foreign_key="task.id", index=True)
    depth: int = Field(default=0, ge=0, le=2)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    @property
    def pattern(self) -> Optional[RecurrencePattern]:
        """Parsed recurrence pattern, or None when absent or unparseable."""
        if not self.is_recurring:
            return None
        return parse_pattern(self.recurring_pattern)
