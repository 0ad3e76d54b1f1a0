"""Task schemas for the task tracker API."""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List, Union

from tracker.schemas.recurrence import RecurrencePattern


class TaskCreate(BaseModel):
    """Schema for creating a task or sub-task."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: int = Field(default=3, ge=1, le=4)  # 1 = vital, 4 = someday
    scheduled_date: Optional[datetime] = None  # ISO datetime, naive values are UTC
    duration: Optional[int] = Field(None, ge=0)  # minutes
    parent_id: Optional[int] = None
    area_id: Optional[str] = None
    tags: Optional[List[str]] = Field(None, max_length=10)
    is_recurring: bool = False
    recurring_pattern: Optional[RecurrencePattern] = None


class TaskResponse(BaseModel):
    """Schema for task API responses."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    description: Optional[str] = None
    priority: int = 3
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = None
    area_id: Optional[str] = None
    tags: Optional[List[str]] = []
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None  # raw JSON blob
    recurring_parent_id: Optional[int] = None
    recurring_streak: int = 0
    longest_recurring_streak: int = 0
    parent_id: Optional[int] = None
    depth: int = 0
    order: int = 0
    is_virtual: bool = False


class ScheduleEntry(TaskResponse):
    """An entry of the schedule view: a stored task or a virtual occurrence."""
    id: Union[int, str]


class VirtualOccurrence(ScheduleEntry):
    """A projected, never-persisted occurrence of a recurring task."""
    id: str  # "<anchor id>-recurring-<yyyy-mm-dd>"
    is_virtual: bool = True


class CompleteTaskResponse(BaseModel):
    """Completed task plus the successor materialized for it, if any."""
    task: TaskResponse
    next_occurrence: Optional[TaskResponse] = None
