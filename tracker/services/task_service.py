"""Task mutation hooks: create, complete and uncomplete."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session

from tracker.config import MAX_TASK_DEPTH
from tracker.models.task import Task
from tracker.schemas.task import TaskCreate
from tracker.services.materializer import OccurrenceMaterializer
from tracker.services.streaks import StreakService
from tracker.services.task_store import TaskStore
from tracker.utils.timeutils import get_zone, to_utc_naive, utcnow

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Task does not exist or is not owned by the user."""


class TaskDepthError(ValueError):
    """Sub-task would nest deeper than the supported maximum."""


class RecurringSubTaskError(ValueError):
    """Sub-tasks follow their top-level task's recurrence and cannot carry their own."""


@dataclass
class CompletionResult:
    task: Task
    next_occurrence: Optional[Task] = None


class TaskService:
    """Task mutations, each followed by a best-effort daily streak sync."""

    def __init__(self, session: Session):
        self.session = session
        self.store = TaskStore(session)
        self.streaks = StreakService(session)
        self.materializer = OccurrenceMaterializer(session)

    def create_task(self, user_id: str, task_data: TaskCreate) -> Task:
        """
        Create a task or sub-task.

        Raises:
            TaskNotFoundError: If the parent task does not exist
            RecurringSubTaskError: If a sub-task is given its own recurrence
            TaskDepthError: If the sub-task would exceed the maximum depth
        """
        depth = 0
        if task_data.parent_id is not None:
            if task_data.is_recurring or task_data.recurring_pattern is not None:
                raise RecurringSubTaskError("Sub-tasks cannot be recurring")
            parent = self.store.get_by_id(task_data.parent_id, user_id)
            if parent is None:
                raise TaskNotFoundError(f"Parent task {task_data.parent_id} not found")
            depth = parent.depth + 1
            if depth > MAX_TASK_DEPTH:
                raise TaskDepthError(f"Maximum nesting depth is {MAX_TASK_DEPTH + 1} levels")

        pattern = task_data.recurring_pattern
        now = utcnow()
        task = Task(
            user_id=user_id,
            title=task_data.title,
            description=task_data.description,
            priority=task_data.priority,
            scheduled_date=to_utc_naive(task_data.scheduled_date),
            duration=task_data.duration,
            area_id=task_data.area_id,
            tags=task_data.tags or [],
            is_recurring=task_data.is_recurring,
            recurring_pattern=pattern.to_json() if pattern else None,
            parent_id=task_data.parent_id,
            depth=depth,
            order=self.store.next_order(user_id, task_data.parent_id),
            created_at=now,
            updated_at=now,
        )
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)

        self._sync_streak(user_id)
        return task

    def complete_task(self, task_id: int, user_id: str, now=None) -> CompletionResult:
        """
        Complete a task, its open sub-tasks and, if recurring, materialize its successor.

        Raises:
            TaskNotFoundError: If the task does not exist for the user
        """
        task = self.store.get_by_id(task_id, user_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        if task.is_completed:
            return CompletionResult(task=task)

        now = now or utcnow()
        task.is_completed = True
        task.completed_at = now
        task.updated_at = now
        self.session.add(task)
        self.store.complete_descendants(task, now)

        successor = None
        if task.is_recurring and task.parent_id is None and self.materializer.get_successor(task.id) is None:
            user = self.store.get_user(user_id)
            tz = get_zone(user.timezone if user else None)
            self.streaks.on_recurring_completion(task)
            successor = self.materializer.materialize_next(task, tz)

        self.session.commit()
        self.session.refresh(task)
        if successor is not None:
            self.session.refresh(successor)

        self._sync_streak(user_id, now)
        return CompletionResult(task=task, next_occurrence=successor)

    def uncomplete_task(self, task_id: int, user_id: str, now=None) -> Task:
        """
        Reopen a completed task.

        Raises:
            TaskNotFoundError: If the task does not exist for the user
        """
        task = self.store.get_by_id(task_id, user_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        task.is_completed = False
        task.completed_at = None
        task.updated_at = utcnow()
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)

        self._sync_streak(user_id, now)
        return task

    def _sync_streak(self, user_id: str, now=None) -> None:
        """Streak bookkeeping never fails the mutation that triggered it."""
        try:
            self.streaks.sync_daily_streak(user_id, now=now)
        except Exception:
            logger.exception(f"Failed to sync daily streak for user {user_id}")
            self.session.rollback()
