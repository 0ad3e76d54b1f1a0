"""Task store: the read/write queries the recurrence and streak engine needs."""
from sqlmodel import Session, select
from sqlalchemy import func
from typing import List, Optional
from datetime import datetime

from tracker.models.task import Task
from tracker.models.user import User
from tracker.utils.timeutils import utcnow


class TaskStore:
    """Query helpers over the task and user tables."""

    def __init__(self, session: Session):
        self.session = session

    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_id(self, task_id: int, user_id: str) -> Optional[Task]:
        """Get a specific task by ID, ensuring user ownership."""
        statement = (
            select(Task)
            .where(Task.id == task_id)
            .where(Task.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def get_children(self, task_id: int) -> List[Task]:
        statement = select(Task).where(Task.parent_id == task_id).order_by(Task.order)
        return list(self.session.exec(statement).all())

    def next_order(self, user_id: str, parent_id: Optional[int]) -> int:
        """Order value placing a new task after its existing siblings."""
        statement = select(func.max(Task.order)).where(Task.user_id == user_id)
        if parent_id is None:
            statement = statement.where(Task.parent_id.is_(None))
        else:
            statement = statement.where(Task.parent_id == parent_id)
        current = self.session.exec(statement).first()
        return (current or 0) + 1

    def get_tasks_in_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        is_completed: Optional[bool] = None,
        is_recurring: Optional[bool] = None,
    ) -> List[Task]:
        """Tasks (top-level and sub-tasks) scheduled within ``[start, end)``."""
        statement = (
            select(Task)
            .where(Task.user_id == user_id)
            .where(Task.scheduled_date >= start)
            .where(Task.scheduled_date < end)
        )
        if is_completed is not None:
            statement = statement.where(Task.is_completed == is_completed)
        if is_recurring is not None:
            statement = statement.where(Task.is_recurring == is_recurring)
        statement = statement.order_by(Task.scheduled_date.asc(), Task.priority.asc())
        return list(self.session.exec(statement).all())

    def get_open_recurring_tasks(self, user_id: str) -> List[Task]:
        """Incomplete top-level recurring occurrences with a scheduled date (projection anchors)."""
        statement = (
            select(Task)
            .where(Task.user_id == user_id)
            .where(Task.is_recurring == True)  # noqa: E712
            .where(Task.is_completed == False)  # noqa: E712
            .where(Task.parent_id.is_(None))
            .where(Task.scheduled_date.is_not(None))
            .order_by(Task.scheduled_date.asc())
        )
        return list(self.session.exec(statement).all())

    def complete_descendants(self, task: Task, completed_at: datetime) -> int:
        """Mark every incomplete descendant of ``task`` complete."""
        count = 0
        for child in self.get_children(task.id):
            if not child.is_completed:
                child.is_completed = True
                child.completed_at = completed_at
                child.updated_at = utcnow()
                self.session.add(child)
                count += 1
            count += self.complete_descendants(child, completed_at)
        return count
