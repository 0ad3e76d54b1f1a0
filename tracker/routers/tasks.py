"""Task router: mutation hooks and the schedule view."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Dict, List, Optional
from datetime import date, datetime, timedelta

from sqlmodel import Session

from tracker.db.config import get_session
from tracker.middleware.auth import CurrentUser, ensure_same_user, get_current_user
from tracker.schemas.task import CompleteTaskResponse, ScheduleEntry, TaskCreate, TaskResponse
from tracker.services.projector import project_occurrences
from tracker.services.task_service import RecurringSubTaskError, TaskDepthError, TaskNotFoundError, TaskService
from tracker.services.task_store import TaskStore
from tracker.utils.timeutils import day_bounds_utc, get_zone, local_date, to_local, utcnow

router = APIRouter(tags=["Tasks"])  # No prefix since main.py adds /api prefix


def get_task_service(session: Session = Depends(get_session)) -> TaskService:
    """Dependency for getting TaskService instance."""
    return TaskService(session)


@router.post("/{user_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    user_id: str,
    task_data: TaskCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a task, sub-task or recurring task."""
    ensure_same_user(user_id, current_user)

    try:
        return service.create_task(user_id, task_data)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (TaskDepthError, RecurringSubTaskError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{user_id}/tasks/{task_id}/complete", response_model=CompleteTaskResponse)
async def complete_task(
    user_id: str,
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Complete a task; recurring tasks get their next occurrence."""
    ensure_same_user(user_id, current_user)

    try:
        result = service.complete_task(task_id, user_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return CompleteTaskResponse(
        task=TaskResponse.model_validate(result.task),
        next_occurrence=TaskResponse.model_validate(result.next_occurrence) if result.next_occurrence else None,
    )


@router.patch("/{user_id}/tasks/{task_id}/uncomplete", response_model=TaskResponse)
async def uncomplete_task(
    user_id: str,
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Reopen a completed task."""
    ensure_same_user(user_id, current_user)

    try:
        return service.uncomplete_task(task_id, user_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.get("/{user_id}/schedule", response_model=Dict[str, List[ScheduleEntry]])
async def get_schedule(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    start: Optional[date] = Query(None, description="First local day (YYYY-MM-DD), defaults to today"),
    days: int = Query(7, ge=1, le=35, description="Number of local days to cover"),
):
    """Open tasks plus projected recurring occurrences, grouped by local day."""
    ensure_same_user(user_id, current_user)

    store = TaskStore(session)
    user = store.get_user(user_id)
    tz = get_zone(user.timezone if user else None)

    first_day = start or to_local(utcnow(), tz).date()
    window_start = day_bounds_utc(first_day, tz)[0]
    window_end = day_bounds_utc(first_day + timedelta(days=days - 1), tz)[1]

    entries: List[ScheduleEntry] = [
        ScheduleEntry.model_validate(task)
        for task in store.get_tasks_in_range(user_id, window_start, window_end, is_completed=False)
    ]
    for anchor in store.get_open_recurring_tasks(user_id):
        entries.extend(project_occurrences(anchor, window_start, window_end, tz))

    grouped: Dict[str, List[ScheduleEntry]] = {}
    for entry in entries:
        key = local_date(entry.scheduled_date, tz).isoformat()
        grouped.setdefault(key, []).append(entry)

    for key in grouped:
        grouped[key].sort(key=lambda t: (t.scheduled_date or datetime.min, t.priority))

    return grouped
