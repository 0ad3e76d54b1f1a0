"""Streak and sweep schemas."""
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class StreakResponse(BaseModel):
    """A user's daily completion streak."""
    current_streak: int
    longest_streak: int
    last_streak_check_date: Optional[datetime] = None


class SweepUserResult(BaseModel):
    """Outcome of reconciling one user during a sweep."""
    user_id: str
    timezone: Optional[str] = None
    status: str  # processed | error
    error: Optional[str] = None


class SweepResult(BaseModel):
    """Batch result of one midnight window sweep tick."""
    success: bool = True
    processed: int = 0
    skipped: int = 0
    results: List[SweepUserResult] = []
    timestamp: datetime
