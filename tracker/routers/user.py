"""User router: streak read endpoint."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from tracker.db.config import get_session
from tracker.middleware.auth import CurrentUser, ensure_same_user, get_current_user
from tracker.models.user import User
from tracker.schemas.streak import StreakResponse

router = APIRouter(tags=["User"])


@router.get("/{user_id}/streak", response_model=StreakResponse)
async def get_user_streak(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Get the user's current and longest daily streak."""
    ensure_same_user(user_id, current_user)

    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return StreakResponse(
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        last_streak_check_date=user.last_streak_check_date,
    )
