"""Cron router: entry point for the externally scheduled midnight sweep."""
import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from tracker.db.config import get_session_factory
from tracker.middleware.auth import verify_cron_secret
from tracker.schemas.streak import SweepResult
from tracker.services.sweep import run_sweep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cron"], dependencies=[Depends(verify_cron_secret)])


@router.api_route("/cron/check-streaks", methods=["GET", "POST"], response_model=SweepResult)
def check_streaks(session_factory: Callable[[], Session] = Depends(get_session_factory)):
    """Reconcile streaks for every user currently crossing local midnight."""
    try:
        return run_sweep(session_factory)
    except Exception as e:
        logger.exception("Cron job error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        )
