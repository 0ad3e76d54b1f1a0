"""Routers package for the task tracker API."""

from .cron import router as cron_router
from .tasks import router as tasks_router
from .user import router as user_router

__all__ = ["cron_router", "tasks_router", "user_router"]
