"""Main FastAPI application for the task tracker backend."""
import logging

from fastapi import FastAPI

from tracker import __version__
from tracker.db.init import init_db
from tracker.middleware.cors import add_cors_middleware
from tracker.routers import cron_router, tasks_router, user_router
from tracker.utils.logger import configure_logging
from tracker.utils.metrics import metrics_collector

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Task Tracker API",
    description="Recurring tasks, occurrence scheduling and completion streaks",
    version=__version__,
)

# Add CORS middleware
add_cors_middleware(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
        logger.info("Database tables initialized successfully.")
    except Exception as e:
        logger.warning(f"Database initialization failed: {str(e)}")
        logger.warning("Server will continue but database operations may fail.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/metrics")
async def get_metrics():
    """In-process engine counters and timers."""
    return metrics_collector.get_metrics()


app.include_router(tasks_router, prefix="/api")  # /api/{user_id}/tasks, /api/{user_id}/schedule
app.include_router(user_router, prefix="/api")  # /api/{user_id}/streak
app.include_router(cron_router, prefix="/api")  # /api/cron/check-streaks


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
