"""CORS for the browser client that renders the schedule and streaks."""
import logging
from typing import List

from fastapi.middleware.cors import CORSMiddleware

from tracker import config

logger = logging.getLogger(__name__)

LOCAL_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# Only the task hooks, schedule and streak reads are called from a browser
CLIENT_METHODS = ["GET", "POST", "PATCH", "OPTIONS"]


def allowed_origins() -> List[str]:
    """Explicit origins: local dev servers plus the configured frontend."""
    origins = list(LOCAL_ORIGINS)
    if config.FRONTEND_URL and config.FRONTEND_URL not in origins:
        origins.append(config.FRONTEND_URL)
    return origins


def add_cors_middleware(app):
    """Attach CORS handling; production also accepts preview deployment hosts."""
    origins = allowed_origins()
    regex = config.CORS_ORIGIN_REGEX if config.ENVIRONMENT == "production" else None
    logger.info(f"CORS origins {origins}, origin pattern {regex or 'none'}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_origin_regex=regex,
        allow_credentials=True,
        allow_methods=CLIENT_METHODS,
        allow_headers=["Authorization", "Content-Type"],
    )
