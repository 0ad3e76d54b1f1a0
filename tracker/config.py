"""Environment configuration for the task tracker backend."""
import os
from dotenv import load_dotenv

# Load environment variables from a local .env when present
load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./tracker.db")
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
# Preview deployments of the frontend, accepted in production only
CORS_ORIGIN_REGEX = os.environ.get("CORS_ORIGIN_REGEX", r"https://.*\.vercel\.app")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Secrets
AUTH_SECRET = os.environ.get("AUTH_SECRET", "dev-auth-secret-change-me")
# Production has no fallback: an unset secret disables the sweep trigger
CRON_SECRET = os.environ.get("CRON_SECRET") or (
    "" if ENVIRONMENT == "production" else "dev-cron-secret-change-me"
)

# Timezone used when a user has none set or an unknown one
DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "UTC")

# The external scheduler fires every SWEEP_INTERVAL_MINUTES; the sweep accepts
# local times within MIDNIGHT_WINDOW_MINUTES either side of midnight.
SWEEP_INTERVAL_MINUTES = int(os.environ.get("SWEEP_INTERVAL_MINUTES", "15"))
MIDNIGHT_WINDOW_MINUTES = int(os.environ.get("MIDNIGHT_WINDOW_MINUTES", "7"))

# Safety limit for recurring projections
MAX_PROJECTION_ITERATIONS = 100

# Sub-tasks may nest at most this deep (0 = top level)
MAX_TASK_DEPTH = 2
