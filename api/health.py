"""Health check endpoint."""

from datetime import datetime, timezone

from src.utils.http import ApiHandler, Request, Router, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

SERVICE_NAME = "terrasale-backend"
VERSION = "1.0.0"

router = Router()


@router.add("GET", "/api/health")
def health(request: Request):
    return ok(
        {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="TerraSale API is running",
    )


class handler(ApiHandler):
    """Health check handler for Vercel serverless function."""
    router = router
