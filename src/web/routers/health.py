"""
Health Check Endpoint

- GET /health : service status plus a database connectivity probe
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config.settings import get_settings
from database.async_engine import DatabaseHealth

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Report service health.

    Returns 200 when the database answers, 503 otherwise.
    """
    database = await DatabaseHealth().check()
    healthy = database.get("status") == "healthy"
    if not healthy:
        logger.warning("Health check failed: database unreachable")

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": get_settings().version,
            "database": database,
        },
    )
