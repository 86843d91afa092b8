"""
FastAPI application for the PR reviewer service.

Routes:
- POST /team/add              : register a team with members
- GET  /team/get              : fetch a team
- POST /users/setIsActive     : toggle a user's active flag
- GET  /users/getReview       : pull requests a user reviews
- POST /pullRequest/create    : create a PR with auto-assigned reviewers
- POST /pullRequest/merge     : merge a PR (idempotent)
- POST /pullRequest/reassign  : replace a reviewer
- GET  /health                : health check
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.settings import get_settings
from database.async_engine import close_database, init_database
from middleware.correlation import CorrelationIdMiddleware
from services.logging_config import configure_logging
from services.review_service import reset_review_service
from web.api_errors import register_exception_handlers
from web.routers import (
    health_router,
    pull_requests_router,
    teams_router,
    users_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and the database on startup; release it on shutdown."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json,
        log_file=settings.log_file,
    )
    await init_database()
    logger.info(f"{settings.name} {settings.version} started ({settings.environment})")
    try:
        yield
    finally:
        reset_review_service()
        await close_database()
        logger.info(f"{settings.name} stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================
    app.add_middleware(CorrelationIdMiddleware)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================
    register_exception_handlers(app)

    # =========================================================================
    # ROUTERS
    # =========================================================================
    app.include_router(teams_router)
    app.include_router(users_router)
    app.include_router(pull_requests_router)
    app.include_router(health_router)

    return app


app = create_app()
