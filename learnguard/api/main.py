"""FastAPI application factory.

``create_app()`` wires middleware, exception handlers and routers; the
module-level ``app`` is what ``learnguard serve`` and uvicorn load.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnguard import __version__
from learnguard.api.middleware.error_handler import setup_exception_handlers
from learnguard.api.middleware.logging import (
    REQUEST_ID_HEADER,
    RequestLoggingMiddleware,
    setup_logging,
)
from learnguard.jobs.scheduler import get_scheduler
from learnguard.shared.config import get_settings
from learnguard.shared.feature_flags import FeatureFlags, get_feature_flags

logger = logging.getLogger(__name__)

API_DESCRIPTION = """
Predictive learning-risk API:
- Record learner stats snapshots
- Detect learning risks and generate intervention strategies
- Predictive alerts with dismissal and expiry
- Track intervention executions and learner feedback
- Learning profiles, optimized learning paths and analytics reports
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and run the background jobs for the app's lifetime.

    Jobs are only scheduled when FF_ENABLE_BACKGROUND_JOBS is on; requests
    are served either way.
    """
    setup_logging()
    scheduler = get_scheduler()
    if get_feature_flags().is_enabled(FeatureFlags.ENABLE_BACKGROUND_JOBS):
        scheduler.schedule_all_default_jobs()
        scheduler.start()
    logger.info(f"LearnGuard API {__version__} started")
    yield
    scheduler.shutdown(wait=False)


def _routers() -> list[tuple[APIRouter, str, str]]:
    """(router, prefix, tag) for every mounted router."""
    from learnguard.api.routers import (
        alerts_router,
        health_router,
        interventions_router,
        users_router,
    )

    return [
        (health_router, "/health", "Health"),
        (users_router, "/users", "Learners"),
        (alerts_router, "/alerts", "Alerts"),
        (interventions_router, "/interventions", "Interventions"),
    ]


def create_app() -> FastAPI:
    """Build a configured application instance."""
    settings = get_settings()

    application = FastAPI(
        title="LearnGuard API",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    cors_origins = settings.cors_origins_list
    if settings.is_production and not cors_origins:
        logger.warning("No CORS_ORIGINS configured in production; browsers cannot call the API")

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=600,
    )

    setup_exception_handlers(application)

    # Added last so it wraps CORS and sees every request first
    application.add_middleware(RequestLoggingMiddleware)

    for router, prefix, tag in _routers():
        application.include_router(router, prefix=prefix, tags=[tag])

    return application


app = create_app()
