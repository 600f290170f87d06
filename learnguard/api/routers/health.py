"""Health check API routes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from learnguard import __version__
from learnguard.api.dependencies import Registry
from learnguard.jobs.scheduler import get_scheduler

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness of the API and the state of its background pieces."""

    status: str
    scheduler: str = Field(..., description="running or stopped")
    scheduled_jobs: int = Field(default=0, description="Jobs registered on the scheduler")
    feature_flags: dict[str, bool] = Field(default_factory=dict)
    services: dict[str, str] = Field(
        default_factory=dict,
        description="Implementation of the provider and of each service created so far",
    )


class LivenessResponse(BaseModel):
    status: str = "alive"


@router.get("", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Report scheduler, feature flags and instantiated services.",
)
async def readiness_check(registry: Registry) -> ReadinessResponse:
    """Readiness check.

    Analysis runs on request whether or not background jobs are scheduled,
    so a stopped scheduler is reported but never makes the API unready.
    """
    scheduler = get_scheduler()
    return ReadinessResponse(
        status="ready",
        scheduler="running" if scheduler.is_running else "stopped",
        scheduled_jobs=len(scheduler.get_jobs()) if scheduler.is_running else 0,
        feature_flags=registry.flags.get_all_states(),
        services=registry.get_service_info(),
    )


@router.get("/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness_check() -> LivenessResponse:
    return LivenessResponse()
