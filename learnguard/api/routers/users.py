"""Per-learner API routes: stats ingestion, risks, profile, path and report."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from learnguard.api.dependencies import (
    AnalyticsServiceDep,
    InterventionServiceDep,
    PathingServiceDep,
    Registry,
)
from learnguard.api.middleware.error_handler import APIError, NotFoundError
from learnguard.api.schemas.insights import (
    AnalysisCycleResponse,
    AnalyticsReportResponse,
    LearningProfileResponse,
    LearningRiskResponse,
    OptimizedPathResponse,
    RecordStatsRequest,
    RecordStatsResponse,
    ReportRequest,
)
from learnguard.api.schemas.interventions import (
    InterventionExecutionResponse,
    InterventionStrategyResponse,
    PredictiveAlertResponse,
)
from learnguard.modules.stats import InMemoryStatsProvider, StatsSnapshot, TimeRange
from learnguard.shared.models import ExecutionStatus

router = APIRouter()


# ===================
# Stats
# ===================

@router.post(
    "/{user_id}/stats",
    response_model=RecordStatsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record stats snapshot",
    description="Store a snapshot of rolled-up counters for a learner.",
)
async def record_stats(
    user_id: UUID,
    request: RecordStatsRequest,
    registry: Registry,
) -> RecordStatsResponse:
    """Record a stats snapshot.

    Only available when the registry is backed by the in-memory provider;
    external aggregators own their own ingestion.

    Raises:
        APIError: 501 if the provider does not accept snapshots
    """
    provider = registry.provider
    if not isinstance(provider, InMemoryStatsProvider):
        raise APIError(
            message=f"{type(provider).__name__} does not accept recorded snapshots",
            error_code="NOT_IMPLEMENTED",
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
        )

    snapshot = StatsSnapshot.from_dict(request.snapshot.model_dump())
    recorded_at = request.recorded_at or registry.clock()
    provider.record(user_id, snapshot, recorded_at=recorded_at)
    return RecordStatsResponse(user_id=user_id, recorded_at=recorded_at)


# ===================
# Risks and strategies
# ===================

@router.get(
    "/{user_id}/risks",
    response_model=list[LearningRiskResponse],
    summary="Detect learning risks",
)
async def get_risks(
    user_id: UUID,
    service: InterventionServiceDep,
) -> list[LearningRiskResponse]:
    risks = await service.analyze_learning_risks(user_id)
    return [LearningRiskResponse.model_validate(r.to_dict()) for r in risks]


@router.post(
    "/{user_id}/strategies",
    response_model=list[InterventionStrategyResponse],
    summary="Generate intervention strategies",
    description="Detect risks and instantiate one strategy per risk.",
)
async def generate_strategies(
    user_id: UUID,
    service: InterventionServiceDep,
) -> list[InterventionStrategyResponse]:
    risks = await service.analyze_learning_risks(user_id)
    strategies = await service.generate_intervention_strategies(risks)
    return [InterventionStrategyResponse.model_validate(s.to_dict()) for s in strategies]


@router.post(
    "/{user_id}/analysis",
    response_model=AnalysisCycleResponse,
    summary="Run analysis cycle",
    description="Detect risks, generate strategies, raise alerts and auto-execute where enabled.",
)
async def run_analysis(
    user_id: UUID,
    service: InterventionServiceDep,
) -> AnalysisCycleResponse:
    summary = await service.run_analysis_cycle(user_id)
    return AnalysisCycleResponse.model_validate(summary)


# ===================
# Alerts and interventions
# ===================

@router.get(
    "/{user_id}/alerts",
    response_model=list[PredictiveAlertResponse],
    summary="List visible alerts",
    description="Alerts for the learner that are neither dismissed nor expired.",
)
async def list_alerts(
    user_id: UUID,
    service: InterventionServiceDep,
) -> list[PredictiveAlertResponse]:
    alerts = await service.visible_alerts(user_id)
    return [PredictiveAlertResponse.model_validate(a.to_dict()) for a in alerts]


@router.get(
    "/{user_id}/alerts/history",
    response_model=list[PredictiveAlertResponse],
    summary="Alert history",
    description="Most recent alerts for the learner, oldest first, including dismissed ones.",
)
async def alert_history(
    user_id: UUID,
    service: InterventionServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> list[PredictiveAlertResponse]:
    alerts = await service.get_alert_history(user_id, limit=limit)
    return [PredictiveAlertResponse.model_validate(a.to_dict()) for a in alerts]


@router.get(
    "/{user_id}/interventions",
    response_model=list[InterventionExecutionResponse],
    summary="List interventions",
)
async def list_interventions(
    user_id: UUID,
    service: InterventionServiceDep,
    status_filter: ExecutionStatus | None = Query(default=None, alias="status"),
) -> list[InterventionExecutionResponse]:
    executions = await service.list_interventions(user_id, status=status_filter)
    return [InterventionExecutionResponse.model_validate(e.to_dict()) for e in executions]


# ===================
# Profile and path
# ===================

@router.get(
    "/{user_id}/profile",
    response_model=LearningProfileResponse,
    summary="Get stored learning profile",
)
async def get_profile(
    user_id: UUID,
    service: PathingServiceDep,
) -> LearningProfileResponse:
    """Get the last profile built for the learner.

    Raises:
        NotFoundError: If no profile has been built yet
    """
    profile = service.get_learning_profile(user_id)
    if profile is None:
        raise NotFoundError("LearningProfile", str(user_id))
    return LearningProfileResponse.model_validate(profile.to_dict())


@router.post(
    "/{user_id}/profile",
    response_model=LearningProfileResponse,
    summary="Analyze learning profile",
    description="Rebuild the learner's profile from current stats.",
)
async def analyze_profile(
    user_id: UUID,
    service: PathingServiceDep,
) -> LearningProfileResponse:
    profile = await service.analyze_learning_profile(user_id)
    return LearningProfileResponse.model_validate(profile.to_dict())


@router.get(
    "/{user_id}/path",
    response_model=OptimizedPathResponse,
    summary="Get optimized learning path",
    description="Cached per learner until the path's valid_until.",
)
async def get_path(
    user_id: UUID,
    service: PathingServiceDep,
) -> OptimizedPathResponse:
    path = await service.generate_optimized_path(user_id)
    return OptimizedPathResponse.model_validate(path.to_dict())


@router.delete(
    "/{user_id}/path",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear cached profile and path",
)
async def clear_path(
    user_id: UUID,
    service: PathingServiceDep,
) -> None:
    service.clear_user_cache(user_id)


# ===================
# Report
# ===================

@router.get(
    "/{user_id}/report",
    response_model=AnalyticsReportResponse,
    summary="Advanced analytics report",
    description="Trends, patterns, correlations, predictions and insights for a window.",
)
async def get_report(
    user_id: UUID,
    service: AnalyticsServiceDep,
    start: datetime | None = Query(default=None, description="Window start (ISO 8601)"),
    end: datetime | None = Query(default=None, description="Window end (ISO 8601)"),
) -> AnalyticsReportResponse:
    """Generate a report for ``[start, end)``, or the default window when both are omitted."""
    window = ReportRequest(start=start, end=end)
    if window.start is None or window.end is None:
        time_range = service.default_time_range()
    else:
        time_range = TimeRange(start=window.start, end=window.end)

    report = await service.generate_advanced_report(user_id, time_range)
    return AnalyticsReportResponse.model_validate(report.to_dict())
