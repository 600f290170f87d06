"""Predictive alert API routes."""

from uuid import UUID

from fastapi import APIRouter

from learnguard.api.dependencies import InterventionServiceDep
from learnguard.api.schemas.common import SuccessResponse
from learnguard.api.schemas.interventions import AlertSweepResponse, PredictiveAlertResponse

router = APIRouter()


@router.get(
    "/{alert_id}",
    response_model=PredictiveAlertResponse,
    summary="Get alert",
)
async def get_alert(
    alert_id: UUID,
    service: InterventionServiceDep,
) -> PredictiveAlertResponse:
    alert = await service.get_alert(alert_id)
    return PredictiveAlertResponse.model_validate(alert.to_dict())


@router.post(
    "/{alert_id}/dismiss",
    response_model=SuccessResponse,
    summary="Dismiss alert",
    description="Hide an alert from visible alerts. Dismissing twice is a no-op.",
)
async def dismiss_alert(
    alert_id: UUID,
    service: InterventionServiceDep,
) -> SuccessResponse:
    await service.dismiss_alert(alert_id)
    return SuccessResponse(message=f"Alert {alert_id} dismissed")


@router.post(
    "/sweep",
    response_model=AlertSweepResponse,
    summary="Remove expired alerts",
)
async def sweep_alerts(service: InterventionServiceDep) -> AlertSweepResponse:
    removed = await service.clear_expired_alerts()
    return AlertSweepResponse(removed=removed)
