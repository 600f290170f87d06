"""Intervention execution API routes.

Every route that changes an execution returns its full current state.
Invalid lifecycle moves surface as 409, unknown executions as 404.
"""

from uuid import UUID

from fastapi import APIRouter, status

from learnguard.api.dependencies import InterventionServiceDep
from learnguard.api.schemas.interventions import (
    ExecuteInterventionRequest,
    FeedbackRequest,
    FinishInterventionRequest,
    InterventionExecutionResponse,
    RecordMetricRequest,
    UpdateProgressRequest,
)
from learnguard.modules.intervention.interface import InterventionExecution

router = APIRouter()


def _respond(execution: InterventionExecution) -> InterventionExecutionResponse:
    return InterventionExecutionResponse.model_validate(execution.to_dict())


@router.post(
    "",
    response_model=InterventionExecutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Execute intervention",
    description="Start tracking a strategy for a learner, active immediately or planned.",
)
async def execute_intervention(
    request: ExecuteInterventionRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    if request.planned:
        execution = await service.plan_intervention(request.strategy_id, request.user_id)
    else:
        execution = await service.execute_intervention(request.strategy_id, request.user_id)
    return _respond(execution)


@router.get(
    "/{execution_id}",
    response_model=InterventionExecutionResponse,
    summary="Get intervention",
)
async def get_intervention(
    execution_id: UUID,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    return _respond(await service.get_intervention(execution_id))


@router.post(
    "/{execution_id}/start",
    response_model=InterventionExecutionResponse,
    summary="Start planned intervention",
)
async def start_intervention(
    execution_id: UUID,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    return _respond(await service.start_intervention(execution_id))


@router.patch(
    "/{execution_id}/progress",
    response_model=InterventionExecutionResponse,
    summary="Update progress",
    description="Update action counters and phase of an active intervention.",
)
async def update_progress(
    execution_id: UUID,
    request: UpdateProgressRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    execution = await service.update_intervention_progress(
        execution_id,
        completed_actions=request.completed_actions,
        total_actions=request.total_actions,
        current_phase=request.current_phase,
        next_milestone=request.next_milestone,
    )
    return _respond(execution)


@router.post(
    "/{execution_id}/metrics",
    response_model=InterventionExecutionResponse,
    summary="Record monitored metric",
)
async def record_metric(
    execution_id: UUID,
    request: RecordMetricRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    execution = await service.record_intervention_metric(
        execution_id,
        metric=request.metric,
        baseline=request.baseline,
        current=request.current,
        target=request.target,
    )
    return _respond(execution)


@router.post(
    "/{execution_id}/complete",
    response_model=InterventionExecutionResponse,
    summary="Complete intervention",
)
async def complete_intervention(
    execution_id: UUID,
    request: FinishInterventionRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    return _respond(await service.complete_intervention(execution_id, request.results))


@router.post(
    "/{execution_id}/fail",
    response_model=InterventionExecutionResponse,
    summary="Mark intervention failed",
)
async def fail_intervention(
    execution_id: UUID,
    request: FinishInterventionRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    return _respond(await service.fail_intervention(execution_id, request.results))


@router.post(
    "/{execution_id}/cancel",
    response_model=InterventionExecutionResponse,
    summary="Cancel intervention",
)
async def cancel_intervention(
    execution_id: UUID,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    return _respond(await service.cancel_intervention(execution_id))


@router.post(
    "/{execution_id}/feedback",
    response_model=InterventionExecutionResponse,
    summary="Record learner feedback",
    description="Accepted once, after the intervention has completed, failed or been cancelled.",
)
async def record_feedback(
    execution_id: UUID,
    request: FeedbackRequest,
    service: InterventionServiceDep,
) -> InterventionExecutionResponse:
    execution = await service.record_feedback(
        execution_id,
        rating=request.rating,
        comment=request.comment,
        helpful=request.helpful,
    )
    return _respond(execution)
