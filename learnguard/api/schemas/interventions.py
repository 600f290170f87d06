"""Intervention API schemas: strategies, alerts and executions."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from learnguard.api.schemas.insights import LearningRiskResponse
from learnguard.shared.models import (
    ActionType,
    AlertType,
    ExecutionStatus,
    InterventionType,
    LearningFeature,
    RiskType,
    StrategyPriority,
)


# ===================
# Strategies
# ===================

class InterventionActionResponse(BaseModel):
    action_type: ActionType
    description: str
    parameters: dict[str, Any] = Field(
        ...,
        description="Typed parameters for the action type",
    )
    expected_impact: str
    time_to_effect_hours: float


class SuccessMetricResponse(BaseModel):
    metric: str
    target_value: float
    timeframe_hours: float


class InterventionStrategyResponse(BaseModel):
    """A strategy instantiated for a detected risk."""

    id: UUID
    name: str
    target_risk: RiskType
    intervention_type: InterventionType
    priority: StrategyPriority
    actions: list[InterventionActionResponse]
    success_metrics: list[SuccessMetricResponse]
    related_features: list[LearningFeature]
    confidence: float = Field(..., ge=0, le=1)
    estimated_effectiveness: float = Field(..., ge=0, le=1)
    created_at: datetime


# ===================
# Alerts
# ===================

class PredictiveAlertResponse(BaseModel):
    """A time-boxed alert bundling a risk with recommended strategies."""

    id: UUID
    user_id: UUID | None = None
    alert_type: AlertType
    title: str
    message: str
    risk: LearningRiskResponse
    recommended_strategies: list[InterventionStrategyResponse]
    urgency: float = Field(..., ge=0, le=1)
    auto_executable: bool
    user_action_required: bool
    created_at: datetime
    expires_at: datetime


class AlertSweepResponse(BaseModel):
    removed: int = Field(..., description="Number of expired alerts removed")


# ===================
# Executions
# ===================

class ExecuteInterventionRequest(BaseModel):
    """Request to start (or plan) tracking a strategy for a learner."""

    strategy_id: UUID
    user_id: UUID
    planned: bool = Field(
        default=False,
        description="Create the execution in planned status instead of active",
    )


class UpdateProgressRequest(BaseModel):
    completed_actions: int | None = Field(default=None, ge=0)
    total_actions: int | None = Field(default=None, ge=0)
    current_phase: str | None = None
    next_milestone: str | None = None


class RecordMetricRequest(BaseModel):
    metric: str = Field(..., min_length=1)
    baseline: float
    current: float
    target: float


class FinishInterventionRequest(BaseModel):
    """Terminal results payload for complete/fail."""

    results: dict[str, Any] = Field(default_factory=dict)


class FeedbackRequest(BaseModel):
    rating: int = Field(..., description="1 (not helpful) to 5 (very helpful)")
    comment: str | None = Field(default=None, max_length=2000)
    helpful: bool | None = None


class ExecutionProgressResponse(BaseModel):
    completed_actions: int
    total_actions: int
    current_phase: str
    next_milestone: str | None = None


class MonitoredMetricResponse(BaseModel):
    metric: str
    baseline: float
    current: float
    target: float
    improvement: float


class UserFeedbackResponse(BaseModel):
    rating: int
    comment: str | None = None
    helpful: bool | None = None
    submitted_at: datetime


class InterventionExecutionResponse(BaseModel):
    """Tracked record of a strategy being carried out."""

    id: UUID
    strategy_id: UUID
    user_id: UUID
    started_at: datetime
    status: ExecutionStatus
    progress: ExecutionProgressResponse
    monitoring: list[MonitoredMetricResponse] = Field(default_factory=list)
    user_feedback: UserFeedbackResponse | None = None
    completed_at: datetime | None = None
    results: dict[str, Any] | None = None
