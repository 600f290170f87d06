"""Intervention Module - Strategies, alerts and execution tracking."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, Union
from uuid import UUID, uuid4

from learnguard.modules.risk.interface import LearningRisk
from learnguard.shared.datetime_utils import utc_now
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
# Action parameters
# ===================

def _check_fraction(owner: str, name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{owner}.{name} must be in [0, 1], got {value}")


def _check_positive(owner: str, name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{owner}.{name} must be positive, got {value}")


@dataclass(frozen=True)
class AdjustDifficultyParams:
    """Lower or raise content difficulty. Exactly one of reduction/increase is set."""

    difficulty_reduction: float = 0.0
    difficulty_increase: float = 0.0
    duration_hours: float | None = None
    progression_rate: float | None = None

    def __post_init__(self) -> None:
        _check_fraction("AdjustDifficultyParams", "difficulty_reduction", self.difficulty_reduction)
        _check_fraction("AdjustDifficultyParams", "difficulty_increase", self.difficulty_increase)
        if (self.difficulty_reduction > 0) == (self.difficulty_increase > 0):
            raise ValueError("AdjustDifficultyParams needs exactly one of reduction or increase")


@dataclass(frozen=True)
class ModifyScheduleParams:
    session_duration_minutes: int | None = None
    break_interval_minutes: int | None = None
    flexible_scheduling: bool = False
    reminder_optimization: bool = False

    def __post_init__(self) -> None:
        for name in ("session_duration_minutes", "break_interval_minutes"):
            value = getattr(self, name)
            if value is not None:
                _check_positive("ModifyScheduleParams", name, value)


@dataclass(frozen=True)
class AddSupportParams:
    feature: LearningFeature
    sensitivity: float
    visual_enhancement: bool = False
    guidance_detail: str | None = None

    def __post_init__(self) -> None:
        _check_fraction("AddSupportParams", "sensitivity", self.sensitivity)


@dataclass(frozen=True)
class ProvideMotivationParams:
    goal_difficulty: float
    reward_frequency: str

    def __post_init__(self) -> None:
        _check_fraction("ProvideMotivationParams", "goal_difficulty", self.goal_difficulty)


@dataclass(frozen=True)
class ChangeStrategyParams:
    gamification: bool = False
    variety_increase: float = 0.0
    new_content_ratio: float = 0.0
    memory_techniques: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_fraction("ChangeStrategyParams", "variety_increase", self.variety_increase)
        _check_fraction("ChangeStrategyParams", "new_content_ratio", self.new_content_ratio)


@dataclass(frozen=True)
class SkillReinforcementParams:
    review_frequency_multiplier: float = 1.0
    prioritize_difficult_items: bool = False
    practice_frequency: str | None = None

    def __post_init__(self) -> None:
        _check_positive(
            "SkillReinforcementParams", "review_frequency_multiplier", self.review_frequency_multiplier
        )


ActionParameters = Union[
    AdjustDifficultyParams,
    ModifyScheduleParams,
    AddSupportParams,
    ProvideMotivationParams,
    ChangeStrategyParams,
    SkillReinforcementParams,
]

PARAMETER_TYPES: dict[ActionType, type] = {
    ActionType.ADJUST_DIFFICULTY: AdjustDifficultyParams,
    ActionType.MODIFY_SCHEDULE: ModifyScheduleParams,
    ActionType.ADD_SUPPORT: AddSupportParams,
    ActionType.PROVIDE_MOTIVATION: ProvideMotivationParams,
    ActionType.CHANGE_STRATEGY: ChangeStrategyParams,
    ActionType.SKILL_REINFORCEMENT: SkillReinforcementParams,
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


# ===================
# Strategies
# ===================

@dataclass(frozen=True)
class InterventionAction:
    """One concrete step of a strategy."""

    action_type: ActionType
    description: str
    parameters: ActionParameters
    expected_impact: str
    time_to_effect_hours: float

    def __post_init__(self) -> None:
        expected = PARAMETER_TYPES[self.action_type]
        if not isinstance(self.parameters, expected):
            raise TypeError(
                f"{self.action_type.value} actions take {expected.__name__}, "
                f"got {type(self.parameters).__name__}"
            )
        _check_positive("InterventionAction", "time_to_effect_hours", self.time_to_effect_hours)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "description": self.description,
            "parameters": {k: _jsonable(v) for k, v in asdict(self.parameters).items()},
            "expected_impact": self.expected_impact,
            "time_to_effect_hours": self.time_to_effect_hours,
        }


@dataclass(frozen=True)
class SuccessMetric:
    metric: str
    target_value: float
    timeframe_hours: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "target_value": self.target_value,
            "timeframe_hours": self.timeframe_hours,
        }


@dataclass(frozen=True)
class StrategyTemplate:
    """Fixed recipe for responding to one risk type."""

    name: str
    intervention_type: InterventionType
    default_priority: StrategyPriority
    actions: tuple[InterventionAction, ...]
    success_metrics: tuple[SuccessMetric, ...]
    related_features: tuple[LearningFeature, ...]


@dataclass(frozen=True)
class InterventionStrategy:
    """A template instantiated for one detected risk."""

    name: str
    target_risk: RiskType
    intervention_type: InterventionType
    priority: StrategyPriority
    actions: tuple[InterventionAction, ...]
    success_metrics: tuple[SuccessMetric, ...]
    related_features: tuple[LearningFeature, ...]
    confidence: float
    estimated_effectiveness: float
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "target_risk": self.target_risk.value,
            "intervention_type": self.intervention_type.value,
            "priority": self.priority.value,
            "actions": [a.to_dict() for a in self.actions],
            "success_metrics": [m.to_dict() for m in self.success_metrics],
            "related_features": [f.value for f in self.related_features],
            "confidence": self.confidence,
            "estimated_effectiveness": self.estimated_effectiveness,
            "created_at": self.created_at.isoformat(),
        }


# ===================
# Alerts
# ===================

@dataclass(frozen=True)
class PredictiveAlert:
    """Time-boxed notification bundling a risk with its recommended strategies."""

    alert_type: AlertType
    title: str
    message: str
    risk: LearningRisk
    recommended_strategies: tuple[InterventionStrategy, ...]
    urgency: float
    auto_executable: bool
    user_action_required: bool
    created_at: datetime
    expires_at: datetime
    user_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        if not 0.0 <= self.urgency <= 1.0:
            raise ValueError(f"urgency must be in [0, 1], got {self.urgency}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "alert_type": self.alert_type.value,
            "title": self.title,
            "message": self.message,
            "risk": self.risk.to_dict(),
            "recommended_strategies": [s.to_dict() for s in self.recommended_strategies],
            "urgency": self.urgency,
            "auto_executable": self.auto_executable,
            "user_action_required": self.user_action_required,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


# ===================
# Executions
# ===================

@dataclass
class ExecutionProgress:
    completed_actions: int = 0
    total_actions: int = 0
    current_phase: str = "initialization"
    next_milestone: str | None = "action_execution"

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed_actions": self.completed_actions,
            "total_actions": self.total_actions,
            "current_phase": self.current_phase,
            "next_milestone": self.next_milestone,
        }


@dataclass
class MonitoredMetric:
    metric: str
    baseline: float
    current: float
    target: float

    @property
    def improvement(self) -> float:
        return self.current - self.baseline

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "baseline": self.baseline,
            "current": self.current,
            "target": self.target,
            "improvement": self.improvement,
        }


@dataclass
class UserFeedback:
    rating: int  # 1-5
    comment: str | None = None
    helpful: bool | None = None
    submitted_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rating": self.rating,
            "comment": self.comment,
            "helpful": self.helpful,
            "submitted_at": self.submitted_at.isoformat(),
        }


@dataclass
class InterventionExecution:
    """Tracked record of a strategy being carried out for a learner.

    Mutable; only the executor changes it.
    """

    strategy_id: UUID
    user_id: UUID
    started_at: datetime
    status: ExecutionStatus
    progress: ExecutionProgress = field(default_factory=ExecutionProgress)
    monitoring: list[MonitoredMetric] = field(default_factory=list)
    user_feedback: UserFeedback | None = None
    completed_at: datetime | None = None
    results: dict[str, Any] | None = None
    id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "strategy_id": str(self.strategy_id),
            "user_id": str(self.user_id),
            "started_at": self.started_at.isoformat(),
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "monitoring": [m.to_dict() for m in self.monitoring],
            "user_feedback": self.user_feedback.to_dict() if self.user_feedback else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": self.results,
        }


class IPredictiveInterventionService(Protocol):
    """Interface for the risk → strategy → alert → execution pipeline."""

    async def analyze_learning_risks(self, user_id: UUID) -> list[LearningRisk]:
        """Detect risks for a learner from the latest counters."""
        ...

    async def generate_intervention_strategies(
        self, risks: list[LearningRisk]
    ) -> list[InterventionStrategy]:
        """Instantiate strategy templates for risks, sorted by priority."""
        ...

    async def create_predictive_alerts(
        self,
        risks: list[LearningRisk],
        strategies: list[InterventionStrategy],
        user_id: UUID | None = None,
    ) -> list[PredictiveAlert]:
        """Create one alert per risk and append them to the history."""
        ...

    async def execute_intervention(self, strategy_id: UUID, user_id: UUID) -> InterventionExecution:
        """Start tracking an intervention."""
        ...

    async def get_active_interventions(self, user_id: UUID) -> list[InterventionExecution]:
        """Active executions for a learner."""
        ...

    async def clear_expired_alerts(self) -> int:
        """Remove expired alerts from the history; returns how many were removed."""
        ...
