"""Pathing Module - Learner profiles and optimized learning paths."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

from learnguard.shared.datetime_utils import utc_now
from learnguard.shared.models import (
    DifficultyPreference,
    Impact,
    LearningFeature,
    LearningPhase,
    LearningStyle,
    PacePreference,
    RecommendationPriority,
    RecommendationType,
)


@dataclass(frozen=True)
class LearningProfile:
    """Derived snapshot of a learner's style, preferences and scores.

    All five scores are in [0, 100].
    """

    user_id: UUID
    learning_style: LearningStyle
    difficulty_preference: DifficultyPreference
    pace_preference: PacePreference
    focus_strength: float
    memory_retention: float
    pronunciation_skill: float
    consistency_score: float
    motivation_level: float
    preferred_topics: tuple[str, ...] = ()
    weak_areas: tuple[str, ...] = ()
    strong_areas: tuple[str, ...] = ()
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        for name, value in self.scores.items():
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be in [0, 100], got {value}")

    @property
    def scores(self) -> dict[str, float]:
        return {
            "focus_strength": self.focus_strength,
            "memory_retention": self.memory_retention,
            "pronunciation_skill": self.pronunciation_skill,
            "consistency_score": self.consistency_score,
            "motivation_level": self.motivation_level,
        }

    @property
    def average_skill(self) -> float:
        """Mean of the three skill scores (focus, memory, pronunciation)."""
        return (self.focus_strength + self.memory_retention + self.pronunciation_skill) / 3

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": str(self.user_id),
            "learning_style": self.learning_style.value,
            "difficulty_preference": self.difficulty_preference.value,
            "pace_preference": self.pace_preference.value,
            **self.scores,
            "preferred_topics": list(self.preferred_topics),
            "weak_areas": list(self.weak_areas),
            "strong_areas": list(self.strong_areas),
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class LearningRecommendation:
    """A ranked suggestion within an optimized path."""

    type: RecommendationType
    priority: RecommendationPriority
    title: str
    description: str
    reasoning: str
    action_items: tuple[str, ...]
    expected_benefit: str
    estimated_minutes: int
    confidence: float  # 0-100
    related_features: tuple[LearningFeature, ...]
    based_on: tuple[str, ...] = ()
    id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "type": self.type.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "reasoning": self.reasoning,
            "action_items": list(self.action_items),
            "expected_benefit": self.expected_benefit,
            "estimated_minutes": self.estimated_minutes,
            "confidence": self.confidence,
            "related_features": [f.value for f in self.related_features],
            "based_on": list(self.based_on),
        }


@dataclass(frozen=True)
class LearningInsight:
    category: str  # "performance", "behavior", "progress", "prediction"
    insight: str
    impact: Impact
    confidence: float  # 0-100
    supporting_data: dict[str, float]
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "insight": self.insight,
            "impact": self.impact.value,
            "confidence": self.confidence,
            "supporting_data": dict(self.supporting_data),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class Milestone:
    milestone: str
    estimated_days: int
    required_actions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "milestone": self.milestone,
            "estimated_days": self.estimated_days,
            "required_actions": list(self.required_actions),
        }


@dataclass(frozen=True)
class AdaptiveAdjustment:
    reason: str
    adjustment: str
    expected_impact: str

    def to_dict(self) -> dict[str, str]:
        return {
            "reason": self.reason,
            "adjustment": self.adjustment,
            "expected_impact": self.expected_impact,
        }


@dataclass(frozen=True)
class OptimizedLearningPath:
    """Phase-aware plan derived from a profile, cached until ``valid_until``."""

    user_id: UUID
    current_phase: LearningPhase
    recommendations: tuple[LearningRecommendation, ...]
    insights: tuple[LearningInsight, ...]
    next_milestones: tuple[Milestone, ...]
    adaptive_adjustments: tuple[AdaptiveAdjustment, ...]
    generated_at: datetime
    valid_until: datetime
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        if self.valid_until <= self.generated_at:
            raise ValueError("valid_until must be after generated_at")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "current_phase": self.current_phase.value,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "insights": [i.to_dict() for i in self.insights],
            "next_milestones": [m.to_dict() for m in self.next_milestones],
            "adaptive_adjustments": [a.to_dict() for a in self.adaptive_adjustments],
            "generated_at": self.generated_at.isoformat(),
            "valid_until": self.valid_until.isoformat(),
        }


class ILearningPathService(Protocol):
    """Interface for profile analysis and path optimization."""

    async def analyze_learning_profile(self, user_id: UUID) -> LearningProfile:
        """Rebuild and store the learner's profile from fresh counters."""
        ...

    async def generate_optimized_path(self, user_id: UUID) -> OptimizedLearningPath:
        """Return the cached path while it is valid, otherwise build a new one."""
        ...

    def get_learning_profile(self, user_id: UUID) -> LearningProfile | None:
        """The latest stored profile, if any."""
        ...

    def get_cached_path(self, user_id: UUID) -> OptimizedLearningPath | None:
        """The cached path if it is still valid."""
        ...

    def clear_user_cache(self, user_id: UUID) -> None:
        """Drop the learner's stored profile and cached path."""
        ...
