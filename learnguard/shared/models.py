"""Enums shared by the domain modules and the API schemas."""

from enum import Enum


# ===================
# Risk enums
# ===================

class RiskType(str, Enum):
    """Kinds of learning risk the analyzer can report."""

    ATTENTION_DECLINE = "attention_decline"
    MOTIVATION_DROP = "motivation_drop"
    SKILL_PLATEAU = "skill_plateau"
    MEMORY_DECAY = "memory_decay"
    PRONUNCIATION_REGRESSION = "pronunciation_regression"
    CONSISTENCY_BREAK = "consistency_break"
    OVERLOAD_STRESS = "overload_stress"


class RiskSeverity(str, Enum):
    """Risk severity, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    RiskSeverity.LOW: 1,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.HIGH: 3,
    RiskSeverity.CRITICAL: 4,
}


class IndicatorTrend(str, Enum):
    """Direction tag attached to a risk indicator."""

    DECLINING = "declining"
    STAGNANT = "stagnant"
    VOLATILE = "volatile"


# ===================
# Intervention enums
# ===================

class InterventionType(str, Enum):
    """How quickly a strategy is meant to take effect."""

    IMMEDIATE = "immediate"
    GRADUAL = "gradual"
    PREVENTIVE = "preventive"


class StrategyPriority(str, Enum):
    """Strategy priority; ``weight`` orders strategies for display."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHT[self]


_PRIORITY_WEIGHT = {
    StrategyPriority.URGENT: 4,
    StrategyPriority.HIGH: 3,
    StrategyPriority.MEDIUM: 2,
    StrategyPriority.LOW: 1,
}


class ActionType(str, Enum):
    """Concrete action kinds a strategy can prescribe."""

    ADJUST_DIFFICULTY = "adjust_difficulty"
    CHANGE_STRATEGY = "change_strategy"
    ADD_SUPPORT = "add_support"
    MODIFY_SCHEDULE = "modify_schedule"
    PROVIDE_MOTIVATION = "provide_motivation"
    SKILL_REINFORCEMENT = "skill_reinforcement"


class LearningFeature(str, Enum):
    """Adaptive-assistance features whose counters feed the models."""

    FOCUS_MODE = "focus_mode"
    PRONUNCIATION = "pronunciation"
    RESCUE_MODE = "rescue_mode"
    SRS = "srs"


class AlertType(str, Enum):
    """Types of predictive alerts."""

    WARNING = "warning"
    CRITICAL = "critical"
    OPPORTUNITY = "opportunity"


class ExecutionStatus(str, Enum):
    """Intervention execution status."""

    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ExecutionStatus.COMPLETED,
            ExecutionStatus.CANCELLED,
            ExecutionStatus.FAILED,
        )


# ===================
# Analytics enums
# ===================

class TrendDirection(str, Enum):
    """Classification of a metric's movement between two periods."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Impact(str, Enum):
    """Whether a pattern or insight helps or hurts learning."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class CorrelationStrength(str, Enum):
    """Human-readable label for a correlation coefficient."""

    STRONG_POSITIVE = "strong_positive"
    MODERATE_POSITIVE = "moderate_positive"
    WEAK_POSITIVE = "weak_positive"
    WEAK_NEGATIVE = "weak_negative"
    MODERATE_NEGATIVE = "moderate_negative"
    STRONG_NEGATIVE = "strong_negative"
    NONE = "none"


class ReportRiskType(str, Enum):
    """Longer-horizon risks assessed in analytics reports."""

    LEARNING_PLATEAU = "learning_plateau"
    MOTIVATION_DECLINE = "motivation_decline"
    SKILL_REGRESSION = "skill_regression"
    INCONSISTENCY = "inconsistency"


# ===================
# Profile / path enums
# ===================

class LearningStyle(str, Enum):
    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    MIXED = "mixed"


class DifficultyPreference(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    ADAPTIVE = "adaptive"


class PacePreference(str, Enum):
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"
    ADAPTIVE = "adaptive"


class LearningPhase(str, Enum):
    """Learning phase, ordered by average skill."""

    FOUNDATION = "foundation"
    DEVELOPMENT = "development"
    MASTERY = "mastery"
    MAINTENANCE = "maintenance"


class RecommendationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class RecommendationType(str, Enum):
    CONTENT = "content"
    STRATEGY = "strategy"
    SCHEDULE = "schedule"
    FOCUS = "focus"
    REVIEW = "review"
