"""Analytics Module - Trends, patterns and correlations over a report window."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

from learnguard.modules.stats.interface import TimeRange
from learnguard.shared.datetime_utils import utc_now
from learnguard.shared.models import (
    CorrelationStrength,
    Impact,
    ReportRiskType,
    RiskSeverity,
    TrendDirection,
)


@dataclass(frozen=True)
class LearningTrend:
    """Movement of one metric between the report window and the window before it."""

    metric: str
    period: str
    value: float
    baseline: float
    change: float
    change_percent: float
    trend: TrendDirection
    confidence: float

    @property
    def is_stable(self) -> bool:
        return self.trend is TrendDirection.STABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "period": self.period,
            "value": self.value,
            "baseline": self.baseline,
            "change": self.change,
            "change_percent": self.change_percent,
            "trend": self.trend.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class LearningPattern:
    """A named, recurring behavioral signature."""

    pattern_id: str
    name: str
    description: str
    frequency: float
    impact: Impact
    confidence: float
    related_metrics: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    detected_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern_id": self.pattern_id,
            "name": self.name,
            "description": self.description,
            "frequency": self.frequency,
            "impact": self.impact.value,
            "confidence": self.confidence,
            "related_metrics": list(self.related_metrics),
            "recommendations": list(self.recommendations),
            "detected_at": self.detected_at.isoformat(),
        }


@dataclass(frozen=True)
class LearningCorrelation:
    """Correlation between two metrics across the report window's buckets."""

    metric_1: str
    metric_2: str
    coefficient: float  # -1 to 1
    significance: float  # 0 to 1
    relationship: CorrelationStrength
    insights: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric_1": self.metric_1,
            "metric_2": self.metric_2,
            "coefficient": self.coefficient,
            "significance": self.significance,
            "relationship": self.relationship.value,
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class PredictionFactor:
    factor: str
    weight: float


@dataclass(frozen=True)
class Prediction:
    """Deterministic projection of one metric."""

    model_id: str
    target_metric: str
    timeframe: str
    predicted_value: float
    confidence: float
    factors: tuple[PredictionFactor, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "target_metric": self.target_metric,
            "timeframe": self.timeframe,
            "predicted_value": self.predicted_value,
            "confidence": self.confidence,
            "factors": [{"factor": f.factor, "weight": f.weight} for f in self.factors],
        }


@dataclass(frozen=True)
class ReportInsight:
    """Human-readable finding derived from trends, patterns and session data."""

    category: str  # "performance", "behavior", "efficiency"
    insight: str
    impact: str  # "high", "medium", "low"
    actionable: bool
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "insight": self.insight,
            "impact": self.impact,
            "actionable": self.actionable,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class ReportRisk:
    """A risk assessed over the report window, with suggested mitigation."""

    risk_type: ReportRiskType
    probability: float
    severity: RiskSeverity
    indicators: tuple[str, ...] = ()
    mitigation: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_type": self.risk_type.value,
            "probability": self.probability,
            "severity": self.severity.value,
            "indicators": list(self.indicators),
            "mitigation": list(self.mitigation),
        }


@dataclass(frozen=True)
class AnalyticsReport:
    """Everything computed for one learner over one time range."""

    user_id: UUID
    time_range: TimeRange
    trends: tuple[LearningTrend, ...] = ()
    patterns: tuple[LearningPattern, ...] = ()
    correlations: tuple[LearningCorrelation, ...] = ()
    predictions: tuple[Prediction, ...] = ()
    insights: tuple[ReportInsight, ...] = ()
    risks: tuple[ReportRisk, ...] = ()
    id: UUID = field(default_factory=uuid4)
    generated_at: datetime = field(default_factory=utc_now)

    def relevant_correlations(self, min_coefficient: float) -> list[LearningCorrelation]:
        """Correlations whose magnitude is at least ``min_coefficient``."""
        return [c for c in self.correlations if abs(c.coefficient) >= min_coefficient]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "generated_at": self.generated_at.isoformat(),
            "time_range": self.time_range.to_dict(),
            "trends": [t.to_dict() for t in self.trends],
            "patterns": [p.to_dict() for p in self.patterns],
            "correlations": [c.to_dict() for c in self.correlations],
            "predictions": [p.to_dict() for p in self.predictions],
            "insights": [i.to_dict() for i in self.insights],
            "risks": [r.to_dict() for r in self.risks],
        }


class IAnalyticsService(Protocol):
    """Interface for analytics report generation."""

    async def generate_advanced_report(
        self,
        user_id: UUID,
        time_range: TimeRange,
    ) -> AnalyticsReport:
        """Generate a fresh report for a learner.

        Args:
            user_id: Learner
            time_range: Report window; the baseline is the window before it

        Returns:
            AnalyticsReport; the last-known or an empty report when counters
            cannot be fetched
        """
        ...
