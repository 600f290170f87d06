"""Risk Module - Learning risk types and model definitions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence
from uuid import UUID, uuid4

from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared.datetime_utils import utc_now
from learnguard.shared.models import IndicatorTrend, RiskSeverity, RiskType


class Direction(str, Enum):
    """Which side of a threshold is unfavorable."""

    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class IndicatorRule:
    """One binary indicator of a weighted risk model."""

    metric: str
    threshold: float
    weight: float
    direction: Direction
    trend: IndicatorTrend = IndicatorTrend.DECLINING

    def crossed(self, value: float) -> bool:
        """True when ``value`` is strictly past the threshold in the unfavorable direction."""
        if self.direction is Direction.ABOVE:
            return value > self.threshold
        return value < self.threshold


@dataclass(frozen=True)
class RiskModel:
    """Definition of one risk type.

    Weighted models carry indicator rules whose weights sum to 1.0 and a
    trigger score. Rule-based types (plateau, memory, pronunciation) and
    types without a detector carry no indicator rules; their cut-offs live
    in the analyzer.
    """

    risk_type: RiskType
    title: str
    message: str  # may reference {hours}
    time_to_impact_hours: float
    affected_areas: tuple[str, ...] = ()
    indicators: tuple[IndicatorRule, ...] = ()
    trigger_score: float | None = None
    high_severity_score: float | None = None

    @property
    def is_weighted(self) -> bool:
        return bool(self.indicators)

    def score(self, values: Mapping[str, float]) -> float:
        """Weighted sum of crossed indicators.

        Args:
            values: Observed value per indicator metric

        Returns:
            Score in [0, 1], rounded to absorb float noise at the trigger boundary
        """
        total = sum(
            rule.weight for rule in self.indicators if rule.crossed(values.get(rule.metric, 0.0))
        )
        return round(total, 6)

    def render_message(self) -> str:
        return self.message.format(hours=f"{self.time_to_impact_hours:g}")


@dataclass(frozen=True)
class RiskIndicator:
    """Observed value of one indicator at detection time."""

    metric: str
    current_value: float
    threshold: float
    trend: IndicatorTrend

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "current_value": self.current_value,
            "threshold": self.threshold,
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class LearningRisk:
    """A quantified hypothesis that a learner is about to disengage, stagnate or regress."""

    risk_type: RiskType
    severity: RiskSeverity
    probability: float
    time_to_impact_hours: float
    affected_areas: tuple[str, ...] = ()
    indicators: tuple[RiskIndicator, ...] = ()
    id: UUID = field(default_factory=uuid4)
    detected_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(f"probability must be in [0, 1], got {self.probability}")
        if self.time_to_impact_hours <= 0:
            raise ValueError(
                f"time_to_impact_hours must be positive, got {self.time_to_impact_hours}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "risk_type": self.risk_type.value,
            "severity": self.severity.value,
            "probability": self.probability,
            "time_to_impact_hours": self.time_to_impact_hours,
            "affected_areas": list(self.affected_areas),
            "indicators": [indicator.to_dict() for indicator in self.indicators],
            "detected_at": self.detected_at.isoformat(),
        }


class TrendLike(Protocol):
    """Anything carrying a trend classification (see analytics.LearningTrend)."""

    @property
    def is_stable(self) -> bool: ...


class IRiskAnalyzer(Protocol):
    """Interface for risk detection over a stats snapshot."""

    def analyze(
        self,
        snapshot: StatsSnapshot,
        trends: Sequence[TrendLike] = (),
    ) -> list[LearningRisk]:
        """Evaluate every detector against a snapshot.

        Args:
            snapshot: Learner counters
            trends: Trend classifications used for stagnation evidence

        Returns:
            Zero or one risk per type, in fixed detection order
        """
        ...

