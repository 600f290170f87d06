"""Metric-pair correlations across the buckets of a report window."""

from dataclasses import dataclass
from typing import Sequence
import logging
import statistics

from learnguard.modules.analytics.interface import LearningCorrelation
from learnguard.modules.analytics.metrics import metric_value
from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared import constants as c
from learnguard.shared.models import CorrelationStrength

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricPair:
    metric_1: str
    metric_2: str
    significance: float
    negate_second: bool = False


DEFAULT_PAIRS = (
    MetricPair("focus_effectiveness", "overall_accuracy", c.FOCUS_ACCURACY_SIGNIFICANCE),
    # Rescue usage is expected to move against the score, so it is negated
    MetricPair(
        "pronunciation_score",
        "rescue_mode_usage",
        c.PRONUNCIATION_RESCUE_SIGNIFICANCE,
        negate_second=True,
    ),
)


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson coefficient clamped to [-1, 1]; 0.0 when it is undefined."""
    if len(xs) < 2 or len(xs) != len(ys):
        return 0.0
    try:
        value = statistics.correlation(xs, ys)
    except statistics.StatisticsError:
        # constant series
        return 0.0
    return max(-1.0, min(1.0, value))


def interpret(coefficient: float) -> CorrelationStrength:
    """Map a coefficient to a strength label."""
    magnitude = abs(coefficient)
    positive = coefficient >= 0
    if magnitude >= c.CORRELATION_STRONG:
        return CorrelationStrength.STRONG_POSITIVE if positive else CorrelationStrength.STRONG_NEGATIVE
    if magnitude >= c.CORRELATION_MODERATE:
        return (
            CorrelationStrength.MODERATE_POSITIVE if positive else CorrelationStrength.MODERATE_NEGATIVE
        )
    if magnitude >= c.CORRELATION_WEAK:
        return CorrelationStrength.WEAK_POSITIVE if positive else CorrelationStrength.WEAK_NEGATIVE
    return CorrelationStrength.NONE


class CorrelationFinder:
    """Correlate fixed metric pairs over a series of bucket snapshots."""

    def __init__(self, pairs: Sequence[MetricPair] = DEFAULT_PAIRS) -> None:
        self.pairs = tuple(pairs)

    def find(self, series: Sequence[StatsSnapshot]) -> list[LearningCorrelation]:
        """Compute one correlation per configured pair.

        Args:
            series: Snapshots for consecutive buckets of the report window

        Returns:
            List of LearningCorrelation, in pair order
        """
        correlations = []
        for pair in self.pairs:
            xs = [metric_value(snapshot, pair.metric_1) for snapshot in series]
            ys = [metric_value(snapshot, pair.metric_2) for snapshot in series]
            if pair.negate_second:
                ys = [-y for y in ys]
            coefficient = pearson(xs, ys)
            correlations.append(
                LearningCorrelation(
                    metric_1=pair.metric_1,
                    metric_2=pair.metric_2,
                    coefficient=coefficient,
                    significance=pair.significance,
                    relationship=interpret(coefficient),
                    insights=(self._insight(pair, coefficient),),
                )
            )
        return correlations

    @staticmethod
    def _insight(pair: MetricPair, coefficient: float) -> str:
        if pair.metric_1 == "focus_effectiveness":
            if coefficient > 0.5:
                return "Effective Focus Mode use clearly lifts overall accuracy"
            return (
                "Focus Mode effectiveness is only loosely tied to overall accuracy; "
                "its usage strategy may need tuning"
            )
        if pair.metric_1 == "pronunciation_score":
            # rescue usage is negated, so leaning on rescue at low scores reads positive
            if coefficient > 0.3:
                return (
                    "Rescue Mode is used more when pronunciation scores are low, "
                    "so the rescue mechanism is doing its job"
                )
            return (
                "Rescue Mode usage is only loosely tied to pronunciation scores; "
                "its trigger conditions may need adjusting"
            )
        return f"{pair.metric_1} and {pair.metric_2} correlate at {coefficient:.2f}"
