"""Trend classification against a prior-period baseline."""

import logging

from learnguard.modules.analytics.interface import LearningTrend
from learnguard.modules.analytics.metrics import TREND_METRICS, metric_value
from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared import constants as c
from learnguard.shared.models import TrendDirection

logger = logging.getLogger(__name__)


class TrendAnalyzer:
    """Classify each trend metric as increasing, decreasing or stable.

    A metric is stable when ``|change_percent| <= stable_percent``. Percent
    change is 0 when the baseline is not positive, so a learner without a
    prior period reads as stable everywhere.

    Args:
        stable_percent: Largest percent change still treated as stable
    """

    def __init__(self, stable_percent: float = 10.0) -> None:
        if stable_percent < 0:
            raise ValueError(f"stable_percent must be non-negative, got {stable_percent}")
        self.stable_percent = stable_percent

    def analyze(
        self,
        current: StatsSnapshot,
        baseline: StatsSnapshot,
        period: str = "30_days",
    ) -> list[LearningTrend]:
        """Compare the current window with its baseline.

        Args:
            current: Counters for the report window
            baseline: Counters for the window of equal length before it
            period: Label attached to every trend

        Returns:
            One LearningTrend per metric, in fixed order
        """
        return [
            self.classify(metric, metric_value(current, metric), metric_value(baseline, metric), period)
            for metric in TREND_METRICS
        ]

    def classify(self, metric: str, value: float, baseline: float, period: str) -> LearningTrend:
        change = value - baseline
        change_percent = change / baseline * 100 if baseline > 0 else 0.0

        if abs(change_percent) <= self.stable_percent:
            direction = TrendDirection.STABLE
            confidence = c.TREND_STABLE_CONFIDENCE
        else:
            direction = TrendDirection.INCREASING if change_percent > 0 else TrendDirection.DECREASING
            confidence = min(
                c.TREND_MAX_CONFIDENCE,
                c.TREND_STABLE_CONFIDENCE + abs(change_percent) / 100,
            )

        return LearningTrend(
            metric=metric,
            period=period,
            value=value,
            baseline=baseline,
            change=change,
            change_percent=change_percent,
            trend=direction,
            confidence=confidence,
        )
