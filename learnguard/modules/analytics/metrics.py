"""Named metrics read out of a StatsSnapshot."""

from typing import Callable

from learnguard.modules.stats.interface import StatsSnapshot

METRIC_READERS: dict[str, Callable[[StatsSnapshot], float]] = {
    "overall_accuracy": lambda s: s.overall.overall_accuracy,
    "focus_effectiveness": lambda s: s.focus_mode.effectiveness,
    "pronunciation_score": lambda s: s.pronunciation.average_score,
    "srs_retention": lambda s: s.srs.accuracy_rate,
    "learning_consistency": lambda s: s.overall.consistency_score,
    "rescue_mode_usage": lambda s: s.rescue_mode.triggered,
}

# Metrics classified by the trend analyzer, in report order
TREND_METRICS = (
    "overall_accuracy",
    "focus_effectiveness",
    "pronunciation_score",
    "srs_retention",
    "learning_consistency",
)


def metric_value(snapshot: StatsSnapshot, metric: str) -> float:
    """Read a named metric.

    Raises:
        KeyError: If the metric is unknown
    """
    return float(METRIC_READERS[metric](snapshot))
