"""Risk analyzer.

Evaluates each detector against a StatsSnapshot and emits at most one
LearningRisk per risk type, in a fixed detection order:

1. attention_decline (weighted model)
2. motivation_drop (weighted model)
3. skill_plateau (stable-trend ratio AND accuracy floor)
4. memory_decay (SRS accuracy OR review backlog)
5. pronunciation_regression (low score AND rescue dependency)

All ratios use ``max(1, denominator)``, so a learner with no history still
produces defined values and may still trigger risks.
"""

from typing import Callable, Sequence
import logging
import math

from learnguard.modules.risk.interface import (
    IRiskAnalyzer,
    LearningRisk,
    RiskIndicator,
    RiskModel,
    TrendLike,
)
from learnguard.modules.risk.registry import RiskModelRegistry, build_default_registry
from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared import constants as c
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.models import IndicatorTrend, RiskSeverity, RiskType

logger = logging.getLogger(__name__)


def attention_values(snapshot: StatsSnapshot) -> dict[str, float]:
    """Observed values for the attention_decline indicators."""
    overall = snapshot.overall
    sessions = max(1, overall.total_sessions)
    return {
        "focus_mode_frequency": snapshot.focus_mode.triggered / sessions,
        "session_completion_rate": overall.completed_sessions / sessions,
        "error_rate": 1 - overall.overall_accuracy / 100,
    }


def motivation_values(snapshot: StatsSnapshot) -> dict[str, float]:
    """Observed values for the motivation_drop indicators."""
    overall = snapshot.overall
    total = overall.total_sessions
    recent = (
        overall.recent_sessions
        if overall.recent_sessions is not None
        else total * c.DEFAULT_RECENT_SESSION_SHARE
    )
    engagement = (
        snapshot.focus_mode.triggered
        + snapshot.pronunciation.assessments
        + snapshot.rescue_mode.triggered
        + snapshot.srs.reviews_today
    ) / max(1, total)
    return {
        "session_frequency": recent / max(1, total),
        "session_duration": snapshot.average_session_minutes / c.NORMALIZED_SESSION_MINUTES,
        "feature_engagement": min(1.0, engagement),
    }


class RiskAnalyzer(IRiskAnalyzer):
    """Rule-based learning risk detection.

    Args:
        registry: Risk model definitions (defaults to the built-in models)
        clock: Source of ``detected_at`` timestamps
    """

    def __init__(
        self,
        registry: RiskModelRegistry | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry or build_default_registry()
        self._clock = clock or utc_now
        self._detectors: list[tuple[RiskType, Callable[..., LearningRisk | None]]] = [
            (RiskType.ATTENTION_DECLINE, self._detect_attention_decline),
            (RiskType.MOTIVATION_DROP, self._detect_motivation_drop),
            (RiskType.SKILL_PLATEAU, self._detect_skill_plateau),
            (RiskType.MEMORY_DECAY, self._detect_memory_decay),
            (RiskType.PRONUNCIATION_REGRESSION, self._detect_pronunciation_regression),
        ]

    def analyze(
        self,
        snapshot: StatsSnapshot,
        trends: Sequence[TrendLike] = (),
    ) -> list[LearningRisk]:
        risks = []
        for risk_type, detector in self._detectors:
            if risk_type not in self.registry:
                logger.debug(f"No model registered for {risk_type.value}, skipping")
                continue
            risk = detector(snapshot, trends)
            if risk is not None:
                logger.debug(
                    f"Detected {risk_type.value} (severity={risk.severity.value}, "
                    f"probability={risk.probability:.2f})"
                )
                risks.append(risk)
        return risks

    # ===================
    # Weighted models
    # ===================

    def _detect_attention_decline(
        self, snapshot: StatsSnapshot, trends: Sequence[TrendLike]
    ) -> LearningRisk | None:
        model = self.registry.get(RiskType.ATTENTION_DECLINE)
        return self._evaluate_weighted(model, attention_values(snapshot))

    def _detect_motivation_drop(
        self, snapshot: StatsSnapshot, trends: Sequence[TrendLike]
    ) -> LearningRisk | None:
        model = self.registry.get(RiskType.MOTIVATION_DROP)
        return self._evaluate_weighted(model, motivation_values(snapshot))

    def _evaluate_weighted(
        self, model: RiskModel, values: dict[str, float]
    ) -> LearningRisk | None:
        score = model.score(values)
        if score <= model.trigger_score:
            return None

        high_cutoff = model.high_severity_score or c.HIGH_SEVERITY_SCORE
        severity = RiskSeverity.HIGH if score > high_cutoff else RiskSeverity.MEDIUM
        indicators = tuple(
            RiskIndicator(
                metric=rule.metric,
                current_value=values.get(rule.metric, 0.0),
                threshold=rule.threshold,
                trend=rule.trend,
            )
            for rule in model.indicators
        )
        return self._build(model, severity, score, indicators)

    # ===================
    # Rule-based detectors
    # ===================

    def _detect_skill_plateau(
        self, snapshot: StatsSnapshot, trends: Sequence[TrendLike]
    ) -> LearningRisk | None:
        stable = sum(1 for trend in trends if trend.is_stable)
        stagnation = stable / max(1, len(trends))
        accuracy = snapshot.overall.overall_accuracy

        if not (stagnation > c.PLATEAU_STAGNATION_THRESHOLD and accuracy > c.PLATEAU_ACCURACY_FLOOR):
            return None

        model = self.registry.get(RiskType.SKILL_PLATEAU)
        indicators = (
            RiskIndicator(
                metric="accuracy_stagnation",
                current_value=stagnation,
                threshold=c.PLATEAU_STAGNATION_THRESHOLD,
                trend=IndicatorTrend.STAGNANT,
            ),
        )
        return self._build(model, RiskSeverity.MEDIUM, stagnation, indicators)

    def _detect_memory_decay(
        self, snapshot: StatsSnapshot, trends: Sequence[TrendLike]
    ) -> LearningRisk | None:
        srs = snapshot.srs
        expected_reviews = math.ceil(srs.cards_total * c.MEMORY_EXPECTED_REVIEW_SHARE)
        min_reviews = expected_reviews * c.MEMORY_MIN_REVIEW_RATIO

        if not (srs.accuracy_rate < c.MEMORY_ACCURACY_THRESHOLD or srs.reviews_today < min_reviews):
            return None

        model = self.registry.get(RiskType.MEMORY_DECAY)
        severity = (
            RiskSeverity.HIGH
            if srs.accuracy_rate < c.MEMORY_HIGH_SEVERITY_ACCURACY
            else RiskSeverity.MEDIUM
        )
        indicators = (
            RiskIndicator(
                metric="srs_accuracy_rate",
                current_value=srs.accuracy_rate,
                threshold=c.MEMORY_ACCURACY_THRESHOLD,
                trend=IndicatorTrend.DECLINING,
            ),
            RiskIndicator(
                metric="srs_reviews_today",
                current_value=srs.reviews_today,
                threshold=min_reviews,
                trend=IndicatorTrend.DECLINING,
            ),
        )
        return self._build(model, severity, c.MEMORY_PROBABILITY, indicators)

    def _detect_pronunciation_regression(
        self, snapshot: StatsSnapshot, trends: Sequence[TrendLike]
    ) -> LearningRisk | None:
        score = snapshot.pronunciation.average_score
        rescue_ratio = snapshot.rescue_mode.triggered / max(1, snapshot.pronunciation.assessments)

        if not (
            score < c.PRONUNCIATION_SCORE_THRESHOLD
            and rescue_ratio > c.PRONUNCIATION_RESCUE_RATIO_THRESHOLD
        ):
            return None

        model = self.registry.get(RiskType.PRONUNCIATION_REGRESSION)
        severity = (
            RiskSeverity.HIGH
            if score < c.PRONUNCIATION_HIGH_SEVERITY_SCORE
            else RiskSeverity.MEDIUM
        )
        indicators = (
            RiskIndicator(
                metric="pronunciation_score",
                current_value=score,
                threshold=c.PRONUNCIATION_SCORE_THRESHOLD,
                trend=IndicatorTrend.DECLINING,
            ),
            RiskIndicator(
                metric="rescue_frequency",
                current_value=rescue_ratio,
                threshold=c.PRONUNCIATION_RESCUE_RATIO_THRESHOLD,
                trend=IndicatorTrend.VOLATILE,
            ),
        )
        return self._build(model, severity, c.PRONUNCIATION_PROBABILITY, indicators)

    def _build(
        self,
        model: RiskModel,
        severity: RiskSeverity,
        probability: float,
        indicators: tuple[RiskIndicator, ...],
    ) -> LearningRisk:
        return LearningRisk(
            risk_type=model.risk_type,
            severity=severity,
            probability=min(1.0, max(0.0, probability)),
            time_to_impact_hours=model.time_to_impact_hours,
            affected_areas=model.affected_areas,
            indicators=indicators,
            detected_at=self._clock(),
        )
