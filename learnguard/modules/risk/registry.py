"""Risk model registry.

Holds one RiskModel per RiskType. The default registry is built from the
fixed thresholds in ``learnguard.shared.constants``; tests can construct
their own instance with different models.
"""

import logging
import math

from learnguard.modules.risk.interface import Direction, IndicatorRule, RiskModel
from learnguard.shared import constants as c
from learnguard.shared.exceptions import InvalidRiskModelError
from learnguard.shared.models import RiskType

logger = logging.getLogger(__name__)

_WEIGHT_TOLERANCE = 1e-9


class RiskModelRegistry:
    """Registry of risk model definitions keyed by risk type."""

    def __init__(self, models: list[RiskModel] | None = None) -> None:
        self._models: dict[RiskType, RiskModel] = {}
        for model in models or []:
            self.register(model)

    def register(self, model: RiskModel) -> None:
        """Validate and store a model, replacing any previous one for the type.

        Raises:
            InvalidRiskModelError: If the model is inconsistent
        """
        self._validate(model)
        if model.risk_type in self._models:
            logger.info(f"Replacing risk model for {model.risk_type.value}")
        self._models[model.risk_type] = model

    def get(self, risk_type: RiskType) -> RiskModel:
        """Get the model for a risk type.

        Raises:
            InvalidRiskModelError: If no model is registered for the type
        """
        try:
            return self._models[risk_type]
        except KeyError:
            raise InvalidRiskModelError(str(risk_type), "no model registered") from None

    def __contains__(self, risk_type: object) -> bool:
        return risk_type in self._models

    def __len__(self) -> int:
        return len(self._models)

    def all(self) -> list[RiskModel]:
        return list(self._models.values())

    @staticmethod
    def _validate(model: RiskModel) -> None:
        name = model.risk_type.value
        if model.time_to_impact_hours <= 0:
            raise InvalidRiskModelError(name, "time_to_impact_hours must be positive")
        if not model.indicators:
            return

        total = sum(rule.weight for rule in model.indicators)
        if not math.isclose(total, 1.0, abs_tol=_WEIGHT_TOLERANCE):
            raise InvalidRiskModelError(name, f"indicator weights sum to {total}, expected 1.0")
        if any(rule.weight < 0 for rule in model.indicators):
            raise InvalidRiskModelError(name, "indicator weights must be non-negative")
        metrics = [rule.metric for rule in model.indicators]
        if len(set(metrics)) != len(metrics):
            raise InvalidRiskModelError(name, "indicator metrics must be unique")
        if model.trigger_score is None or not 0.0 <= model.trigger_score < 1.0:
            raise InvalidRiskModelError(name, "weighted models need a trigger score in [0, 1)")


def build_default_models() -> list[RiskModel]:
    """The built-in model for every risk type, in detection order."""
    return [
        RiskModel(
            risk_type=RiskType.ATTENTION_DECLINE,
            title="Attention decline risk",
            message=(
                "Your focus may be slipping and could start to affect results within "
                "{hours} hours. Try a few steps to sharpen your concentration."
            ),
            time_to_impact_hours=c.ATTENTION_TIME_TO_IMPACT_HOURS,
            affected_areas=("focus_effectiveness", "learning_accuracy", "session_completion"),
            indicators=(
                IndicatorRule(
                    metric="focus_mode_frequency",
                    threshold=c.ATTENTION_FOCUS_FREQUENCY_THRESHOLD,
                    weight=c.ATTENTION_FOCUS_FREQUENCY_WEIGHT,
                    direction=Direction.ABOVE,
                ),
                IndicatorRule(
                    metric="session_completion_rate",
                    threshold=c.ATTENTION_COMPLETION_RATE_THRESHOLD,
                    weight=c.ATTENTION_COMPLETION_RATE_WEIGHT,
                    direction=Direction.BELOW,
                ),
                IndicatorRule(
                    metric="error_rate",
                    threshold=c.ATTENTION_ERROR_RATE_THRESHOLD,
                    weight=c.ATTENTION_ERROR_RATE_WEIGHT,
                    direction=Direction.ABOVE,
                ),
            ),
            trigger_score=c.ATTENTION_TRIGGER_SCORE,
            high_severity_score=c.HIGH_SEVERITY_SCORE,
        ),
        RiskModel(
            risk_type=RiskType.MOTIVATION_DROP,
            title="Motivation drop",
            message=(
                "Your motivation may be fading, which can reduce how often and how well "
                "you study. Consider changing your approach to spark your interest again."
            ),
            time_to_impact_hours=c.MOTIVATION_TIME_TO_IMPACT_HOURS,
            affected_areas=("learning_frequency", "session_duration", "feature_usage"),
            indicators=(
                IndicatorRule(
                    metric="session_frequency",
                    threshold=c.MOTIVATION_SESSION_FREQUENCY_THRESHOLD,
                    weight=c.MOTIVATION_SESSION_FREQUENCY_WEIGHT,
                    direction=Direction.BELOW,
                ),
                IndicatorRule(
                    metric="session_duration",
                    threshold=c.MOTIVATION_SESSION_DURATION_THRESHOLD,
                    weight=c.MOTIVATION_SESSION_DURATION_WEIGHT,
                    direction=Direction.BELOW,
                ),
                IndicatorRule(
                    metric="feature_engagement",
                    threshold=c.MOTIVATION_FEATURE_ENGAGEMENT_THRESHOLD,
                    weight=c.MOTIVATION_FEATURE_ENGAGEMENT_WEIGHT,
                    direction=Direction.BELOW,
                ),
            ),
            trigger_score=c.MOTIVATION_TRIGGER_SCORE,
            high_severity_score=c.MOTIVATION_HIGH_SEVERITY_SCORE,
        ),
        RiskModel(
            risk_type=RiskType.SKILL_PLATEAU,
            title="Skill development has stalled",
            message=(
                "Your progress may have reached a plateau. Adding more challenge "
                "should help you keep improving."
            ),
            time_to_impact_hours=c.PLATEAU_TIME_TO_IMPACT_HOURS,
            affected_areas=("skill_development", "learning_progress", "motivation"),
        ),
        RiskModel(
            risk_type=RiskType.MEMORY_DECAY,
            title="Memory decay risk",
            message=(
                "Retention of what you have learned may be slipping. More review "
                "will help consolidate it."
            ),
            time_to_impact_hours=c.MEMORY_TIME_TO_IMPACT_HOURS,
            affected_areas=("memory_retention", "srs_performance", "long_term_learning"),
        ),
        RiskModel(
            risk_type=RiskType.PRONUNCIATION_REGRESSION,
            title="Pronunciation regression",
            message=(
                "Your pronunciation may be regressing. Practice more often and use "
                "Rescue Mode for extra guidance."
            ),
            time_to_impact_hours=c.PRONUNCIATION_TIME_TO_IMPACT_HOURS,
            affected_areas=("pronunciation_accuracy", "speaking_confidence", "rescue_dependency"),
        ),
        RiskModel(
            risk_type=RiskType.CONSISTENCY_BREAK,
            title="Learning consistency interrupted",
            message="Your study rhythm may be breaking. Adjust your plan to keep a regular schedule.",
            time_to_impact_hours=c.CONSISTENCY_TIME_TO_IMPACT_HOURS,
            affected_areas=("learning_rhythm", "habit_formation"),
        ),
        RiskModel(
            risk_type=RiskType.OVERLOAD_STRESS,
            title="Learning load too heavy",
            message="Your study load may be too heavy. Consider easing the intensity and pace.",
            time_to_impact_hours=c.OVERLOAD_TIME_TO_IMPACT_HOURS,
            affected_areas=("cognitive_load", "session_duration"),
        ),
    ]


def build_default_registry() -> RiskModelRegistry:
    return RiskModelRegistry(build_default_models())

