"""Strategy generation from detected risks."""

from typing import Iterable, Mapping
import logging

from learnguard.modules.intervention.interface import InterventionStrategy, StrategyTemplate
from learnguard.modules.intervention.templates import STRATEGY_TEMPLATES
from learnguard.modules.risk.interface import LearningRisk
from learnguard.shared import constants as c
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.models import RiskSeverity, RiskType, StrategyPriority

logger = logging.getLogger(__name__)

_SEVERITY_PRIORITY = {
    RiskSeverity.CRITICAL: StrategyPriority.URGENT,
    RiskSeverity.HIGH: StrategyPriority.HIGH,
}


def escalate_priority(default: StrategyPriority, severity: RiskSeverity) -> StrategyPriority:
    """Raise ``default`` to the priority implied by ``severity``, never lower it."""
    floor = _SEVERITY_PRIORITY.get(severity)
    if floor is None or floor.weight <= default.weight:
        return default
    return floor


class StrategyGenerator:
    """Maps each risk to at most one strategy via the template table.

    Args:
        templates: Risk type to template (None means no strategy available)
        clock: Source of ``created_at`` timestamps
    """

    def __init__(
        self,
        templates: Mapping[RiskType, StrategyTemplate | None] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._templates = STRATEGY_TEMPLATES if templates is None else templates
        self._clock = clock or utc_now

    def generate(self, risks: Iterable[LearningRisk]) -> list[InterventionStrategy]:
        """Build strategies for risks.

        Args:
            risks: Risks in detection order

        Returns:
            Strategies sorted by descending priority weight; ties keep detection order
        """
        strategies = []
        for risk in risks:
            strategy = self.for_risk(risk)
            if strategy is not None:
                strategies.append(strategy)
        return sorted(strategies, key=lambda s: s.priority.weight, reverse=True)

    def for_risk(self, risk: LearningRisk) -> InterventionStrategy | None:
        if risk.risk_type not in self._templates:
            logger.warning(f"Unsupported risk type {risk.risk_type!r}, no strategy generated")
            return None

        template = self._templates[risk.risk_type]
        if template is None:
            logger.debug(f"No strategy template for {risk.risk_type.value}")
            return None

        return InterventionStrategy(
            name=template.name,
            target_risk=risk.risk_type,
            intervention_type=template.intervention_type,
            priority=escalate_priority(template.default_priority, risk.severity),
            actions=template.actions,
            success_metrics=template.success_metrics,
            related_features=template.related_features,
            confidence=c.STRATEGY_CONFIDENCE,
            estimated_effectiveness=c.STRATEGY_ESTIMATED_EFFECTIVENESS,
            created_at=self._clock(),
        )
