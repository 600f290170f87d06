"""Predictive alert lifecycle.

An alert is created per risk and appended to a bounded history. It stays
visible until it is dismissed or until ``now > expires_at``. Dismissed ids
are remembered separately from the history, so a dismissed alert never
becomes visible again, whether or not a sweep has removed it.
"""

from datetime import timedelta
from typing import Sequence
from uuid import UUID
import logging

from learnguard.modules.intervention.interface import InterventionStrategy, PredictiveAlert
from learnguard.modules.risk.interface import LearningRisk
from learnguard.modules.risk.registry import RiskModelRegistry, build_default_registry
from learnguard.shared import constants as c
from learnguard.shared.datetime_utils import Clock, is_expired, utc_now
from learnguard.shared.exceptions import AlertNotFoundError
from learnguard.shared.models import AlertType, RiskSeverity

logger = logging.getLogger(__name__)

_URGENCY_MULTIPLIER = {
    RiskSeverity.CRITICAL: c.URGENCY_MULTIPLIER_CRITICAL,
    RiskSeverity.HIGH: c.URGENCY_MULTIPLIER_HIGH,
}

_FALLBACK_TITLE = "Learning risk alert"
_FALLBACK_MESSAGE = "A learning risk was detected. Consider taking the recommended steps."


class AlertManager:
    """Creates, stores, sweeps and hides predictive alerts.

    Args:
        registry: Source of alert titles and messages per risk type
        history_limit: Maximum number of alerts kept; oldest are dropped first
        clock: Source of the current time
    """

    def __init__(
        self,
        registry: RiskModelRegistry | None = None,
        history_limit: int = 100,
        clock: Clock | None = None,
    ) -> None:
        if history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {history_limit}")
        self._registry = registry or build_default_registry()
        self._history_limit = history_limit
        self._clock = clock or utc_now
        self._history: list[PredictiveAlert] = []
        self._dismissed: set[UUID] = set()

    def create_alerts(
        self,
        risks: Sequence[LearningRisk],
        strategies: Sequence[InterventionStrategy],
        user_id: UUID | None = None,
    ) -> list[PredictiveAlert]:
        """Create one alert per risk.

        Args:
            risks: Detected risks
            strategies: Candidate strategies, matched to risks by target type
            user_id: Learner the alerts belong to

        Returns:
            The new alerts sorted by descending urgency
        """
        now = self._clock()
        alerts = []
        for risk in risks:
            related = tuple(s for s in strategies if s.target_risk == risk.risk_type)
            critical = risk.severity is RiskSeverity.CRITICAL
            title, message = self._describe(risk)
            alerts.append(
                PredictiveAlert(
                    alert_type=AlertType.CRITICAL if critical else AlertType.WARNING,
                    title=title,
                    message=message,
                    risk=risk,
                    recommended_strategies=related,
                    urgency=min(
                        1.0,
                        risk.probability
                        * _URGENCY_MULTIPLIER.get(risk.severity, c.URGENCY_MULTIPLIER_DEFAULT),
                    ),
                    auto_executable=not critical,
                    user_action_required=critical or not related,
                    created_at=now,
                    expires_at=now + timedelta(hours=risk.time_to_impact_hours),
                    user_id=user_id,
                )
            )

        self._history.extend(alerts)
        overflow = len(self._history) - self._history_limit
        if overflow > 0:
            del self._history[:overflow]
            logger.debug(f"Alert history trimmed by {overflow}")

        if alerts:
            logger.info(f"Created {len(alerts)} alerts for user {user_id}")
        return sorted(alerts, key=lambda a: a.urgency, reverse=True)

    def get(self, alert_id: UUID) -> PredictiveAlert:
        for alert in self._history:
            if alert.id == alert_id:
                return alert
        raise AlertNotFoundError(alert_id)

    def dismiss(self, alert_id: UUID) -> None:
        """Hide an alert permanently.

        Raises:
            AlertNotFoundError: If the alert is neither in history nor already dismissed
        """
        if alert_id in self._dismissed:
            return
        self.get(alert_id)
        self._dismissed.add(alert_id)
        logger.info(f"Alert dismissed: {alert_id}")

    def is_dismissed(self, alert_id: UUID) -> bool:
        return alert_id in self._dismissed

    def visible_alerts(self, user_id: UUID | None = None) -> list[PredictiveAlert]:
        """Alerts that are neither dismissed nor expired, by descending urgency."""
        now = self._clock()
        visible = [
            alert
            for alert in self._history
            if alert.id not in self._dismissed
            and not is_expired(alert.expires_at, now)
            and (user_id is None or alert.user_id == user_id)
        ]
        return sorted(visible, key=lambda a: a.urgency, reverse=True)

    def history(
        self,
        user_id: UUID | None = None,
        limit: int = c.DEFAULT_ALERT_HISTORY_QUERY_LIMIT,
    ) -> list[PredictiveAlert]:
        """The most recent ``limit`` alerts, oldest first."""
        if limit <= 0:
            return []
        entries = [a for a in self._history if user_id is None or a.user_id == user_id]
        return entries[-limit:]

    def clear_expired(self) -> int:
        """Remove alerts whose expiry has passed.

        Returns:
            Number of alerts removed
        """
        now = self._clock()
        before = len(self._history)
        self._history = [a for a in self._history if not is_expired(a.expires_at, now)]
        removed = before - len(self._history)
        if removed:
            logger.info(f"Cleared {removed} expired alerts")
        return removed

    def strategy_ids(self) -> set[UUID]:
        """Strategies recommended by any alert still in history."""
        return {s.id for alert in self._history for s in alert.recommended_strategies}

    def __len__(self) -> int:
        return len(self._history)

    def _describe(self, risk: LearningRisk) -> tuple[str, str]:
        if risk.risk_type not in self._registry:
            return _FALLBACK_TITLE, _FALLBACK_MESSAGE
        model = self._registry.get(risk.risk_type)
        return model.title, model.render_message()
