"""Service registry for dependency injection.

The registry is an explicitly constructed container: it wires one stats
provider, one clock and one settings object into the analytics, intervention
and pathing services. Tests build their own isolated instances; the API,
scheduler and CLI share the process-wide one from ``get_service_registry()``.

Usage:
    from learnguard.shared.service_registry import get_service_registry

    registry = get_service_registry()
    risks = await registry.intervention.analyze_learning_risks(user_id)
    path = await registry.pathing.generate_optimized_path(user_id)
"""

from functools import lru_cache
from typing import TYPE_CHECKING
import logging

from learnguard.shared.config import Settings, get_settings
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.feature_flags import FeatureFlagManager, get_feature_flags

if TYPE_CHECKING:
    from learnguard.modules.analytics.service import AnalyticsService
    from learnguard.modules.intervention.service import PredictiveInterventionService
    from learnguard.modules.pathing.service import LearningPathService
    from learnguard.modules.stats.interface import IStatsProvider

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Container for the application's services.

    Services are created lazily on first access and then reused.

    Args:
        provider: Stats provider shared by every service
        settings: Application settings (defaults to ``get_settings()``)
        flags: Feature flag manager (defaults to the process-wide one)
        clock: Source of the current time
    """

    def __init__(
        self,
        provider: "IStatsProvider",
        settings: Settings | None = None,
        flags: FeatureFlagManager | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.provider = provider
        self.settings = settings or get_settings()
        self.flags = flags or get_feature_flags()
        self.clock = clock or utc_now
        self._analytics: "AnalyticsService | None" = None
        self._intervention: "PredictiveInterventionService | None" = None
        self._pathing: "LearningPathService | None" = None
        logger.info(f"ServiceRegistry initialized with {type(provider).__name__}")

    @property
    def analytics(self) -> "AnalyticsService":
        if self._analytics is None:
            from learnguard.modules.analytics.service import AnalyticsService

            self._analytics = AnalyticsService(self.provider, self.settings, self.clock)
        return self._analytics

    @property
    def intervention(self) -> "PredictiveInterventionService":
        if self._intervention is None:
            from learnguard.modules.intervention.service import PredictiveInterventionService

            self._intervention = PredictiveInterventionService(
                self.provider,
                analytics=self.analytics,
                flags=self.flags,
                settings=self.settings,
                clock=self.clock,
            )
        return self._intervention

    @property
    def pathing(self) -> "LearningPathService":
        if self._pathing is None:
            from learnguard.modules.pathing.service import LearningPathService

            self._pathing = LearningPathService(self.provider, self.settings, self.clock)
        return self._pathing

    def clear_cache(self) -> None:
        """Drop service instances (and their in-memory state)."""
        self._analytics = None
        self._intervention = None
        self._pathing = None
        logger.info("ServiceRegistry cache cleared")

    def get_service_info(self) -> dict[str, str]:
        """Get the implementation type of each instantiated service."""
        info = {"provider": type(self.provider).__name__}
        if self._analytics:
            info["analytics"] = type(self._analytics).__name__
        if self._intervention:
            info["intervention"] = type(self._intervention).__name__
        if self._pathing:
            info["pathing"] = type(self._pathing).__name__
        return info

    def __repr__(self) -> str:
        return f"ServiceRegistry(services={self.get_service_info()})"


@lru_cache
def get_service_registry() -> ServiceRegistry:
    """Get the process-wide ServiceRegistry, backed by the in-memory provider."""
    from learnguard.modules.stats.provider import get_stats_provider

    return ServiceRegistry(get_stats_provider())


def reset_service_registry() -> None:
    """Forget the process-wide registry so the next call builds a fresh one."""
    get_service_registry.cache_clear()
