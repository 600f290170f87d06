"""Feature flags for the analysis pipeline.

Flags gate the parts of the pipeline that act on a learner's behalf: raising
alerts during analysis cycles, starting interventions automatically, and
running the background scheduler at all.

Usage:
    from learnguard.shared.feature_flags import get_feature_flags, FeatureFlags

    flags = get_feature_flags()
    if flags.is_enabled(FeatureFlags.ENABLE_AUTO_EXECUTION):
        # Start the top strategy of each auto-executable alert
    else:
        # Leave alerts for the learner to accept

Environment Variables:
    FF_ENABLE_BACKGROUND_JOBS: Run scheduled analysis and alert sweeps (default: false)
    FF_ENABLE_PREDICTIVE_ALERTS: Create alerts during analysis cycles (default: true)
    FF_ENABLE_AUTO_EXECUTION: Auto-start strategies of auto-executable alerts (default: false)
"""

from enum import Enum
from functools import lru_cache
import logging
import os

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes", "on")


class FeatureFlags(str, Enum):
    """Available feature flags, each read from ``FF_<NAME>``."""

    ENABLE_BACKGROUND_JOBS = "enable_background_jobs"
    ENABLE_PREDICTIVE_ALERTS = "enable_predictive_alerts"
    ENABLE_AUTO_EXECUTION = "enable_auto_execution"

    @property
    def env_key(self) -> str:
        return f"FF_{self.value.upper()}"

    @property
    def default(self) -> bool:
        """Value used when neither an override nor the env var is set."""
        return self is FeatureFlags.ENABLE_PREDICTIVE_ALERTS


class FlagSource(str, Enum):
    """Where a flag's current value came from."""

    OVERRIDE = "override"
    ENV = "env"
    DEFAULT = "default"


class FeatureFlagManager:
    """Process-wide flag state.

    Runtime overrides win over ``FF_*`` environment variables, which win over
    the flag's default. The environment is read on every check, so changing
    it takes effect without a restart.
    """

    _instance: "FeatureFlagManager | None" = None

    def __new__(cls) -> "FeatureFlagManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._overrides: dict[FeatureFlags, bool] = {}
        self._initialized = True
        logger.info("FeatureFlagManager initialized")

    def state(self, flag: FeatureFlags) -> tuple[bool, FlagSource]:
        """Resolve a flag and report which source decided it."""
        if flag in self._overrides:
            return self._overrides[flag], FlagSource.OVERRIDE

        env_value = os.getenv(flag.env_key)
        if env_value is not None:
            return env_value.strip().lower() in _TRUTHY, FlagSource.ENV

        return flag.default, FlagSource.DEFAULT

    def is_enabled(self, flag: FeatureFlags) -> bool:
        enabled, _ = self.state(flag)
        return enabled

    def set_override(self, flag: FeatureFlags, enabled: bool) -> None:
        """Pin a flag for the rest of the process (or until cleared)."""
        self._overrides[flag] = enabled
        logger.info(f"Feature flag {flag.value} overridden: {'on' if enabled else 'off'}")

    def enable(self, flag: FeatureFlags) -> None:
        self.set_override(flag, True)

    def disable(self, flag: FeatureFlags) -> None:
        self.set_override(flag, False)

    def clear_override(self, flag: FeatureFlags) -> None:
        """Drop the override for one flag so env and default apply again."""
        if self._overrides.pop(flag, None) is not None:
            logger.info(f"Feature flag override cleared: {flag.value}")

    def clear_all_overrides(self) -> None:
        if self._overrides:
            logger.info(f"Cleared {len(self._overrides)} feature flag overrides")
        self._overrides.clear()

    def get_all_states(self) -> dict[str, bool]:
        """Map of flag name to enabled state."""
        return {flag.value: self.is_enabled(flag) for flag in FeatureFlags}

    def describe(self) -> dict[str, tuple[bool, FlagSource]]:
        """Map of flag name to (enabled, source), for diagnostics."""
        return {flag.value: self.state(flag) for flag in FeatureFlags}

    def __repr__(self) -> str:
        enabled = [name for name, on in self.get_all_states().items() if on]
        return f"FeatureFlagManager(enabled={enabled})"


@lru_cache
def get_feature_flags() -> FeatureFlagManager:
    """Get the singleton FeatureFlagManager instance."""
    return FeatureFlagManager()


def is_background_jobs_enabled() -> bool:
    return get_feature_flags().is_enabled(FeatureFlags.ENABLE_BACKGROUND_JOBS)


def is_predictive_alerts_enabled() -> bool:
    return get_feature_flags().is_enabled(FeatureFlags.ENABLE_PREDICTIVE_ALERTS)


def is_auto_execution_enabled() -> bool:
    return get_feature_flags().is_enabled(FeatureFlags.ENABLE_AUTO_EXECUTION)
