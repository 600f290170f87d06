"""Unit tests for service registry."""

from unittest.mock import MagicMock

import pytest

from learnguard.modules.analytics import AnalyticsService
from learnguard.modules.intervention import PredictiveInterventionService
from learnguard.modules.pathing import LearningPathService
from learnguard.modules.stats import InMemoryStatsProvider
from learnguard.shared.feature_flags import FeatureFlagManager
from learnguard.shared.service_registry import (
    ServiceRegistry,
    get_service_registry,
    reset_service_registry,
)


class TestServiceRegistry:
    """Tests for ServiceRegistry."""

    def test_services_are_created_lazily(self, registry):
        """Test that no service exists before first access."""
        assert registry.get_service_info() == {"provider": "InMemoryStatsProvider"}

        assert isinstance(registry.intervention, PredictiveInterventionService)
        info = registry.get_service_info()
        assert info["intervention"] == "PredictiveInterventionService"
        assert info["analytics"] == "AnalyticsService"
        assert "pathing" not in info

    def test_service_caching(self, registry):
        """Test that services are cached after first creation."""
        assert registry.analytics is registry.analytics
        assert registry.intervention is registry.intervention
        assert registry.pathing is registry.pathing

    def test_services_share_the_provider(self, registry, provider):
        """Test that the intervention service reads through the registry's provider."""
        assert registry.provider is provider
        assert isinstance(registry.pathing, LearningPathService)
        assert isinstance(registry.analytics, AnalyticsService)

    def test_clear_cache(self, registry):
        """Test that clear_cache removes cached services."""
        first = registry.intervention

        registry.clear_cache()

        assert registry.get_service_info() == {"provider": "InMemoryStatsProvider"}
        assert registry.intervention is not first

    def test_defaults(self):
        """Test that settings, flags and clock default to process-wide values."""
        registry = ServiceRegistry(InMemoryStatsProvider())

        assert isinstance(registry.flags, FeatureFlagManager)
        assert registry.settings is not None
        assert registry.clock().tzinfo is not None

    def test_explicit_flags(self, provider):
        flags = MagicMock()
        registry = ServiceRegistry(provider, flags=flags)
        assert registry.flags is flags

    def test_repr(self, registry):
        assert "InMemoryStatsProvider" in repr(registry)


class TestGetServiceRegistry:
    """Tests for the process-wide registry."""

    @pytest.fixture(autouse=True)
    def reset(self):
        reset_service_registry()
        yield
        reset_service_registry()

    def test_returns_same_instance(self):
        assert get_service_registry() is get_service_registry()

    def test_reset_builds_new_instance(self):
        first = get_service_registry()
        reset_service_registry()
        assert get_service_registry() is not first

    def test_uses_shared_in_memory_provider(self):
        assert isinstance(get_service_registry().provider, InMemoryStatsProvider)
