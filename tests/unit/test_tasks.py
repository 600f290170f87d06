"""Unit tests for scheduled task functions."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from learnguard.jobs.tasks import run_alert_sweep, run_risk_analysis
from learnguard.shared.feature_flags import FeatureFlags


class TestRunRiskAnalysis:
    """Tests for run_risk_analysis."""

    @pytest.mark.asyncio
    async def test_analyzes_every_learner(self, registry, record, at_risk_snapshot, healthy_snapshot):
        record(uuid4(), at_risk_snapshot)
        record(uuid4(), healthy_snapshot)

        result = await run_risk_analysis(registry)

        assert result["users_analyzed"] == 2
        assert result["risks_detected"] == 4
        assert result["alerts_created"] == 4
        assert result["interventions_started"] == 0
        assert result["errors"] == []
        assert "completed_at" in result
        assert result["duration_seconds"] == 0

    @pytest.mark.asyncio
    async def test_auto_execution_counts(self, registry, record, at_risk_snapshot):
        registry.flags.enable(FeatureFlags.ENABLE_AUTO_EXECUTION)
        record(uuid4(), at_risk_snapshot)

        result = await run_risk_analysis(registry)

        assert result["interventions_started"] == 4

    @pytest.mark.asyncio
    async def test_no_learners(self, registry):
        result = await run_risk_analysis(registry)

        assert result["users_analyzed"] == 0
        assert result["errors"] == []

    @pytest.mark.asyncio
    async def test_learner_failure_is_recorded(self, registry, record, at_risk_snapshot):
        """Test that one failing learner does not stop the others."""
        failing, working = uuid4(), uuid4()
        record(failing, at_risk_snapshot)
        record(working, at_risk_snapshot)
        service = registry.intervention
        original = service.run_analysis_cycle

        async def cycle(user_id):
            if user_id == failing:
                raise RuntimeError("boom")
            return await original(user_id)

        with patch.object(service, "run_analysis_cycle", side_effect=cycle):
            result = await run_risk_analysis(registry)

        assert result["users_analyzed"] == 1
        assert len(result["errors"]) == 1
        assert "boom" in result["errors"][0]

    @pytest.mark.asyncio
    async def test_listing_failure_is_recorded(self, registry, provider):
        with patch.object(provider, "list_user_ids", AsyncMock(side_effect=RuntimeError("offline"))):
            result = await run_risk_analysis(registry)

        assert result["users_analyzed"] == 0
        assert "offline" in result["errors"][0]


class TestRunAlertSweep:
    """Tests for run_alert_sweep."""

    @pytest.mark.asyncio
    async def test_removes_expired_alerts(self, registry, record, clock, at_risk_snapshot):
        record(uuid4(), at_risk_snapshot)
        await run_risk_analysis(registry)

        clock.advance(hours=25)
        result = await run_alert_sweep(registry)

        assert result["alerts_removed"] == 2
        assert result["errors"] == []

    @pytest.mark.asyncio
    async def test_sweep_failure_is_recorded(self, registry):
        with patch.object(
            registry.intervention, "clear_expired_alerts", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            result = await run_alert_sweep(registry)

        assert result["alerts_removed"] == 0
        assert "boom" in result["errors"][0]
