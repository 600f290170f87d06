"""Predictive Intervention Service - Risk to alert to execution pipeline.

This service provides:
- Risk analysis from the latest stats snapshot and trend classification
- Strategy generation and predictive alert creation
- Alert dismissal, history and expiry sweeps
- Intervention execution tracking
- A full analysis cycle used by the scheduler and the API

Engines are synchronous; this facade is async because the stats provider
is. A full analysis cycle is serialized per learner so that concurrent
triggers for the same learner cannot raise duplicate alerts.
"""

from collections import defaultdict
from typing import Any
from uuid import UUID
import asyncio
import logging

from learnguard.modules.analytics.interface import LearningTrend
from learnguard.modules.analytics.service import AnalyticsService
from learnguard.modules.intervention.alerts import AlertManager
from learnguard.modules.intervention.executor import InterventionExecutor
from learnguard.modules.intervention.interface import (
    IPredictiveInterventionService,
    InterventionExecution,
    InterventionStrategy,
    PredictiveAlert,
)
from learnguard.modules.intervention.strategy import StrategyGenerator
from learnguard.modules.risk.analyzer import RiskAnalyzer
from learnguard.modules.risk.interface import LearningRisk
from learnguard.modules.stats.interface import IStatsProvider, StatsSnapshot
from learnguard.shared.config import Settings, get_settings
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.feature_flags import FeatureFlagManager, FeatureFlags, get_feature_flags
from learnguard.shared.models import ExecutionStatus

logger = logging.getLogger(__name__)


class PredictiveInterventionService(IPredictiveInterventionService):
    """Facade over the risk analyzer, strategy generator, alerts and executor.

    Args:
        provider: Source of learner snapshots
        analytics: Trend source for the skill-plateau heuristic
        analyzer: Risk detection engine
        generator: Strategy generation engine
        alerts: Alert store
        executor: Execution store
        flags: Feature flags consulted by ``run_analysis_cycle``
        settings: Application settings
        clock: Source of the current time
    """

    def __init__(
        self,
        provider: IStatsProvider,
        analytics: AnalyticsService | None = None,
        analyzer: RiskAnalyzer | None = None,
        generator: StrategyGenerator | None = None,
        alerts: AlertManager | None = None,
        executor: InterventionExecutor | None = None,
        flags: FeatureFlagManager | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or utc_now
        self._provider = provider
        self._analytics = analytics or AnalyticsService(provider, self._settings, self._clock)
        self._analyzer = analyzer or RiskAnalyzer(clock=self._clock)
        self._generator = generator or StrategyGenerator(clock=self._clock)
        self._alerts = alerts or AlertManager(
            history_limit=self._settings.alert_history_limit, clock=self._clock
        )
        self._executor = executor or InterventionExecutor(clock=self._clock)
        self._flags = flags or get_feature_flags()

        self._last_snapshots: dict[UUID, StatsSnapshot] = {}
        self._strategies: dict[UUID, InterventionStrategy] = {}
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def alerts(self) -> AlertManager:
        return self._alerts

    @property
    def executor(self) -> InterventionExecutor:
        return self._executor

    # ===================
    # Risks and strategies
    # ===================

    async def analyze_learning_risks(self, user_id: UUID) -> list[LearningRisk]:
        """Detect risks for a learner.

        Falls back to the last snapshot seen for the learner when the stats
        provider fails, and returns no risks when there is none.

        Args:
            user_id: Learner to analyze

        Returns:
            Risks in detection order
        """
        snapshot = await self._fetch_snapshot(user_id)
        if snapshot is None:
            return []

        trends = await self._fetch_trends(user_id)
        risks = self._analyzer.analyze(snapshot, trends)
        logger.info(f"Detected {len(risks)} risks for user {user_id}")
        return risks

    async def generate_intervention_strategies(
        self, risks: list[LearningRisk]
    ) -> list[InterventionStrategy]:
        strategies = self._generator.generate(risks)
        for strategy in strategies:
            self._strategies[strategy.id] = strategy
        self._prune_strategies(keep={s.id for s in strategies})
        return strategies

    def get_strategy(self, strategy_id: UUID) -> InterventionStrategy | None:
        """A strategy generated by this service, if it is still known."""
        return self._strategies.get(strategy_id)

    def _prune_strategies(self, keep: set[UUID]) -> None:
        """Drop the oldest strategies beyond the cache limit.

        Strategies recommended by an alert in history or backing an open
        execution are never dropped, so the map is bounded by the alert
        history, the open executions and the configured limit.
        """
        overflow = len(self._strategies) - self._settings.strategy_cache_limit
        if overflow <= 0:
            return
        keep = keep | self._alerts.strategy_ids() | self._executor.open_strategy_ids()
        stale = [sid for sid in self._strategies if sid not in keep][:overflow]
        for strategy_id in stale:
            del self._strategies[strategy_id]
        if stale:
            logger.debug(f"Dropped {len(stale)} unreferenced strategies")

    @property
    def strategy_count(self) -> int:
        return len(self._strategies)

    async def _fetch_snapshot(self, user_id: UUID) -> StatsSnapshot | None:
        try:
            snapshot = await self._provider.get_snapshot(user_id)
        except Exception as e:
            fallback = self._last_snapshots.get(user_id)
            logger.error(
                f"Stats retrieval failed for user {user_id}: {e}; "
                f"{'using last-known snapshot' if fallback else 'no snapshot available'}"
            )
            return fallback

        self._last_snapshots[user_id] = snapshot
        return snapshot

    async def _fetch_trends(self, user_id: UUID) -> list[LearningTrend]:
        try:
            return await self._analytics.analyze_trends(user_id)
        except Exception as e:
            logger.warning(f"Trend analysis failed for user {user_id}: {e}")
            return []

    # ===================
    # Alerts
    # ===================

    async def create_predictive_alerts(
        self,
        risks: list[LearningRisk],
        strategies: list[InterventionStrategy],
        user_id: UUID | None = None,
    ) -> list[PredictiveAlert]:
        return self._alerts.create_alerts(risks, strategies, user_id=user_id)

    async def dismiss_alert(self, alert_id: UUID) -> None:
        self._alerts.dismiss(alert_id)

    async def get_alert(self, alert_id: UUID) -> PredictiveAlert:
        return self._alerts.get(alert_id)

    async def visible_alerts(self, user_id: UUID | None = None) -> list[PredictiveAlert]:
        return self._alerts.visible_alerts(user_id)

    async def get_alert_history(
        self, user_id: UUID | None = None, limit: int = 10
    ) -> list[PredictiveAlert]:
        return self._alerts.history(user_id, limit)

    async def clear_expired_alerts(self) -> int:
        return self._alerts.clear_expired()

    # ===================
    # Executions
    # ===================

    async def execute_intervention(self, strategy_id: UUID, user_id: UUID) -> InterventionExecution:
        return self._executor.execute(strategy_id, user_id, total_actions=self._action_count(strategy_id))

    async def plan_intervention(self, strategy_id: UUID, user_id: UUID) -> InterventionExecution:
        return self._executor.plan(strategy_id, user_id, total_actions=self._action_count(strategy_id))

    async def start_intervention(self, execution_id: UUID) -> InterventionExecution:
        return self._executor.start(execution_id)

    async def update_intervention_progress(
        self,
        execution_id: UUID,
        completed_actions: int | None = None,
        total_actions: int | None = None,
        current_phase: str | None = None,
        next_milestone: str | None = None,
    ) -> InterventionExecution:
        return self._executor.update_progress(
            execution_id,
            completed_actions=completed_actions,
            total_actions=total_actions,
            current_phase=current_phase,
            next_milestone=next_milestone,
        )

    async def record_intervention_metric(
        self,
        execution_id: UUID,
        metric: str,
        baseline: float,
        current: float,
        target: float,
    ) -> InterventionExecution:
        self._executor.record_metric(execution_id, metric, baseline, current, target)
        return self._executor.get(execution_id)

    async def complete_intervention(
        self, execution_id: UUID, results: dict[str, Any] | None = None
    ) -> InterventionExecution:
        return self._executor.complete(execution_id, results)

    async def fail_intervention(
        self, execution_id: UUID, results: dict[str, Any] | None = None
    ) -> InterventionExecution:
        return self._executor.fail(execution_id, results)

    async def cancel_intervention(self, execution_id: UUID) -> InterventionExecution:
        return self._executor.cancel(execution_id)

    async def record_feedback(
        self,
        execution_id: UUID,
        rating: int,
        comment: str | None = None,
        helpful: bool | None = None,
    ) -> InterventionExecution:
        return self._executor.record_feedback(execution_id, rating, comment, helpful)

    async def get_intervention(self, execution_id: UUID) -> InterventionExecution:
        return self._executor.get(execution_id)

    async def list_interventions(
        self, user_id: UUID, status: ExecutionStatus | None = None
    ) -> list[InterventionExecution]:
        return self._executor.list_for(user_id, status)

    async def get_active_interventions(self, user_id: UUID) -> list[InterventionExecution]:
        return self._executor.active_for(user_id)

    def _action_count(self, strategy_id: UUID) -> int:
        strategy = self._strategies.get(strategy_id)
        return len(strategy.actions) if strategy else 0

    # ===================
    # Analysis cycle
    # ===================

    async def run_analysis_cycle(self, user_id: UUID) -> dict[str, Any]:
        """Run risks, strategies, alerts and auto-execution for one learner.

        Alerts are only created while predictive alerts are enabled. The top
        strategy of each auto-executable alert is started only while auto
        execution is enabled, and only when the learner has no active
        execution for the same risk type.

        Args:
            user_id: Learner to analyze

        Returns:
            Summary counts for the cycle
        """
        async with self._locks[user_id]:
            risks = await self.analyze_learning_risks(user_id)
            strategies = await self.generate_intervention_strategies(risks)

            alerts: list[PredictiveAlert] = []
            if self._flags.is_enabled(FeatureFlags.ENABLE_PREDICTIVE_ALERTS):
                alerts = self._alerts.create_alerts(risks, strategies, user_id=user_id)

            executions: list[InterventionExecution] = []
            if self._flags.is_enabled(FeatureFlags.ENABLE_AUTO_EXECUTION):
                executions = self._auto_execute(user_id, alerts)

        return {
            "user_id": str(user_id),
            "risks": len(risks),
            "strategies": len(strategies),
            "alerts": len(alerts),
            "auto_executed": len(executions),
            "risk_types": [r.risk_type.value for r in risks],
        }

    def _auto_execute(
        self, user_id: UUID, alerts: list[PredictiveAlert]
    ) -> list[InterventionExecution]:
        running = {
            self._strategies[e.strategy_id].target_risk
            for e in self._executor.active_for(user_id)
            if e.strategy_id in self._strategies
        }

        executions = []
        for alert in alerts:
            if not alert.auto_executable or not alert.recommended_strategies:
                continue
            strategy = alert.recommended_strategies[0]
            if strategy.target_risk in running:
                logger.debug(f"Skipping auto-execution of {strategy.name}: already running")
                continue
            executions.append(
                self._executor.execute(strategy.id, user_id, total_actions=len(strategy.actions))
            )
            running.add(strategy.target_risk)

        if executions:
            logger.info(f"Auto-executed {len(executions)} interventions for user {user_id}")
        return executions
