"""Intervention Module - Strategies, predictive alerts and execution tracking.

Usage:
    from learnguard.modules.intervention import PredictiveInterventionService

    service = PredictiveInterventionService(provider)
    risks = await service.analyze_learning_risks(user_id)
    strategies = await service.generate_intervention_strategies(risks)
    alerts = await service.create_predictive_alerts(risks, strategies, user_id)
"""

from learnguard.modules.intervention.alerts import AlertManager
from learnguard.modules.intervention.executor import ALLOWED_TRANSITIONS, InterventionExecutor
from learnguard.modules.intervention.interface import (
    ActionParameters,
    AddSupportParams,
    AdjustDifficultyParams,
    ChangeStrategyParams,
    ExecutionProgress,
    InterventionAction,
    InterventionExecution,
    InterventionStrategy,
    IPredictiveInterventionService,
    ModifyScheduleParams,
    MonitoredMetric,
    PredictiveAlert,
    ProvideMotivationParams,
    SkillReinforcementParams,
    StrategyTemplate,
    SuccessMetric,
    UserFeedback,
)
from learnguard.modules.intervention.service import PredictiveInterventionService
from learnguard.modules.intervention.strategy import StrategyGenerator, escalate_priority
from learnguard.modules.intervention.templates import STRATEGY_TEMPLATES, check_templates

__all__ = [
    # Action parameters
    "ActionParameters",
    "AddSupportParams",
    "AdjustDifficultyParams",
    "ChangeStrategyParams",
    "ModifyScheduleParams",
    "ProvideMotivationParams",
    "SkillReinforcementParams",
    # Interface types
    "ExecutionProgress",
    "InterventionAction",
    "InterventionExecution",
    "InterventionStrategy",
    "IPredictiveInterventionService",
    "MonitoredMetric",
    "PredictiveAlert",
    "StrategyTemplate",
    "SuccessMetric",
    "UserFeedback",
    # Engines
    "ALLOWED_TRANSITIONS",
    "AlertManager",
    "InterventionExecutor",
    "STRATEGY_TEMPLATES",
    "StrategyGenerator",
    "check_templates",
    "escalate_priority",
    # Service
    "PredictiveInterventionService",
]
