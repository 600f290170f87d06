"""Strategy templates keyed by risk type.

Every RiskType must have an entry; ``None`` means no intervention is
available for that risk. The table is checked at import time so a new risk
type cannot be added without deciding on its template.
"""

from learnguard.modules.intervention.interface import (
    AddSupportParams,
    AdjustDifficultyParams,
    ChangeStrategyParams,
    InterventionAction,
    ModifyScheduleParams,
    ProvideMotivationParams,
    SkillReinforcementParams,
    StrategyTemplate,
    SuccessMetric,
)
from learnguard.shared.exceptions import ConfigurationError
from learnguard.shared.models import (
    ActionType,
    InterventionType,
    LearningFeature,
    RiskType,
    StrategyPriority,
)

ATTENTION_TEMPLATE = StrategyTemplate(
    name="Attention recovery",
    intervention_type=InterventionType.IMMEDIATE,
    default_priority=StrategyPriority.HIGH,
    actions=(
        InterventionAction(
            action_type=ActionType.ADJUST_DIFFICULTY,
            description="Temporarily lower difficulty to reduce cognitive load",
            parameters=AdjustDifficultyParams(difficulty_reduction=0.2, duration_hours=24),
            expected_impact="Fewer errors and better concentration",
            time_to_effect_hours=2,
        ),
        InterventionAction(
            action_type=ActionType.MODIFY_SCHEDULE,
            description="Shorten sessions and add more breaks",
            parameters=ModifyScheduleParams(session_duration_minutes=15, break_interval_minutes=5),
            expected_impact="Longer attention span",
            time_to_effect_hours=1,
        ),
        InterventionAction(
            action_type=ActionType.ADD_SUPPORT,
            description="Use Focus Mode more often and more effectively",
            parameters=AddSupportParams(
                feature=LearningFeature.FOCUS_MODE,
                sensitivity=0.8,
                visual_enhancement=True,
            ),
            expected_impact="Better focus and learning results",
            time_to_effect_hours=1,
        ),
    ),
    success_metrics=(
        SuccessMetric("focus_effectiveness", 80, 48),
        SuccessMetric("session_completion_rate", 85, 72),
    ),
    related_features=(LearningFeature.FOCUS_MODE,),
)

MOTIVATION_TEMPLATE = StrategyTemplate(
    name="Motivation boost",
    intervention_type=InterventionType.GRADUAL,
    default_priority=StrategyPriority.HIGH,
    actions=(
        InterventionAction(
            action_type=ActionType.PROVIDE_MOTIVATION,
            description="Set short-term goals that are easy to reach",
            parameters=ProvideMotivationParams(goal_difficulty=0.7, reward_frequency="daily"),
            expected_impact="A sense of achievement and renewed motivation",
            time_to_effect_hours=4,
        ),
        InterventionAction(
            action_type=ActionType.CHANGE_STRATEGY,
            description="Make content more playful and interactive",
            parameters=ChangeStrategyParams(gamification=True, variety_increase=0.3),
            expected_impact="More interest and engagement",
            time_to_effect_hours=8,
        ),
        InterventionAction(
            action_type=ActionType.MODIFY_SCHEDULE,
            description="Fit the study schedule to the learner's preferences",
            parameters=ModifyScheduleParams(flexible_scheduling=True, reminder_optimization=True),
            expected_impact="More frequent and consistent study",
            time_to_effect_hours=12,
        ),
    ),
    success_metrics=(
        SuccessMetric("session_frequency", 0.8, 168),
        SuccessMetric("feature_engagement", 0.6, 120),
    ),
    related_features=(
        LearningFeature.FOCUS_MODE,
        LearningFeature.PRONUNCIATION,
        LearningFeature.RESCUE_MODE,
        LearningFeature.SRS,
    ),
)

PLATEAU_TEMPLATE = StrategyTemplate(
    name="Plateau breakthrough",
    intervention_type=InterventionType.GRADUAL,
    default_priority=StrategyPriority.MEDIUM,
    actions=(
        InterventionAction(
            action_type=ActionType.ADJUST_DIFFICULTY,
            description="Gradually make content more challenging",
            parameters=AdjustDifficultyParams(difficulty_increase=0.15, progression_rate=0.05),
            expected_impact="Break through the plateau and keep progressing",
            time_to_effect_hours=24,
        ),
        InterventionAction(
            action_type=ActionType.CHANGE_STRATEGY,
            description="Introduce new methods and exercise types",
            parameters=ChangeStrategyParams(variety_increase=0.4, new_content_ratio=0.3),
            expected_impact="Renewed skill growth",
            time_to_effect_hours=48,
        ),
    ),
    success_metrics=(
        SuccessMetric("skill_improvement_rate", 0.05, 168),
        SuccessMetric("challenge_acceptance", 0.7, 120),
    ),
    related_features=(LearningFeature.PRONUNCIATION, LearningFeature.SRS),
)

MEMORY_TEMPLATE = StrategyTemplate(
    name="Memory reinforcement",
    intervention_type=InterventionType.IMMEDIATE,
    default_priority=StrategyPriority.URGENT,
    actions=(
        InterventionAction(
            action_type=ActionType.SKILL_REINFORCEMENT,
            description="Review SRS cards more often, difficult cards first",
            parameters=SkillReinforcementParams(
                review_frequency_multiplier=1.5,
                prioritize_difficult_items=True,
            ),
            expected_impact="Better retention and more effective reviews",
            time_to_effect_hours=6,
        ),
        InterventionAction(
            action_type=ActionType.CHANGE_STRATEGY,
            description="Use a mix of memory techniques while reviewing",
            parameters=ChangeStrategyParams(
                memory_techniques=("spaced_repetition", "active_recall", "elaboration"),
            ),
            expected_impact="Stronger encoding and recall",
            time_to_effect_hours=12,
        ),
    ),
    success_metrics=(
        SuccessMetric("srs_accuracy_rate", 80, 72),
        SuccessMetric("memory_retention", 85, 168),
    ),
    related_features=(LearningFeature.SRS,),
)

PRONUNCIATION_TEMPLATE = StrategyTemplate(
    name="Pronunciation recovery",
    intervention_type=InterventionType.IMMEDIATE,
    default_priority=StrategyPriority.HIGH,
    actions=(
        InterventionAction(
            action_type=ActionType.SKILL_REINFORCEMENT,
            description="Practice pronunciation daily, concentrating on difficult sounds",
            parameters=SkillReinforcementParams(
                prioritize_difficult_items=True,
                practice_frequency="daily",
            ),
            expected_impact="More accurate pronunciation",
            time_to_effect_hours=8,
        ),
        InterventionAction(
            action_type=ActionType.ADD_SUPPORT,
            description="Tune how Rescue Mode triggers and guides",
            parameters=AddSupportParams(
                feature=LearningFeature.RESCUE_MODE,
                sensitivity=0.9,
                guidance_detail="high",
            ),
            expected_impact="Better pronunciation guidance",
            time_to_effect_hours=2,
        ),
    ),
    success_metrics=(
        SuccessMetric("pronunciation_score", 75, 96),
        SuccessMetric("rescue_dependency", 0.2, 168),
    ),
    related_features=(LearningFeature.PRONUNCIATION, LearningFeature.RESCUE_MODE),
)

STRATEGY_TEMPLATES: dict[RiskType, StrategyTemplate | None] = {
    RiskType.ATTENTION_DECLINE: ATTENTION_TEMPLATE,
    RiskType.MOTIVATION_DROP: MOTIVATION_TEMPLATE,
    RiskType.SKILL_PLATEAU: PLATEAU_TEMPLATE,
    RiskType.MEMORY_DECAY: MEMORY_TEMPLATE,
    RiskType.PRONUNCIATION_REGRESSION: PRONUNCIATION_TEMPLATE,
    RiskType.CONSISTENCY_BREAK: None,
    RiskType.OVERLOAD_STRESS: None,
}


def check_templates(templates: dict[RiskType, StrategyTemplate | None]) -> None:
    """Ensure every risk type has an entry (a template or an explicit None).

    Raises:
        ConfigurationError: If a risk type is missing from the table
    """
    missing = [risk_type.value for risk_type in RiskType if risk_type not in templates]
    if missing:
        raise ConfigurationError(
            f"Strategy template table is missing risk types: {', '.join(missing)}",
            {"missing": missing},
        )


check_templates(STRATEGY_TEMPLATES)
