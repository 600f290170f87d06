"""Path optimization from a learning profile.

The optimizer is a set of fixed lookup tables and threshold rules:
- phase from the mean of the three skill scores
- one recommendation per weak area, then phase and style recommendations
- insights, milestones and adaptive adjustments from score thresholds
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

from learnguard.modules.pathing.interface import (
    AdaptiveAdjustment,
    LearningInsight,
    LearningProfile,
    LearningRecommendation,
    Milestone,
    OptimizedLearningPath,
)
from learnguard.shared import constants as c
from learnguard.shared.models import (
    Impact,
    LearningFeature,
    LearningPhase,
    LearningStyle,
    RecommendationPriority,
    RecommendationType,
)

logger = logging.getLogger(__name__)

F = LearningFeature


@dataclass(frozen=True)
class RecommendationText:
    title: str
    description: str
    action_items: tuple[str, ...]
    related_features: tuple[LearningFeature, ...]
    reasoning: str = ""
    expected_benefit: str = ""


WEAKNESS_RECOMMENDATIONS: dict[str, RecommendationText] = {
    "attention_focus": RecommendationText(
        title="Focus training",
        description="Build concentration with Focus Mode practice",
        reasoning="You are often distracted while studying; focus training should help",
        action_items=(
            "Practice focusing for 10 minutes every day",
            "Study in a quiet environment",
            "Use Focus Mode's visual guidance",
        ),
        expected_benefit="+25% learning efficiency and fewer errors",
        related_features=(F.FOCUS_MODE,),
    ),
    "pronunciation": RecommendationText(
        title="Pronunciation reinforcement",
        description="Practice pronunciation to speak more clearly",
        reasoning="Your pronunciation scores are low; practice more often",
        action_items=(
            "Practice pronunciation for 15 minutes every day",
            "Concentrate on difficult sounds",
            "Use Rescue Mode for pronunciation guidance",
        ),
        expected_benefit="+30% pronunciation accuracy",
        related_features=(F.PRONUNCIATION, F.RESCUE_MODE),
    ),
    "learning_persistence": RecommendationText(
        title="Learning persistence",
        description="Build habits that keep you going through hard material",
        reasoning="You often stop when material gets hard; Rescue Mode can help you continue",
        action_items=(
            "Set small goals and finish them one at a time",
            "Use Rescue Mode as soon as you get stuck",
            "Check in every day",
        ),
        expected_benefit="+40% completion rate",
        related_features=(F.RESCUE_MODE,),
    ),
    "memory_retention": RecommendationText(
        title="Memory retention",
        description="Tune your review routine for long-term memory",
        reasoning="Your SRS review accuracy is low; adjust how you review",
        action_items=(
            "Finish SRS reviews on time",
            "Review difficult cards more often",
            "Combine several memory techniques",
        ),
        expected_benefit="+35% retention",
        related_features=(F.SRS,),
    ),
}

PHASE_RECOMMENDATIONS: dict[LearningPhase, tuple[RecommendationText, ...]] = {
    LearningPhase.FOUNDATION: (
        RecommendationText(
            title="Build a learning foundation",
            description="Establish and consolidate the basic skills",
            action_items=(
                "Study for 20 minutes every day",
                "Concentrate on core vocabulary",
                "Build a study habit",
            ),
            related_features=(F.FOCUS_MODE, F.PRONUNCIATION),
        ),
    ),
    LearningPhase.DEVELOPMENT: (
        RecommendationText(
            title="Skill development",
            description="Build on the basics to improve every skill",
            action_items=(
                "Raise the difficulty",
                "Grow your vocabulary",
                "Improve pronunciation accuracy",
            ),
            related_features=(F.PRONUNCIATION, F.SRS),
        ),
    ),
    LearningPhase.MASTERY: (
        RecommendationText(
            title="Mastery training",
            description="Aim for a higher level of command",
            action_items=(
                "Take on difficult content",
                "Keep reviewing frequently",
                "Polish your pronunciation",
            ),
            related_features=(F.SRS, F.RESCUE_MODE),
        ),
    ),
    LearningPhase.MAINTENANCE: (
        RecommendationText(
            title="Skill maintenance",
            description="Keep your current level and avoid regression",
            action_items=(
                "Review regularly",
                "Keep a steady study rhythm",
                "Try new content",
            ),
            related_features=(F.SRS,),
        ),
    ),
}

STYLE_RECOMMENDATIONS: dict[LearningStyle, RecommendationText] = {
    LearningStyle.VISUAL: RecommendationText(
        title="Visual learning",
        description="Make the most of your visual strengths",
        action_items=(
            "Use Focus Mode's visual guidance",
            "Draw mind maps",
            "Memorize with images",
        ),
        related_features=(F.FOCUS_MODE,),
    ),
    LearningStyle.AUDITORY: RecommendationText(
        title="Auditory learning",
        description="Play to your listening strengths",
        action_items=(
            "Do more listening practice",
            "Read aloud and repeat",
            "Study with audio material",
        ),
        related_features=(F.PRONUNCIATION,),
    ),
    LearningStyle.KINESTHETIC: RecommendationText(
        title="Interactive learning",
        description="Learn through interactive practice",
        action_items=(
            "Do more interactive exercises",
            "Use Rescue Mode when you need help",
            "Practice with role play",
        ),
        related_features=(F.RESCUE_MODE, F.PRONUNCIATION),
    ),
    LearningStyle.MIXED: RecommendationText(
        title="Mixed learning strategy",
        description="Combine several ways of learning",
        action_items=(
            "Rotate between study methods",
            "Combine seeing, hearing and doing",
            "Keep your practice varied",
        ),
        related_features=(F.FOCUS_MODE, F.PRONUNCIATION, F.RESCUE_MODE, F.SRS),
    ),
}

MILESTONES: dict[LearningPhase, tuple[Milestone, ...]] = {
    LearningPhase.FOUNDATION: (
        Milestone(
            "Build a stable study habit",
            14,
            (
                "Complete your study tasks 7 days in a row",
                "Set a fixed study time",
                "Finish the core vocabulary",
            ),
        ),
        Milestone(
            "Master basic pronunciation",
            21,
            (
                "Reach a pronunciation score of 70",
                "Finish the basic sound exercises",
                "Rely less on Rescue Mode",
            ),
        ),
    ),
    LearningPhase.DEVELOPMENT: (
        Milestone(
            "Improve learning efficiency",
            30,
            (
                "Use Focus Mode 50% less",
                "Reach 80% accuracy",
                "Settle on an efficient study strategy",
            ),
        ),
        Milestone(
            "Expand vocabulary",
            45,
            (
                "Reach 500 SRS cards",
                "Keep review accuracy at 85%",
                "Master high-frequency words",
            ),
        ),
    ),
    LearningPhase.MASTERY: (
        Milestone(
            "Reach an advanced level",
            60,
            (
                "Reach a pronunciation score of 90",
                "Reach 90% SRS accuracy",
                "Take on difficult content",
            ),
        ),
    ),
    LearningPhase.MAINTENANCE: (
        Milestone(
            "Maintain skill level",
            30,
            (
                "Review regularly",
                "Keep a steady study rhythm",
                "Explore new content",
            ),
        ),
    ),
}


def determine_phase(average_skill: float) -> LearningPhase:
    """Map the mean skill score to a phase; lower bounds are inclusive."""
    if average_skill < c.DEVELOPMENT_PHASE_MIN_SKILL:
        return LearningPhase.FOUNDATION
    if average_skill < c.MASTERY_PHASE_MIN_SKILL:
        return LearningPhase.DEVELOPMENT
    if average_skill < c.MAINTENANCE_PHASE_MIN_SKILL:
        return LearningPhase.MASTERY
    return LearningPhase.MAINTENANCE


class PathOptimizer:
    """Derives an OptimizedLearningPath from a LearningProfile.

    Args:
        ttl_hours: Validity of a generated path
    """

    def __init__(self, ttl_hours: float = 24.0) -> None:
        if ttl_hours <= 0:
            raise ValueError(f"ttl_hours must be positive, got {ttl_hours}")
        self._ttl = timedelta(hours=ttl_hours)

    def optimize(self, profile: LearningProfile, generated_at: datetime) -> OptimizedLearningPath:
        """Build a path for a profile.

        Args:
            profile: Learner profile
            generated_at: Generation timestamp; ``valid_until`` is this plus the TTL

        Returns:
            OptimizedLearningPath
        """
        phase = determine_phase(profile.average_skill)
        path = OptimizedLearningPath(
            user_id=profile.user_id,
            current_phase=phase,
            recommendations=tuple(self.recommendations(profile, phase)),
            insights=tuple(self.insights(profile)),
            next_milestones=MILESTONES[phase],
            adaptive_adjustments=tuple(self.adjustments(profile)),
            generated_at=generated_at,
            valid_until=generated_at + self._ttl,
        )
        logger.info(
            f"Generated path for user {profile.user_id}: phase={phase.value}, "
            f"{len(path.recommendations)} recommendations"
        )
        return path

    def recommendations(
        self, profile: LearningProfile, phase: LearningPhase
    ) -> list[LearningRecommendation]:
        """Weak-area, phase and style recommendations, highest priority first."""
        recommendations = []

        for area in profile.weak_areas:
            text = WEAKNESS_RECOMMENDATIONS.get(area)
            if text is None:
                logger.warning(f"No recommendation for weak area {area!r}")
                continue
            recommendations.append(
                self._recommend(
                    text,
                    RecommendationPriority.HIGH,
                    reasoning=text.reasoning,
                    expected_benefit=text.expected_benefit,
                    minutes=c.WEAKNESS_RECOMMENDATION_MINUTES,
                    confidence=c.WEAKNESS_RECOMMENDATION_CONFIDENCE,
                    based_on=("learning_profile", "performance_stats"),
                )
            )

        for text in PHASE_RECOMMENDATIONS[phase]:
            recommendations.append(
                self._recommend(
                    text,
                    RecommendationPriority.MEDIUM,
                    reasoning=f"Based on your current {phase.value} phase",
                    expected_benefit="Improve overall learning effectiveness",
                    minutes=c.PHASE_RECOMMENDATION_MINUTES,
                    confidence=c.PHASE_RECOMMENDATION_CONFIDENCE,
                    based_on=("learning_phase", "skill_assessment"),
                )
            )

        style = STYLE_RECOMMENDATIONS[profile.learning_style]
        recommendations.append(
            self._recommend(
                style,
                RecommendationPriority.MEDIUM,
                reasoning=f"Based on your {profile.learning_style.value} learning style",
                expected_benefit="More efficient and more enjoyable study",
                minutes=c.STYLE_RECOMMENDATION_MINUTES,
                confidence=c.STYLE_RECOMMENDATION_CONFIDENCE,
                based_on=("learning_style_analysis",),
            )
        )

        return sorted(recommendations, key=lambda r: r.priority.weight, reverse=True)

    def insights(self, profile: LearningProfile) -> list[LearningInsight]:
        insights = []

        if profile.pronunciation_skill > 80:
            insights.append(
                LearningInsight(
                    category="performance",
                    insight="Your pronunciation is excellent; try more difficult content",
                    impact=Impact.POSITIVE,
                    confidence=90,
                    supporting_data={"pronunciation_skill": profile.pronunciation_skill},
                    recommendations=(
                        "Try more complex pronunciation exercises",
                        "Practice dialects and accent variation",
                    ),
                )
            )

        if profile.consistency_score < 50:
            insights.append(
                LearningInsight(
                    category="behavior",
                    insight="Your study rhythm is irregular; set a fixed study time",
                    impact=Impact.NEGATIVE,
                    confidence=85,
                    supporting_data={"consistency_score": profile.consistency_score},
                    recommendations=(
                        "Pick a fixed daily study time",
                        "Turn on reminders",
                        "Start short and build up gradually",
                    ),
                )
            )

        if profile.memory_retention > 85 and profile.focus_strength > 80:
            insights.append(
                LearningInsight(
                    category="progress",
                    insight="Your memory and focus are both strong; you can speed up",
                    impact=Impact.POSITIVE,
                    confidence=88,
                    supporting_data={
                        "memory_retention": profile.memory_retention,
                        "focus_strength": profile.focus_strength,
                    },
                    recommendations=(
                        "Take on more material",
                        "Shorten review intervals",
                        "Try harder content",
                    ),
                )
            )

        return insights

    def adjustments(self, profile: LearningProfile) -> list[AdaptiveAdjustment]:
        adjustments = []

        if profile.motivation_level < 50:
            adjustments.append(
                AdaptiveAdjustment(
                    reason="Low motivation detected",
                    adjustment="Lower the difficulty and add quick wins",
                    expected_impact="More motivation and engagement",
                )
            )

        if profile.consistency_score < 40:
            adjustments.append(
                AdaptiveAdjustment(
                    reason="Irregular study rhythm",
                    adjustment="Shorter sessions, more often",
                    expected_impact="A stable study habit",
                )
            )

        if profile.pronunciation_skill > 90 and profile.memory_retention > 85:
            adjustments.append(
                AdaptiveAdjustment(
                    reason="High skill level",
                    adjustment="Raise difficulty and challenge",
                    expected_impact="Sustained interest and continued progress",
                )
            )

        return adjustments

    @staticmethod
    def _recommend(
        text: RecommendationText,
        priority: RecommendationPriority,
        reasoning: str,
        expected_benefit: str,
        minutes: int,
        confidence: float,
        based_on: tuple[str, ...],
    ) -> LearningRecommendation:
        return LearningRecommendation(
            type=RecommendationType.STRATEGY,
            priority=priority,
            title=text.title,
            description=text.description,
            reasoning=reasoning,
            action_items=text.action_items,
            expected_benefit=expected_benefit,
            estimated_minutes=minutes,
            confidence=confidence,
            related_features=text.related_features,
            based_on=based_on,
        )
