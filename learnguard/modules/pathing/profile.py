"""Learning profile derivation.

Each score is an independent rule over the snapshot, clamped to [0, 100].
Style and preferences compare feature usage and accuracy against fixed
cut-offs.
"""

from datetime import datetime
from uuid import UUID
import logging

from learnguard.modules.pathing.interface import LearningProfile
from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared import constants as c
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.models import DifficultyPreference, LearningStyle, PacePreference

logger = logging.getLogger(__name__)


def clamp_score(value: float) -> float:
    return max(c.MIN_PROFILE_SCORE, min(c.MAX_PROFILE_SCORE, value))


# ===================
# Scores
# ===================

def focus_strength(snapshot: StatsSnapshot) -> float:
    """Few Focus Mode triggers with a high success rate means strong focus."""
    focus = snapshot.focus_mode
    score = c.BASE_PROFILE_SCORE
    if focus.triggered < 5 and focus.success_rate > 80:
        score = 85.0
    elif focus.triggered < 10 and focus.success_rate > 60:
        score = 70.0
    elif focus.triggered > 20 or focus.success_rate < 40:
        score = 30.0
    return clamp_score(score + (focus.effectiveness - 50) * 0.3)


def memory_retention(snapshot: StatsSnapshot) -> float:
    srs = snapshot.srs
    graduation_rate = srs.graduated_cards / max(1, srs.cards_total) * 100
    return clamp_score(srs.accuracy_rate * 0.7 + graduation_rate * 0.3)


def pronunciation_skill(snapshot: StatsSnapshot) -> float:
    pronunciation = snapshot.pronunciation
    score = pronunciation.average_score

    if pronunciation.assessments > 50:
        score += 5
    elif pronunciation.assessments > 20:
        score += 2

    if pronunciation.improvement > 10:
        score += 10
    elif pronunciation.improvement > 5:
        score += 5

    return clamp_score(score)


def consistency_score(snapshot: StatsSnapshot) -> float:
    """Session length in the ideal band and session frequency over 30 days.

    A learner without sessions scores 0.
    """
    sessions = snapshot.overall.total_sessions
    if sessions <= 0:
        return c.MIN_PROFILE_SCORE

    score = c.BASE_PROFILE_SCORE
    average = snapshot.average_session_minutes
    if c.IDEAL_SESSION_MIN_MINUTES <= average <= c.IDEAL_SESSION_MAX_MINUTES:
        score += 20

    frequency = sessions / c.CONSISTENCY_WINDOW_DAYS
    if frequency >= 0.5:
        score += 30
    elif frequency >= 0.3:
        score += 15

    return clamp_score(score)


def motivation_level(snapshot: StatsSnapshot) -> float:
    overall = snapshot.overall
    reviews = snapshot.srs.reviews_today
    score = c.BASE_PROFILE_SCORE

    if overall.total_sessions > 20:
        score += 20
    elif overall.total_sessions > 10:
        score += 10

    if overall.overall_accuracy > 80:
        score += 15
    elif overall.overall_accuracy > 60:
        score += 8

    if reviews > 10:
        score += 15
    elif reviews > 5:
        score += 8

    return clamp_score(score)


# ===================
# Style and preferences
# ===================

def learning_style(snapshot: StatsSnapshot) -> LearningStyle:
    focus = snapshot.focus_mode.triggered
    pronunciation = snapshot.pronunciation.assessments
    rescue = snapshot.rescue_mode.triggered

    if focus > pronunciation and focus > rescue:
        return LearningStyle.VISUAL
    if pronunciation > focus and pronunciation > rescue:
        return LearningStyle.AUDITORY
    if rescue > 0:
        return LearningStyle.KINESTHETIC
    return LearningStyle.MIXED


def difficulty_preference(snapshot: StatsSnapshot) -> DifficultyPreference:
    accuracy = snapshot.overall.overall_accuracy
    rescue = snapshot.rescue_mode.triggered

    if accuracy > 85 and rescue < 5:
        return DifficultyPreference.CHALLENGING
    if accuracy > 70 and rescue < 10:
        return DifficultyPreference.MODERATE
    if accuracy < 60 or rescue > 15:
        return DifficultyPreference.EASY
    return DifficultyPreference.ADAPTIVE


def pace_preference(snapshot: StatsSnapshot) -> PacePreference:
    if snapshot.overall.total_sessions <= 0:
        return PacePreference.ADAPTIVE

    average = snapshot.average_session_minutes
    if average > 30:
        return PacePreference.SLOW
    if average > 15:
        return PacePreference.MODERATE
    return PacePreference.FAST


# ===================
# Areas and topics
# ===================

def weak_areas(snapshot: StatsSnapshot) -> list[str]:
    areas = []
    if snapshot.focus_mode.triggered > c.WEAK_FOCUS_TRIGGERS:
        areas.append("attention_focus")
    if snapshot.pronunciation.average_score < c.WEAK_PRONUNCIATION_SCORE:
        areas.append("pronunciation")
    if snapshot.rescue_mode.triggered > c.WEAK_RESCUE_TRIGGERS:
        areas.append("learning_persistence")
    if snapshot.srs.accuracy_rate < c.WEAK_SRS_ACCURACY:
        areas.append("memory_retention")
    return areas


def strong_areas(snapshot: StatsSnapshot) -> list[str]:
    areas = []
    if snapshot.focus_mode.success_rate > c.STRONG_FOCUS_SUCCESS:
        areas.append("visual_learning")
    if snapshot.pronunciation.average_score > c.STRONG_PRONUNCIATION_SCORE:
        areas.append("pronunciation")
    if snapshot.rescue_mode.effectiveness > c.STRONG_RESCUE_EFFECTIVENESS:
        areas.append("problem_solving")
    if snapshot.srs.accuracy_rate > c.STRONG_SRS_ACCURACY:
        areas.append("memory_retention")
    return areas


def preferred_topics(snapshot: StatsSnapshot, limit: int = c.PREFERRED_TOPIC_COUNT) -> list[str]:
    """Most-used topics, ties broken by name."""
    ranked = sorted(snapshot.topic_counts.items(), key=lambda item: (-item[1], item[0]))
    return [topic for topic, count in ranked[:limit] if count > 0]


class LearningProfileBuilder:
    """Builds a LearningProfile from a snapshot.

    Args:
        clock: Source of ``last_updated``
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def build(
        self,
        user_id: UUID,
        snapshot: StatsSnapshot,
        at: datetime | None = None,
    ) -> LearningProfile:
        """Derive a profile.

        Args:
            user_id: Learner the snapshot belongs to
            snapshot: Current counters
            at: Timestamp for ``last_updated`` (defaults to now)

        Returns:
            LearningProfile
        """
        profile = LearningProfile(
            user_id=user_id,
            learning_style=learning_style(snapshot),
            difficulty_preference=difficulty_preference(snapshot),
            pace_preference=pace_preference(snapshot),
            focus_strength=focus_strength(snapshot),
            memory_retention=memory_retention(snapshot),
            pronunciation_skill=pronunciation_skill(snapshot),
            consistency_score=consistency_score(snapshot),
            motivation_level=motivation_level(snapshot),
            preferred_topics=tuple(preferred_topics(snapshot)),
            weak_areas=tuple(weak_areas(snapshot)),
            strong_areas=tuple(strong_areas(snapshot)),
            last_updated=at or self._clock(),
        )
        logger.debug(
            f"Profile for user {user_id}: style={profile.learning_style.value}, "
            f"weak={list(profile.weak_areas)}"
        )
        return profile
