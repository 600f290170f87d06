"""Behavioral pattern detection.

Each pattern is a fixed signature over the snapshot counters:

- frequent_focus_mode: Focus Mode triggered more than 5 times
- pronunciation_practice_pattern: more than 20 pronunciation assessments
- srs_review_pattern: at least one SRS review today
- frequent_rescue_dependency: Rescue Mode triggered more than 5 times and
  on more than 30% of pronunciation assessments
"""

from typing import Callable
import logging

from learnguard.modules.analytics.interface import LearningPattern
from learnguard.modules.stats.interface import StatsSnapshot
from learnguard.shared import constants as c
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.models import Impact

logger = logging.getLogger(__name__)


class PatternDetector:
    """Detect named learning patterns in a snapshot."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._detectors: list[Callable[[StatsSnapshot], LearningPattern | None]] = [
            self._focus_mode,
            self._pronunciation_practice,
            self._srs_review,
            self._rescue_dependency,
        ]

    def detect(self, snapshot: StatsSnapshot) -> list[LearningPattern]:
        patterns = []
        for detector in self._detectors:
            pattern = detector(snapshot)
            if pattern is not None:
                patterns.append(pattern)
        logger.debug(f"Detected {len(patterns)} patterns")
        return patterns

    def _focus_mode(self, snapshot: StatsSnapshot) -> LearningPattern | None:
        focus = snapshot.focus_mode
        if focus.triggered <= c.FOCUS_PATTERN_MIN_TRIGGERS:
            return None
        positive = focus.effectiveness > c.FOCUS_PATTERN_POSITIVE_EFFECTIVENESS
        return LearningPattern(
            pattern_id="frequent_focus_mode",
            name="Frequent Focus Mode use",
            description="The learner often relies on visual guidance to stay focused",
            frequency=focus.triggered,
            impact=Impact.POSITIVE if positive else Impact.NEGATIVE,
            confidence=0.85,
            related_metrics=("focus_effectiveness", "overall_accuracy"),
            recommendations=(
                "Reduce distractions in the study environment",
                "Try the Pomodoro technique to build focus",
                "Practice focus training regularly",
            ),
            detected_at=self._clock(),
        )

    def _pronunciation_practice(self, snapshot: StatsSnapshot) -> LearningPattern | None:
        pronunciation = snapshot.pronunciation
        if pronunciation.assessments <= c.PRONUNCIATION_PATTERN_MIN_ASSESSMENTS:
            return None
        positive = pronunciation.average_score > c.PRONUNCIATION_PATTERN_POSITIVE_SCORE
        if positive:
            description = "Pronunciation practice is paying off"
            recommendations = (
                "Keep up the current pronunciation practice habit",
                "Try more challenging pronunciation content",
            )
        else:
            description = "Pronunciation practice needs more work"
            recommendations = (
                "Practice pronunciation more often",
                "Focus on the difficult sounds",
                "Use Rescue Mode for more guidance",
            )
        return LearningPattern(
            pattern_id="pronunciation_practice_pattern",
            name="Pronunciation practice",
            description=description,
            frequency=pronunciation.assessments,
            impact=Impact.POSITIVE if positive else Impact.NEGATIVE,
            confidence=0.9,
            related_metrics=("pronunciation_score", "rescue_mode_usage"),
            recommendations=recommendations,
            detected_at=self._clock(),
        )

    def _srs_review(self, snapshot: StatsSnapshot) -> LearningPattern | None:
        srs = snapshot.srs
        if srs.reviews_today <= 0:
            return None
        positive = srs.accuracy_rate > c.SRS_PATTERN_POSITIVE_ACCURACY
        if positive:
            description = "SRS reviews are highly effective"
            recommendations = (
                "Keep the current review rhythm",
                "Consider adding more new cards",
            )
        else:
            description = "SRS reviews could be more effective"
            recommendations = (
                "Adjust review intervals and review difficult cards more often",
                "Combine several memory techniques while reviewing",
            )
        return LearningPattern(
            pattern_id="srs_review_pattern",
            name="SRS review habit",
            description=description,
            frequency=srs.reviews_today,
            impact=Impact.POSITIVE if positive else Impact.NEUTRAL,
            confidence=0.88,
            related_metrics=("srs_retention", "memory_strength"),
            recommendations=recommendations,
            detected_at=self._clock(),
        )

    def _rescue_dependency(self, snapshot: StatsSnapshot) -> LearningPattern | None:
        rescue = snapshot.rescue_mode
        ratio = rescue.triggered / max(1, snapshot.pronunciation.assessments)
        if rescue.triggered <= c.RESCUE_PATTERN_MIN_TRIGGERS or ratio <= c.RESCUE_PATTERN_MIN_RATIO:
            return None
        return LearningPattern(
            pattern_id="frequent_rescue_dependency",
            name="Frequent Rescue Mode dependency",
            description="The learner frequently falls back on Rescue Mode during practice",
            frequency=rescue.triggered,
            impact=Impact.NEGATIVE,
            confidence=0.8,
            related_metrics=("rescue_mode_usage", "pronunciation_score"),
            recommendations=(
                "Attempt each exercise once before asking for help",
                "Review the sounds that trigger Rescue Mode most often",
            ),
            detected_at=self._clock(),
        )
