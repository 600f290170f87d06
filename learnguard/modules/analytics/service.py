"""Analytics Service - Advanced report generation.

This service provides:
- Trend classification against the previous window of equal length
- Behavioral pattern detection
- Metric-pair correlations across the window's buckets
- Deterministic short-term projections
- Summary insights
- Longer-horizon risk assessment

Reports are generated fresh on every call. When the stats provider fails
the last report generated for the learner stands in for the new one.
"""

from typing import Sequence
from uuid import UUID
import asyncio
import logging

from learnguard.modules.analytics.correlations import CorrelationFinder
from learnguard.modules.analytics.interface import (
    AnalyticsReport,
    IAnalyticsService,
    LearningPattern,
    LearningTrend,
    Prediction,
    PredictionFactor,
    ReportInsight,
    ReportRisk,
)
from learnguard.modules.analytics.patterns import PatternDetector
from learnguard.modules.analytics.trends import TrendAnalyzer
from learnguard.modules.stats.interface import IStatsProvider, StatsSnapshot, TimeRange
from learnguard.shared import constants as c
from learnguard.shared.config import Settings, get_settings
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.models import Impact, ReportRiskType, RiskSeverity, TrendDirection

logger = logging.getLogger(__name__)


def project_performance(snapshot: StatsSnapshot) -> list[Prediction]:
    """Project accuracy and SRS retention from the current counters.

    Args:
        snapshot: Counters for the report window

    Returns:
        7 and 30 day accuracy projections and a 7 day retention projection
    """
    accuracy = snapshot.overall.overall_accuracy
    focus_lift = snapshot.focus_mode.effectiveness - 50
    retention = snapshot.srs.accuracy_rate
    retention_drift = 2 if retention > 80 else -3

    return [
        Prediction(
            model_id="learning_performance_predictor",
            target_metric="overall_accuracy",
            timeframe="7_days",
            predicted_value=max(0.0, min(100.0, accuracy + focus_lift * 0.1)),
            confidence=0.85,
            factors=(
                PredictionFactor("focus_effectiveness", 0.3),
                PredictionFactor("pronunciation_improvement", 0.25),
                PredictionFactor("srs_consistency", 0.25),
                PredictionFactor("learning_frequency", 0.2),
            ),
        ),
        Prediction(
            model_id="learning_performance_predictor",
            target_metric="overall_accuracy",
            timeframe="30_days",
            predicted_value=max(0.0, min(100.0, accuracy + focus_lift * 0.2)),
            confidence=0.75,
            factors=(
                PredictionFactor("long_term_retention", 0.4),
                PredictionFactor("skill_development", 0.3),
                PredictionFactor("motivation_sustainability", 0.3),
            ),
        ),
        Prediction(
            model_id="memory_retention_predictor",
            target_metric="srs_retention_rate",
            timeframe="7_days",
            predicted_value=max(0.0, min(100.0, retention + retention_drift)),
            confidence=0.8,
            factors=(
                PredictionFactor("review_frequency", 0.35),
                PredictionFactor("card_difficulty", 0.25),
                PredictionFactor("time_since_last_review", 0.4),
            ),
        ),
    ]


def build_insights(
    snapshot: StatsSnapshot,
    trends: Sequence[LearningTrend],
    patterns: Sequence[LearningPattern],
) -> list[ReportInsight]:
    """Summarize trends, patterns and session length into insights."""
    insights = []

    improving = [t for t in trends if t.trend is TrendDirection.INCREASING and t.confidence > 0.7]
    declining = [t for t in trends if t.trend is TrendDirection.DECREASING and t.confidence > 0.7]

    if improving:
        insights.append(
            ReportInsight(
                category="performance",
                insight=f"Steady improvement in {', '.join(t.metric for t in improving)}",
                impact="high",
                actionable=True,
                recommendations=(
                    "Keep the current learning strategy",
                    "Raise the difficulty a little to stay challenged",
                    "Apply what works here to other areas",
                ),
            )
        )

    if declining:
        insights.append(
            ReportInsight(
                category="performance",
                insight=f"Watch the decline in {', '.join(t.metric for t in declining)}",
                impact="high",
                actionable=True,
                recommendations=(
                    "Look for the specific cause of the decline",
                    "Adjust the strategy or practice more often",
                    "Consider extra learning support",
                ),
            )
        )

    if any(p.impact is Impact.POSITIVE for p in patterns):
        insights.append(
            ReportInsight(
                category="behavior",
                insight="Some effective learning habits are already in place",
                impact="medium",
                actionable=True,
                recommendations=(
                    "Keep reinforcing these habits",
                    "Carry the successful patterns into other situations",
                ),
            )
        )

    average = snapshot.average_session_minutes
    if average > 0:
        ideal = c.IDEAL_REPORT_SESSION_MIN_MINUTES <= average <= c.IDEAL_REPORT_SESSION_MAX_MINUTES
        if average < c.IDEAL_REPORT_SESSION_MIN_MINUTES:
            recommendations = (
                "Lengthen sessions for deeper learning",
                f"Aim for at least {c.IDEAL_REPORT_SESSION_MIN_MINUTES} minutes per session",
            )
        elif average > c.IDEAL_REPORT_SESSION_MAX_MINUTES:
            recommendations = (
                "Split long sessions into several shorter ones",
                "Add breaks to long sessions",
            )
        else:
            recommendations = ("Session length is ideal, keep it up",)
        insights.append(
            ReportInsight(
                category="efficiency",
                insight=f"Average session length is {average:.1f} minutes",
                impact="high" if ideal else "medium",
                actionable=True,
                recommendations=recommendations,
            )
        )

    return insights


def assess_risks(snapshot: StatsSnapshot, trends: Sequence[LearningTrend]) -> list[ReportRisk]:
    """Assess longer-horizon risks for the report window.

    Args:
        snapshot: Counters for the report window
        trends: Trends against the previous window

    Returns:
        Risks in a fixed order: plateau, motivation, regression, inconsistency
    """
    risks = []
    overall = snapshot.overall

    stable = sum(1 for t in trends if t.is_stable)
    if stable > len(trends) * c.REPORT_PLATEAU_STABLE_SHARE:
        risks.append(
            ReportRisk(
                risk_type=ReportRiskType.LEARNING_PLATEAU,
                probability=c.REPORT_PLATEAU_PROBABILITY,
                severity=RiskSeverity.MEDIUM,
                indicators=(
                    "Most learning metrics have stayed flat",
                    "No clear upward trend",
                    "The current approach may have reached its limit",
                ),
                mitigation=(
                    "Try a new learning method or strategy",
                    "Increase content difficulty and variety",
                    "Set more challenging goals",
                ),
            )
        )

    # without a recent count the aggregator's default share never signals a decline
    if overall.recent_sessions is not None and (
        overall.recent_sessions < overall.total_sessions * c.REPORT_MOTIVATION_RECENT_SHARE
    ):
        risks.append(
            ReportRisk(
                risk_type=ReportRiskType.MOTIVATION_DECLINE,
                probability=c.REPORT_MOTIVATION_PROBABILITY,
                severity=RiskSeverity.HIGH,
                indicators=(
                    "Recent study frequency has dropped noticeably",
                    "Sessions are getting shorter",
                    "Motivation may be slipping",
                ),
                mitigation=(
                    "Set short-term goals that are easy to reach",
                    "Make sessions more playful and interactive",
                    "Find a study partner or join a learning group",
                ),
            )
        )

    declining = [
        t
        for t in trends
        if t.trend is TrendDirection.DECREASING and t.confidence > c.REPORT_REGRESSION_MIN_CONFIDENCE
    ]
    if len(declining) >= c.REPORT_REGRESSION_MIN_DECLINING:
        risks.append(
            ReportRisk(
                risk_type=ReportRiskType.SKILL_REGRESSION,
                probability=c.REPORT_REGRESSION_PROBABILITY,
                severity=RiskSeverity.MEDIUM,
                indicators=(
                    f"Declining: {', '.join(t.metric for t in declining)}",
                    "Knowledge or skills may be fading",
                    "Review and consolidation are needed",
                ),
                mitigation=(
                    "Review SRS cards more often",
                    "Focus review on the skills that dropped most",
                    "Consolidate with a mix of practice types",
                ),
            )
        )

    if overall.total_sessions > 0 and overall.consistency_score < c.REPORT_INCONSISTENCY_MAX_SCORE:
        risks.append(
            ReportRisk(
                risk_type=ReportRiskType.INCONSISTENCY,
                probability=c.REPORT_INCONSISTENCY_PROBABILITY,
                severity=RiskSeverity.LOW,
                indicators=(f"Consistency score is {overall.consistency_score:g}",),
                mitigation=(
                    "Study at the same time every day",
                    "Prefer short daily sessions over occasional long ones",
                ),
            )
        )

    return risks


class AnalyticsService(IAnalyticsService):
    """Builds AnalyticsReports from the stats provider.

    Args:
        provider: Source of windowed snapshots
        settings: Trend tolerance and correlation bucket count
        clock: Source of ``generated_at`` timestamps
    """

    def __init__(
        self,
        provider: IStatsProvider,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or get_settings()
        self._clock = clock or utc_now
        self.trend_analyzer = TrendAnalyzer(self._settings.trend_stable_percent)
        self.pattern_detector = PatternDetector(clock=self._clock)
        self.correlation_finder = CorrelationFinder()
        self._last_reports: dict[UUID, AnalyticsReport] = {}

    def default_time_range(self) -> TimeRange:
        """The configured report window ending now."""
        return TimeRange.last_days(self._settings.report_window_days, self._clock())

    async def analyze_trends(
        self,
        user_id: UUID,
        time_range: TimeRange | None = None,
    ) -> list[LearningTrend]:
        """Classify trends for a window (defaults to the configured report window)."""
        time_range = time_range or self.default_time_range()
        current, baseline = await asyncio.gather(
            self._provider.get_snapshot(user_id, time_range),
            self._provider.get_snapshot(user_id, time_range.previous()),
        )
        return self.trend_analyzer.analyze(current, baseline, period=self._period_label(time_range))

    async def generate_advanced_report(
        self,
        user_id: UUID,
        time_range: TimeRange,
    ) -> AnalyticsReport:
        """Generate a fresh report for a learner.

        When the stats provider fails, the last report generated for the
        learner is returned if there is one; otherwise an empty report for
        the requested window.
        """
        logger.info(f"Generating analytics report for user {user_id} over {time_range.days:g} days")

        buckets = time_range.split(self._settings.correlation_buckets)
        try:
            current, baseline, *series = await asyncio.gather(
                self._provider.get_snapshot(user_id, time_range),
                self._provider.get_snapshot(user_id, time_range.previous()),
                *(self._provider.get_snapshot(user_id, bucket) for bucket in buckets),
            )
        except Exception as e:
            fallback = self._last_reports.get(user_id)
            logger.error(
                f"Report generation failed for user {user_id}: {e}; "
                f"{'returning last-known report' if fallback else 'returning empty report'}"
            )
            return fallback or AnalyticsReport(
                user_id=user_id, time_range=time_range, generated_at=self._clock()
            )

        trends = self.trend_analyzer.analyze(current, baseline, period=self._period_label(time_range))
        patterns = self.pattern_detector.detect(current)
        correlations = self.correlation_finder.find(series)
        predictions = project_performance(current)
        insights = build_insights(current, trends, patterns)
        risks = assess_risks(current, trends)

        report = AnalyticsReport(
            user_id=user_id,
            time_range=time_range,
            trends=tuple(trends),
            patterns=tuple(patterns),
            correlations=tuple(correlations),
            predictions=tuple(predictions),
            insights=tuple(insights),
            risks=tuple(risks),
            generated_at=self._clock(),
        )
        self._last_reports[user_id] = report
        return report

    @staticmethod
    def _period_label(time_range: TimeRange) -> str:
        return f"{round(time_range.days)}_days"
