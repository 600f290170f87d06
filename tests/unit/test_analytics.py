"""Unit tests for trends, patterns, correlations and analytics reports."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from learnguard.modules.analytics import (
    AnalyticsService,
    CorrelationFinder,
    PatternDetector,
    TrendAnalyzer,
    assess_risks,
    build_insights,
    pearson,
    project_performance,
)
from learnguard.modules.analytics.correlations import interpret
from learnguard.modules.stats import StatsSnapshot, TimeRange
from learnguard.shared.exceptions import StatsProviderError
from learnguard.shared.models import (
    CorrelationStrength,
    Impact,
    ReportRiskType,
    RiskSeverity,
    TrendDirection,
)


def make_snapshot(
    accuracy: float = 70,
    focus_effectiveness: float = 50,
    pronunciation: float = 70,
    rescue: int = 0,
    srs_accuracy: float = 80,
    sessions: int = 10,
    minutes: float = 200,
) -> StatsSnapshot:
    return StatsSnapshot.from_dict({
        "overall": {
            "totalSessions": sessions,
            "completedSessions": sessions,
            "overallAccuracy": accuracy,
            "totalTimeSpent": minutes,
            "consistencyScore": 50,
        },
        "focusMode": {"triggered": 2, "effectiveness": focus_effectiveness},
        "pronunciation": {"averageScore": pronunciation, "assessments": 10},
        "rescueMode": {"triggered": rescue},
        "srs": {"accuracyRate": srs_accuracy, "reviewsToday": 5, "cardsTotal": 40},
    })


class TestTrendAnalyzer:
    """Tests for TrendAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        return TrendAnalyzer(stable_percent=10)

    def test_increasing(self, analyzer):
        """Test classification of a rise above the tolerance."""
        trend = analyzer.classify("overall_accuracy", 75, 60, "30_days")

        assert trend.trend == TrendDirection.INCREASING
        assert trend.change == 15
        assert trend.change_percent == pytest.approx(25.0)
        assert trend.confidence == pytest.approx(0.95)

    def test_decreasing_confidence_scales_with_change(self, analyzer):
        """Test that confidence grows with the size of the change."""
        trend = analyzer.classify("srs_retention", 85, 100, "30_days")

        assert trend.trend == TrendDirection.DECREASING
        assert trend.confidence == pytest.approx(0.85)

    def test_within_tolerance_is_stable(self, analyzer):
        """Test that a change within the tolerance is stable."""
        trend = analyzer.classify("pronunciation_score", 76, 70, "30_days")

        assert trend.trend == TrendDirection.STABLE
        assert trend.is_stable
        assert trend.confidence == 0.7

    def test_zero_baseline_is_stable(self, analyzer):
        """Test that a missing baseline reads as stable."""
        trend = analyzer.classify("overall_accuracy", 80, 0, "30_days")

        assert trend.change_percent == 0.0
        assert trend.trend == TrendDirection.STABLE

    def test_analyze_reports_every_metric(self, analyzer):
        """Test that analyze() returns one trend per metric in fixed order."""
        trends = analyzer.analyze(make_snapshot(), make_snapshot(), period="7_days")

        assert [t.metric for t in trends] == [
            "overall_accuracy",
            "focus_effectiveness",
            "pronunciation_score",
            "srs_retention",
            "learning_consistency",
        ]
        assert all(t.period == "7_days" for t in trends)

    def test_negative_tolerance_rejected(self):
        """Test that a negative tolerance raises."""
        with pytest.raises(ValueError):
            TrendAnalyzer(stable_percent=-1)


class TestPatternDetector:
    """Tests for PatternDetector."""

    @pytest.fixture
    def detector(self, clock):
        return PatternDetector(clock=clock)

    def test_no_patterns_for_empty_snapshot(self, detector):
        """Test that zero counters produce no patterns."""
        assert detector.detect(StatsSnapshot()) == []

    def test_frequent_focus_mode(self, detector):
        """Test focus pattern impact follows effectiveness."""
        effective = StatsSnapshot.from_dict({"focusMode": {"triggered": 6, "effectiveness": 80}})
        ineffective = StatsSnapshot.from_dict({"focusMode": {"triggered": 6, "effectiveness": 60}})

        assert detector.detect(effective)[0].impact == Impact.POSITIVE
        assert detector.detect(ineffective)[0].impact == Impact.NEGATIVE
        assert detector.detect(effective)[0].pattern_id == "frequent_focus_mode"

    def test_pronunciation_practice(self, detector):
        """Test pronunciation pattern needs more than 20 assessments."""
        few = StatsSnapshot.from_dict({"pronunciation": {"assessments": 20, "averageScore": 90}})
        many = StatsSnapshot.from_dict({"pronunciation": {"assessments": 21, "averageScore": 90}})

        assert detector.detect(few) == []
        pattern = detector.detect(many)[0]
        assert pattern.pattern_id == "pronunciation_practice_pattern"
        assert pattern.impact == Impact.POSITIVE

    def test_srs_review_neutral_when_accuracy_moderate(self, detector):
        """Test SRS review pattern impact."""
        snapshot = StatsSnapshot.from_dict({"srs": {"reviewsToday": 3, "accuracyRate": 80}})

        pattern = detector.detect(snapshot)[0]
        assert pattern.pattern_id == "srs_review_pattern"
        assert pattern.impact == Impact.NEUTRAL

    def test_rescue_dependency(self, detector, clock):
        """Test rescue dependency needs both a count and a ratio."""
        snapshot = StatsSnapshot.from_dict({
            "rescueMode": {"triggered": 8},
            "pronunciation": {"assessments": 10},
        })

        patterns = detector.detect(snapshot)
        assert [p.pattern_id for p in patterns] == ["frequent_rescue_dependency"]
        assert patterns[0].impact == Impact.NEGATIVE
        assert patterns[0].detected_at == clock()


class TestCorrelations:
    """Tests for pearson, interpret and CorrelationFinder."""

    def test_pearson_perfect(self):
        assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)

    def test_pearson_undefined_is_zero(self):
        """Test constant and too-short series."""
        assert pearson([1, 1, 1], [1, 2, 3]) == 0.0
        assert pearson([1], [1]) == 0.0
        assert pearson([1, 2], [1, 2, 3]) == 0.0

    @pytest.mark.parametrize("coefficient,expected", [
        (0.9, CorrelationStrength.STRONG_POSITIVE),
        (0.5, CorrelationStrength.MODERATE_POSITIVE),
        (0.25, CorrelationStrength.WEAK_POSITIVE),
        (0.1, CorrelationStrength.NONE),
        (-0.25, CorrelationStrength.WEAK_NEGATIVE),
        (-0.5, CorrelationStrength.MODERATE_NEGATIVE),
        (-0.8, CorrelationStrength.STRONG_NEGATIVE),
    ])
    def test_interpret(self, coefficient, expected):
        assert interpret(coefficient) == expected

    def test_find_negates_rescue_usage(self):
        """Test that rescue usage falling as scores rise correlates positively."""
        series = [
            make_snapshot(pronunciation=60, rescue=8),
            make_snapshot(pronunciation=65, rescue=6),
            make_snapshot(pronunciation=70, rescue=4),
            make_snapshot(pronunciation=75, rescue=2),
        ]

        focus, rescue = CorrelationFinder().find(series)

        assert focus.metric_1 == "focus_effectiveness"
        assert focus.coefficient == 0.0
        assert rescue.metric_2 == "rescue_mode_usage"
        assert rescue.coefficient == pytest.approx(1.0)
        assert rescue.significance == 0.78
        assert rescue.insights[0].startswith("Rescue Mode is used more when pronunciation scores are low")

    def test_rescue_rising_with_scores_is_loose(self):
        """Test that rescue usage climbing with scores reads as a loose link."""
        series = [
            make_snapshot(pronunciation=60, rescue=2),
            make_snapshot(pronunciation=65, rescue=4),
            make_snapshot(pronunciation=70, rescue=6),
            make_snapshot(pronunciation=75, rescue=8),
        ]

        rescue = CorrelationFinder().find(series)[1]

        assert rescue.coefficient == pytest.approx(-1.0)
        assert rescue.insights[0].startswith("Rescue Mode usage is only loosely tied")


class TestProjectionsAndInsights:
    """Tests for project_performance and build_insights."""

    def test_projections(self):
        """Test accuracy and retention projections."""
        predictions = project_performance(make_snapshot(accuracy=75, focus_effectiveness=70, srs_accuracy=90))

        assert [(p.target_metric, p.timeframe) for p in predictions] == [
            ("overall_accuracy", "7_days"),
            ("overall_accuracy", "30_days"),
            ("srs_retention_rate", "7_days"),
        ]
        assert predictions[0].predicted_value == pytest.approx(77)
        assert predictions[1].predicted_value == pytest.approx(79)
        assert predictions[2].predicted_value == pytest.approx(92)

    def test_projections_are_clamped(self):
        """Test that projections stay within [0, 100]."""
        predictions = project_performance(StatsSnapshot())
        assert predictions[0].predicted_value == 0.0

    def test_long_sessions_insight(self):
        """Test the efficiency insight for sessions longer than ideal."""
        insights = build_insights(make_snapshot(sessions=4, minutes=240), [], [])

        assert len(insights) == 1
        assert insights[0].category == "efficiency"
        assert insights[0].impact == "medium"
        assert "60.0 minutes" in insights[0].insight

    def test_no_sessions_no_insights(self):
        assert build_insights(StatsSnapshot(), [], []) == []


class TestReportRisks:
    """Tests for assess_risks."""

    @pytest.fixture
    def analyzer(self):
        return TrendAnalyzer(stable_percent=10)

    def test_stable_trends_signal_plateau(self, analyzer):
        trends = analyzer.analyze(make_snapshot(), make_snapshot())

        risks = assess_risks(make_snapshot(), trends)

        assert [r.risk_type for r in risks] == [ReportRiskType.LEARNING_PLATEAU]
        assert risks[0].probability == 0.65
        assert risks[0].severity == RiskSeverity.MEDIUM
        assert risks[0].mitigation

    def test_no_trends_no_plateau(self):
        assert assess_risks(make_snapshot(), []) == []

    def test_motivation_decline_needs_reported_recent_sessions(self):
        def snapshot(**overall):
            return StatsSnapshot.from_dict({"overall": {"totalSessions": 20, "consistencyScore": 80, **overall}})

        declining = snapshot(recentSessions=3)
        steady = snapshot(recentSessions=4)
        unreported = snapshot()

        risks = assess_risks(declining, [])

        assert [r.risk_type for r in risks] == [ReportRiskType.MOTIVATION_DECLINE]
        assert risks[0].severity == RiskSeverity.HIGH
        assert risks[0].probability == 0.7
        assert assess_risks(steady, []) == []
        assert assess_risks(unreported, []) == []

    def test_skill_regression_needs_three_declines(self, analyzer):
        down = [
            analyzer.classify(metric, 50, 100, "30_days")
            for metric in ("overall_accuracy", "pronunciation_score", "srs_retention")
        ]

        risks = assess_risks(make_snapshot(), down)
        regression = next(r for r in risks if r.risk_type == ReportRiskType.SKILL_REGRESSION)

        assert regression.probability == 0.55
        assert "pronunciation_score" in regression.indicators[0]
        assert all(
            r.risk_type != ReportRiskType.SKILL_REGRESSION
            for r in assess_risks(make_snapshot(), down[:2])
        )

    def test_low_consistency(self):
        snapshot = StatsSnapshot.from_dict({"overall": {"totalSessions": 10, "consistencyScore": 30}})

        risks = assess_risks(snapshot, [])

        assert [r.risk_type for r in risks] == [ReportRiskType.INCONSISTENCY]
        assert risks[0].severity == RiskSeverity.LOW
        assert assess_risks(StatsSnapshot(), []) == []

    def test_fixed_order(self, analyzer):
        snapshot = StatsSnapshot.from_dict({
            "overall": {"totalSessions": 20, "recentSessions": 1, "consistencyScore": 10},
        })
        trends = analyzer.analyze(snapshot, snapshot)

        assert [r.risk_type for r in assess_risks(snapshot, trends)] == [
            ReportRiskType.LEARNING_PLATEAU,
            ReportRiskType.MOTIVATION_DECLINE,
            ReportRiskType.INCONSISTENCY,
        ]

    def test_to_dict(self):
        snapshot = StatsSnapshot.from_dict({"overall": {"totalSessions": 10, "consistencyScore": 30}})
        data = assess_risks(snapshot, [])[0].to_dict()

        assert data["risk_type"] == "inconsistency"
        assert data["severity"] == "low"
        assert isinstance(data["mitigation"], list)


class TestAnalyticsService:
    """Tests for AnalyticsService report generation."""

    @pytest.fixture
    def service(self, provider, settings, clock):
        return AnalyticsService(provider, settings, clock)

    @pytest.fixture
    def user_id(self, provider, clock):
        """Learner with a baseline snapshot and one snapshot per bucket."""
        user_id = uuid4()
        now = clock()
        provider.record(
            user_id,
            make_snapshot(accuracy=60, focus_effectiveness=50),
            recorded_at=now - timedelta(days=40),
        )
        for days_ago, step in ((26, 0), (19, 1), (11, 2), (1, 3)):
            provider.record(
                user_id,
                make_snapshot(
                    accuracy=60 + 5 * step,
                    focus_effectiveness=40 + 10 * step,
                    pronunciation=60 + 5 * step,
                    rescue=8 - 2 * step,
                ),
                recorded_at=now - timedelta(days=days_ago),
            )
        return user_id

    def test_default_time_range(self, service, clock):
        """Test the default window ends now and spans the configured days."""
        time_range = service.default_time_range()

        assert time_range.end == clock()
        assert time_range.days == 30

    @pytest.mark.asyncio
    async def test_generate_advanced_report(self, service, user_id, clock):
        """Test a full report over the default window."""
        report = await service.generate_advanced_report(user_id, service.default_time_range())

        assert report.user_id == user_id
        assert report.generated_at == clock()

        trends = {t.metric: t for t in report.trends}
        assert trends["overall_accuracy"].trend == TrendDirection.INCREASING
        assert trends["overall_accuracy"].value == 75
        assert trends["overall_accuracy"].baseline == 60
        assert trends["focus_effectiveness"].trend == TrendDirection.INCREASING
        assert trends["srs_retention"].trend == TrendDirection.STABLE
        assert trends["overall_accuracy"].period == "30_days"

        focus, rescue = report.correlations
        assert focus.coefficient == pytest.approx(1.0)
        assert focus.relationship == CorrelationStrength.STRONG_POSITIVE
        assert rescue.coefficient == pytest.approx(1.0)
        assert report.relevant_correlations(0.9) == list(report.correlations)

        assert report.predictions[0].predicted_value == pytest.approx(77)

        categories = [i.category for i in report.insights]
        assert "performance" in categories
        assert "efficiency" in categories
        assert "overall_accuracy" in report.insights[0].insight
        assert report.risks == ()

    @pytest.mark.asyncio
    async def test_report_for_unknown_learner(self, service):
        """Test that a learner without data gets a well-formed empty report."""
        report = await service.generate_advanced_report(uuid4(), service.default_time_range())

        assert all(t.is_stable for t in report.trends)
        assert report.patterns == ()
        assert all(c.relationship == CorrelationStrength.NONE for c in report.correlations)
        assert report.insights == ()
        assert [r.risk_type for r in report.risks] == [ReportRiskType.LEARNING_PLATEAU]

    @pytest.mark.asyncio
    async def test_analyze_trends_custom_window(self, service, user_id, clock):
        """Test trend analysis over an explicit window."""
        window = TimeRange.last_days(7, clock())
        trends = await service.analyze_trends(user_id, window)

        assert trends[0].period == "7_days"
        assert trends[0].value == 75

    @pytest.mark.asyncio
    async def test_report_to_dict(self, service, user_id):
        """Test report serialization."""
        report = await service.generate_advanced_report(user_id, service.default_time_range())
        data = report.to_dict()

        assert data["user_id"] == str(user_id)
        assert set(data["time_range"]) == {"start", "end"}
        assert len(data["trends"]) == 5
        assert data["correlations"][0]["relationship"] == "strong_positive"
        assert data["risks"] == []

    @pytest.mark.asyncio
    async def test_provider_failure_returns_last_report(self, service, provider, user_id):
        """Test that a failing provider falls back to the learner's last report."""
        window = service.default_time_range()
        report = await service.generate_advanced_report(user_id, window)

        with patch.object(provider, "get_snapshot", AsyncMock(side_effect=StatsProviderError("down"))):
            fallback = await service.generate_advanced_report(user_id, window)

        assert fallback is report

    @pytest.mark.asyncio
    async def test_provider_failure_without_history_returns_empty_report(self, service, provider, clock):
        window = service.default_time_range()

        with patch.object(provider, "get_snapshot", AsyncMock(side_effect=StatsProviderError("down"))):
            report = await service.generate_advanced_report(uuid4(), window)

        assert report.time_range == window
        assert report.generated_at == clock()
        assert report.trends == ()
        assert report.risks == ()
