"""Analytics Module - Trends, patterns, correlations and reports.

Usage:
    from learnguard.modules.analytics import AnalyticsService

    service = AnalyticsService(provider)
    report = await service.generate_advanced_report(user_id, time_range)
"""

from learnguard.modules.analytics.correlations import CorrelationFinder, MetricPair, pearson
from learnguard.modules.analytics.interface import (
    AnalyticsReport,
    IAnalyticsService,
    LearningCorrelation,
    LearningPattern,
    LearningTrend,
    Prediction,
    PredictionFactor,
    ReportInsight,
    ReportRisk,
)
from learnguard.modules.analytics.patterns import PatternDetector
from learnguard.modules.analytics.service import (
    AnalyticsService,
    assess_risks,
    build_insights,
    project_performance,
)
from learnguard.modules.analytics.trends import TrendAnalyzer

__all__ = [
    # Interface types
    "AnalyticsReport",
    "IAnalyticsService",
    "LearningCorrelation",
    "LearningPattern",
    "LearningTrend",
    "Prediction",
    "PredictionFactor",
    "ReportInsight",
    "ReportRisk",
    # Engines
    "CorrelationFinder",
    "MetricPair",
    "PatternDetector",
    "TrendAnalyzer",
    "pearson",
    # Service
    "AnalyticsService",
    "assess_risks",
    "build_insights",
    "project_performance",
]
