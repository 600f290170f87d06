"""Learner insight API schemas: stats ingestion, risks, profiles, paths and reports."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from learnguard.shared.models import (
    CorrelationStrength,
    DifficultyPreference,
    Impact,
    IndicatorTrend,
    LearningFeature,
    LearningPhase,
    LearningStyle,
    PacePreference,
    RecommendationPriority,
    RecommendationType,
    ReportRiskType,
    RiskSeverity,
    RiskType,
    TrendDirection,
)


# ===================
# Stats ingestion
# ===================

class CounterSection(BaseModel):
    """Base for snapshot sections: camelCase or snake_case keys, no type coercion."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)


class OverallStatsRequest(CounterSection):
    total_sessions: int = Field(default=0, ge=0)
    completed_sessions: int = Field(default=0, ge=0)
    overall_accuracy: float = Field(default=0.0, ge=0, description="Percent")
    total_time_spent: float = Field(default=0.0, ge=0, description="Minutes")
    consistency_score: float = Field(default=0.0, ge=0)
    recent_sessions: float | None = Field(
        default=None,
        ge=0,
        description="Sessions in the recent window (defaults to 30% of the total)",
    )


class FocusModeStatsRequest(CounterSection):
    triggered: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0)
    effectiveness: float = Field(default=0.0, ge=0)


class PronunciationStatsRequest(CounterSection):
    average_score: float = Field(default=0.0, ge=0)
    assessments: int = Field(default=0, ge=0)
    improvement: float = Field(default=0.0, description="Score delta, may be negative")


class RescueModeStatsRequest(CounterSection):
    triggered: int = Field(default=0, ge=0)
    effectiveness: float = Field(default=0.0, ge=0)


class SRSStatsRequest(CounterSection):
    accuracy_rate: float = Field(default=0.0, ge=0)
    reviews_today: int = Field(default=0, ge=0)
    cards_total: int = Field(default=0, ge=0)
    graduated_cards: int = Field(default=0, ge=0)


class StatsSnapshotRequest(CounterSection):
    """Nested counters as sent by the stats aggregator. Missing sections are zero."""

    overall: OverallStatsRequest = Field(default_factory=OverallStatsRequest)
    focus_mode: FocusModeStatsRequest = Field(default_factory=FocusModeStatsRequest)
    pronunciation: PronunciationStatsRequest = Field(default_factory=PronunciationStatsRequest)
    rescue_mode: RescueModeStatsRequest = Field(default_factory=RescueModeStatsRequest)
    srs: SRSStatsRequest = Field(default_factory=SRSStatsRequest)
    topic_counts: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)


class RecordStatsRequest(BaseModel):
    """Snapshot of rolled-up counters for a learner."""

    snapshot: StatsSnapshotRequest = Field(
        ...,
        description="Nested counters (overall, focusMode, pronunciation, rescueMode, srs)",
        examples=[{
            "overall": {"totalSessions": 12, "completedSessions": 10, "overallAccuracy": 78},
            "srs": {"accuracyRate": 82, "reviewsToday": 6, "cardsTotal": 40},
        }],
    )
    recorded_at: datetime | None = Field(
        default=None,
        description="When the counters were taken (defaults to now)",
    )


class RecordStatsResponse(BaseModel):
    user_id: UUID
    recorded_at: datetime


# ===================
# Risks
# ===================

class RiskIndicatorResponse(BaseModel):
    metric: str
    current_value: float
    threshold: float
    trend: IndicatorTrend


class LearningRiskResponse(BaseModel):
    """A detected learning risk."""

    id: UUID
    risk_type: RiskType
    severity: RiskSeverity
    probability: float = Field(..., ge=0, le=1)
    time_to_impact_hours: float = Field(
        ...,
        gt=0,
        description="Hours until the risk is expected to affect the learner",
    )
    affected_areas: list[str] = Field(default_factory=list)
    indicators: list[RiskIndicatorResponse] = Field(default_factory=list)
    detected_at: datetime


class AnalysisCycleResponse(BaseModel):
    """Summary of one analysis cycle."""

    user_id: UUID
    risks: int
    strategies: int
    alerts: int = Field(..., description="Alerts created (0 when predictive alerts are disabled)")
    auto_executed: int = Field(..., description="Interventions started automatically")
    risk_types: list[RiskType] = Field(default_factory=list)


# ===================
# Profile and path
# ===================

class LearningProfileResponse(BaseModel):
    """Derived learner profile. Scores are in [0, 100]."""

    user_id: UUID
    learning_style: LearningStyle
    difficulty_preference: DifficultyPreference
    pace_preference: PacePreference
    focus_strength: float = Field(..., ge=0, le=100)
    memory_retention: float = Field(..., ge=0, le=100)
    pronunciation_skill: float = Field(..., ge=0, le=100)
    consistency_score: float = Field(..., ge=0, le=100)
    motivation_level: float = Field(..., ge=0, le=100)
    preferred_topics: list[str] = Field(default_factory=list)
    weak_areas: list[str] = Field(default_factory=list)
    strong_areas: list[str] = Field(default_factory=list)
    last_updated: datetime


class LearningRecommendationResponse(BaseModel):
    id: UUID
    type: RecommendationType
    priority: RecommendationPriority
    title: str
    description: str
    reasoning: str
    action_items: list[str]
    expected_benefit: str
    estimated_minutes: int
    confidence: float
    related_features: list[LearningFeature]
    based_on: list[str] = Field(default_factory=list)


class LearningInsightResponse(BaseModel):
    category: str
    insight: str
    impact: Impact
    confidence: float
    supporting_data: dict[str, float] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)


class MilestoneResponse(BaseModel):
    milestone: str
    estimated_days: int
    required_actions: list[str]


class AdaptiveAdjustmentResponse(BaseModel):
    reason: str
    adjustment: str
    expected_impact: str


class OptimizedPathResponse(BaseModel):
    """Phase-aware learning plan, cached until ``valid_until``."""

    id: UUID
    user_id: UUID
    current_phase: LearningPhase
    recommendations: list[LearningRecommendationResponse]
    insights: list[LearningInsightResponse]
    next_milestones: list[MilestoneResponse]
    adaptive_adjustments: list[AdaptiveAdjustmentResponse]
    generated_at: datetime
    valid_until: datetime


# ===================
# Analytics report
# ===================

class ReportRequest(BaseModel):
    """Report window. Omit both bounds to use the configured default window."""

    start: datetime | None = Field(default=None, description="Window start (ISO 8601)")
    end: datetime | None = Field(default=None, description="Window end (ISO 8601)")

    @model_validator(mode="after")
    def _both_or_neither(self) -> "ReportRequest":
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must be given together")
        return self


class TimeRangeResponse(BaseModel):
    start: datetime
    end: datetime


class LearningTrendResponse(BaseModel):
    metric: str
    period: str
    value: float
    baseline: float
    change: float
    change_percent: float
    trend: TrendDirection
    confidence: float


class LearningPatternResponse(BaseModel):
    pattern_id: str
    name: str
    description: str
    frequency: float
    impact: Impact
    confidence: float
    related_metrics: list[str]
    recommendations: list[str]
    detected_at: datetime


class LearningCorrelationResponse(BaseModel):
    metric_1: str
    metric_2: str
    coefficient: float = Field(..., ge=-1, le=1)
    significance: float
    relationship: CorrelationStrength
    insights: list[str] = Field(default_factory=list)


class PredictionFactorResponse(BaseModel):
    factor: str
    weight: float


class PredictionResponse(BaseModel):
    model_id: str
    target_metric: str
    timeframe: str
    predicted_value: float
    confidence: float
    factors: list[PredictionFactorResponse]


class ReportInsightResponse(BaseModel):
    category: str
    insight: str
    impact: str
    actionable: bool
    recommendations: list[str] = Field(default_factory=list)


class ReportRiskResponse(BaseModel):
    risk_type: ReportRiskType
    probability: float = Field(..., ge=0, le=1)
    severity: RiskSeverity
    indicators: list[str] = Field(default_factory=list)
    mitigation: list[str] = Field(default_factory=list)


class AnalyticsReportResponse(BaseModel):
    """Advanced analytics report for one learner and window."""

    id: UUID
    user_id: UUID
    generated_at: datetime
    time_range: TimeRangeResponse
    trends: list[LearningTrendResponse]
    patterns: list[LearningPatternResponse]
    correlations: list[LearningCorrelationResponse]
    predictions: list[PredictionResponse]
    insights: list[ReportInsightResponse]
    risks: list[ReportRiskResponse] = Field(default_factory=list)
