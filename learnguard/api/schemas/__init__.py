"""API schemas package."""

from learnguard.api.schemas.common import ErrorDetail, ErrorResponse, SuccessResponse
from learnguard.api.schemas.insights import (
    AnalysisCycleResponse,
    AnalyticsReportResponse,
    LearningProfileResponse,
    LearningRiskResponse,
    OptimizedPathResponse,
    RecordStatsRequest,
    RecordStatsResponse,
    ReportRequest,
)
from learnguard.api.schemas.interventions import (
    AlertSweepResponse,
    ExecuteInterventionRequest,
    FeedbackRequest,
    FinishInterventionRequest,
    InterventionExecutionResponse,
    InterventionStrategyResponse,
    PredictiveAlertResponse,
    RecordMetricRequest,
    UpdateProgressRequest,
)

__all__ = [
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
    # Insights
    "AnalysisCycleResponse",
    "AnalyticsReportResponse",
    "LearningProfileResponse",
    "LearningRiskResponse",
    "OptimizedPathResponse",
    "RecordStatsRequest",
    "RecordStatsResponse",
    "ReportRequest",
    # Interventions
    "AlertSweepResponse",
    "ExecuteInterventionRequest",
    "FeedbackRequest",
    "FinishInterventionRequest",
    "InterventionExecutionResponse",
    "InterventionStrategyResponse",
    "PredictiveAlertResponse",
    "RecordMetricRequest",
    "UpdateProgressRequest",
]
