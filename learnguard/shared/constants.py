"""Application-wide constants.

This module centralizes the fixed thresholds and weights of the risk models,
the learner profile and the path optimizer. Values that need to be
configurable at runtime should go in config.py instead.

None of these numbers come from a fitted model. They are product rules and
should be reviewed against real learner data before being changed.
"""

# ===================
# Attention Decline Model
# ===================

ATTENTION_FOCUS_FREQUENCY_THRESHOLD = 0.3
ATTENTION_COMPLETION_RATE_THRESHOLD = 0.7
ATTENTION_ERROR_RATE_THRESHOLD = 0.2

ATTENTION_FOCUS_FREQUENCY_WEIGHT = 0.4
ATTENTION_COMPLETION_RATE_WEIGHT = 0.35
ATTENTION_ERROR_RATE_WEIGHT = 0.25

ATTENTION_TRIGGER_SCORE = 0.6
ATTENTION_TIME_TO_IMPACT_HOURS = 24


# ===================
# Motivation Drop Model
# ===================

MOTIVATION_SESSION_FREQUENCY_THRESHOLD = 0.5
MOTIVATION_SESSION_DURATION_THRESHOLD = 0.6
MOTIVATION_FEATURE_ENGAGEMENT_THRESHOLD = 0.4

MOTIVATION_SESSION_FREQUENCY_WEIGHT = 0.5
MOTIVATION_SESSION_DURATION_WEIGHT = 0.3
MOTIVATION_FEATURE_ENGAGEMENT_WEIGHT = 0.2

MOTIVATION_TRIGGER_SCORE = 0.5
MOTIVATION_TIME_TO_IMPACT_HOURS = 48

# Share of all sessions assumed to be recent when the aggregator omits it
DEFAULT_RECENT_SESSION_SHARE = 0.3

# Session duration is normalized against this many minutes
NORMALIZED_SESSION_MINUTES = 30


# Weighted models report high severity above this score
HIGH_SEVERITY_SCORE = 0.8

# Motivation drops are escalated earlier than attention declines
MOTIVATION_HIGH_SEVERITY_SCORE = 0.7


# ===================
# Skill Plateau Rule
# ===================

PLATEAU_STAGNATION_THRESHOLD = 0.7
PLATEAU_ACCURACY_FLOOR = 70
PLATEAU_TIME_TO_IMPACT_HOURS = 72


# ===================
# Memory Decay Rule
# ===================

MEMORY_ACCURACY_THRESHOLD = 70
MEMORY_HIGH_SEVERITY_ACCURACY = 60
MEMORY_EXPECTED_REVIEW_SHARE = 0.1  # of all cards, per day
MEMORY_MIN_REVIEW_RATIO = 0.5  # of the expected reviews
MEMORY_PROBABILITY = 0.7
MEMORY_TIME_TO_IMPACT_HOURS = 12


# ===================
# Pronunciation Regression Rule
# ===================

PRONUNCIATION_SCORE_THRESHOLD = 70
PRONUNCIATION_HIGH_SEVERITY_SCORE = 60
PRONUNCIATION_RESCUE_RATIO_THRESHOLD = 0.3
PRONUNCIATION_PROBABILITY = 0.65
PRONUNCIATION_TIME_TO_IMPACT_HOURS = 36


# Registered kinds without a detector still need a positive impact horizon
CONSISTENCY_TIME_TO_IMPACT_HOURS = 48
OVERLOAD_TIME_TO_IMPACT_HOURS = 24


# ===================
# Strategies & Alerts
# ===================

STRATEGY_CONFIDENCE = 0.8
STRATEGY_ESTIMATED_EFFECTIVENESS = 0.75

URGENCY_MULTIPLIER_CRITICAL = 1.0
URGENCY_MULTIPLIER_HIGH = 0.8
URGENCY_MULTIPLIER_DEFAULT = 0.6

DEFAULT_ALERT_HISTORY_QUERY_LIMIT = 10


# ===================
# Analytics
# ===================

TREND_STABLE_CONFIDENCE = 0.7
TREND_MAX_CONFIDENCE = 0.95

FOCUS_PATTERN_MIN_TRIGGERS = 5
FOCUS_PATTERN_POSITIVE_EFFECTIVENESS = 70
PRONUNCIATION_PATTERN_MIN_ASSESSMENTS = 20
PRONUNCIATION_PATTERN_POSITIVE_SCORE = 80
SRS_PATTERN_POSITIVE_ACCURACY = 85
RESCUE_PATTERN_MIN_TRIGGERS = 5
RESCUE_PATTERN_MIN_RATIO = 0.3

CORRELATION_STRONG = 0.7
CORRELATION_MODERATE = 0.4
CORRELATION_WEAK = 0.2

FOCUS_ACCURACY_SIGNIFICANCE = 0.85
PRONUNCIATION_RESCUE_SIGNIFICANCE = 0.78

IDEAL_REPORT_SESSION_MIN_MINUTES = 15
IDEAL_REPORT_SESSION_MAX_MINUTES = 45

# Report risk assessment
REPORT_PLATEAU_STABLE_SHARE = 0.7
REPORT_PLATEAU_PROBABILITY = 0.65
REPORT_MOTIVATION_RECENT_SHARE = 0.2
REPORT_MOTIVATION_PROBABILITY = 0.7
REPORT_REGRESSION_MIN_CONFIDENCE = 0.6
REPORT_REGRESSION_MIN_DECLINING = 3
REPORT_REGRESSION_PROBABILITY = 0.55
REPORT_INCONSISTENCY_MAX_SCORE = 50
REPORT_INCONSISTENCY_PROBABILITY = 0.5


# ===================
# Learning Profile
# ===================

MIN_PROFILE_SCORE = 0.0
MAX_PROFILE_SCORE = 100.0
BASE_PROFILE_SCORE = 50.0

IDEAL_SESSION_MIN_MINUTES = 10
IDEAL_SESSION_MAX_MINUTES = 30
CONSISTENCY_WINDOW_DAYS = 30

WEAK_FOCUS_TRIGGERS = 10
WEAK_PRONUNCIATION_SCORE = 70
WEAK_RESCUE_TRIGGERS = 15
WEAK_SRS_ACCURACY = 70

STRONG_FOCUS_SUCCESS = 85
STRONG_PRONUNCIATION_SCORE = 85
STRONG_RESCUE_EFFECTIVENESS = 80
STRONG_SRS_ACCURACY = 85

PREFERRED_TOPIC_COUNT = 2


# ===================
# Path Optimizer
# ===================

# Average skill lower bounds for each phase after foundation
DEVELOPMENT_PHASE_MIN_SKILL = 40
MASTERY_PHASE_MIN_SKILL = 70
MAINTENANCE_PHASE_MIN_SKILL = 90

WEAKNESS_RECOMMENDATION_MINUTES = 30
WEAKNESS_RECOMMENDATION_CONFIDENCE = 85
PHASE_RECOMMENDATION_MINUTES = 45
PHASE_RECOMMENDATION_CONFIDENCE = 80
STYLE_RECOMMENDATION_MINUTES = 25
STYLE_RECOMMENDATION_CONFIDENCE = 75
