"""Shared utilities and common code."""

from learnguard.shared.cache import CacheEntry, TTLCache
from learnguard.shared.config import Settings, get_settings
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.exceptions import LearnGuardException
from learnguard.shared.models import (
    ExecutionStatus,
    LearningPhase,
    RiskSeverity,
    RiskType,
    StrategyPriority,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Cache
    "CacheEntry",
    "TTLCache",
    # Time
    "Clock",
    "utc_now",
    # Errors
    "LearnGuardException",
    # Enums
    "ExecutionStatus",
    "LearningPhase",
    "RiskSeverity",
    "RiskType",
    "StrategyPriority",
]
