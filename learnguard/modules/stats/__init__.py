"""Stats Module - Learner counters and the aggregator interface.

Usage:
    from learnguard.modules.stats import InMemoryStatsProvider, StatsSnapshot

    provider = InMemoryStatsProvider()
    provider.record(user_id, StatsSnapshot.from_dict(payload))
"""

from learnguard.modules.stats.interface import (
    FocusModeStats,
    IStatsProvider,
    OverallStats,
    PronunciationStats,
    RescueModeStats,
    SRSStats,
    StatsSnapshot,
    TimeRange,
)
from learnguard.modules.stats.provider import (
    InMemoryStatsProvider,
    get_stats_provider,
    load_snapshot,
)

__all__ = [
    # Interface types
    "FocusModeStats",
    "IStatsProvider",
    "OverallStats",
    "PronunciationStats",
    "RescueModeStats",
    "SRSStats",
    "StatsSnapshot",
    "TimeRange",
    # Implementations
    "InMemoryStatsProvider",
    "get_stats_provider",
    "load_snapshot",
]
