"""Test configuration and fixtures."""

import sys
from pathlib import Path

# Load environment variables before any imports that need them
from dotenv import load_dotenv
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Ensure the project root is importable (tests share data via tests.conftest)
sys.path.insert(0, str(project_root))

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest


class FakeClock:
    """Controllable clock for expiry and cache tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


AT_RISK_STATS = {
    "overall": {
        "totalSessions": 10,
        "completedSessions": 5,
        "overallAccuracy": 60,
        "totalTimeSpent": 100,
        "consistencyScore": 40,
        "recentSessions": 2,
    },
    "focusMode": {"triggered": 5, "successRate": 50, "effectiveness": 40},
    "pronunciation": {"averageScore": 55, "assessments": 10, "improvement": -2},
    "rescueMode": {"triggered": 5, "effectiveness": 50},
    "srs": {"accuracyRate": 55, "reviewsToday": 0, "cardsTotal": 40, "graduatedCards": 4},
    "topicCounts": {"travel": 3},
}

HEALTHY_STATS = {
    "overall": {
        "totalSessions": 20,
        "completedSessions": 18,
        "overallAccuracy": 68,
        "totalTimeSpent": 500,
        "consistencyScore": 70,
        "recentSessions": 12,
    },
    "focusMode": {"triggered": 2, "successRate": 90, "effectiveness": 80},
    "pronunciation": {"averageScore": 82, "assessments": 10, "improvement": 6},
    "rescueMode": {"triggered": 1, "effectiveness": 85},
    "srs": {"accuracyRate": 88, "reviewsToday": 10, "cardsTotal": 40, "graduatedCards": 20},
    "topicCounts": {"travel": 5, "food": 8, "business": 5},
}


@pytest.fixture(autouse=True)
def reset_feature_flags():
    """Drop runtime flag overrides between tests."""
    from learnguard.shared.feature_flags import get_feature_flags

    flags = get_feature_flags()
    flags.clear_all_overrides()
    yield
    flags.clear_all_overrides()


@pytest.fixture
def clock():
    """Clock frozen at a fixed UTC instant."""
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sample_user_id():
    """Sample user UUID."""
    return UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def at_risk_snapshot():
    """Snapshot that trips attention, motivation, memory and pronunciation risks."""
    from learnguard.modules.stats import StatsSnapshot

    return StatsSnapshot.from_dict(AT_RISK_STATS)


@pytest.fixture
def healthy_snapshot():
    """Snapshot that trips no risk."""
    from learnguard.modules.stats import StatsSnapshot

    return StatsSnapshot.from_dict(HEALTHY_STATS)


@pytest.fixture
def settings():
    from learnguard.shared.config import Settings

    return Settings()


@pytest.fixture
def provider(clock):
    from learnguard.modules.stats import InMemoryStatsProvider

    return InMemoryStatsProvider(clock=clock)


@pytest.fixture
def registry(provider, settings, clock):
    """Isolated service registry over the in-memory provider."""
    from learnguard.shared.service_registry import ServiceRegistry

    return ServiceRegistry(provider, settings=settings, clock=clock)


@pytest.fixture
def record(provider, clock):
    """Record a snapshot for a learner an hour before "now"."""

    def _record(user_id, snapshot, hours_ago: float = 1):
        provider.record(user_id, snapshot, recorded_at=clock() - timedelta(hours=hours_ago))

    return _record
