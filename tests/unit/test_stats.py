"""Unit tests for stats snapshots, time ranges and the in-memory provider."""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from learnguard.modules.stats import (
    InMemoryStatsProvider,
    StatsSnapshot,
    TimeRange,
    load_snapshot,
)
from learnguard.shared.exceptions import InvalidTimeRangeError

from tests.conftest import AT_RISK_STATS


class TestStatsSnapshot:
    """Tests for StatsSnapshot."""

    def test_from_dict_camel_case(self):
        """Test that the aggregator's camelCase shape is parsed."""
        snapshot = StatsSnapshot.from_dict(AT_RISK_STATS)

        assert snapshot.overall.total_sessions == 10
        assert snapshot.focus_mode.success_rate == 50
        assert snapshot.rescue_mode.triggered == 5
        assert snapshot.srs.cards_total == 40
        assert snapshot.topic_counts == {"travel": 3}

    def test_from_dict_snake_case(self):
        """Test that snake_case keys are accepted too."""
        snapshot = StatsSnapshot.from_dict({
            "focus_mode": {"success_rate": 75},
            "srs": {"reviews_today": 4},
        })

        assert snapshot.focus_mode.success_rate == 75
        assert snapshot.srs.reviews_today == 4

    def test_missing_sections_default_to_zero(self):
        """Test that missing sections and fields are zero."""
        snapshot = StatsSnapshot.from_dict({"overall": {"totalSessions": 3}})

        assert snapshot.overall.completed_sessions == 0
        assert snapshot.overall.recent_sessions is None
        assert snapshot.pronunciation.average_score == 0.0
        assert snapshot.topic_counts == {}

    def test_unknown_keys_ignored(self):
        """Test that unknown keys do not raise."""
        snapshot = StatsSnapshot.from_dict({"overall": {"streakDays": 9}, "badges": []})
        assert snapshot == StatsSnapshot()

    def test_negative_counter_rejected(self):
        """Test that a negative counter raises ValueError."""
        with pytest.raises(ValueError, match="triggered"):
            StatsSnapshot.from_dict({"focusMode": {"triggered": -1}})

    def test_negative_topic_count_rejected(self):
        """Test that negative topic counts raise ValueError."""
        with pytest.raises(ValueError, match="topic_counts"):
            StatsSnapshot.from_dict({"topicCounts": {"travel": -2}})

    @pytest.mark.parametrize("value", ["12", None, True, [1]])
    def test_non_numeric_counter_rejected(self, value):
        """Test that counters must be numbers."""
        raw = {"overall": {"totalSessions": value}}
        if value is None:
            # None means "not supplied" and falls back to the default
            assert StatsSnapshot.from_dict(raw).overall.total_sessions == 0
            return
        with pytest.raises(ValueError, match="total_sessions must be a number"):
            StatsSnapshot.from_dict(raw)

    def test_non_numeric_topic_count_rejected(self):
        with pytest.raises(ValueError, match="must be a number"):
            StatsSnapshot.from_dict({"topicCounts": {"travel": "many"}})

    def test_negative_pronunciation_improvement_allowed(self):
        """Test that improvement is a delta and may be negative."""
        snapshot = StatsSnapshot.from_dict({"pronunciation": {"improvement": -4}})
        assert snapshot.pronunciation.improvement == -4

    def test_to_dict_round_trips(self, at_risk_snapshot):
        """Test that to_dict produces the shape from_dict reads."""
        data = at_risk_snapshot.to_dict()

        assert data["focusMode"]["successRate"] == 50
        assert StatsSnapshot.from_dict(data) == at_risk_snapshot

    def test_average_session_minutes(self, at_risk_snapshot):
        """Test average session length."""
        assert at_risk_snapshot.average_session_minutes == 10
        assert StatsSnapshot().average_session_minutes == 0.0


class TestTimeRange:
    """Tests for TimeRange."""

    @pytest.fixture
    def now(self):
        return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_end_must_follow_start(self, now):
        """Test that empty or inverted ranges raise."""
        with pytest.raises(InvalidTimeRangeError):
            TimeRange(start=now, end=now)
        with pytest.raises(InvalidTimeRangeError):
            TimeRange(start=now, end=now - timedelta(days=1))

    def test_naive_datetimes_become_utc(self):
        """Test that naive datetimes are treated as UTC."""
        time_range = TimeRange(start=datetime(2026, 1, 1), end=datetime(2026, 1, 2))
        assert time_range.start.tzinfo == timezone.utc

    def test_half_open(self, now):
        """Test that start is inside the range and end is not."""
        time_range = TimeRange.last_days(7, now)

        assert time_range.contains(now - timedelta(days=7))
        assert time_range.contains(now - timedelta(seconds=1))
        assert not time_range.contains(now)

    def test_previous(self, now):
        """Test that previous() is the adjacent window of equal length."""
        time_range = TimeRange.last_days(30, now)
        previous = time_range.previous()

        assert previous.end == time_range.start
        assert previous.duration == time_range.duration

    def test_split(self, now):
        """Test that split() covers the range with equal consecutive buckets."""
        time_range = TimeRange.last_days(30, now)
        buckets = time_range.split(4)

        assert len(buckets) == 4
        assert buckets[0].start == time_range.start
        assert buckets[-1].end == time_range.end
        for left, right in zip(buckets, buckets[1:]):
            assert left.end == right.start

    def test_split_requires_a_bucket(self, now):
        """Test that zero buckets raise ValueError."""
        with pytest.raises(ValueError):
            TimeRange.last_days(1, now).split(0)

    def test_from_iso(self):
        """Test parsing of ISO 8601 bounds with a Z suffix."""
        time_range = TimeRange.from_iso("2026-01-01T00:00:00Z", "2026-01-31T00:00:00Z")
        assert time_range.days == 30


class TestInMemoryStatsProvider:
    """Tests for InMemoryStatsProvider."""

    @pytest.mark.asyncio
    async def test_unknown_learner_gets_empty_snapshot(self, provider):
        """Test that a learner without data reads as zeroed counters."""
        assert await provider.get_snapshot(uuid4()) == StatsSnapshot()

    @pytest.mark.asyncio
    async def test_latest_snapshot_wins(self, provider, clock, at_risk_snapshot, healthy_snapshot):
        """Test that the most recent snapshot is returned regardless of insert order."""
        user_id = uuid4()
        provider.record(user_id, healthy_snapshot, recorded_at=clock() - timedelta(hours=1))
        provider.record(user_id, at_risk_snapshot, recorded_at=clock() - timedelta(days=2))

        assert await provider.get_snapshot(user_id) == healthy_snapshot

    @pytest.mark.asyncio
    async def test_windowed_snapshot(self, provider, clock, at_risk_snapshot, healthy_snapshot):
        """Test that a time range selects the latest snapshot inside it."""
        user_id = uuid4()
        provider.record(user_id, at_risk_snapshot, recorded_at=clock() - timedelta(days=40))
        provider.record(user_id, healthy_snapshot, recorded_at=clock() - timedelta(days=1))

        current = TimeRange.last_days(30, clock())
        assert await provider.get_snapshot(user_id, current) == healthy_snapshot
        assert await provider.get_snapshot(user_id, current.previous()) == at_risk_snapshot
        assert await provider.get_snapshot(
            user_id, TimeRange.last_days(30, clock() - timedelta(days=90))
        ) == StatsSnapshot()

    @pytest.mark.asyncio
    async def test_record_defaults_to_clock(self, clock, at_risk_snapshot):
        """Test that record() stamps snapshots with the injected clock."""
        provider = InMemoryStatsProvider(clock=clock)
        user_id = uuid4()
        provider.record(user_id, at_risk_snapshot)

        window = TimeRange(start=clock(), end=clock() + timedelta(seconds=1))
        assert await provider.get_snapshot(user_id, window) == at_risk_snapshot

    @pytest.mark.asyncio
    async def test_list_and_forget(self, provider, at_risk_snapshot):
        """Test listing and forgetting learners."""
        first, second = uuid4(), uuid4()
        provider.record(first, at_risk_snapshot)
        provider.record(second, at_risk_snapshot)

        assert set(await provider.list_user_ids()) == {first, second}

        provider.forget(first)
        assert await provider.list_user_ids() == [second]


class TestLoadSnapshot:
    """Tests for load_snapshot."""

    def test_reads_json_file(self, tmp_path):
        """Test reading a snapshot file."""
        path = tmp_path / "stats.json"
        path.write_text(json.dumps(AT_RISK_STATS))

        snapshot = load_snapshot(path)
        assert snapshot.overall.total_sessions == 10

    def test_invalid_json_raises_value_error(self, tmp_path):
        """Test that malformed JSON surfaces as ValueError."""
        path = tmp_path / "stats.json"
        path.write_text("{not json")

        with pytest.raises(ValueError):
            load_snapshot(path)
