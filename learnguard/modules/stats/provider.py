"""In-memory stats provider.

Holds dated snapshots per learner. Used by tests, the CLI and the default
service registry when no external aggregator is wired in.
"""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from uuid import UUID
import json
import logging

from learnguard.modules.stats.interface import IStatsProvider, StatsSnapshot, TimeRange
from learnguard.shared.datetime_utils import Clock, ensure_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedSnapshot:
    recorded_at: datetime
    snapshot: StatsSnapshot


class InMemoryStatsProvider(IStatsProvider):
    """Stats provider backed by a per-learner list of dated snapshots.

    ``get_snapshot(user_id)`` returns the most recent snapshot.
    ``get_snapshot(user_id, time_range)`` returns the most recent snapshot
    recorded inside the window, or an empty snapshot when there is none.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._history: dict[UUID, list[RecordedSnapshot]] = {}

    def record(
        self,
        user_id: UUID,
        snapshot: StatsSnapshot,
        recorded_at: datetime | None = None,
    ) -> None:
        """Store a snapshot for a learner.

        Args:
            user_id: Learner
            snapshot: Counters to store
            recorded_at: When the counters were taken (defaults to now)
        """
        at = ensure_utc(recorded_at) if recorded_at else self._clock()
        history = self._history.setdefault(user_id, [])
        history.append(RecordedSnapshot(recorded_at=at, snapshot=snapshot))
        history.sort(key=lambda item: item.recorded_at)
        logger.debug(f"Recorded snapshot for user {user_id} at {at.isoformat()}")

    def forget(self, user_id: UUID) -> None:
        self._history.pop(user_id, None)

    async def get_snapshot(
        self,
        user_id: UUID,
        time_range: TimeRange | None = None,
    ) -> StatsSnapshot:
        history = self._history.get(user_id, [])
        if time_range is not None:
            history = [item for item in history if time_range.contains(item.recorded_at)]
        if not history:
            return StatsSnapshot()
        return history[-1].snapshot

    async def list_user_ids(self) -> list[UUID]:
        return list(self._history)


def load_snapshot(path: Path | str) -> StatsSnapshot:
    """Read a snapshot from a JSON file in the aggregator's nested shape."""
    with open(path, encoding="utf-8") as f:
        return StatsSnapshot.from_dict(json.load(f))


@lru_cache
def get_stats_provider() -> InMemoryStatsProvider:
    """Get the process-wide in-memory provider."""
    return InMemoryStatsProvider()
