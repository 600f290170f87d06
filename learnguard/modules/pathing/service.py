"""Learning Path Service - Profile analysis and cached path generation.

This service provides:
- Profile rebuilds from the latest stats snapshot
- Optimized path generation with a per-learner TTL cache
- Access to the latest stored profile and the cached path

A cache hit returns the stored path without touching the stats provider or
rebuilding the profile. The read-check-write on the cache is serialized per
learner so concurrent requests do not both recompute.
"""

from collections import defaultdict
from uuid import UUID
import asyncio
import logging

from learnguard.modules.pathing.interface import (
    ILearningPathService,
    LearningProfile,
    OptimizedLearningPath,
)
from learnguard.modules.pathing.optimizer import PathOptimizer
from learnguard.modules.pathing.profile import LearningProfileBuilder
from learnguard.modules.stats.interface import IStatsProvider, StatsSnapshot
from learnguard.shared.cache import TTLCache
from learnguard.shared.config import Settings, get_settings
from learnguard.shared.datetime_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class LearningPathService(ILearningPathService):
    """Facade over the profile builder, path optimizer and path cache.

    Args:
        provider: Source of learner snapshots
        settings: Provides the path cache TTL
        clock: Source of the current time
    """

    def __init__(
        self,
        provider: IStatsProvider,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or utc_now
        self._provider = provider
        self._builder = LearningProfileBuilder(clock=self._clock)
        self._optimizer = PathOptimizer(ttl_hours=self._settings.path_cache_ttl_hours)
        self._paths: TTLCache[UUID, OptimizedLearningPath] = TTLCache(
            self._settings.path_cache_ttl_hours, clock=self._clock, name="path cache"
        )
        self._profiles: dict[UUID, LearningProfile] = {}
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def analyze_learning_profile(self, user_id: UUID) -> LearningProfile:
        """Rebuild the learner's profile and store it, replacing the previous one.

        When the stats provider fails, the stored profile is returned if there
        is one; otherwise the profile is built from empty counters.

        Args:
            user_id: Learner to analyze

        Returns:
            The new (or last-known) profile
        """
        try:
            snapshot = await self._provider.get_snapshot(user_id)
        except Exception as e:
            stored = self._profiles.get(user_id)
            logger.error(f"Stats retrieval failed for user {user_id}: {e}")
            if stored is not None:
                return stored
            snapshot = StatsSnapshot()

        profile = self._builder.build(user_id, snapshot, at=self._clock())
        self._profiles[user_id] = profile
        return profile

    async def generate_optimized_path(self, user_id: UUID) -> OptimizedLearningPath:
        """Return the learner's path, rebuilding it only when the cache is stale.

        Args:
            user_id: Learner

        Returns:
            OptimizedLearningPath valid until ``generated_at + TTL``
        """
        async with self._locks[user_id]:
            return await self._paths.get_or_compute(
                user_id,
                lambda: self._build_path(user_id),
                expires_at=lambda path: path.valid_until,
            )

    async def _build_path(self, user_id: UUID) -> OptimizedLearningPath:
        profile = await self.analyze_learning_profile(user_id)
        return self._optimizer.optimize(profile, generated_at=self._clock())

    def get_learning_profile(self, user_id: UUID) -> LearningProfile | None:
        return self._profiles.get(user_id)

    def get_cached_path(self, user_id: UUID) -> OptimizedLearningPath | None:
        return self._paths.get(user_id)

    def clear_user_cache(self, user_id: UUID) -> None:
        self._profiles.pop(user_id, None)
        self._paths.invalidate(user_id)
        logger.info(f"Cleared profile and path cache for user {user_id}")
