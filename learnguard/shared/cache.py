"""In-memory TTL cache.

Entries are stored as ``key -> (value, expires_at)``. An entry is live while
``now < expires_at``; expired entries are dropped lazily on access. Time comes
from an injected clock so expiry can be driven from tests.

Usage:
    from learnguard.shared.cache import TTLCache

    cache: TTLCache[UUID, OptimizedLearningPath] = TTLCache(ttl_hours=24)
    path = await cache.get_or_compute(user_id, lambda: build_path(user_id))  # build_path is async
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Generic, Hashable, TypeVar
import logging
import threading

from learnguard.shared.datetime_utils import Clock, add_hours, utc_now

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value with its expiry."""

    value: V
    expires_at: datetime


class TTLCache(Generic[K, V]):
    """Thread-safe key/value cache with a per-entry time-to-live.

    Args:
        ttl_hours: Default lifetime of an entry
        clock: Callable returning the current UTC time
        name: Label used in log messages
    """

    def __init__(
        self,
        ttl_hours: float,
        clock: Clock | None = None,
        name: str = "cache",
    ) -> None:
        if ttl_hours <= 0:
            raise ValueError(f"ttl_hours must be positive, got {ttl_hours}")
        self._ttl_hours = ttl_hours
        self._clock = clock or utc_now
        self._name = name
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    @property
    def ttl_hours(self) -> float:
        return self._ttl_hours

    def get(self, key: K) -> V | None:
        """Return the live value for ``key``, or None when missing or expired."""
        with self._lock:
            return self._get_live(key)

    def set(self, key: K, value: V, expires_at: datetime | None = None) -> CacheEntry[V]:
        """Store ``value`` under ``key``.

        Args:
            key: Cache key
            value: Value to store
            expires_at: Explicit expiry; defaults to now + ttl

        Returns:
            The stored entry
        """
        if expires_at is None:
            expires_at = add_hours(self._clock(), self._ttl_hours)
        entry = CacheEntry(value=value, expires_at=expires_at)
        with self._lock:
            self._entries[key] = entry
        return entry

    async def get_or_compute(
        self,
        key: K,
        compute: Callable[[], Awaitable[V]],
        expires_at: Callable[[V], datetime] | None = None,
    ) -> V:
        """Return the live value for ``key``, computing and storing it on a miss.

        The map lock is not held while ``compute`` runs. Callers that need
        the read-check-write to be atomic for a key serialize on their own
        per-key lock around this call.

        Args:
            key: Cache key
            compute: Zero-argument coroutine factory for the value
            expires_at: Optional callable deriving the expiry from the value

        Returns:
            The cached or freshly computed value
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"{self._name} hit for {key}")
            return cached

        logger.debug(f"{self._name} miss for {key}")
        value = await compute()
        self.set(key, value, expires_at(value) if expires_at is not None else None)
        return value

    def invalidate(self, key: K) -> bool:
        """Remove ``key``. Returns True if an entry was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _get_live(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() < entry.expires_at:
            return entry.value
        del self._entries[key]
        return None
