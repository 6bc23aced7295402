"""Cache of resolved snapshots keyed by normalized timestamp."""

from __future__ import annotations

from typing import TYPE_CHECKING

from city_cycling.adapters.web.cache.read_write_lock import ReadWriteLock
from city_cycling.domain.contracts.snapshot_cache import SnapshotCacheProtocol

if TYPE_CHECKING:
    from city_cycling.domain.models import Station


class SnapshotCache(SnapshotCacheProtocol):
    """In-memory cache of stations by normalized target timestamp.

    Entries never expire because snapshots are never rewritten. There is no
    eviction either, so the cache grows with every distinct timestamp queried.
    """

    def __init__(self) -> None:
        """Initialize the cache."""
        self._lock = ReadWriteLock()
        self._cache: dict[str, list[Station]] = {}

    def get(self, key: str) -> list[Station] | None:
        """Get cached stations for a normalized timestamp."""
        with self._lock.read():
            return self._cache.get(key)

    def set(self, key: str, stations: list[Station]) -> None:
        """Cache stations for a normalized timestamp."""
        with self._lock.write():
            self._cache[key] = stations

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._cache)
