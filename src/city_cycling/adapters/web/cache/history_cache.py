"""Time-limited cache for the aggregate history series."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from city_cycling.adapters.web.cache.read_write_lock import ReadWriteLock
from city_cycling.domain.contracts.history_cache import HistoryCacheProtocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from city_cycling.domain.models import HistoricalDataPoint

DEFAULT_HISTORY_CACHE_TTL_SECONDS = 600.0


class HistoryCache(HistoryCacheProtocol):
    """Single-slot cache that expires ``ttl_seconds`` after each install."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_HISTORY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Freshness window for an installed series.
            clock: Monotonic clock, injectable for tests.
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = ReadWriteLock()
        self._series: list[HistoricalDataPoint] | None = None
        self._computed_at = 0.0

    def get(self) -> list[HistoricalDataPoint] | None:
        """Get the cached series if it is still fresh."""
        with self._lock.read():
            if self._series is None:
                return None
            if self._clock() - self._computed_at >= self.ttl_seconds:
                return None
            return self._series

    def set(self, series: list[HistoricalDataPoint]) -> None:
        """Install a freshly computed series."""
        with self._lock.write():
            self._series = series
            self._computed_at = self._clock()
