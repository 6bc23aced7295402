"""Aggregate history across all stored snapshots."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from city_cycling.domain.errors import SnapshotStoreError
from city_cycling.domain.models import HistoricalDataPoint

if TYPE_CHECKING:
    from city_cycling.domain.contracts import HistoryCacheProtocol
    from city_cycling.domain.models import Snapshot
    from city_cycling.domain.ports import SnapshotStore

logger = logging.getLogger(__name__)


def summarize_snapshot(snapshot: Snapshot) -> HistoricalDataPoint:
    """Compute the aggregate counters for one snapshot."""
    return HistoricalDataPoint(
        timestamp=snapshot.captured_at,
        total_bikes=sum(station.bike_count for station in snapshot.stations),
        total_e_bikes=sum(station.e_bike_count for station in snapshot.stations),
        total_empty_docks=sum(station.empty_dock_count for station in snapshot.stations),
        station_count=len(snapshot.stations),
    )


async def compute_series(store: SnapshotStore) -> list[HistoricalDataPoint]:
    """Summarize every snapshot in the store.

    The series is in the store's key order, newest first. A snapshot that
    cannot be read or decoded is logged and left out; a failure to list the
    snapshots propagates.
    """
    start = time.monotonic()
    keys = await store.list_keys()

    data_points: list[HistoricalDataPoint] = []
    for key in keys:
        try:
            snapshot = await store.read_by_key(key)
        except SnapshotStoreError as e:
            logger.warning(f"Failed to read snapshot {key}: {e}")
            continue
        data_points.append(summarize_snapshot(snapshot))

    logger.info(
        f"Computed history from {len(data_points)}/{len(keys)} snapshots "
        f"in {time.monotonic() - start:.3f}s"
    )
    return data_points


class HistoryService:
    """Serves the aggregate history series through a time-limited cache."""

    def __init__(self, store: SnapshotStore, cache: HistoryCacheProtocol) -> None:
        """Initialize with a snapshot store and a history cache."""
        self._store = store
        self._cache = cache

    async def get_series(self) -> list[HistoricalDataPoint]:
        """Return the cached series, recomputing it when stale.

        The computation runs outside any cache lock. Two concurrent misses may
        both compute; the later install wins, which is harmless because both
        read the same immutable snapshots.
        """
        cached = self._cache.get()
        if cached is not None:
            logger.info(f"History cache hit ({len(cached)} data points)")
            return cached

        data_points = await compute_series(self._store)
        self._cache.set(data_points)
        logger.info(f"History cache updated ({len(data_points)} data points)")
        return data_points
