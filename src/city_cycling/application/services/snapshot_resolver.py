"""Resolve a point in time to the closest stored snapshot."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from city_cycling.domain.errors import NoMatchingSnapshotError, NoSnapshotsError
from city_cycling.domain.snapshot_naming import format_rfc3339, timestamp_from_key, to_utc_second

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime, timedelta

    from city_cycling.domain.contracts import SnapshotCacheProtocol
    from city_cycling.domain.models import Station
    from city_cycling.domain.ports import SnapshotStore

logger = logging.getLogger(__name__)


def normalize_timestamp(target: datetime) -> str:
    """Normalize a target instant to the RFC 3339 UTC string used as cache key."""
    return format_rfc3339(target)


def find_nearest_key(
    keys: Iterable[str], target: datetime, prefix: str = ""
) -> tuple[str, timedelta] | None:
    """Pick the key whose embedded timestamp is closest to ``target``.

    Keys are scanned in the given order and only a strictly closer key replaces
    the current best, so with newest-first keys the more recent of two
    equidistant snapshots wins. Keys that do not parse are skipped.

    Returns:
        The best key and its distance from the target, or None if no key parses.
    """
    target = to_utc_second(target)
    closest: tuple[str, timedelta] | None = None
    for key in keys:
        timestamp = timestamp_from_key(key, prefix)
        if timestamp is None:
            logger.warning(f"Failed to parse timestamp from key {key}")
            continue

        diff = abs(timestamp - target)
        if closest is None or diff < closest[1]:
            closest = (key, diff)
    return closest


async def find_nearest(store: SnapshotStore, target: datetime) -> list[Station]:
    """Return the stations of the snapshot closest in time to ``target``.

    Only the winning snapshot is downloaded.

    Raises:
        NoSnapshotsError: If the store is empty.
        NoMatchingSnapshotError: If no key carries a parseable timestamp.
    """
    keys = await store.list_keys()
    if not keys:
        raise NoSnapshotsError("No snapshots available")

    closest = find_nearest_key(keys, target, store.key_prefix)
    if closest is None:
        raise NoMatchingSnapshotError(
            f"No matching snapshot found for {normalize_timestamp(target)}"
        )

    key, diff = closest
    logger.info(f"Found closest snapshot {key} (diff={diff})")
    snapshot = await store.read_by_key(key)
    return list(snapshot.stations)


class SnapshotResolver:
    """Serves nearest-snapshot lookups through a per-timestamp cache."""

    def __init__(self, store: SnapshotStore, cache: SnapshotCacheProtocol) -> None:
        """Initialize with a snapshot store and a snapshot cache."""
        self._store = store
        self._cache = cache

    async def get_stations_at(self, target: datetime) -> list[Station]:
        """Return the stations closest to ``target``, from cache when possible."""
        cache_key = normalize_timestamp(target)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"Snapshot cache hit for {cache_key} ({len(cached)} stations)")
            return cached

        stations = await find_nearest(self._store, target)
        self._cache.set(cache_key, stations)
        logger.info(f"Snapshot cache updated for {cache_key} ({len(stations)} stations)")
        return stations
