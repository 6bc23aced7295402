"""Fetch the live feed and store it as a snapshot."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from city_cycling.domain.ports import SnapshotStore, StationFeed

logger = logging.getLogger(__name__)


class CollectorService:
    """Captures one snapshot per call from the live feed."""

    def __init__(
        self,
        feed: StationFeed,
        store: SnapshotStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            feed: Live station feed.
            store: Store receiving the snapshots.
            clock: Source of the capture instant, defaults to the current UTC time.
        """
        self._feed = feed
        self._store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def fetch_and_store(self) -> str:
        """Fetch all stations and write them as a new snapshot.

        Returns:
            The key of the written snapshot.

        Raises:
            StationFeedError: If the feed could not be fetched.
            SnapshotStoreError: If the snapshot could not be written.
        """
        logger.info("Fetching station data...")
        stations = await self._feed.fetch_current_stations()
        key = await self._store.write_snapshot(stations, self._clock())
        logger.info(f"Stored {len(stations)} stations as {key} ({self._store.name})")
        return key
