"""Snapshot store port."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from city_cycling.domain.models.snapshot import Snapshot
from city_cycling.domain.models.station import Station


class SnapshotStore(Protocol):
    """Port for persisting and reading timestamped station snapshots."""

    @property
    def name(self) -> str:
        """Short backend name used in logs and health checks."""
        ...

    @property
    def key_prefix(self) -> str:
        """Prefix prepended to every snapshot key by this backend."""
        ...

    async def write_snapshot(self, stations: Sequence[Station], now: datetime) -> str:
        """Write a new snapshot captured at ``now`` and return its key."""
        ...

    async def read_latest(self) -> Snapshot:
        """Read the most recent snapshot."""
        ...

    async def read_by_key(self, key: str) -> Snapshot:
        """Read a single snapshot by key."""
        ...

    async def list_keys(self) -> list[str]:
        """List snapshot keys, newest first."""
        ...

    async def list_timestamps(self) -> list[datetime]:
        """List snapshot capture times, newest first."""
        ...
