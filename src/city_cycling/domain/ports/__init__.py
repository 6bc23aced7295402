"""Ports (interfaces) for the ports-and-adapters architecture."""

from city_cycling.domain.ports.snapshot_store import SnapshotStore
from city_cycling.domain.ports.station_feed import StationFeed

__all__ = [
    "SnapshotStore",
    "StationFeed",
]
