"""Domain layer - core models, errors and ports."""

from city_cycling.domain.models import HistoricalDataPoint, Snapshot, Station
from city_cycling.domain.ports import SnapshotStore, StationFeed

__all__ = [
    "HistoricalDataPoint",
    "Snapshot",
    "SnapshotStore",
    "Station",
    "StationFeed",
]
