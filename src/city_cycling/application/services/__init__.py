"""Application services."""

from city_cycling.application.services.collector_service import CollectorService
from city_cycling.application.services.history_service import HistoryService, compute_series
from city_cycling.application.services.snapshot_resolver import (
    SnapshotResolver,
    find_nearest,
    find_nearest_key,
    normalize_timestamp,
)

__all__ = [
    "CollectorService",
    "HistoryService",
    "SnapshotResolver",
    "compute_series",
    "find_nearest",
    "find_nearest_key",
    "normalize_timestamp",
]
