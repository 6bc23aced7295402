"""Domain models for city cycling snapshots."""

from city_cycling.domain.models.historical_data_point import HistoricalDataPoint
from city_cycling.domain.models.snapshot import Snapshot
from city_cycling.domain.models.station import Station

__all__ = [
    "HistoricalDataPoint",
    "Snapshot",
    "Station",
]
