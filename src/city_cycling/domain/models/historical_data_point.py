"""Historical data point domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HistoricalDataPoint:
    """Aggregate statistics for a single snapshot."""

    timestamp: datetime
    total_bikes: int
    total_e_bikes: int
    total_empty_docks: int
    station_count: int
