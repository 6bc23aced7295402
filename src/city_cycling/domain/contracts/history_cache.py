"""Protocol for caching the aggregate history series."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from city_cycling.domain.models.historical_data_point import HistoricalDataPoint


class HistoryCacheProtocol(Protocol):
    """Protocol for a single-slot, time-limited cache of the history series."""

    def get(self) -> list["HistoricalDataPoint"] | None:
        """Get the cached series.

        Returns:
            The cached series while it is still fresh, otherwise None.
        """
        ...

    def set(self, series: list["HistoricalDataPoint"]) -> None:
        """Replace the cached series and restart its freshness window.

        Args:
            series: The newly computed series.
        """
        ...
