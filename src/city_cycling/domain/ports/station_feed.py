"""Station feed port."""

from typing import Protocol

from city_cycling.domain.models.station import Station


class StationFeed(Protocol):
    """Port for fetching the current state of every station upstream."""

    async def fetch_current_stations(self) -> list[Station]:
        """Fetch all stations from the live feed."""
        ...
