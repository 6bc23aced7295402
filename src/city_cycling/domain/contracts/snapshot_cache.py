"""Protocol for caching snapshot lookups by timestamp."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from city_cycling.domain.models.station import Station


class SnapshotCacheProtocol(Protocol):
    """Protocol for caching resolved snapshots by normalized timestamp."""

    def get(self, key: str) -> list["Station"] | None:
        """Get cached stations for a normalized timestamp.

        Args:
            key: Normalized (UTC, RFC 3339) timestamp string.

        Returns:
            The cached stations, or None if the timestamp was never resolved.
        """
        ...

    def set(self, key: str, stations: list["Station"]) -> None:
        """Cache stations for a normalized timestamp.

        Args:
            key: Normalized (UTC, RFC 3339) timestamp string.
            stations: The stations of the nearest snapshot.
        """
        ...
