"""Station domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    """Represents a docking station and its availability at one instant.

    Counts come straight from the upstream feed, which does not guarantee that
    they add up (e.g. bikes + empty docks may differ from docks).
    """

    id: int
    name: str
    latitude: float
    longitude: float
    bike_count: int = 0
    standard_bike_count: int = 0
    e_bike_count: int = 0
    empty_dock_count: int = 0
    dock_count: int = 0
