"""Snapshot domain model."""

from dataclasses import dataclass
from datetime import datetime

from city_cycling.domain.models.station import Station


@dataclass(frozen=True)
class Snapshot:
    """All stations captured at one instant.

    Snapshots are never modified once written, which is what makes it safe to
    cache them for the lifetime of the process.
    """

    stations: tuple[Station, ...]
    captured_at: datetime
