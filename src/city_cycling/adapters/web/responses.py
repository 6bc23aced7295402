"""JSON shaping for the HTTP API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from starlette.responses import JSONResponse

from city_cycling.domain.snapshot_naming import format_rfc3339

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from city_cycling.domain.models import HistoricalDataPoint, Station

HISTORY_CACHE_CONTROL = "public, max-age=3600"
# Snapshots never change once written
SNAPSHOT_CACHE_CONTROL = "public, max-age=604800, immutable"


def station_to_dict(station: Station) -> dict[str, Any]:
    """Convert a station to its JSON representation."""
    return {
        "id": station.id,
        "name": station.name,
        "lat": station.latitude,
        "lng": station.longitude,
        "nbBikes": station.bike_count,
        "nbStandardBikes": station.standard_bike_count,
        "nbEBikes": station.e_bike_count,
        "nbEmptyDocks": station.empty_dock_count,
        "nbDocks": station.dock_count,
    }


def data_point_to_dict(data_point: HistoricalDataPoint) -> dict[str, Any]:
    """Convert a history data point to its JSON representation."""
    return {
        "timestamp": format_rfc3339(data_point.timestamp),
        "totalBikes": data_point.total_bikes,
        "totalEBikes": data_point.total_e_bikes,
        "totalEmptyDocks": data_point.total_empty_docks,
        "stationCount": data_point.station_count,
    }


def stations_response(
    timestamp: datetime,
    stations: Iterable[Station],
    cache_control: str | None = None,
) -> JSONResponse:
    """Build the ``{"timestamp", "stations"}`` response."""
    response = JSONResponse(
        {
            "timestamp": format_rfc3339(timestamp),
            "stations": [station_to_dict(station) for station in stations],
        }
    )
    if cache_control:
        response.headers["Cache-Control"] = cache_control
    return response


def history_response(data_points: Iterable[HistoricalDataPoint]) -> JSONResponse:
    """Build the ``{"dataPoints"}`` response."""
    response = JSONResponse(
        {"dataPoints": [data_point_to_dict(data_point) for data_point in data_points]}
    )
    response.headers["Cache-Control"] = HISTORY_CACHE_CONTROL
    return response


def timestamps_response(timestamps: Iterable[datetime]) -> JSONResponse:
    """Build the ``{"timestamps"}`` response."""
    return JSONResponse({"timestamps": [format_rfc3339(timestamp) for timestamp in timestamps]})


def error_response(message: str, status_code: int) -> JSONResponse:
    """Build an ``{"error"}`` response."""
    return JSONResponse({"error": message}, status_code=status_code)
