"""Starlette application serving the map page and the JSON API."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.routing import Route

from city_cycling.adapters.storage.tsv_codec import ZERO_TIME
from city_cycling.adapters.web.rate_limit_middleware import RateLimitMiddleware
from city_cycling.adapters.web.responses import (
    SNAPSHOT_CACHE_CONTROL,
    error_response,
    history_response,
    stations_response,
    timestamps_response,
)
from city_cycling.domain.errors import (
    NoMatchingSnapshotError,
    NoSnapshotsError,
    SnapshotNotFoundError,
    SnapshotStoreError,
    StationFeedError,
)
from city_cycling.domain.snapshot_naming import parse_rfc3339

if TYPE_CHECKING:
    from starlette.requests import Request

    from city_cycling.adapters.config import AppConfig
    from city_cycling.application.services import HistoryService, SnapshotResolver
    from city_cycling.domain.ports import SnapshotStore, StationFeed

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
MAP_TEMPLATE = TEMPLATES_DIR / "map.html"


async def _not_found(_request: Request, exc: Exception) -> Response:
    return error_response(str(exc), 404)


async def _timed_out(_request: Request, _exc: Exception) -> Response:
    logger.warning("Request timed out waiting for storage")
    return error_response("Timed out waiting for storage", 504)


async def _storage_failed(_request: Request, exc: Exception) -> Response:
    logger.error(f"Storage error: {exc}")
    return error_response("Failed to read station data", 500)


EXCEPTION_HANDLERS = {
    NoSnapshotsError: _not_found,
    NoMatchingSnapshotError: _not_found,
    SnapshotNotFoundError: _not_found,
    TimeoutError: _timed_out,
    SnapshotStoreError: _storage_failed,
}


class CyclingApi:
    """Request handlers for the station and history endpoints.

    Every handler bounds its storage work with the configured request deadline;
    an expired deadline surfaces as ``TimeoutError`` and maps to 504.
    """

    def __init__(
        self,
        store: SnapshotStore,
        history_service: HistoryService,
        resolver: SnapshotResolver,
        config: AppConfig,
        feed: StationFeed | None = None,
    ) -> None:
        """Initialize the handlers.

        Args:
            store: Snapshot store to read from.
            history_service: Cached aggregate history.
            resolver: Cached nearest-snapshot lookup.
            config: Application configuration.
            feed: Live feed used when no snapshot can be read, if enabled.
        """
        self.store = store
        self.history_service = history_service
        self.resolver = resolver
        self.feed = feed if config.live_fallback else None
        # 0 disables the deadline
        self.request_timeout = config.request_timeout_seconds or None
        self.map_page = MAP_TEMPLATE.read_text(encoding="utf-8")

    async def map_page_handler(self, _request: Request) -> Response:
        """Serve the map page."""
        return HTMLResponse(self.map_page)

    async def stations(self, _request: Request) -> Response:
        """Serve the latest snapshot, falling back to the live feed."""
        try:
            async with asyncio.timeout(self.request_timeout):
                snapshot = await self.store.read_latest()
        except SnapshotStoreError as e:
            if self.feed is None:
                raise
            logger.info(f"No stored data, fetching live: {e}")
            return await self._live_stations(self.feed)
        return stations_response(snapshot.captured_at, snapshot.stations)

    async def _live_stations(self, feed: StationFeed) -> Response:
        try:
            stations = await feed.fetch_current_stations()
        except StationFeedError as e:
            logger.error(f"Live feed fetch failed: {e}")
            return error_response("Failed to fetch station data", 500)
        # Live data carries no capture time
        return stations_response(ZERO_TIME, stations)

    async def history(self, _request: Request) -> Response:
        """Serve the aggregate history series, newest first."""
        async with asyncio.timeout(self.request_timeout):
            data_points = await self.history_service.get_series()
        return history_response(data_points)

    async def history_snapshot(self, request: Request) -> Response:
        """Serve the stored snapshot nearest to the ``timestamp`` query parameter."""
        raw_timestamp = request.query_params.get("timestamp", "")
        if not raw_timestamp:
            return error_response("Missing timestamp parameter", 400)

        target = parse_rfc3339(raw_timestamp)
        if target is None:
            return error_response("Invalid timestamp format", 400)

        async with asyncio.timeout(self.request_timeout):
            stations = await self.resolver.get_stations_at(target)
        return stations_response(target, stations, cache_control=SNAPSHOT_CACHE_CONTROL)

    async def timestamps(self, _request: Request) -> Response:
        """Serve the capture times of all stored snapshots, newest first."""
        async with asyncio.timeout(self.request_timeout):
            timestamps = await self.store.list_timestamps()
        return timestamps_response(timestamps)

    async def healthz(self, _request: Request) -> Response:
        """Health check endpoint for load balancers and monitoring."""
        return JSONResponse({"status": "ok", "backend": self.store.name})


def create_app(
    store: SnapshotStore,
    history_service: HistoryService,
    resolver: SnapshotResolver,
    config: AppConfig,
    feed: StationFeed | None = None,
) -> Starlette:
    """Create the Starlette application.

    Args:
        store: Snapshot store to read from.
        history_service: Cached aggregate history.
        resolver: Cached nearest-snapshot lookup.
        config: Application configuration.
        feed: Live feed for the ``/api/stations`` fallback.

    Returns:
        The configured application, wrapped in the rate limiting middleware.
    """
    api = CyclingApi(store, history_service, resolver, config, feed=feed)
    routes = [
        Route("/", api.map_page_handler, methods=["GET"]),
        Route("/api/stations", api.stations, methods=["GET"]),
        Route("/api/history", api.history, methods=["GET"]),
        Route("/api/history/snapshot", api.history_snapshot, methods=["GET"]),
        Route("/api/timestamps", api.timestamps, methods=["GET"]),
        Route("/healthz", api.healthz, methods=["GET"]),
    ]
    middleware = [
        Middleware(RateLimitMiddleware, requests_per_minute=config.rate_limit_per_minute),
    ]
    logger.info(f"Web application created ({len(routes)} routes, backend={store.name})")
    return Starlette(routes=routes, middleware=middleware, exception_handlers=EXCEPTION_HANDLERS)
