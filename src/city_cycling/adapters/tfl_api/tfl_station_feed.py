"""TfL Santander Cycles live feed client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiohttp
from lxml import etree

from city_cycling.domain.errors import StationFeedError
from city_cycling.domain.models import Station
from city_cycling.domain.ports.station_feed import StationFeed

if TYPE_CHECKING:
    from aiohttp import ClientSession

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://tfl.gov.uk/tfl/syndication/feeds/cycle-hire/livecyclehireupdates.xml"
USER_AGENT = "city-cycling/1.0"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _child_text(element: etree._Element, tag: str) -> str:
    value = element.findtext(tag)
    return value.strip() if value else ""


def _child_int(element: etree._Element, tag: str) -> int:
    try:
        return int(_child_text(element, tag))
    except ValueError:
        return 0


def _child_float(element: etree._Element, tag: str) -> float:
    try:
        return float(_child_text(element, tag))
    except ValueError:
        return 0.0


def parse_stations_xml(payload: bytes) -> list[Station]:
    """Parse the ``<stations>`` document into Station models.

    Missing or malformed numeric children decode as zero.

    Raises:
        StationFeedError: If the payload is not well-formed XML.
    """
    try:
        root = etree.fromstring(payload, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as e:
        raise StationFeedError(f"Failed to parse XML: {e}") from e

    return [
        Station(
            id=_child_int(element, "id"),
            name=_child_text(element, "name"),
            latitude=_child_float(element, "lat"),
            longitude=_child_float(element, "long"),
            bike_count=_child_int(element, "nbBikes"),
            standard_bike_count=_child_int(element, "nbStandardBikes"),
            e_bike_count=_child_int(element, "nbEBikes"),
            empty_dock_count=_child_int(element, "nbEmptyDocks"),
            dock_count=_child_int(element, "nbDocks"),
        )
        for element in root.iter("station")
    ]


class TflStationFeed(StationFeed):
    """Fetches current station availability from the TfL XML feed."""

    def __init__(
        self,
        session: ClientSession,
        endpoint: str = DEFAULT_FEED_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the feed client.

        Args:
            session: Shared aiohttp session.
            endpoint: Feed URL.
            timeout_seconds: Total timeout for one fetch.
        """
        self._session = session
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds

    async def fetch_current_stations(self) -> list[Station]:
        """Fetch and parse all stations.

        Raises:
            StationFeedError: On timeout, connection failure, non-200 status or bad XML.
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        headers = {"User-Agent": USER_AGENT}
        try:
            async with self._session.get(self.endpoint, headers=headers, timeout=timeout) as response:
                if response.status != 200:
                    raise StationFeedError(f"unexpected status code: {response.status}")
                payload = await response.read()
        except TimeoutError as e:
            raise StationFeedError(
                f"Timed out fetching stations after {self.timeout_seconds}s"
            ) from e
        except aiohttp.ClientError as e:
            raise StationFeedError(f"Failed to fetch stations: {e}") from e

        stations = parse_stations_xml(payload)
        logger.debug(f"Fetched {len(stations)} stations from {self.endpoint}")
        return stations
