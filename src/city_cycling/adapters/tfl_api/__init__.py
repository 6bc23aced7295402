"""TfL live feed adapter."""

from city_cycling.adapters.tfl_api.tfl_station_feed import TflStationFeed, parse_stations_xml

__all__ = ["TflStationFeed", "parse_stations_xml"]
