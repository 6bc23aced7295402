"""Tests for the web result caches."""

import threading

from city_cycling.adapters.web.cache import HistoryCache, ReadWriteLock, SnapshotCache
from city_cycling.domain.models import HistoricalDataPoint
from tests.fakes import make_station, utc


def _series() -> list[HistoricalDataPoint]:
    return [
        HistoricalDataPoint(
            timestamp=utc(2024, 1, 15, 10, 0, 0),
            total_bikes=10,
            total_e_bikes=2,
            total_empty_docks=5,
            station_count=3,
        )
    ]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        """Start at zero."""
        self.now = 0.0

    def __call__(self) -> float:
        """Return the current reading."""
        return self.now


class TestHistoryCache:
    """Tests for the time-limited history cache."""

    def test_when_empty_then_get_returns_none(self) -> None:
        """Given nothing installed, when getting, then None is returned."""
        assert HistoryCache().get() is None

    def test_when_within_ttl_then_series_is_returned(self) -> None:
        """Given a fresh series, when getting before the TTL, then it is returned."""
        clock = FakeClock()
        cache = HistoryCache(ttl_seconds=600, clock=clock)
        series = _series()

        cache.set(series)
        clock.now = 599.9

        assert cache.get() is series

    def test_when_ttl_elapsed_then_get_returns_none(self) -> None:
        """Given an installed series, when the TTL has elapsed, then None is returned."""
        clock = FakeClock()
        cache = HistoryCache(ttl_seconds=600, clock=clock)

        cache.set(_series())
        clock.now = 600.0

        assert cache.get() is None

    def test_when_reinstalled_then_ttl_restarts(self) -> None:
        """Given an expired series, when a new one is installed, then it is fresh again."""
        clock = FakeClock()
        cache = HistoryCache(ttl_seconds=600, clock=clock)
        cache.set(_series())
        clock.now = 1000.0

        cache.set([])

        assert cache.get() == []


class TestSnapshotCache:
    """Tests for the per-timestamp snapshot cache."""

    def test_when_key_missing_then_get_returns_none(self) -> None:
        """Given an empty cache, when getting, then None is returned."""
        assert SnapshotCache().get("2024-01-15T10:00:00Z") is None

    def test_when_set_then_get_returns_stations_and_len_counts_keys(self) -> None:
        """Given installed entries, when getting, then the stations are returned."""
        cache = SnapshotCache()
        stations = [make_station(1)]

        cache.set("2024-01-15T10:00:00Z", stations)
        cache.set("2024-01-15T11:00:00Z", [])

        assert cache.get("2024-01-15T10:00:00Z") is stations
        assert len(cache) == 2


class TestReadWriteLock:
    """Tests for the reader-writer lock."""

    def test_when_reader_holds_lock_then_other_readers_enter(self) -> None:
        """Given a held read lock, when another thread reads, then it is not blocked."""
        lock = ReadWriteLock()
        entered = threading.Event()

        def reader() -> None:
            with lock.read():
                entered.set()

        with lock.read():
            thread = threading.Thread(target=reader)
            thread.start()
            assert entered.wait(timeout=1.0)
        thread.join(timeout=1.0)

    def test_when_reader_holds_lock_then_writer_waits(self) -> None:
        """Given a held read lock, when a thread writes, then it waits for the reader."""
        lock = ReadWriteLock()
        written = threading.Event()

        def writer() -> None:
            with lock.write():
                written.set()

        with lock.read():
            thread = threading.Thread(target=writer)
            thread.start()
            assert not written.wait(timeout=0.1)

        assert written.wait(timeout=1.0)
        thread.join(timeout=1.0)
