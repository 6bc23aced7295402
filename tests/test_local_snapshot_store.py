"""Tests for the local filesystem snapshot store."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from city_cycling.adapters.storage import LocalSnapshotStore
from city_cycling.application.services.history_service import compute_series
from city_cycling.domain.errors import (
    NoSnapshotsError,
    SnapshotDecodeError,
    SnapshotNotFoundError,
    SubstrateUnavailableError,
)
from tests.fakes import make_station, utc


def _write_half_then_fail(path: Path, data: bytes) -> int:
    with open(path, "wb") as f:
        f.write(data[: len(data) // 2])
    raise OSError(28, "No space left on device")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data directory that does not exist yet."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> LocalSnapshotStore:
    """Local store over the temporary data directory."""
    return LocalSnapshotStore(data_dir)


class TestLocalSnapshotStoreWrite:
    """Tests for writing snapshots."""

    @pytest.mark.asyncio
    async def test_when_writing_then_directory_is_created_and_key_returned(
        self, store: LocalSnapshotStore, data_dir: Path
    ) -> None:
        """Given a missing directory, when writing, then it is created with the snapshot file."""
        key = await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 30, 45))

        assert key == "stations_20240115_103045.tsv"
        assert (data_dir / key).is_file()

    @pytest.mark.asyncio
    async def test_when_writing_then_latest_returns_same_stations(
        self, store: LocalSnapshotStore
    ) -> None:
        """Given a written snapshot, when reading latest, then the stations come back."""
        stations = [make_station(1), make_station(2, bikes=0, e_bikes=0)]

        await store.write_snapshot(stations, utc(2024, 1, 15, 10, 30, 45, 500000))
        snapshot = await store.read_latest()

        assert list(snapshot.stations) == stations
        assert snapshot.captured_at == utc(2024, 1, 15, 10, 30, 45)

    @pytest.mark.asyncio
    async def test_when_writing_twice_in_same_second_then_last_write_wins(
        self, store: LocalSnapshotStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Given two writes in one second, when reading, then the second replaces the first."""
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 30, 45, 100))
        with caplog.at_level(logging.WARNING):
            await store.write_snapshot([make_station(2)], utc(2024, 1, 15, 10, 30, 45, 900))

        snapshot = await store.read_latest()

        assert [station.id for station in snapshot.stations] == [2]
        assert await store.list_keys() == ["stations_20240115_103045.tsv"]
        assert "already exists" in caplog.text

    @pytest.mark.asyncio
    async def test_when_write_fails_part_way_then_no_truncated_snapshot_is_left(
        self, store: LocalSnapshotStore, data_dir: Path
    ) -> None:
        """Given a disk that fills mid-write, when writing, then the old file stays intact."""
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 0, 0))
        stations = [make_station(i) for i in range(10)]

        with (
            patch.object(Path, "write_bytes", autospec=True, side_effect=_write_half_then_fail),
            pytest.raises(SubstrateUnavailableError),
        ):
            await store.write_snapshot(stations, utc(2024, 1, 15, 10, 0, 0))

        snapshot = await store.read_latest()

        assert [station.id for station in snapshot.stations] == [1]
        assert sorted(entry.name for entry in data_dir.iterdir()) == [
            "stations_20240115_100000.tsv"
        ]

    @pytest.mark.asyncio
    async def test_when_first_write_fails_then_nothing_is_listed(
        self, store: LocalSnapshotStore, data_dir: Path
    ) -> None:
        """Given a failing first write, when listing, then no snapshot and no temp file exist."""
        with (
            patch.object(Path, "write_bytes", autospec=True, side_effect=_write_half_then_fail),
            pytest.raises(SubstrateUnavailableError),
        ):
            await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 0, 0))

        assert await store.list_keys() == []
        assert list(data_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_when_writing_no_stations_then_capture_time_comes_from_key(
        self, store: LocalSnapshotStore
    ) -> None:
        """Given an empty feed tick, when reading it back, then it keeps its capture time."""
        await store.write_snapshot([], utc(2024, 1, 15, 10, 0, 0))

        snapshot = await store.read_latest()
        series = await compute_series(store)

        assert snapshot.stations == ()
        assert snapshot.captured_at == utc(2024, 1, 15, 10, 0, 0)
        assert [point.timestamp for point in series] == [utc(2024, 1, 15, 10, 0, 0)]
        assert series[0].station_count == 0


class TestLocalSnapshotStoreRead:
    """Tests for listing and reading snapshots."""

    @pytest.mark.asyncio
    async def test_when_directory_missing_then_no_keys(self, store: LocalSnapshotStore) -> None:
        """Given no data directory, when listing, then the list is empty."""
        assert await store.list_keys() == []
        assert await store.list_timestamps() == []

    @pytest.mark.asyncio
    async def test_when_directory_missing_then_read_latest_raises_no_snapshots(
        self, store: LocalSnapshotStore
    ) -> None:
        """Given no data directory, when reading latest, then NoSnapshotsError is raised."""
        with pytest.raises(NoSnapshotsError):
            await store.read_latest()

    @pytest.mark.asyncio
    async def test_when_listing_then_newest_first_and_foreign_files_ignored(
        self, store: LocalSnapshotStore, data_dir: Path
    ) -> None:
        """Given snapshots and unrelated entries, when listing, then only snapshots, newest first."""
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 0, 0))
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 12, 0, 0))
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 11, 0, 0))
        (data_dir / "notes.txt").write_text("hello")
        (data_dir / "stations_latest.tsv").write_text("x")
        (data_dir / "stations_20990101_000000.tsv").mkdir()

        keys = await store.list_keys()
        timestamps = await store.list_timestamps()

        assert keys == [
            "stations_20240115_120000.tsv",
            "stations_20240115_110000.tsv",
            "stations_20240115_100000.tsv",
        ]
        assert timestamps == [
            utc(2024, 1, 15, 12, 0, 0),
            utc(2024, 1, 15, 11, 0, 0),
            utc(2024, 1, 15, 10, 0, 0),
        ]

    @pytest.mark.asyncio
    async def test_when_reading_latest_then_greatest_key_is_read(
        self, store: LocalSnapshotStore
    ) -> None:
        """Given several snapshots, when reading latest, then the newest one is returned."""
        await store.write_snapshot([make_station(1)], utc(2024, 1, 15, 10, 0, 0))
        await store.write_snapshot([make_station(2)], utc(2024, 1, 15, 12, 0, 0))

        snapshot = await store.read_latest()

        assert snapshot.stations[0].id == 2

    @pytest.mark.asyncio
    async def test_when_key_missing_then_raises_not_found(self, store: LocalSnapshotStore) -> None:
        """Given an absent key, when reading, then SnapshotNotFoundError is raised."""
        with pytest.raises(SnapshotNotFoundError) as exc_info:
            await store.read_by_key("stations_20240115_103045.tsv")

        assert exc_info.value.key == "stations_20240115_103045.tsv"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key", ["../stations_20240115_103045.tsv", "sub/stations_20240115_103045.tsv", "notes.txt"]
    )
    async def test_when_key_is_not_a_bare_snapshot_name_then_raises_not_found(
        self, store: LocalSnapshotStore, key: str
    ) -> None:
        """Given a key with a path or a foreign name, when reading, then it is not found."""
        with pytest.raises(SnapshotNotFoundError):
            await store.read_by_key(key)

    @pytest.mark.asyncio
    async def test_when_file_is_corrupt_then_raises_decode_error(
        self, store: LocalSnapshotStore, data_dir: Path
    ) -> None:
        """Given a snapshot file with a foreign header, when reading, then SnapshotDecodeError."""
        data_dir.mkdir()
        (data_dir / "stations_20240115_103045.tsv").write_text("garbage\n")

        with pytest.raises(SnapshotDecodeError):
            await store.read_by_key("stations_20240115_103045.tsv")
