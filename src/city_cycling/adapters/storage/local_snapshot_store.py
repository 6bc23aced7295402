"""Snapshot store backed by TSV files in a local directory."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from city_cycling.adapters.storage import tsv_codec
from city_cycling.domain.errors import (
    NoSnapshotsError,
    SnapshotNotFoundError,
    SubstrateUnavailableError,
)
from city_cycling.domain.ports.snapshot_store import SnapshotStore
from city_cycling.domain.snapshot_naming import (
    snapshot_key,
    timestamp_from_key,
    to_utc_second,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from city_cycling.domain.models import Snapshot, Station

logger = logging.getLogger(__name__)


class LocalSnapshotStore(SnapshotStore):
    """Stores one TSV file per snapshot in a single, flat directory.

    The snapshot key is the bare filename. A missing directory means there are
    no snapshots yet and is not an error.
    """

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory holding the snapshot files. Created on first write.
        """
        self.data_dir = Path(data_dir)

    @property
    def name(self) -> str:
        """Backend name."""
        return "local"

    @property
    def key_prefix(self) -> str:
        """Local keys are bare filenames."""
        return ""

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a path inside the data directory."""
        if "/" in key or "\\" in key or timestamp_from_key(key) is None:
            raise SnapshotNotFoundError(key)
        return self.data_dir / key

    def _write(self, key: str, body: bytes) -> None:
        """Write the body next to its key and rename it into place.

        Readers see either the previous file or the complete new one. The
        temporary name starts with a dot so listing never picks it up.
        """
        path = self.data_dir / key
        temp_path = self.data_dir / f".{key}.tmp"
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if path.exists():
                logger.warning(f"Snapshot {path} already exists (same-second write), overwriting")
            temp_path.write_bytes(body)
            os.replace(temp_path, path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise SubstrateUnavailableError(
                f"Failed to write snapshot to {self.data_dir}: {e}"
            ) from e

    async def write_snapshot(self, stations: Sequence[Station], now: datetime) -> str:
        """Write stations to a new timestamped file and return its key."""
        captured_at = to_utc_second(now)
        key = snapshot_key(captured_at)
        body = tsv_codec.encode(stations, captured_at)
        await asyncio.to_thread(self._write, key, body)
        logger.info(f"Saved {len(stations)} stations to {self.data_dir / key}")
        return key

    def _list(self) -> list[str]:
        try:
            entries = list(self.data_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SubstrateUnavailableError(
                f"Failed to read data directory {self.data_dir}: {e}"
            ) from e

        return sorted(
            (entry.name for entry in entries if entry.is_file() and timestamp_from_key(entry.name)),
            reverse=True,
        )

    async def list_keys(self) -> list[str]:
        """List snapshot filenames, newest first."""
        return await asyncio.to_thread(self._list)

    async def list_timestamps(self) -> list[datetime]:
        """List snapshot capture times parsed from filenames, newest first."""
        timestamps = []
        for key in await self.list_keys():
            timestamp = timestamp_from_key(key)
            if timestamp is not None:
                timestamps.append(timestamp)
        return timestamps

    def _read(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(key) from e
        except OSError as e:
            raise SubstrateUnavailableError(f"Failed to read snapshot {path}: {e}") from e

    async def read_by_key(self, key: str) -> Snapshot:
        """Read and decode one snapshot file."""
        body = await asyncio.to_thread(self._read, key)
        return tsv_codec.decode(body, default_captured_at=timestamp_from_key(key))

    async def read_latest(self) -> Snapshot:
        """Read the newest snapshot file."""
        keys = await self.list_keys()
        if not keys:
            raise NoSnapshotsError(f"No station data files found in {self.data_dir}")
        return await self.read_by_key(keys[0])
