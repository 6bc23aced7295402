"""Error kinds raised by snapshot storage and the station feed."""


class SnapshotStoreError(Exception):
    """Base class for snapshot storage failures."""


class SubstrateUnavailableError(SnapshotStoreError):
    """The storage medium could not be listed, read or written."""


class SnapshotNotFoundError(SnapshotStoreError):
    """A named snapshot does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Snapshot not found: {key}")
        self.key = key


class NoSnapshotsError(SnapshotStoreError):
    """The backend holds no snapshots at all."""


class NoMatchingSnapshotError(SnapshotStoreError):
    """No snapshot key could be matched against the requested timestamp."""


class SnapshotDecodeError(SnapshotStoreError):
    """A snapshot body is malformed beyond per-row and per-field leniency."""


class EmptySnapshotError(SnapshotDecodeError):
    """A snapshot body has no header line."""


class StationFeedError(Exception):
    """Fetching or parsing the upstream station feed failed."""
