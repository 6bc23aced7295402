"""Snapshot storage adapters."""

from city_cycling.adapters.storage.factory import create_snapshot_store
from city_cycling.adapters.storage.local_snapshot_store import LocalSnapshotStore
from city_cycling.adapters.storage.s3_snapshot_store import S3SnapshotStore

__all__ = ["LocalSnapshotStore", "S3SnapshotStore", "create_snapshot_store"]
