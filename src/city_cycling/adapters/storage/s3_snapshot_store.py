"""Snapshot store backed by an S3-compatible bucket (e.g. Cloudflare R2)."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from city_cycling.adapters.storage import tsv_codec
from city_cycling.domain.errors import (
    NoSnapshotsError,
    SnapshotNotFoundError,
    SubstrateUnavailableError,
)
from city_cycling.domain.ports.snapshot_store import SnapshotStore
from city_cycling.domain.snapshot_naming import (
    DEFAULT_OBJECT_PREFIX,
    format_rfc3339,
    is_snapshot_key,
    snapshot_key,
    timestamp_from_key,
    to_utc_second,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from city_cycling.domain.models import Snapshot, Station

logger = logging.getLogger(__name__)

SNAPSHOT_CONTENT_TYPE = "text/tab-separated-values"
_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def create_s3_client(
    access_key_id: str,
    secret_access_key: str,
    endpoint: str,
    region: str = "auto",
    timeout_seconds: float = 10,
) -> Any:
    """Create a boto3 S3 client for an S3-compatible endpoint.

    Retries are disabled: a failed call surfaces immediately and the caller
    decides whether to try again.
    """
    return boto3.client(
        "s3",
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        endpoint_url=endpoint,
        region_name=region,
        config=Config(
            s3={"addressing_style": "path"},
            connect_timeout=timeout_seconds,
            read_timeout=timeout_seconds,
            retries={"mode": "standard", "total_max_attempts": 1},
        ),
    )


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3SnapshotStore(SnapshotStore):
    """Stores one object per snapshot under a key prefix in a bucket."""

    def __init__(self, client: Any, bucket: str, prefix: str = DEFAULT_OBJECT_PREFIX) -> None:
        """Initialize the store.

        Args:
            client: A boto3 S3 client (see ``create_s3_client``).
            bucket: Bucket holding the snapshots.
            prefix: Key prefix for snapshot objects. Empty means the default.
        """
        self._client = client
        self.bucket = bucket
        self.prefix = prefix or DEFAULT_OBJECT_PREFIX

    @property
    def name(self) -> str:
        """Backend name."""
        return "s3"

    @property
    def key_prefix(self) -> str:
        """Prefix shared by every snapshot object key."""
        return self.prefix

    async def check_bucket(self) -> None:
        """Verify the configured bucket is reachable.

        Raises:
            SubstrateUnavailableError: If the bucket is missing or inaccessible.
        """
        try:
            await asyncio.to_thread(self._client.head_bucket, Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            raise SubstrateUnavailableError(f"Failed to access bucket '{self.bucket}': {e}") from e

    async def write_snapshot(self, stations: Sequence[Station], now: datetime) -> str:
        """Upload stations as a new timestamped object and return its key."""
        start = time.monotonic()
        captured_at = to_utc_second(now)
        key = snapshot_key(captured_at, self.prefix)
        body = tsv_codec.encode(stations, captured_at)

        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=SNAPSHOT_CONTENT_TYPE,
                Metadata={
                    "timestamp": format_rfc3339(captured_at),
                    "stations": str(len(stations)),
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise SubstrateUnavailableError(f"Failed to upload {key}: {e}") from e

        logger.debug(
            f"[S3] write_snapshot completed in {time.monotonic() - start:.3f}s "
            f"(stations={len(stations)})"
        )
        return key

    def _list_all(self) -> list[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    async def list_keys(self) -> list[str]:
        """List snapshot object keys under the prefix, newest first.

        Other objects sharing the prefix are skipped.
        """
        start = time.monotonic()
        try:
            all_keys = await asyncio.to_thread(self._list_all)
        except (ClientError, BotoCoreError) as e:
            raise SubstrateUnavailableError(f"Failed to list objects: {e}") from e

        keys = []
        for key in all_keys:
            if not is_snapshot_key(key, self.prefix):
                logger.debug(f"[S3] Skipping non-snapshot key {key}")
                continue
            keys.append(key)

        keys.sort(reverse=True)
        logger.debug(
            f"[S3] list_keys completed in {time.monotonic() - start:.3f}s ({len(keys)} keys)"
        )
        return keys

    async def list_timestamps(self) -> list[datetime]:
        """List capture times parsed from object keys, newest first."""
        timestamps = []
        for key in await self.list_keys():
            timestamp = timestamp_from_key(key, self.prefix)
            if timestamp is not None:
                timestamps.append(timestamp)
        return timestamps

    def _get(self, key: str) -> bytes:
        result = self._client.get_object(Bucket=self.bucket, Key=key)
        body = result["Body"]
        try:
            return body.read()
        finally:
            body.close()

    async def read_by_key(self, key: str) -> Snapshot:
        """Download and decode one snapshot object."""
        start = time.monotonic()
        try:
            body = await asyncio.to_thread(self._get, key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise SnapshotNotFoundError(key) from e
            raise SubstrateUnavailableError(f"Failed to get object {key}: {e}") from e
        except BotoCoreError as e:
            raise SubstrateUnavailableError(f"Failed to get object {key}: {e}") from e

        snapshot = tsv_codec.decode(
            body, default_captured_at=timestamp_from_key(key, self.prefix)
        )
        logger.debug(
            f"[S3] read_by_key completed in {time.monotonic() - start:.3f}s (key={key})"
        )
        return snapshot

    async def read_latest(self) -> Snapshot:
        """Read the newest snapshot object."""
        keys = await self.list_keys()
        if not keys:
            raise NoSnapshotsError(f"No snapshots found in bucket '{self.bucket}'")
        return await self.read_by_key(keys[0])
