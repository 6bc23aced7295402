"""Storage backend selection."""

import logging

from city_cycling.adapters.config import AppConfig
from city_cycling.adapters.storage.local_snapshot_store import LocalSnapshotStore
from city_cycling.adapters.storage.s3_snapshot_store import S3SnapshotStore, create_s3_client

logger = logging.getLogger(__name__)


def create_snapshot_store(config: AppConfig) -> LocalSnapshotStore | S3SnapshotStore:
    """Create the snapshot store selected by ``config.storage_backend``."""
    if config.storage_backend == "s3":
        client = create_s3_client(
            access_key_id=config.s3_access_key_id or "",
            secret_access_key=config.s3_secret_access_key or "",
            endpoint=config.s3_endpoint or "",
            region=config.s3_region,
            timeout_seconds=config.s3_timeout_seconds,
        )
        logger.info(f"Using S3 storage: bucket '{config.s3_bucket_name}' at {config.s3_endpoint}")
        return S3SnapshotStore(client, bucket=config.s3_bucket_name or "", prefix=config.s3_prefix)

    logger.info(f"Using local file storage in '{config.data_dir}'")
    return LocalSnapshotStore(config.data_dir)
