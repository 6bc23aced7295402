"""12-factor configuration adapter using environment variables and an optional .env file."""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from city_cycling.adapters.tfl_api.tfl_station_feed import DEFAULT_FEED_URL


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=8080, description="Port to bind the server to")
    log_level: str = Field(default="INFO", description="Root logging level")
    request_timeout_seconds: float = Field(
        default=60, description="Deadline for storage work done on behalf of one request"
    )
    rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum number of requests allowed per IP address per minute (0 disables)",
    )
    live_fallback: bool = Field(
        default=True,
        description="Serve the live feed from /api/stations when no snapshot can be read",
    )

    # Storage configuration
    storage_backend: str = Field(default="local", description="Storage backend: 'local' or 's3'")
    data_dir: str = Field(default="data", description="Directory holding TSV files (local mode)")
    s3_access_key_id: str | None = Field(default=None, description="S3/R2 access key id")
    s3_secret_access_key: str | None = Field(default=None, description="S3/R2 secret access key")
    s3_endpoint: str | None = Field(default=None, description="S3/R2 endpoint URL")
    s3_bucket_name: str | None = Field(default=None, description="Bucket holding snapshots")
    s3_prefix: str = Field(default="snapshots/", description="Key prefix for snapshot objects")
    # R2 ignores the region but the SDK requires one
    s3_region: str = Field(default="auto", description="S3 region name")
    s3_timeout_seconds: float = Field(
        default=10, description="Connect and read timeout for S3 calls in seconds"
    )

    # Feed and collector configuration
    feed_url: str = Field(default=DEFAULT_FEED_URL, description="Live station feed URL")
    feed_timeout_seconds: float = Field(
        default=30, description="Timeout for live feed requests in seconds"
    )
    fetch_interval_seconds: int = Field(
        default=300, description="Interval between collector fetches (0 for one-shot)"
    )

    # Cache configuration
    history_cache_ttl_seconds: float = Field(
        default=600, description="How long the aggregate history series stays cached"
    )

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate storage backend is either 'local' or 's3'."""
        if v.lower() not in ("local", "s3"):
            raise ValueError("storage_backend must be either 'local' or 's3'")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v.upper()

    @field_validator("s3_prefix")
    @classmethod
    def default_empty_prefix(cls, v: str) -> str:
        """Fall back to 'snapshots/' when the prefix is set but empty."""
        return v or "snapshots/"

    @field_validator(
        "history_cache_ttl_seconds",
        "fetch_interval_seconds",
        "rate_limit_per_minute",
        "request_timeout_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Reject negative durations and limits."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @model_validator(mode="after")
    def validate_s3_settings(self) -> "AppConfig":
        """Require S3 credentials, endpoint and bucket when the S3 backend is selected."""
        if self.storage_backend != "s3":
            return self

        required = {
            "S3_ACCESS_KEY_ID": self.s3_access_key_id,
            "S3_SECRET_ACCESS_KEY": self.s3_secret_access_key,
            "S3_ENDPOINT": self.s3_endpoint,
            "S3_BUCKET_NAME": self.s3_bucket_name,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"missing required environment variables: {missing}")
        return self

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Create a configuration that ignores any .env file."""
        return cls(_env_file=None, **overrides)

    def describe(self) -> dict[str, Any]:
        """Return a summary of the configuration that is safe to log (no secrets)."""
        summary: dict[str, Any] = {"storage_backend": self.storage_backend}
        if self.storage_backend == "s3":
            summary.update(
                endpoint=self.s3_endpoint,
                bucket=self.s3_bucket_name,
                region=self.s3_region,
                prefix=self.s3_prefix,
            )
        else:
            summary["data_dir"] = self.data_dir
        return summary
