"""Snapshot key naming scheme.

Keys look like ``<prefix>stations_YYYYMMDD_HHMMSS.tsv``. Because the timestamp
is zero-padded and most-significant first, sorting keys as strings in
descending order sorts them newest first.

Keys only resolve to the second: two writes within the same second produce the
same key and the later write replaces the earlier one.
"""

import re
from datetime import UTC, datetime

KEY_MARKER = "stations_"
KEY_SUFFIX = ".tsv"
KEY_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_OBJECT_PREFIX = "snapshots/"

_KEY_TIMESTAMP_PATTERN = re.compile(r"\d{8}_\d{6}")
_KEY_TIMESTAMP_LENGTH = 15
_RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


def to_utc_second(value: datetime) -> datetime:
    """Convert a datetime to UTC with second precision (naive values are UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(microsecond=0)


def format_rfc3339(value: datetime) -> str:
    """Format an instant as RFC 3339 UTC with second precision and a ``Z`` suffix."""
    # isoformat zero-pads the year, strftime does not on every platform
    return to_utc_second(value).replace(tzinfo=None).isoformat() + "Z"


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp into UTC, returning None when malformed.

    Only the full ``YYYY-MM-DDTHH:MM:SS[.fff](Z|+hh:mm)`` form is accepted.
    Dates alone, basic ISO 8601 and values without an offset are rejected.
    """
    value = value.strip()
    if not _RFC3339_PATTERN.fullmatch(value):
        return None
    try:
        return to_utc_second(datetime.fromisoformat(value))
    except (ValueError, OverflowError):
        return None


def snapshot_key(captured_at: datetime, prefix: str = "") -> str:
    """Build the key for a snapshot captured at the given instant."""
    utc = to_utc_second(captured_at)
    stamp = (
        f"{utc.year:04d}{utc.month:02d}{utc.day:02d}_{utc.hour:02d}{utc.minute:02d}{utc.second:02d}"
    )
    return f"{prefix}{KEY_MARKER}{stamp}{KEY_SUFFIX}"


def timestamp_from_key(key: str, prefix: str = "") -> datetime | None:
    """Recover the capture time embedded in a snapshot key.

    Returns:
        The UTC capture time, or None if ``key`` is not a snapshot key.
    """
    head = f"{prefix}{KEY_MARKER}"
    if not key.startswith(head) or not key.endswith(KEY_SUFFIX):
        return None

    stamp = key[len(head) : -len(KEY_SUFFIX)]
    if len(stamp) != _KEY_TIMESTAMP_LENGTH or not _KEY_TIMESTAMP_PATTERN.fullmatch(stamp):
        return None

    try:
        return datetime.strptime(stamp, KEY_TIMESTAMP_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return None


def is_snapshot_key(key: str, prefix: str = "") -> bool:
    """Check whether ``key`` follows the snapshot naming scheme."""
    return timestamp_from_key(key, prefix) is not None
