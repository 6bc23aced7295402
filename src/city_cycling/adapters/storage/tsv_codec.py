"""Tab-separated snapshot codec.

A snapshot is stored as a header line followed by one line per station. The
capture time is repeated on every row so any single row carries its own
context.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from city_cycling.domain.errors import EmptySnapshotError, SnapshotDecodeError
from city_cycling.domain.models import Snapshot, Station
from city_cycling.domain.snapshot_naming import format_rfc3339, parse_rfc3339

logger = logging.getLogger(__name__)

COLUMNS = (
    "timestamp",
    "id",
    "name",
    "lat",
    "long",
    "nb_bikes",
    "nb_standard_bikes",
    "nb_ebikes",
    "nb_empty_docks",
    "nb_docks",
)
TSV_HEADER = "\t".join(COLUMNS)

# Returned when the first row's timestamp cannot be parsed
ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)


def _encode_row(station: Station, timestamp: str) -> str:
    name = station.name.replace("\t", " ")
    return (
        f"{timestamp}\t{station.id}\t{name}\t{station.latitude:.6f}\t{station.longitude:.6f}\t"
        f"{station.bike_count}\t{station.standard_bike_count}\t{station.e_bike_count}\t"
        f"{station.empty_dock_count}\t{station.dock_count}\n"
    )


def encode(stations: Sequence[Station], captured_at: datetime) -> bytes:
    """Encode stations captured at one instant as a TSV document."""
    timestamp = format_rfc3339(captured_at)
    lines = [TSV_HEADER + "\n"]
    lines.extend(_encode_row(station, timestamp) for station in stations)
    return "".join(lines).encode("utf-8")


def _int_field(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _float_field(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _decode_row(fields: list[str]) -> Station:
    return Station(
        id=_int_field(fields[1]),
        name=fields[2],
        latitude=_float_field(fields[3]),
        longitude=_float_field(fields[4]),
        bike_count=_int_field(fields[5]),
        standard_bike_count=_int_field(fields[6]),
        e_bike_count=_int_field(fields[7]),
        empty_dock_count=_int_field(fields[8]),
        dock_count=_int_field(fields[9]),
    )


def decode(data: bytes | None, default_captured_at: datetime | None = None) -> Snapshot:
    """Decode a TSV document into a snapshot.

    Rows with fewer than ten columns are skipped and malformed numeric cells
    decode as zero, so one bad row never loses the whole snapshot.

    A body with no data rows carries no timestamp of its own. It is labelled
    with ``default_captured_at`` (usually the time encoded in the key), or
    ZERO_TIME when none is given.

    Raises:
        EmptySnapshotError: If the body is missing or has no header line.
        SnapshotDecodeError: If the body is not UTF-8 or the header is not ours.
    """
    if not data:
        raise EmptySnapshotError("Snapshot body is empty")

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SnapshotDecodeError(f"Snapshot body is not valid UTF-8: {e}") from e

    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if not lines or not lines[0].strip():
        raise EmptySnapshotError("Snapshot body has no header line")

    header = tuple(lines[0].split("\t")[: len(COLUMNS)])
    if header != COLUMNS:
        raise SnapshotDecodeError(f"Unrecognized snapshot header: {lines[0][:80]!r}")

    stations: list[Station] = []
    captured_at: datetime | None = None
    for line in lines[1:]:
        fields = line.split("\t")
        if len(fields) < len(COLUMNS):
            continue

        if captured_at is None:
            captured_at = parse_rfc3339(fields[0])
            if captured_at is None:
                # A corrupt first row mislabels the whole snapshot as ZERO_TIME
                logger.warning(f"Unparseable snapshot timestamp {fields[0]!r}, using zero time")
                captured_at = ZERO_TIME

        stations.append(_decode_row(fields))

    if captured_at is None:
        captured_at = default_captured_at or ZERO_TIME
    return Snapshot(stations=tuple(stations), captured_at=captured_at)
