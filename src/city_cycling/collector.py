"""Collector entry point: store a snapshot of the live feed once or on an interval."""

import argparse
import asyncio
import logging
import re
import signal
import sys

import aiohttp
from pydantic import ValidationError

from city_cycling.adapters.config import AppConfig
from city_cycling.adapters.storage import S3SnapshotStore, create_snapshot_store
from city_cycling.adapters.tfl_api import TflStationFeed
from city_cycling.application.services import CollectorService
from city_cycling.domain.errors import SnapshotStoreError, StationFeedError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_interval(value: str) -> float:
    """Parse an interval given in seconds ("300") or as a duration ("5m", "1h30m").

    Raises:
        argparse.ArgumentTypeError: If the value is neither.
    """
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        parts = _DURATION_PART.findall(value)
        if not parts or "".join(number + unit for number, unit in parts) != value:
            raise argparse.ArgumentTypeError(f"invalid interval: {value!r}") from None
        seconds = sum(float(number) * _UNIT_SECONDS[unit] for number, unit in parts)

    if seconds < 0:
        raise argparse.ArgumentTypeError(f"interval must not be negative: {value!r}")
    return seconds


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse collector command line arguments."""
    parser = argparse.ArgumentParser(description="Collect cycle hire station snapshots")
    parser.add_argument(
        "--interval",
        type=parse_interval,
        default=None,
        help="Fetch interval in seconds or as 5m/1h30m (0 for one-shot, "
        "default from FETCH_INTERVAL_SECONDS)",
    )
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--data-dir", help="Directory to write TSV files to (local storage only, default DATA_DIR)"
    )
    return parser.parse_args(argv)


async def _tick(collector: CollectorService, tick_timeout: float | None) -> None:
    async with asyncio.timeout(tick_timeout):
        await collector.fetch_and_store()


async def run_collector(
    collector: CollectorService,
    interval: float,
    stop_event: asyncio.Event,
    tick_timeout: float | None = None,
) -> int:
    """Run the initial fetch, then fetch every ``interval`` seconds until stopped.

    An interval of 0 runs the initial fetch only. Later failures are logged and
    retried on the next tick.

    Returns:
        The process exit code: 1 if the initial fetch failed, 0 otherwise.
    """
    try:
        await _tick(collector, tick_timeout)
    except (StationFeedError, SnapshotStoreError, TimeoutError) as e:
        logger.error(f"Initial fetch failed: {e}")
        return 1

    if interval <= 0:
        logger.info("One-shot mode: exiting after single fetch")
        return 0

    logger.info(f"Collector running with {interval:g}s interval. Press Ctrl+C to stop.")
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except TimeoutError:
            try:
                await _tick(collector, tick_timeout)
            except (StationFeedError, SnapshotStoreError, TimeoutError) as e:
                logger.error(f"Fetch failed: {e}")

    logger.info("Collector stopped")
    return 0


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):

        def handle_signal(sig: signal.Signals = sig) -> None:
            logger.info(f"Received signal {sig.name}, shutting down")
            stop_event.set()

        loop.add_signal_handler(sig, handle_signal)


async def main(argv: list[str] | None = None) -> int:
    """Collector entry point. Returns the process exit code."""
    args = parse_args(argv)
    overrides = {"data_dir": args.data_dir} if args.data_dir else {}
    try:
        config = AppConfig(**overrides)
    except ValidationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Configuration: {config.describe()}")

    interval = 0.0 if args.once else (
        args.interval if args.interval is not None else float(config.fetch_interval_seconds)
    )

    store = create_snapshot_store(config)
    tick_timeout = config.feed_timeout_seconds
    if isinstance(store, S3SnapshotStore):
        logger.info("Verifying bucket access...")
        try:
            await store.check_bucket()
        except SnapshotStoreError as e:
            logger.error(f"Bucket verification failed: {e}")
            return 1
        logger.info("Bucket verified successfully")
        tick_timeout += config.s3_timeout_seconds

    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    async with aiohttp.ClientSession() as session:
        feed = TflStationFeed(
            session, endpoint=config.feed_url, timeout_seconds=config.feed_timeout_seconds
        )
        collector = CollectorService(feed, store)
        return await run_collector(collector, interval, stop_event, tick_timeout=tick_timeout)


def cli_main() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli_main()
