"""Main entry point for the city cycling web server."""

import argparse
import asyncio
import logging
import sys
from typing import Any

import aiohttp
import uvicorn
from pydantic import ValidationError

from city_cycling.adapters.config import AppConfig
from city_cycling.adapters.storage import create_snapshot_store
from city_cycling.adapters.tfl_api import TflStationFeed
from city_cycling.adapters.web import create_app
from city_cycling.adapters.web.cache import HistoryCache, SnapshotCache
from city_cycling.application.services import HistoryService, SnapshotResolver

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse server command line arguments. Unset flags fall back to the environment."""
    parser = argparse.ArgumentParser(description="Serve the cycle hire map and history API")
    parser.add_argument("--host", help="Host to bind the server to")
    parser.add_argument("--port", type=int, help="HTTP server port")
    parser.add_argument(
        "--storage",
        choices=["local", "s3"],
        dest="storage_backend",
        help="Storage backend (default from STORAGE_BACKEND)",
    )
    parser.add_argument("--data-dir", help="Directory containing TSV files (local storage only)")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> AppConfig:
    """Build the configuration, with command line flags taking precedence."""
    overrides: dict[str, Any] = {
        name: value for name, value in vars(args).items() if value is not None
    }
    return AppConfig(**overrides)


async def main(argv: list[str] | None = None) -> None:
    """Main application entry point."""
    args = parse_args(argv)
    try:
        config = load_config(args)
    except ValidationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Configuration: {config.describe()}")

    store = create_snapshot_store(config)
    history_service = HistoryService(
        store, HistoryCache(ttl_seconds=config.history_cache_ttl_seconds)
    )
    resolver = SnapshotResolver(store, SnapshotCache())

    async with aiohttp.ClientSession() as session:
        feed = TflStationFeed(
            session, endpoint=config.feed_url, timeout_seconds=config.feed_timeout_seconds
        )
        app = create_app(store, history_service, resolver, config, feed=feed)

        server_config = uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
        server = uvicorn.Server(server_config)
        logger.info(f"Starting server on http://{config.host}:{config.port}")
        await server.serve()


def cli_main() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
