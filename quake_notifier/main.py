"""Process Entry Point.

Loads configuration, wires the shell clients into the orchestrator and
router, and runs the feed connection for the life of the process.
"""

import argparse
import logging
import os
import sys

from quake_notifier.core.config import Config, validate_config
from quake_notifier.geocoder import GeocodeResolver, MemoryGeocodeCache
from quake_notifier.orchestrator import Orchestrator
from quake_notifier.router import EventRouter
from quake_notifier.shell.config_loader import DEFAULT_CONFIG_PATH, load_config, load_config_from_env
from quake_notifier.shell.destination_store import StaticDestinationStore, YamlDestinationStore
from quake_notifier.shell.feed_client import FeedConnection
from quake_notifier.shell.firestore_client import FirestoreConfig, FirestoreGeocodeCache
from quake_notifier.shell.geocoding_client import GeocodingClient


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _get_config(config_path: str | None) -> tuple[Config, str | None]:
    """Load configuration from file or environment.

    Returns:
        Tuple of (config, path of the config file if one was used)
    """
    config_path = config_path or os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path), config_path
    elif os.environ.get("WEBHOOK_URL"):
        # Simple env-based config
        return load_config_from_env(), None
    else:
        return load_config(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH


def build_geocoder(config: Config) -> GeocodeResolver | None:
    """Create the geocode resolver, or None if geocoding is disabled."""
    if not config.geocoding.enabled:
        return None

    if config.firestore_collection:
        cache = FirestoreGeocodeCache(FirestoreConfig(
            database=config.firestore_database,
            collection=config.firestore_collection,
        ))
    else:
        logger.warning("No firestore_collection set, geocode cache is kept in memory")
        cache = MemoryGeocodeCache()

    return GeocodeResolver(
        cache=cache,
        client=GeocodingClient(api_key=config.geocoding.api_key),
        region=config.geocoding.region,
        wait_timeout=config.geocoding.wait_timeout_seconds,
    )


def build_connection(config: Config, config_path: str | None = None) -> FeedConnection:
    """Wire all components together.

    Args:
        config: Application configuration
        config_path: Config file to watch for destination changes

    Returns:
        Feed connection ready to run
    """
    if config_path and os.path.exists(config_path):
        destination_store = YamlDestinationStore(config_path)
    else:
        destination_store = StaticDestinationStore(config.destinations)

    orchestrator = Orchestrator(
        config,
        destination_store=destination_store,
        geocoder=build_geocoder(config),
    )
    router = EventRouter(
        orchestrator.handlers,
        max_workers=config.feed.handler_workers,
    )

    return FeedConnection(
        on_frame=router.route,
        url=config.feed.url,
        reconnect_delay=config.feed.reconnect_delay_seconds,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the notifier.

    Args:
        argv: Command-line arguments (sys.argv[1:] if None)

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(description="Relay P2PQuake feed events to webhooks")
    parser.add_argument(
        "--config",
        help=f"Path to YAML config (default: $CONFIG_PATH or {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate configuration and exit",
    )
    args = parser.parse_args(argv)

    configure_logging()

    config, config_path = _get_config(args.config)

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    for error in validation.critical_errors:
        logger.error("Config %s: %s", error.field, error.message)

    if not validation.valid:
        return 1
    if args.check:
        logger.info("Configuration is valid")
        return 0

    logger.info("Starting earthquake feed relay (%s)", config.feed.url)
    build_connection(config, config_path).run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
