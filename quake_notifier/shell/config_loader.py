"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, Destination, ...) are defined in quake_notifier/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quake_notifier.core.config import (
    DEFAULT_FEED_URL,
    Config,
    Destination,
    FeedConfig,
    GeocodingConfig,
)


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place so validation can flag it.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_destination(data: dict[str, Any]) -> Destination:
    """Parse a destination from config data."""
    return Destination(
        guild_id=str(data["guild_id"]),
        channel_id=str(data["channel_id"]),
        min_intensity=int(data.get("min_intensity", 10)),
        guild_name=data.get("guild_name", ""),
        webhook_url=_resolve_value(data.get("webhook_url", "")),
    )


def parse_destinations(data: list[dict[str, Any]] | None) -> list[Destination]:
    """Parse the destinations list from config data."""
    return [_parse_destination(d) for d in data or []]


def _parse_feed(data: dict[str, Any]) -> FeedConfig:
    """Parse feed settings from config data."""
    return FeedConfig(
        url=data.get("url", DEFAULT_FEED_URL),
        reconnect_delay_seconds=float(data.get("reconnect_delay_seconds", 1.0)),
        handler_workers=int(data.get("handler_workers", 4)),
    )


def _parse_geocoding(data: dict[str, Any]) -> GeocodingConfig:
    """Parse geocoding settings from config data."""
    return GeocodingConfig(
        enabled=bool(data.get("enabled", False)),
        api_key=_resolve_value(data.get("api_key", "")),
        region=data.get("region", "jp"),
        wait_timeout_seconds=float(data.get("wait_timeout_seconds", 10.0)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    maps = data.get("maps") or {}

    return Config(
        feed=_parse_feed(data.get("feed") or {}),
        geocoding=_parse_geocoding(data.get("geocoding") or {}),
        maps_api_key=_resolve_value(maps.get("api_key", "")),
        destinations=parse_destinations(data.get("destinations")),
        firestore_database=data.get("firestore_database"),
        firestore_collection=data.get("firestore_collection"),
    )


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Read a YAML config file.

    Returns:
        Parsed mapping, or None if the file is missing or empty

    Raises:
        yaml.YAMLError: If the file is invalid YAML
    """
    if not path.exists():
        return None

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    data = read_config_file(path)

    if data is None:
        logger.warning("Config file missing or empty: %s, using defaults", path)
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: %d destinations, geocoding %s",
        len(config.destinations),
        "enabled" if config.geocoding.enabled else "disabled",
    )

    return config


def load_config_from_env() -> Config:
    """Load minimal configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        WEBHOOK_URL: Webhook for the single destination
        GUILD_ID: Destination guild (default "default")
        CHANNEL_ID: Destination channel (default "default")
        MIN_INTENSITY: Minimum intensity scale to deliver (default 30)
        GOOGLE_MAPS_API_KEY: Enables map images and geocoding
        FEED_URL: Websocket endpoint override

    Returns:
        Config object from environment
    """
    webhook_url = os.environ.get("WEBHOOK_URL")
    maps_api_key = os.environ.get("GOOGLE_MAPS_API_KEY", "")

    destinations = []
    if webhook_url:
        destinations.append(Destination(
            guild_id=os.environ.get("GUILD_ID", "default"),
            channel_id=os.environ.get("CHANNEL_ID", "default"),
            min_intensity=int(os.environ.get("MIN_INTENSITY", "30")),
            guild_name="default",
            webhook_url=webhook_url,
        ))
    else:
        logger.warning("WEBHOOK_URL not set, no destinations configured")

    return Config(
        feed=FeedConfig(url=os.environ.get("FEED_URL", DEFAULT_FEED_URL)),
        geocoding=GeocodingConfig(enabled=bool(maps_api_key), api_key=maps_api_key),
        maps_api_key=maps_api_key,
        destinations=destinations,
        firestore_database=os.environ.get("FIRESTORE_DATABASE"),
        firestore_collection=os.environ.get("FIRESTORE_COLLECTION"),
    )
