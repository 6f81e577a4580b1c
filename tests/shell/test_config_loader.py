"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
import tempfile
from unittest.mock import patch

import pytest

from quake_notifier.core.config import DEFAULT_FEED_URL, Config, Destination
from quake_notifier.shell.config_loader import (
    _parse_destination,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
    parse_destinations,
)


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None
        assert _resolve_value(True) is True

    def test_returns_plain_string_unchanged(self):
        """Plain strings without placeholders are returned unchanged."""
        assert _resolve_value("hello") == "hello"
        assert _resolve_value("https://example.com") == "https://example.com"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        """Returns original placeholder if env var not set."""
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestParseDestination:
    """Tests for destination parsing."""

    def test_parses_full_destination(self):
        """All fields are read and IDs coerced to strings."""
        with patch.dict(os.environ, {"HOOK": "https://hooks.example.com/x"}):
            result = _parse_destination({
                "guild_id": 123456789012345678,
                "guild_name": "Example",
                "channel_id": "234567890123456789",
                "min_intensity": 45,
                "webhook_url": "${HOOK}",
            })

        assert result == Destination(
            guild_id="123456789012345678",
            channel_id="234567890123456789",
            min_intensity=45,
            guild_name="Example",
            webhook_url="https://hooks.example.com/x",
        )

    def test_default_min_intensity(self):
        """Missing min_intensity defaults to 震度1."""
        result = _parse_destination({"guild_id": "g", "channel_id": "c"})
        assert result.min_intensity == 10

    def test_missing_id_raises(self):
        """A destination without IDs cannot be parsed."""
        with pytest.raises(KeyError):
            _parse_destination({"guild_id": "g"})

    def test_missing_list_is_empty(self):
        assert parse_destinations(None) == []


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_loads_minimal_config(self):
        """Empty dict gives defaults."""
        result = load_config_from_dict({})

        assert result.feed.url == DEFAULT_FEED_URL
        assert result.feed.reconnect_delay_seconds == 1.0
        assert result.geocoding.enabled is False
        assert result.maps_api_key == ""
        assert result.destinations == []
        assert result.firestore_collection is None

    def test_loads_full_config(self):
        """All sections are parsed."""
        data = {
            "feed": {
                "url": "wss://feed.example/ws",
                "reconnect_delay_seconds": 2,
                "handler_workers": 8,
            },
            "maps": {"api_key": "MAPS"},
            "geocoding": {
                "enabled": True,
                "api_key": "GEO",
                "region": "jp",
                "wait_timeout_seconds": 5,
            },
            "firestore_database": "quakes",
            "firestore_collection": "geocoding",
            "destinations": [
                {"guild_id": "g1", "channel_id": "c1", "min_intensity": 30},
                {"guild_id": "g2", "channel_id": "c2"},
            ],
        }

        result = load_config_from_dict(data)

        assert result.feed.url == "wss://feed.example/ws"
        assert result.feed.reconnect_delay_seconds == 2.0
        assert result.feed.handler_workers == 8
        assert result.maps_api_key == "MAPS"
        assert result.geocoding.enabled is True
        assert result.geocoding.api_key == "GEO"
        assert result.geocoding.wait_timeout_seconds == 5.0
        assert result.firestore_database == "quakes"
        assert result.firestore_collection == "geocoding"
        assert [d.min_intensity for d in result.destinations] == [30, 10]

    def test_null_sections_use_defaults(self):
        """Sections left empty in YAML load as None."""
        result = load_config_from_dict({"feed": None, "maps": None, "geocoding": None})
        assert result.feed.url == DEFAULT_FEED_URL


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_from_yaml_file(self):
        """Loads configuration from YAML file."""
        yaml_content = """
feed:
  url: wss://feed.example/ws
destinations:
  - guild_id: "1"
    guild_name: テストサーバー
    channel_id: "2"
    min_intensity: 40
    webhook_url: https://hooks.example.com/1
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False, encoding='utf-8') as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            result = load_config(temp_path)

            assert result.feed.url == "wss://feed.example/ws"
            assert len(result.destinations) == 1
            assert result.destinations[0].guild_name == "テストサーバー"
            assert result.destinations[0].min_intensity == 40
        finally:
            os.unlink(temp_path)

    def test_returns_default_config_when_file_not_found(self):
        """Returns default config when file doesn't exist."""
        result = load_config("/nonexistent/path/config.yaml")

        assert isinstance(result, Config)
        assert result.destinations == []

    def test_returns_default_config_for_empty_file(self):
        """Returns default config when file is empty."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("")
            temp_path = f.name

        try:
            result = load_config(temp_path)
            assert isinstance(result, Config)
        finally:
            os.unlink(temp_path)

    def test_uses_config_path_env_var(self):
        """Uses CONFIG_PATH environment variable when path not specified."""
        yaml_content = """
feed:
  handler_workers: 2
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            with patch.dict(os.environ, {"CONFIG_PATH": temp_path}):
                result = load_config()

            assert result.feed.handler_workers == 2
        finally:
            os.unlink(temp_path)


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_returns_empty_config_without_webhook(self):
        """Returns empty config when no webhook URL available."""
        with patch.dict(os.environ, {}, clear=True):
            result = load_config_from_env()

        assert result.destinations == []
        assert result.geocoding.enabled is False

    def test_loads_config_from_env_vars(self):
        """Loads configuration from environment variables."""
        env_vars = {
            "WEBHOOK_URL": "https://hooks.example.com/env",
            "GUILD_ID": "g",
            "CHANNEL_ID": "c",
            "MIN_INTENSITY": "45",
            "GOOGLE_MAPS_API_KEY": "KEY",
            "FEED_URL": "wss://sandbox.example/ws",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            result = load_config_from_env()

        assert len(result.destinations) == 1
        assert result.destinations[0].webhook_url == "https://hooks.example.com/env"
        assert result.destinations[0].min_intensity == 45
        assert result.maps_api_key == "KEY"
        assert result.geocoding.enabled is True
        assert result.feed.url == "wss://sandbox.example/ws"

    def test_default_min_intensity_from_env(self):
        with patch.dict(os.environ, {"WEBHOOK_URL": "https://hooks.example.com/env"}, clear=True):
            result = load_config_from_env()

        assert result.destinations[0].min_intensity == 30

    def test_loads_firestore_settings_from_env(self):
        """Loads Firestore database and collection from environment."""
        env_vars = {
            "WEBHOOK_URL": "https://hooks.example.com/env",
            "FIRESTORE_DATABASE": "custom-database",
            "FIRESTORE_COLLECTION": "geocoding",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            result = load_config_from_env()

        assert result.firestore_database == "custom-database"
        assert result.firestore_collection == "geocoding"
