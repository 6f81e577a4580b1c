"""Unit tests for configuration validation.

Pure function tests - fast, no mocks needed.
"""

import pytest

from quake_notifier.core.config import (
    Config,
    Destination,
    FeedConfig,
    GeocodingConfig,
    validate_config,
)


@pytest.fixture
def destination():
    return Destination(
        guild_id="g1",
        channel_id="c1",
        min_intensity=30,
        guild_name="Test Guild",
        webhook_url="https://hooks.example.com/abc",
    )


class TestDestination:
    """Tests for Destination."""

    def test_name_prefers_guild_name(self, destination):
        assert destination.name == "Test Guild"

    def test_name_falls_back_to_ids(self):
        assert Destination(guild_id="g", channel_id="c", min_intensity=10).name == "g/c"


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_valid_config(self, destination):
        result = validate_config(Config(destinations=[destination]))
        assert result.valid is True
        assert result.errors == []

    def test_no_destinations_is_warning(self):
        result = validate_config(Config())
        assert result.valid is True
        assert [w.field for w in result.warnings] == ["destinations"]

    def test_unknown_min_intensity_is_warning(self, destination):
        bad = Destination(**{**destination.__dict__, "min_intensity": 35})
        result = validate_config(Config(destinations=[bad]))
        assert result.valid is True
        assert result.warnings[0].field == "destinations[0].min_intensity"

    def test_placeholder_webhook_is_warning(self, destination):
        bad = Destination(**{**destination.__dict__, "webhook_url": "${HOOK}"})
        result = validate_config(Config(destinations=[bad]))
        assert result.warnings[0].field == "destinations[0].webhook_url"

    def test_missing_ids_is_error(self, destination):
        bad = Destination(**{**destination.__dict__, "guild_id": ""})
        result = validate_config(Config(destinations=[bad]))
        assert result.valid is False
        assert result.critical_errors[0].field == "destinations[0]"

    def test_non_websocket_url_is_error(self, destination):
        config = Config(feed=FeedConfig(url="https://api.p2pquake.net"), destinations=[destination])
        result = validate_config(config)
        assert result.valid is False
        assert result.critical_errors[0].field == "feed.url"

    def test_non_positive_delay_is_error(self, destination):
        config = Config(feed=FeedConfig(reconnect_delay_seconds=0), destinations=[destination])
        assert validate_config(config).valid is False

    def test_no_workers_is_error(self, destination):
        config = Config(feed=FeedConfig(handler_workers=0), destinations=[destination])
        assert validate_config(config).valid is False

    def test_geocoding_without_key_is_error(self, destination):
        config = Config(geocoding=GeocodingConfig(enabled=True), destinations=[destination])
        result = validate_config(config)
        assert result.valid is False
        assert result.critical_errors[0].field == "geocoding.api_key"
