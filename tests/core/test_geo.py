"""Unit tests for coordinate rounding.

Pure function tests - fast, no mocks needed.
"""

import pytest

from quake_notifier.core.geo import (
    Coordinates,
    GeocodeCacheEntry,
    round_coordinate,
    round_coordinates,
)


class TestRoundCoordinate:
    """Tests for round_coordinate()."""

    @pytest.mark.parametrize("value,expected", [
        (35.6812, 35.68),
        (139.7671, 139.77),
        (-33.8675, -33.87),
        (10.0, 10.0),
    ])
    def test_two_places(self, value, expected):
        assert round_coordinate(value) == pytest.approx(expected)

    def test_half_rounds_up(self):
        """Halves round toward positive infinity, not to even."""
        assert round_coordinate(0.125) == pytest.approx(0.13)
        assert round_coordinate(-0.125) == pytest.approx(-0.12)


def test_round_coordinates():
    assert round_coordinates(Coordinates(lat=35.6812, lng=139.7671)) == Coordinates(35.68, 139.77)


def test_cache_entry_coordinates():
    entry = GeocodeCacheEntry("東京都", "千代田区", 35.69, 139.75)
    assert entry.coordinates == Coordinates(lat=35.69, lng=139.75)
