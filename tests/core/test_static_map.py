"""Unit tests for static map configuration.

Pure function tests - fast, no mocks needed.
"""

from urllib.parse import parse_qs, urlparse

from quake_notifier.core.static_map import (
    MAX_EXTRA_MARKERS,
    STATIC_MAP_URL,
    build_map_link,
    build_static_map_url,
    create_map_config,
)


class TestCreateMapConfig:
    """Tests for create_map_config()."""

    def test_defaults(self):
        config = create_map_config(35.7, 140.8)
        assert config.latitude == 35.7
        assert config.longitude == 140.8
        assert config.zoom == 8
        assert (config.width, config.height) == (640, 480)
        assert config.extra_markers == ()

    def test_extra_markers_deduplicated(self):
        config = create_map_config(35.7, 140.8, [(35.1, 140.1), (35.1, 140.1), (35.2, 140.2)])
        assert config.extra_markers == ((35.1, 140.1), (35.2, 140.2))

    def test_extra_markers_capped(self):
        markers = [(35.0 + i / 100, 140.0) for i in range(MAX_EXTRA_MARKERS + 5)]
        config = create_map_config(35.7, 140.8, markers)
        assert len(config.extra_markers) == MAX_EXTRA_MARKERS


class TestBuildStaticMapUrl:
    """Tests for build_static_map_url()."""

    def test_epicenter_parameters(self):
        url = build_static_map_url(create_map_config(35.7, 140.8), "KEY")
        parsed = urlparse(url)
        params = parse_qs(parsed.query)

        assert url.startswith(STATIC_MAP_URL)
        assert params["key"] == ["KEY"]
        assert params["size"] == ["640x480"]
        assert params["zoom"] == ["8"]
        assert params["center"] == ["35.7,140.8"]
        assert params["markers"] == ["color:red|35.7,140.8"]
        assert params["language"] == ["ja"]

    def test_extra_markers_as_second_group(self):
        config = create_map_config(35.7, 140.8, [(35.1, 140.1), (35.2, 140.2)])
        params = parse_qs(urlparse(build_static_map_url(config, "KEY")).query)

        assert params["markers"] == [
            "color:red|35.7,140.8",
            "size:small|color:blue|35.1,140.1|35.2,140.2",
        ]


def test_build_map_link():
    assert build_map_link(35.7, 140.8) == "https://www.google.com/maps/@35.7,140.8,8z"
