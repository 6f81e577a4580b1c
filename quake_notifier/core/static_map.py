"""Static map configuration - Pure functions.

This module builds map image and map link URLs for notifications.
Fetching the image is left to whoever renders the notification.
"""

from dataclasses import dataclass, field
from urllib.parse import urlencode


STATIC_MAP_URL = "https://maps.googleapis.com/maps/api/staticmap"
MAPS_LINK_URL = "https://www.google.com/maps/@{latitude},{longitude},{zoom}z"

# Most observation points we plot next to the epicenter
MAX_EXTRA_MARKERS = 30


@dataclass(frozen=True)
class MapConfig:
    """Immutable configuration for a static map image.

    Attributes:
        latitude: Center latitude
        longitude: Center longitude
        zoom: Zoom level
        width: Image width in pixels
        height: Image height in pixels
        marker_color: Epicenter marker color
        extra_markers: Additional (latitude, longitude) points
        language: Map label language
    """
    latitude: float
    longitude: float
    zoom: int = 8
    width: int = 640
    height: int = 480
    marker_color: str = "red"
    extra_markers: tuple[tuple[float, float], ...] = field(default_factory=tuple)
    language: str = "ja"


def create_map_config(
    latitude: float,
    longitude: float,
    extra_markers: list[tuple[float, float]] | None = None,
) -> MapConfig:
    """Create map configuration centered on an epicenter.

    Pure function. Extra markers are deduplicated and capped.
    """
    markers: list[tuple[float, float]] = []
    for marker in extra_markers or []:
        if marker not in markers:
            markers.append(marker)

    return MapConfig(
        latitude=latitude,
        longitude=longitude,
        extra_markers=tuple(markers[:MAX_EXTRA_MARKERS]),
    )


def build_static_map_url(config: MapConfig, api_key: str) -> str:
    """Build a Google Static Maps image URL.

    Pure function.

    Args:
        config: Map configuration
        api_key: Google Maps Platform API key

    Returns:
        Image URL
    """
    markers = [f"color:{config.marker_color}|{config.latitude},{config.longitude}"]
    if config.extra_markers:
        points = "|".join(f"{lat},{lng}" for lat, lng in config.extra_markers)
        markers.append(f"size:small|color:blue|{points}")

    params = [
        ("key", api_key),
        ("size", f"{config.width}x{config.height}"),
        ("zoom", str(config.zoom)),
        ("center", f"{config.latitude},{config.longitude}"),
    ]
    params.extend(("markers", m) for m in markers)
    params.append(("language", config.language))

    return f"{STATIC_MAP_URL}?{urlencode(params)}"


def build_map_link(latitude: float, longitude: float, zoom: int = 8) -> str:
    """Build a Google Maps link to a location.

    Pure function.
    """
    return MAPS_LINK_URL.format(latitude=latitude, longitude=longitude, zoom=zoom)
