"""Geographic models - Pure functions.

Coordinates and geocode cache entries. All functions are pure with
no side effects.
"""

import math
from dataclasses import dataclass


# Decimal places kept for cached coordinates
COORDINATE_PRECISION = 2


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair."""
    lat: float
    lng: float


@dataclass(frozen=True)
class GeocodeCacheEntry:
    """A persisted geocoding result.

    Attributes:
        prefecture: Prefecture name
        address: Address within the prefecture
        latitude: Latitude rounded to COORDINATE_PRECISION places
        longitude: Longitude rounded to COORDINATE_PRECISION places
    """
    prefecture: str
    address: str
    latitude: float
    longitude: float

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.latitude, lng=self.longitude)


def round_coordinate(value: float, places: int = COORDINATE_PRECISION) -> float:
    """Round half up to a fixed number of decimal places.

    Pure function. Cached coordinates are deliberately coarse so nearby
    lookups share entries.
    """
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def round_coordinates(coordinates: Coordinates) -> Coordinates:
    """Round both components of a coordinate pair.

    Pure function.
    """
    return Coordinates(
        lat=round_coordinate(coordinates.lat),
        lng=round_coordinate(coordinates.lng),
    )
