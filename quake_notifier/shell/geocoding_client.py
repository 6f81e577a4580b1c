"""Geocoding API Client - Imperative Shell.

This module handles HTTP communication with the Google Geocoding API.
All I/O is contained here; caching and single-flight logic live in
quake_notifier.geocoder.
"""

import logging
from dataclasses import dataclass, field

import requests

from quake_notifier.core.geo import Coordinates


logger = logging.getLogger(__name__)


GEOCODING_API_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class GeocodingResponse:
    """Response from the Geocoding API.

    Attributes:
        status: API status string ("OK", "ZERO_RESULTS", ...)
        results: Locations of the matched results, best match first
        error_message: Error message sent by the API, if any
    """
    status: str
    results: list[Coordinates] = field(default_factory=list)
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        """True if the lookup found at least one location."""
        return self.status == "OK" and len(self.results) > 0


class GeocodingClient:
    """Client for looking up coordinates of an address.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GEOCODING_API_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize geocoding client.

        Args:
            api_key: Google Maps Platform API key
            base_url: Geocoding API URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def lookup(self, address: str, region: str = "jp") -> GeocodingResponse:
        """Look up the coordinates of an address.

        This method performs HTTP I/O.

        Args:
            address: Address to look up
            region: Region hint (ccTLD)

        Returns:
            GeocodingResponse with the API status and result locations

        Raises:
            requests.RequestException: If the request fails
            ValueError: If the response is not valid JSON
        """
        params = {
            "address": address,
            "region": region,
            "key": self.api_key,
        }

        logger.info("Geocoding %s (region=%s)", address, region)

        response = requests.get(
            self.base_url,
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        results = [
            Coordinates(
                lat=float(r["geometry"]["location"]["lat"]),
                lng=float(r["geometry"]["location"]["lng"]),
            )
            for r in data.get("results", [])
        ]

        return GeocodingResponse(
            status=data.get("status", ""),
            results=results,
            error_message=data.get("error_message"),
        )
