"""Geocode Resolver - single-flight cache over a coordinate lookup.

Resolution order for a (prefecture, address) pair:
1. The persistent cache (no network).
2. An in-process registry of lookups already resolved or in flight.
   Callers that find a lookup in flight wait for its result instead of
   issuing their own.
3. The external lookup, performed by the first caller only. Results
   are rounded to 2 decimal places and persisted.

A failed lookup resolves waiting callers to None and clears the key,
so a later call can try again.
"""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Protocol, runtime_checkable

import requests

from quake_notifier.core.geo import Coordinates, GeocodeCacheEntry, round_coordinates
from quake_notifier.shell.geocoding_client import GeocodingClient


logger = logging.getLogger(__name__)


# How long a caller waits on another caller's lookup (seconds)
DEFAULT_WAIT_TIMEOUT = 10.0


@runtime_checkable
class GeocodeCache(Protocol):
    """Persistent store of geocoding results."""

    def get(self, prefecture: str, address: str) -> GeocodeCacheEntry | None: ...

    def add(self, prefecture: str, address: str, latitude: float, longitude: float) -> bool: ...


class MemoryGeocodeCache:
    """Geocode cache kept in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, str], GeocodeCacheEntry] = {}

    def get(self, prefecture: str, address: str) -> GeocodeCacheEntry | None:
        with self._lock:
            return self._entries.get((prefecture, address))

    def add(self, prefecture: str, address: str, latitude: float, longitude: float) -> bool:
        with self._lock:
            # Entries are never updated
            self._entries.setdefault(
                (prefecture, address),
                GeocodeCacheEntry(prefecture, address, latitude, longitude),
            )
        return True


class GeocodeResolver:
    """Resolves coordinates with at most one external lookup per address.

    Safe to call from several threads at once.
    """

    def __init__(
        self,
        cache: GeocodeCache,
        client: GeocodingClient,
        region: str = "jp",
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
    ) -> None:
        """Initialize resolver.

        Args:
            cache: Persistent store of geocoding results
            client: External coordinate lookup
            region: Region hint passed to the lookup
            wait_timeout: Seconds to wait on another caller's lookup
        """
        self.cache = cache
        self.client = client
        self.region = region
        self.wait_timeout = wait_timeout

        self._lock = threading.Lock()
        self._in_flight: dict[str, Future] = {}
        self._resolved: dict[str, Coordinates] = {}

    def resolve(self, prefecture: str, address: str) -> Coordinates | None:
        """Get the coordinates of an address.

        Args:
            prefecture: Prefecture name
            address: Address within the prefecture

        Returns:
            Coordinates rounded to 2 decimal places, or None if the
            lookup failed or another caller's lookup took too long
        """
        entry = self.cache.get(prefecture, address)
        if entry is not None:
            return entry.coordinates

        key = prefecture + address

        with self._lock:
            resolved = self._resolved.get(key)
            if resolved is not None:
                return resolved

            future = self._in_flight.get(key)
            is_owner = future is None
            if is_owner:
                future = Future()
                self._in_flight[key] = future

        if not is_owner:
            try:
                return future.result(timeout=self.wait_timeout)
            except FutureTimeoutError:
                logger.warning(
                    "geocode: gave up waiting for %s after %.1fs",
                    key,
                    self.wait_timeout,
                )
                return None

        try:
            coordinates = self._lookup(prefecture, address)
        except Exception as e:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._in_flight.pop(key, None)
            if coordinates is not None:
                self._resolved[key] = coordinates
        future.set_result(coordinates)

        return coordinates

    def _lookup(self, prefecture: str, address: str) -> Coordinates | None:
        """Call the external lookup and persist a successful result."""
        try:
            response = self.client.lookup(address, region=self.region)
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.error(
                "geocode: failed to geocode %s%s (region=%s): %s",
                prefecture,
                address,
                self.region,
                str(e),
            )
            return None

        if not response.ok:
            logger.warning(
                "geocode: failed to geocode %s%s (region=%s): status=%s %s",
                prefecture,
                address,
                self.region,
                response.status,
                response.error_message or "",
            )
            return None

        coordinates = round_coordinates(response.results[0])
        self.cache.add(prefecture, address, coordinates.lat, coordinates.lng)

        return coordinates
