"""Firestore Client - Imperative Shell.

This module persists geocoding results so each (prefecture, address)
pair is looked up at most once. Uses Google Cloud Firestore.

All I/O is contained here; single-flight logic is in quake_notifier.geocoder.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore

from quake_notifier.core.geo import GeocodeCacheEntry


logger = logging.getLogger(__name__)


# Default collection name for geocoding results
DEFAULT_COLLECTION = "geocoding"


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


def document_id(prefecture: str, address: str) -> str:
    """Stable document ID for a (prefecture, address) key.

    Addresses may contain characters Firestore does not allow in IDs,
    so the key is hashed.
    """
    key = f"{prefecture}\x00{address}".encode("utf-8")
    return hashlib.sha256(key).hexdigest()


class FirestoreGeocodeCache:
    """Geocode cache persisted to Firestore.

    This is part of the imperative shell - it handles database I/O.

    Document structure:
    {
        "prefecture": "東京都",
        "address": "千代田区大手町",
        "latitude": 35.69,
        "longitude": 139.77,
        "created_at": <timestamp>
    }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _get_doc_ref(self, prefecture: str, address: str) -> Any:
        return (
            self.client
            .collection(self.config.collection)
            .document(document_id(prefecture, address))
        )

    def get(self, prefecture: str, address: str) -> GeocodeCacheEntry | None:
        """Fetch a cached geocoding result.

        This method performs database I/O.

        Returns:
            The cached entry, or None if absent or on error
        """
        try:
            doc = self._get_doc_ref(prefecture, address).get()

            if not doc.exists:
                return None

            data = doc.to_dict()
            return GeocodeCacheEntry(
                prefecture=data.get("prefecture", prefecture),
                address=data.get("address", address),
                latitude=float(data["latitude"]),
                longitude=float(data["longitude"]),
            )

        except Exception as e:
            logger.error("Failed to fetch geocode for %s%s: %s", prefecture, address, str(e))
            # Treat as a miss - costs a lookup but won't crash
            return None

    def add(self, prefecture: str, address: str, latitude: float, longitude: float) -> bool:
        """Store a geocoding result.

        This method performs database I/O.

        Returns:
            True if the entry was stored
        """
        logger.info("Caching geocode for %s%s", prefecture, address)

        try:
            self._get_doc_ref(prefecture, address).set({
                "prefecture": prefecture,
                "address": address,
                "latitude": latitude,
                "longitude": longitude,
                "created_at": datetime.now(timezone.utc),
            })
            return True

        except Exception as e:
            logger.error("Failed to cache geocode for %s%s: %s", prefecture, address, str(e))
            return False
