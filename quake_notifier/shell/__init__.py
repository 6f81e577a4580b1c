"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- P2PQuake websocket feed (network)
- Geocoding API client (HTTP)
- Webhook delivery client (HTTP)
- Firestore geocode cache (database)
- Configuration and destination loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake_notifier.shell.feed_client import FeedConnection
from quake_notifier.shell.geocoding_client import GeocodingClient
from quake_notifier.shell.webhook_client import WebhookClient
from quake_notifier.shell.firestore_client import FirestoreGeocodeCache
from quake_notifier.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "FeedConnection",
    "GeocodingClient",
    "WebhookClient",
    "FirestoreGeocodeCache",
    "load_config",
    "load_config_from_env",
]
