"""Orchestrator - Wires Functional Core and Imperative Shell.

This module holds one handler per feed event type. Each handler runs
the pure core functions over an event, then delivers the resulting
notification to every destination whose threshold the event reaches.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from quake_notifier.core.aggregation import (
    IntensityGroups,
    filter_destinations,
    group_area_names,
    group_by_intensity,
    max_intensity_addresses,
    quake_abort_reason,
    select_max_scale_areas,
)
from quake_notifier.core.config import Config, Destination
from quake_notifier.core.events import (
    EEW,
    AreaPeers,
    EEWDetection,
    Event,
    IgnoredEvent,
    JMAQuake,
    JMATsunami,
    UserQuake,
    UserQuakeEvaluation,
)
from quake_notifier.core.intensity import MIN_FELT_SCALE, UNKNOWN_LABEL, intensity_from_scale
from quake_notifier.core.notification import (
    Notification,
    build_eew_notification,
    build_quake_notification,
)
from quake_notifier.core.static_map import (
    MAX_EXTRA_MARKERS,
    build_static_map_url,
    create_map_config,
)
from quake_notifier.geocoder import GeocodeResolver
from quake_notifier.shell.destination_store import DestinationStore, StaticDestinationStore
from quake_notifier.shell.webhook_client import WebhookClient


logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Result of delivering one event to one destination.

    Attributes:
        event_id: The event that was delivered
        destination: The destination it was delivered to
        success: Whether delivery succeeded
        error: Error message if failed
    """
    event_id: str
    destination: Destination
    success: bool
    error: str | None = None


Handler = Callable[[Event], list[DeliveryResult]]


class Orchestrator:
    """Handles feed events and fans notifications out to destinations.

    This class wires together:
    - Core functions (grouping, reduction, notification content)
    - Destination store (who receives what)
    - Webhook client (delivery)
    - Geocode resolver (map markers for observation points, optional)

    It also owns the cache of the latest JMA quake report per event ID.
    The cache is never evicted and grows for the life of the process.
    """

    def __init__(
        self,
        config: Config,
        destination_store: DestinationStore | None = None,
        webhook_client: WebhookClient | None = None,
        geocoder: GeocodeResolver | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            destination_store: Destination source (static store over
                config.destinations if not provided)
            webhook_client: Delivery client (created if not provided)
            geocoder: Geocode resolver (None disables observation markers)
        """
        self.config = config
        self.destination_store = destination_store or StaticDestinationStore(config.destinations)
        self.webhook_client = webhook_client or WebhookClient()
        self.geocoder = geocoder

        self._quake_cache_lock = threading.Lock()
        self.quake_cache: dict[str, JMAQuake] = {}

    @property
    def handlers(self) -> dict[type, Handler]:
        """Handler for every event type."""
        return {
            JMAQuake: self.handle_jma_quake,
            JMATsunami: self.handle_jma_tsunami,
            EEWDetection: self.handle_eew_detection,
            AreaPeers: self.handle_area_peers,
            EEW: self.handle_eew,
            UserQuake: self.handle_user_quake,
            UserQuakeEvaluation: self.handle_user_quake_evaluation,
            IgnoredEvent: self.handle_ignored,
        }

    def _deliver_all(
        self,
        event_id: str,
        destinations: list[Destination],
        notification: Notification,
    ) -> list[DeliveryResult]:
        """Deliver a notification to each destination.

        A failure for one destination never stops delivery to the rest.
        """
        results = []

        for destination in destinations:
            try:
                response = self.webhook_client.deliver(destination, notification)
                result = DeliveryResult(
                    event_id=event_id,
                    destination=destination,
                    success=response.success,
                    error=response.error,
                )
            except Exception as e:
                logger.exception("Delivery of %s to %s raised", event_id, destination.name)
                result = DeliveryResult(
                    event_id=event_id,
                    destination=destination,
                    success=False,
                    error=str(e),
                )

            results.append(result)

            if result.success:
                logger.info("Sent %s %s to %s", notification.title, event_id, destination.name)
            else:
                logger.error(
                    "Failed to send %s %s to %s: %s",
                    notification.title,
                    event_id,
                    destination.name,
                    result.error,
                )

        return results

    def _observation_markers(self, groups: IntensityGroups) -> list[tuple[float, float]]:
        """Coordinates of the highest-intensity observation points."""
        if self.geocoder is None:
            return []

        markers = []
        for prefecture, address in max_intensity_addresses(groups)[:MAX_EXTRA_MARKERS]:
            coordinates = self.geocoder.resolve(prefecture, address)
            if coordinates is not None:
                markers.append((coordinates.lat, coordinates.lng))
        return markers

    def _map_image_url(self, quake: JMAQuake, groups: IntensityGroups) -> str | None:
        if not self.config.maps_api_key:
            return None

        map_config = create_map_config(
            latitude=quake.hypocenter.latitude,
            longitude=quake.hypocenter.longitude,
            extra_markers=self._observation_markers(groups),
        )
        return build_static_map_url(map_config, self.config.maps_api_key)

    def handle_jma_quake(self, quake: JMAQuake) -> list[DeliveryResult]:
        """Handle a JMA earthquake report (code 551).

        1. Caches the report under its ID
        2. Groups observation points by intensity and prefecture
        3. Drops reports without a usable hypocenter
        4. Delivers a summary plus per-intensity details to each
           destination whose threshold the maximum intensity reaches

        Returns:
            One DeliveryResult per destination attempted
        """
        with self._quake_cache_lock:
            self.quake_cache[quake.id] = quake

        groups = group_by_intensity(quake.points)

        reason = quake_abort_reason(quake, groups)
        if reason is not None:
            logger.info("handle_jma_quake: %s: %s", reason, quake.id)
            return []

        destinations = filter_destinations(self.destination_store.records(), quake.max_scale)
        if not destinations:
            logger.info(
                "handle_jma_quake: no destinations for %s (max %s)",
                quake.id,
                intensity_from_scale(quake.max_scale),
            )
            return []

        notification = build_quake_notification(
            quake,
            groups,
            image_url=self._map_image_url(quake, groups),
        )

        return self._deliver_all(quake.id, destinations, notification)

    def handle_eew(self, eew: EEW) -> list[DeliveryResult]:
        """Handle an earthquake early warning (code 556).

        Only test warnings are delivered; production warnings are dropped.

        Returns:
            One DeliveryResult per destination attempted
        """
        if not eew.test:
            return []

        areas = select_max_scale_areas(eew.areas)

        if not areas or eew.earthquake is None:
            logger.info("handle_eew: no data: %s", eew.id)
            return []

        max_scale = max(a.scale_to for a in areas)
        intensity = intensity_from_scale(max_scale)
        if max_scale < MIN_FELT_SCALE or intensity == UNKNOWN_LABEL:
            logger.info("handle_eew: predicted intensity too low (%s): %s", max_scale, eew.id)
            return []

        destinations = filter_destinations(self.destination_store.records(), max_scale)
        notification = build_eew_notification(eew, intensity, group_area_names(areas))

        return self._deliver_all(eew.id, destinations, notification)

    def handle_jma_tsunami(self, event: JMATsunami) -> list[DeliveryResult]:
        return []

    def handle_eew_detection(self, event: EEWDetection) -> list[DeliveryResult]:
        return []

    def handle_area_peers(self, event: AreaPeers) -> list[DeliveryResult]:
        return []

    def handle_user_quake(self, event: UserQuake) -> list[DeliveryResult]:
        return []

    def handle_user_quake_evaluation(self, event: UserQuakeEvaluation) -> list[DeliveryResult]:
        return []

    def handle_ignored(self, event: IgnoredEvent) -> list[DeliveryResult]:
        return []
