"""Webhook Delivery Client - Imperative Shell.

This module posts notifications to destination webhooks as JSON.
All I/O is contained here; notification content is built in the core
module and rendered by whatever sits behind the webhook.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from quake_notifier.core.config import Destination
from quake_notifier.core.notification import Notification, notification_to_dict


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class DeliveryResponse:
    """Response from a webhook delivery.

    Attributes:
        success: Whether every message was accepted
        status_code: HTTP status code of the last request
        error: Error message if failed
        message_id: ID the webhook assigned to the primary message, if any
    """
    success: bool
    status_code: int
    error: str | None = None
    message_id: str | None = None


class WebhookClient:
    """Client for delivering notifications to destination webhooks.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize webhook client.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout

    def _post(self, webhook_url: str, payload: dict[str, Any]) -> DeliveryResponse:
        try:
            response = requests.post(
                webhook_url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )

            if 200 <= response.status_code < 300:
                message_id = None
                try:
                    body = response.json()
                    if isinstance(body, dict) and body.get("id") is not None:
                        message_id = str(body["id"])
                except ValueError:
                    pass
                return DeliveryResponse(
                    success=True,
                    status_code=response.status_code,
                    message_id=message_id,
                )
            else:
                error_text = response.text
                logger.warning(
                    "Webhook returned non-2xx: %d - %s",
                    response.status_code,
                    error_text,
                )
                return DeliveryResponse(
                    success=False,
                    status_code=response.status_code,
                    error=error_text,
                )

        except requests.Timeout:
            logger.error("Webhook request timed out")
            return DeliveryResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Webhook request failed: %s", str(e))
            return DeliveryResponse(
                success=False,
                status_code=0,
                error=str(e),
            )

    def deliver(
        self,
        destination: Destination,
        notification: Notification,
    ) -> DeliveryResponse:
        """Deliver a notification and its follow-ups to a destination.

        This method performs HTTP I/O. Follow-ups are posted after the
        primary message, referencing it through ``reply_to`` and
        ``thread_name``. Delivery stops at the first failed request.

        Args:
            destination: Target destination
            notification: Notification to deliver

        Returns:
            DeliveryResponse for the whole delivery
        """
        if not destination.webhook_url:
            return DeliveryResponse(
                success=False,
                status_code=0,
                error="Destination has no webhook URL",
            )

        logger.info("Delivering notification to %s", destination.name)

        target = {
            "guild_id": destination.guild_id,
            "channel_id": destination.channel_id,
        }

        primary = self._post(destination.webhook_url, {
            **target,
            "thread_name": notification.thread_name,
            "notification": notification_to_dict(notification),
        })
        if not primary.success:
            return primary

        last = primary
        for follow_up in notification.follow_ups:
            last = self._post(destination.webhook_url, {
                **target,
                "reply_to": primary.message_id,
                "thread_name": notification.thread_name,
                "notification": notification_to_dict(follow_up),
            })
            if not last.success:
                return DeliveryResponse(
                    success=False,
                    status_code=last.status_code,
                    error=f"Follow-up failed: {last.error}",
                    message_id=primary.message_id,
                )

        return DeliveryResponse(
            success=True,
            status_code=last.status_code,
            message_id=primary.message_id,
        )
