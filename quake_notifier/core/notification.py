"""Notification content - Pure functions.

This module builds the structured content delivered to destinations.
It decides what a notification says, not how a chat platform shows it.
All functions are pure with no side effects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from quake_notifier.core.aggregation import IntensityGroups
from quake_notifier.core.events import EEW, UNKNOWN_VALUE, JMAQuake, parse_feed_time
from quake_notifier.core.intensity import intensity_from_scale
from quake_notifier.core.static_map import build_map_link


QUAKE_TITLE = "地震情報"
EEW_TITLE = "緊急地震速報"

# Red, as used by common chat platforms for alerts
EEW_COLOR = 0xED4245

ADDRESS_SEPARATOR = "、"


@dataclass(frozen=True)
class NotificationField:
    """A named block of notification content."""
    name: str
    value: str


@dataclass(frozen=True)
class Notification:
    """Structured notification content.

    Attributes:
        title: Notification title
        description: Body text
        fields: Named content blocks, in display order
        image_url: Optional image reference
        color: Optional accent color (0xRRGGBB)
        timestamp: Event time
        thread_name: Name of the thread holding follow-ups
        follow_ups: Notifications delivered as replies to this one
    """
    title: str
    description: str = ""
    fields: tuple[NotificationField, ...] = field(default_factory=tuple)
    image_url: str | None = None
    color: int | None = None
    timestamp: datetime | None = None
    thread_name: str | None = None
    follow_ups: tuple["Notification", ...] = field(default_factory=tuple)


def _format_number(value: float) -> str:
    """Format 7.0 as "7" and 6.5 as "6.5"."""
    return f"{value:g}"


def build_quake_description(quake: JMAQuake) -> str:
    """Describe location, maximum intensity, magnitude and depth.

    Pure function. Unknown magnitude or depth (-1) is omitted.
    """
    hypocenter = quake.hypocenter
    map_link = build_map_link(hypocenter.latitude, hypocenter.longitude)
    max_intensity = intensity_from_scale(quake.max_scale)

    sentences = [f"[{hypocenter.name}]({map_link})で最大{max_intensity}の地震が発生しました。"]
    if hypocenter.magnitude != UNKNOWN_VALUE:
        sentences.append(f"マグニチュードは {_format_number(hypocenter.magnitude)}。")
    if hypocenter.depth != UNKNOWN_VALUE:
        sentences.append(f"震源の深さはおよそ {_format_number(hypocenter.depth)}km です。")

    return "\n".join(sentences)


def build_intensity_details(groups: IntensityGroups) -> tuple[Notification, ...]:
    """Build one detail notification per intensity scale.

    Pure function.
    """
    return tuple(
        Notification(
            title=intensity_from_scale(scale),
            fields=tuple(
                NotificationField(name=prefecture, value=ADDRESS_SEPARATOR.join(addresses))
                for prefecture, addresses in prefectures
            ),
        )
        for scale, prefectures in groups
    )


def build_quake_notification(
    quake: JMAQuake,
    groups: IntensityGroups,
    image_url: str | None = None,
) -> Notification:
    """Build the notification for a JMA quake report.

    Pure function. The caller must have checked the report is deliverable
    (see quake_abort_reason).

    Args:
        quake: JMA quake report with a located hypocenter
        groups: Its intensity groups
        image_url: Optional map image URL

    Returns:
        Primary notification with per-intensity follow-ups
    """
    return Notification(
        title=QUAKE_TITLE,
        description=build_quake_description(quake),
        image_url=image_url,
        timestamp=parse_feed_time(quake.time),
        thread_name=f"{quake.time} 震度別地域詳細",
        follow_ups=build_intensity_details(groups),
    )


def build_eew_notification(eew: EEW, intensity: str, area_lines: list[str]) -> Notification:
    """Build the notification for an earthquake early warning.

    Pure function.

    Args:
        eew: Early warning with earthquake metadata
        intensity: Maximum predicted intensity label
        area_lines: Forecast area lines from group_area_names

    Returns:
        Notification
    """
    return Notification(
        title=EEW_TITLE,
        color=EEW_COLOR,
        timestamp=parse_feed_time(eew.time),
        fields=(
            NotificationField(name="最大予測震度", value=intensity),
            NotificationField(name="最大震度観測予定地", value="\n".join(area_lines)),
            NotificationField(name="発生日時", value=eew.earthquake.origin_time),
        ),
    )


def notification_to_dict(notification: Notification) -> dict[str, Any]:
    """Convert a notification to a JSON-serializable dict.

    Pure function. Follow-ups are not included.
    """
    return {
        "title": notification.title,
        "description": notification.description,
        "fields": [{"name": f.name, "value": f.value} for f in notification.fields],
        "image_url": notification.image_url,
        "color": notification.color,
        "timestamp": notification.timestamp.isoformat() if notification.timestamp else None,
    }
