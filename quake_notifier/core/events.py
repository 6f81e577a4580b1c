"""Feed event models and frame classification - Pure functions.

This module parses raw P2PQuake JSON API v2 frames into typed event
variants. Each frame becomes exactly one variant, selected by its
integer ``code`` field. All functions are pure with no side effects.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any


# P2PQuake timestamps are Japan Standard Time
JST = timezone(timedelta(hours=9), name="JST")

# Latitude/longitude value meaning "no location"
NO_LOCATION = -200.0

# Magnitude/depth value meaning "unknown"
UNKNOWN_VALUE = -1.0


class EventCode(IntEnum):
    """Event type codes used by the feed."""
    JMA_QUAKE = 551
    JMA_TSUNAMI = 552
    EEW_DETECTION = 554
    AREA_PEERS = 555
    EEW = 556
    USER_QUAKE = 561
    USER_QUAKE_EVALUATION = 9611


class FrameParseError(ValueError):
    """Raised when a frame cannot be decoded into an event."""


@dataclass(frozen=True)
class Hypocenter:
    """Earthquake hypocenter.

    Attributes:
        name: Human-readable epicenter name (empty if unknown)
        magnitude: Magnitude, -1 if unknown
        depth: Depth in kilometers, -1 if unknown
        latitude: Latitude, -200 if there is no location
        longitude: Longitude, -200 if there is no location
    """
    name: str
    magnitude: float = UNKNOWN_VALUE
    depth: float = UNKNOWN_VALUE
    latitude: float = NO_LOCATION
    longitude: float = NO_LOCATION

    @property
    def has_location(self) -> bool:
        """Return False if either coordinate is the no-location sentinel."""
        return self.latitude != NO_LOCATION and self.longitude != NO_LOCATION


@dataclass(frozen=True)
class QuakeObservationPoint:
    """A single intensity observation for a JMA quake report.

    Attributes:
        prefecture: Prefecture name
        address: Observation point address
        scale: Observed intensity scale
    """
    prefecture: str
    address: str
    scale: int


@dataclass(frozen=True)
class JMAQuake:
    """JMA earthquake information (code 551).

    Attributes:
        id: Event identifier
        time: Time the report was received, as sent by the feed
        occurred_at: Earthquake occurrence time, as sent by the feed
        max_scale: Maximum observed intensity scale
        hypocenter: Hypocenter, None if the report has none
        points: Observation points
        domestic_tsunami: Domestic tsunami assessment
    """
    id: str
    time: str
    occurred_at: str = ""
    max_scale: int = -1
    hypocenter: Hypocenter | None = None
    points: tuple[QuakeObservationPoint, ...] = field(default_factory=tuple)
    domestic_tsunami: str = ""

    code = EventCode.JMA_QUAKE


@dataclass(frozen=True)
class ForecastArea:
    """An area covered by an earthquake early warning.

    Attributes:
        prefecture: Prefecture name
        name: Forecast area name
        scale_from: Lower bound of the predicted intensity
        scale_to: Upper bound of the predicted intensity
    """
    prefecture: str
    name: str
    scale_from: int
    scale_to: int


@dataclass(frozen=True)
class EEWEarthquake:
    """Earthquake metadata carried by an early warning.

    Attributes:
        origin_time: Origin time, as sent by the feed
        arrival_time: Arrival time, as sent by the feed
        condition: Free-form condition (e.g. "仮定震源要素")
        hypocenter: Hypocenter, None if absent
    """
    origin_time: str
    arrival_time: str = ""
    condition: str = ""
    hypocenter: Hypocenter | None = None


@dataclass(frozen=True)
class EEW:
    """Earthquake early warning (code 556).

    Attributes:
        id: Event identifier
        time: Time the warning was received, as sent by the feed
        test: True for test/drill warnings
        cancelled: True if the warning was cancelled
        earthquake: Earthquake metadata, None if absent
        areas: Forecast areas
    """
    id: str
    time: str
    test: bool = False
    cancelled: bool = False
    earthquake: EEWEarthquake | None = None
    areas: tuple[ForecastArea, ...] = field(default_factory=tuple)

    code = EventCode.EEW


@dataclass(frozen=True)
class JMATsunami:
    """JMA tsunami forecast (code 552). Payload kept as-is."""
    id: str
    time: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    code = EventCode.JMA_TSUNAMI


@dataclass(frozen=True)
class EEWDetection:
    """EEW detection by peers (code 554). Payload kept as-is."""
    id: str
    time: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    code = EventCode.EEW_DETECTION


@dataclass(frozen=True)
class AreaPeers:
    """Peer counts per area (code 555). Payload kept as-is."""
    id: str
    time: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    code = EventCode.AREA_PEERS


@dataclass(frozen=True)
class UserQuake:
    """User-reported shaking (code 561). Payload kept as-is."""
    id: str
    time: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    code = EventCode.USER_QUAKE


@dataclass(frozen=True)
class UserQuakeEvaluation:
    """Evaluation of user reports (code 9611). Payload kept as-is."""
    id: str
    time: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    code = EventCode.USER_QUAKE_EVALUATION


@dataclass(frozen=True)
class IgnoredEvent:
    """A frame with a code this service does not know."""
    id: str
    code: int


Event = (
    JMAQuake
    | JMATsunami
    | EEWDetection
    | AreaPeers
    | EEW
    | UserQuake
    | UserQuakeEvaluation
    | IgnoredEvent
)

EVENT_TYPES: tuple[type, ...] = (
    JMAQuake,
    JMATsunami,
    EEWDetection,
    AreaPeers,
    EEW,
    UserQuake,
    UserQuakeEvaluation,
    IgnoredEvent,
)


def normalize_frame(data: dict[str, Any]) -> dict[str, Any]:
    """Copy ``_id`` into ``id`` when ``id`` is absent.

    Pure function: returns a new dict.
    """
    normalized = dict(data)
    if normalized.get("id") is None:
        normalized["id"] = normalized.get("_id")
    return normalized


def _parse_hypocenter(data: dict[str, Any] | None) -> Hypocenter | None:
    if not data:
        return None
    return Hypocenter(
        name=data.get("name") or "",
        magnitude=float(data.get("magnitude", UNKNOWN_VALUE)),
        depth=float(data.get("depth", UNKNOWN_VALUE)),
        latitude=float(data.get("latitude", NO_LOCATION)),
        longitude=float(data.get("longitude", NO_LOCATION)),
    )


def parse_jma_quake(data: dict[str, Any]) -> JMAQuake:
    """Parse a code 551 payload.

    Args:
        data: Normalized frame dict

    Returns:
        JMAQuake event
    """
    earthquake = data.get("earthquake") or {}

    points = tuple(
        QuakeObservationPoint(
            prefecture=p.get("pref", ""),
            address=p.get("addr", ""),
            scale=int(p["scale"]),
        )
        for p in data.get("points") or []
    )

    return JMAQuake(
        id=str(data.get("id") or ""),
        time=data.get("time", ""),
        occurred_at=earthquake.get("time", ""),
        max_scale=int(earthquake.get("maxScale", -1)),
        hypocenter=_parse_hypocenter(earthquake.get("hypocenter")),
        points=points,
        domestic_tsunami=earthquake.get("domesticTsunami", ""),
    )


def parse_eew(data: dict[str, Any]) -> EEW:
    """Parse a code 556 payload.

    Args:
        data: Normalized frame dict

    Returns:
        EEW event
    """
    earthquake = None
    earthquake_data = data.get("earthquake")
    if earthquake_data:
        earthquake = EEWEarthquake(
            origin_time=earthquake_data.get("originTime", ""),
            arrival_time=earthquake_data.get("arrivalTime", ""),
            condition=earthquake_data.get("condition", ""),
            hypocenter=_parse_hypocenter(earthquake_data.get("hypocenter")),
        )

    areas = tuple(
        ForecastArea(
            prefecture=a.get("pref", ""),
            name=a.get("name", ""),
            scale_from=int(a.get("scaleFrom", -1)),
            scale_to=int(a["scaleTo"]),
        )
        for a in data.get("areas") or []
    )

    return EEW(
        id=str(data.get("id") or ""),
        time=data.get("time", ""),
        test=bool(data.get("test", False)),
        cancelled=bool(data.get("cancelled", False)),
        earthquake=earthquake,
        areas=areas,
    )


_PAYLOAD_TYPES: dict[int, type] = {
    EventCode.JMA_TSUNAMI: JMATsunami,
    EventCode.EEW_DETECTION: EEWDetection,
    EventCode.AREA_PEERS: AreaPeers,
    EventCode.USER_QUAKE: UserQuake,
    EventCode.USER_QUAKE_EVALUATION: UserQuakeEvaluation,
}


def classify_frame(data: dict[str, Any]) -> Event:
    """Classify a decoded frame into its event variant.

    Pure function. Unknown codes become IgnoredEvent.

    Args:
        data: Decoded frame dict

    Returns:
        The matching event variant

    Raises:
        FrameParseError: If the payload does not match its code's shape
    """
    data = normalize_frame(data)
    event_id = str(data.get("id") or "")
    code = data.get("code")

    try:
        if code == EventCode.JMA_QUAKE:
            return parse_jma_quake(data)
        if code == EventCode.EEW:
            return parse_eew(data)
        if code in _PAYLOAD_TYPES:
            return _PAYLOAD_TYPES[code](
                id=event_id,
                time=data.get("time", ""),
                payload=data,
            )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise FrameParseError(f"invalid payload for code {code}: {e}") from e

    return IgnoredEvent(id=event_id, code=code if isinstance(code, int) else -1)


def parse_frame(raw: str | bytes) -> Event:
    """Decode a raw feed frame and classify it.

    Pure function.

    Args:
        raw: Frame text or bytes

    Returns:
        The matching event variant

    Raises:
        FrameParseError: If the frame is not a JSON object or is malformed
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise FrameParseError(f"frame is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise FrameParseError("frame is not a JSON object")

    return classify_frame(data)


def parse_feed_time(value: str) -> datetime | None:
    """Parse a feed timestamp ("2024/01/01 16:10:22.123") as JST.

    Pure function.

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    for fmt in ("%Y/%m/%d %H:%M:%S.%f", "%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=JST)
        except (TypeError, ValueError):
            continue
    return None
