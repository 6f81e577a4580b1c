"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Intensity scale labels
- Feed frame parsing and classification
- Grouping, sorting and reduction of event sub-records
- Notification content
- Configuration validation

All functions here are deterministic and have no I/O.
"""

from quake_notifier.core.intensity import (
    UnexpectedIntensityError,
    intensity_from_scale,
    intensity_from_scale_strict,
)
from quake_notifier.core.events import Event, FrameParseError, parse_frame
from quake_notifier.core.aggregation import (
    filter_destinations,
    group_area_names,
    group_by_intensity,
    select_max_scale_areas,
)
from quake_notifier.core.notification import (
    Notification,
    build_eew_notification,
    build_quake_notification,
)

__all__ = [
    # Intensity
    "UnexpectedIntensityError",
    "intensity_from_scale",
    "intensity_from_scale_strict",
    # Events
    "Event",
    "FrameParseError",
    "parse_frame",
    # Aggregation
    "filter_destinations",
    "group_area_names",
    "group_by_intensity",
    "select_max_scale_areas",
    # Notification
    "Notification",
    "build_eew_notification",
    "build_quake_notification",
]
