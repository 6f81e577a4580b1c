"""Event aggregation - Pure functions.

This module groups, sorts and reduces event sub-records into
delivery-ready structures, and decides which destinations receive an
event. All functions are pure with no side effects.
"""

from functools import lru_cache
from typing import Iterable

import icu

from quake_notifier.core.config import Destination
from quake_notifier.core.events import (
    ForecastArea,
    JMAQuake,
    QuakeObservationPoint,
)


# scale -> [(prefecture, [address, ...]), ...]
IntensityGroups = list[tuple[int, list[tuple[str, list[str]]]]]


COLLATION_LOCALE = "ja_JP"


@lru_cache(maxsize=1)
def _collator() -> icu.Collator:
    """Shared Japanese collator (kanji in JIS X 0208 order)."""
    return icu.Collator.createInstance(icu.Locale(COLLATION_LOCALE))


def collation_key(text: str) -> bytes:
    """Locale-aware sort key for user-facing names."""
    return _collator().getSortKey(text)


def group_by_intensity(points: Iterable[QuakeObservationPoint]) -> IntensityGroups:
    """Group observation points by intensity scale and prefecture.

    Pure function.

    Scales are ordered descending. Prefectures within a scale are ordered
    by Japanese collation. Addresses are deduplicated and sorted.

    Args:
        points: Observation points from a JMA quake report

    Returns:
        List of (scale, [(prefecture, addresses), ...]) tuples
    """
    grouped: dict[int, dict[str, set[str]]] = {}

    for point in points:
        by_prefecture = grouped.setdefault(point.scale, {})
        by_prefecture.setdefault(point.prefecture, set()).add(point.address)

    return [
        (
            scale,
            [
                (prefecture, sorted(grouped[scale][prefecture]))
                for prefecture in sorted(grouped[scale], key=collation_key)
            ],
        )
        for scale in sorted(grouped, reverse=True)
    ]


def quake_abort_reason(quake: JMAQuake, groups: IntensityGroups) -> str | None:
    """Check whether a quake report is deliverable.

    Pure function.

    Args:
        quake: JMA quake report
        groups: Its intensity groups

    Returns:
        Reason string if the report must not be delivered, else None
    """
    if not groups or quake.hypocenter is None:
        return "no data"

    if quake.hypocenter.name == "":
        return "no location name"

    if not quake.hypocenter.has_location:
        return "no location"

    return None


def select_max_scale_areas(areas: Iterable[ForecastArea]) -> list[ForecastArea]:
    """Reduce forecast areas to those sharing the maximum upper-bound scale.

    Pure function. Single pass: a strictly greater scale starts a new
    group, a tie joins the current one. The result is ordered by
    prefecture in codepoint order; areas of one prefecture keep their
    input order.

    Args:
        areas: Forecast areas from an early warning

    Returns:
        Areas at the maximum scale, sorted by prefecture
    """
    selected: list[ForecastArea] = []

    for area in areas:
        if not selected or area.scale_to > selected[0].scale_to:
            selected = [area]
        elif area.scale_to == selected[0].scale_to:
            selected.append(area)

    return sorted(selected, key=lambda a: a.prefecture)


def group_area_names(areas: Iterable[ForecastArea]) -> list[str]:
    """Render forecast area names as one line per prefecture.

    Pure function. Prefectures and names appear in first-seen order.

    Args:
        areas: Forecast areas

    Returns:
        Lines like "東京都: 東京都２３区、東京都多摩東部"
    """
    names: dict[str, list[str]] = {}
    for area in areas:
        names.setdefault(area.prefecture, []).append(area.name)

    return [f"{prefecture}: {'、'.join(area_names)}" for prefecture, area_names in names.items()]


def max_intensity_addresses(groups: IntensityGroups) -> list[tuple[str, str]]:
    """Get (prefecture, address) pairs of the highest intensity group.

    Pure function.
    """
    if not groups:
        return []

    _, prefectures = groups[0]
    return [
        (prefecture, address)
        for prefecture, addresses in prefectures
        for address in addresses
    ]


def filter_destinations(
    destinations: Iterable[Destination],
    max_scale: int,
) -> list[Destination]:
    """Select destinations whose threshold the event reaches.

    Pure function.

    Args:
        destinations: All configured destinations
        max_scale: Maximum intensity scale of the event

    Returns:
        Destinations with min_intensity <= max_scale
    """
    return [d for d in destinations if d.min_intensity <= max_scale]
