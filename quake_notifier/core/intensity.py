"""Seismic intensity codec - Pure functions.

Maps the numeric intensity scale used by the P2PQuake feed to the JMA
intensity label shown to users. Both call conventions share one table;
only the handling of unexpected values differs.
"""

import logging


logger = logging.getLogger(__name__)


UNKNOWN_LABEL = "不明"

# Feed scale value -> JMA seismic intensity label
INTENSITY_LABELS: dict[int, str] = {
    -1: UNKNOWN_LABEL,
    0: "震度0",
    10: "震度1",
    20: "震度2",
    30: "震度3",
    40: "震度4",
    45: "震度5弱",
    50: "震度5強",
    55: "震度6弱",
    60: "震度6強",
    70: "震度7",
    99: "震度7程度以上",
}

KNOWN_SCALES = frozenset(INTENSITY_LABELS)

# Smallest scale that describes a felt earthquake (震度1)
MIN_FELT_SCALE = 10


class UnexpectedIntensityError(ValueError):
    """Raised by strict classification for a scale outside the table.

    Attributes:
        intensity: The offending scale value
    """

    def __init__(self, intensity: int) -> None:
        super().__init__(f"unexpected intensity: {intensity}")
        self.intensity = intensity


def is_known_scale(scale: int) -> bool:
    """Return True if the scale value has a label."""
    return scale in KNOWN_SCALES


def intensity_from_scale(scale: int) -> str:
    """Get the intensity label for a scale value.

    Unexpected values are logged and reported as unknown.

    Args:
        scale: Scale value from the feed (e.g. 45)

    Returns:
        Intensity label (e.g. "震度5弱"), or UNKNOWN_LABEL
    """
    label = INTENSITY_LABELS.get(scale)
    if label is None:
        logger.warning("intensity_from_scale: unexpected value: %s", scale)
        return UNKNOWN_LABEL
    return label


def intensity_from_scale_strict(scale: int) -> str:
    """Get the intensity label for a scale value, failing on unexpected values.

    Args:
        scale: Scale value from the feed

    Returns:
        Intensity label

    Raises:
        UnexpectedIntensityError: If the scale is not in the table
    """
    label = INTENSITY_LABELS.get(scale)
    if label is None:
        logger.warning("intensity_from_scale_strict: unexpected value: %s", scale)
        raise UnexpectedIntensityError(scale)
    return label
