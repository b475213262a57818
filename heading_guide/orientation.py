"""
Orientation event decoding: raw device-orientation events -> compass heading.

Events come in two shapes:
- a vendor compass heading (already clockwise from true north), or
- alpha/beta/gamma rotation angles with an "absolute" flag.
Alpha rotates counter-clockwise, so heading = 360 - alpha, corrected for the
current screen rotation.
"""

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from heading_guide.angles import normalize

COMPASS_HEADING_KEYS = ("webkitCompassHeading", "compass_heading")


def _number(value: object) -> Optional[float]:
    """Return value as float if it is a real finite number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        result = float(value)
    except OverflowError:
        return None
    if not math.isfinite(result):
        return None
    return result


@dataclass
class OrientationEvent:
    """
    One raw orientation event; fields are None when the event lacks them.

    absolute: the event declares alpha as referenced to true north.
    """

    compass_heading: Optional[float] = None
    alpha: Optional[float] = None
    beta: Optional[float] = None
    gamma: Optional[float] = None
    absolute: bool = False

    @classmethod
    def from_dict(cls, data: object) -> "OrientationEvent":
        """Build from a decoded JSON object. Non-numeric fields are dropped."""
        if not isinstance(data, dict):
            return cls()
        compass = None
        for key in COMPASS_HEADING_KEYS:
            compass = _number(data.get(key))
            if compass is not None:
                break
        return cls(
            compass_heading=compass,
            alpha=_number(data.get("alpha")),
            beta=_number(data.get("beta")),
            gamma=_number(data.get("gamma")),
            absolute=data.get("absolute") is True,
        )


class OrientationReading(NamedTuple):
    heading: float
    absolute: bool


def decode_orientation(
    event: OrientationEvent, screen_rotation: Optional[float] = 0.0
) -> Optional[OrientationReading]:
    """
    Convert an event to a heading reading, or None if it has no usable field.

    screen_rotation: 0/90/180/270; None or non-finite counts as 0.
    """
    compass = _number(event.compass_heading)
    if compass is not None:
        return OrientationReading(normalize(compass), True)
    alpha = _number(event.alpha)
    if alpha is None:
        return None
    offset = _number(screen_rotation) or 0.0
    raw = 360.0 - alpha + offset
    if not math.isfinite(raw):
        return None
    return OrientationReading(normalize(raw), event.absolute is True)


class OrientationDecoder:
    """
    Decoder bound to a screen-rotation provider.

    The provider returns the current rotation angle or None when unknown.
    """

    def __init__(
        self, screen_rotation: Optional[Callable[[], Optional[float]]] = None
    ) -> None:
        self._screen_rotation = screen_rotation

    def decode(self, event: OrientationEvent) -> Optional[OrientationReading]:
        rotation = self._screen_rotation() if self._screen_rotation else None
        return decode_orientation(event, rotation)
