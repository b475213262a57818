"""
Event types delivered by sources, and the abstract source interfaces.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from heading_guide.errors import UpstreamUnavailable
from heading_guide.geo import Target
from heading_guide.gps_reader import PositionFix
from heading_guide.orientation import OrientationEvent


@dataclass
class PositionEvent:
    fix: PositionFix


@dataclass
class OrientationInput:
    event: OrientationEvent


@dataclass
class ScreenRotationEvent:
    angle: Optional[float]


@dataclass
class ManualHeadingEvent:
    value: float


@dataclass
class TargetEvent:
    target: Target


@dataclass
class SourceFailureEvent:
    error: UpstreamUnavailable


Event = Union[
    PositionEvent,
    OrientationInput,
    ScreenRotationEvent,
    ManualHeadingEvent,
    TargetEvent,
    SourceFailureEvent,
]


class PositionSource:
    """Source of position fixes."""

    def poll(self) -> Optional[Event]:
        """
        Return a PositionEvent, a SourceFailureEvent, or None.

        None means nothing new since the last poll (non-blocking).
        """
        raise NotImplementedError


class EventSource:
    """Source of any mix of events, queued in arrival order."""

    def drain(self) -> List[Event]:
        """Return and clear all events received since the last call."""
        raise NotImplementedError
