"""
Navigator: the single owner of heading, position and target state.

Every ingest runs to completion, then a fresh NavigationSnapshot is built
and passed to the update listeners so output never lags the newest data.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from heading_guide.arbiter import ActiveHeading, HeadingArbiter
from heading_guide.config import Config
from heading_guide.errors import UpstreamUnavailable
from heading_guide.geo import GeoPoint, Target, format_coordinates
from heading_guide.geocode import AddressResolver
from heading_guide.gps_reader import PositionFix
from heading_guide.guidance import GuidanceResult, compute_guidance, format_distance
from heading_guide.orientation import OrientationDecoder, OrientationEvent
from heading_guide.sources.base import (
    Event,
    ManualHeadingEvent,
    OrientationInput,
    PositionEvent,
    ScreenRotationEvent,
    SourceFailureEvent,
    TargetEvent,
)
from heading_guide.tracker import PositionTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationSnapshot:
    """Everything a presentation layer needs after one update."""

    position: Optional[GeoPoint]
    target: Optional[Target]
    heading: ActiveHeading
    guidance: GuidanceResult
    status: str
    status_is_error: bool = False


class Navigator:
    """Coordinates HeadingArbiter, PositionTracker and the orientation decoder."""

    def __init__(self, config: Optional[Config] = None) -> None:
        config = config or Config()
        self.arbiter = HeadingArbiter(
            sensor_factor=config.sensor_smoothing,
            gps_factor=config.gps_smoothing,
            manual_heading=config.manual_heading,
        )
        self.tracker = PositionTracker(
            self.arbiter,
            min_movement_m=config.min_movement_m,
            min_course_speed_ms=config.min_course_speed_ms,
        )
        self._screen_rotation: Optional[float] = None
        self._decoder = OrientationDecoder(lambda: self._screen_rotation)
        self._tolerance_deg = config.ahead_tolerance_deg
        self.target: Optional[Target] = None
        self.status = "Waiting for position."
        self.status_is_error = False
        self._error_source: Optional[str] = None
        self._listeners: List[Callable[[NavigationSnapshot], None]] = []

    def add_listener(self, listener: Callable[[NavigationSnapshot], None]) -> None:
        """Call listener with a new snapshot after every successful ingest."""
        self._listeners.append(listener)

    @property
    def position(self) -> Optional[GeoPoint]:
        return self.tracker.last_fix

    def snapshot(self) -> NavigationSnapshot:
        heading = self.arbiter.active_heading()
        guidance = compute_guidance(
            self.position,
            self.target.point if self.target else None,
            heading.value,
            self._tolerance_deg,
        )
        return NavigationSnapshot(
            position=self.position,
            target=self.target,
            heading=heading,
            guidance=guidance,
            status=self.status,
            status_is_error=self.status_is_error,
        )

    def _refresh(self) -> NavigationSnapshot:
        snap = self.snapshot()
        for listener in self._listeners:
            listener(snap)
        return snap

    def _set_status(self, message: str, error_source: Optional[str] = None) -> None:
        """Show message; error_source names the failing upstream for errors."""
        self.status = message
        self.status_is_error = error_source is not None
        self._error_source = error_source

    def ingest_position(self, fix: PositionFix) -> NavigationSnapshot:
        first = self.position is None
        self.tracker.ingest_fix(fix.point, fix.course, fix.speed_ms)
        # A fix only clears errors raised by the position source itself.
        if self._error_source == "position" or (first and not self.status_is_error):
            self._set_status("Tracking live GPS location.")
        logger.debug("Position %s", format_coordinates(fix.point))
        return self._refresh()

    def ingest_orientation(
        self, event: OrientationEvent
    ) -> Optional[NavigationSnapshot]:
        """Returns None when the event carried no usable heading."""
        reading = self._decoder.decode(event)
        if reading is None:
            return None
        self.arbiter.ingest_sensor_reading(reading.heading, reading.absolute)
        return self._refresh()

    def set_screen_rotation(self, angle: Optional[float]) -> None:
        """Applies to the next orientation event; nothing to recompute now."""
        self._screen_rotation = angle

    def set_manual_heading(self, value: float) -> NavigationSnapshot:
        self.arbiter.set_manual_heading(value)
        return self._refresh()

    def set_target(self, target: Target) -> NavigationSnapshot:
        self.target = target
        self._set_status("Target locked. Compass now points to destination.")
        logger.info(
            "Target %s (%s)", target.label, format_coordinates(target.point, 5)
        )
        return self._refresh()

    def resolve_target(
        self, resolver: AddressResolver, address: str
    ) -> NavigationSnapshot:
        """
        Look up address with resolver and make it the target.

        A failed lookup keeps the previous target and is reported in the status.
        """
        if not address.strip():
            self._set_status("Enter an address first.", error_source="address")
            return self._refresh()
        try:
            target = resolver.resolve(address.strip())
        except UpstreamUnavailable as e:
            return self.report_failure(e)
        return self.set_target(target)

    def report_failure(self, error: UpstreamUnavailable) -> NavigationSnapshot:
        logger.warning(
            "%s unavailable (%s): %s", error.source, error.reason.value, error.message
        )
        self._set_status(
            f"{error.source.capitalize()} error: {error.message}", error_source=error.source
        )
        return self._refresh()

    def dispatch(self, event: Event) -> Optional[NavigationSnapshot]:
        """Route one source event to the matching ingest method."""
        if isinstance(event, PositionEvent):
            return self.ingest_position(event.fix)
        if isinstance(event, OrientationInput):
            return self.ingest_orientation(event.event)
        if isinstance(event, ScreenRotationEvent):
            self.set_screen_rotation(event.angle)
            return None
        if isinstance(event, ManualHeadingEvent):
            return self.set_manual_heading(event.value)
        if isinstance(event, TargetEvent):
            return self.set_target(event.target)
        if isinstance(event, SourceFailureEvent):
            return self.report_failure(event.error)
        logger.debug("Unknown event %r", event)
        return None


def describe(snapshot: NavigationSnapshot) -> str:
    """One-line human summary, used for logging."""
    heading = snapshot.heading
    parts = [f"heading {round(heading.value)}° ({heading.source.value})"]
    guidance = snapshot.guidance
    if guidance.has_guidance and guidance.instruction is not None:
        parts.append(format_distance(guidance.distance_m))
        parts.append(guidance.instruction.text)
    else:
        parts.append("no guidance")
    return ", ".join(parts)
