"""
Position tracking: derive a GPS heading from position fixes.

Two ways to get a heading, so both course-reporting receivers and plain
lat/lon streams work:
- reported course-over-ground, trusted only above a minimum speed;
- otherwise the bearing between consecutive fixes, only once the device has
  moved at least a minimum distance (smaller steps are receiver jitter).
"""

import logging
import math
from typing import Optional

from heading_guide.angles import bearing, distance_m
from heading_guide.arbiter import HeadingArbiter
from heading_guide.config import MIN_COURSE_SPEED_MS, MIN_MOVEMENT_M
from heading_guide.geo import GeoPoint

logger = logging.getLogger(__name__)


def _is_finite_number(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


class PositionTracker:
    """
    Feeds GPS-derived headings into a HeadingArbiter.

    Owns the last-fix cell used for displacement bearings.
    """

    def __init__(
        self,
        arbiter: HeadingArbiter,
        min_movement_m: float = MIN_MOVEMENT_M,
        min_course_speed_ms: float = MIN_COURSE_SPEED_MS,
    ) -> None:
        self._arbiter = arbiter
        self._min_movement_m = min_movement_m
        self._min_course_speed_ms = min_course_speed_ms
        self.last_fix: Optional[GeoPoint] = None

    def _course_usable(
        self, course: Optional[float], speed: Optional[float]
    ) -> bool:
        if not _is_finite_number(course) or course < 0:
            return False
        if not _is_finite_number(speed):
            return True
        return speed > self._min_course_speed_ms

    def ingest_fix(
        self,
        point: GeoPoint,
        reported_course: Optional[float] = None,
        reported_speed: Optional[float] = None,
    ) -> Optional[float]:
        """
        Process one position fix.

        Returns the raw heading passed to the arbiter, or None when the fix
        did not carry a usable heading.
        """
        raw: Optional[float] = None
        if self._course_usable(reported_course, reported_speed):
            raw = reported_course
        elif self.last_fix is not None:
            moved = distance_m(self.last_fix, point)
            if moved >= self._min_movement_m:
                raw = bearing(self.last_fix, point)
                logger.debug("Moved %.1f m, bearing %.1f", moved, raw)
        if raw is not None:
            self._arbiter.ingest_gps_heading(raw)
        self.last_fix = point
        return raw
