"""
Heading arbitration: smooth each heading source and pick the active one.

Priority (first available wins):
  1. orientation sensor reporting a true-north (absolute) heading
  2. GPS course (reported course-over-ground or displacement bearing)
  3. orientation sensor with a relative heading
  4. manual heading (always available, 0 until set)
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional

from heading_guide.angles import normalize, smooth
from heading_guide.config import GPS_SMOOTHING, MANUAL_SMOOTHING, SENSOR_SMOOTHING

logger = logging.getLogger(__name__)


class HeadingSource(Enum):
    """Where the active heading came from."""

    SENSOR_ABSOLUTE = "sensor_absolute"
    GPS_COURSE = "gps_course"
    SENSOR_RELATIVE = "sensor_relative"
    MANUAL = "manual"


class ActiveHeading(NamedTuple):
    value: float
    source: HeadingSource


class SmoothedValue:
    """
    Mutable cell holding the last smoothed angle of one source.

    Empty until the first update; never reset afterwards.
    """

    __slots__ = ("factor", "previous")

    def __init__(self, factor: float) -> None:
        if not 0.0 < factor <= 1.0:
            raise ValueError(f"smoothing factor must be in (0, 1], got {factor}")
        self.factor = factor
        self.previous: Optional[float] = None

    def update(self, raw: float) -> float:
        """Fold one raw angle into the cell and return the new smoothed value."""
        self.previous = smooth(self.previous, raw, self.factor)
        return self.previous


class HeadingArbiter:
    """Holds the latest smoothed heading of each source and selects one."""

    def __init__(
        self,
        sensor_factor: float = SENSOR_SMOOTHING,
        gps_factor: float = GPS_SMOOTHING,
        manual_heading: float = 0.0,
    ) -> None:
        self._sensor = SmoothedValue(sensor_factor)
        self._gps = SmoothedValue(gps_factor)
        self._manual = SmoothedValue(MANUAL_SMOOTHING)
        self._manual.update(manual_heading)
        self._sensor_is_absolute = False

    def ingest_sensor_reading(self, raw_heading: float, is_absolute: bool) -> float:
        """Smooth an orientation-sensor heading; the absolute flag is last-write-wins."""
        value = self._sensor.update(raw_heading)
        self._sensor_is_absolute = bool(is_absolute)
        return value

    def ingest_gps_heading(self, raw_heading: float) -> float:
        value = self._gps.update(raw_heading)
        logger.debug("GPS heading %.1f -> %.1f", raw_heading, value)
        return value

    def set_manual_heading(self, value: float) -> float:
        """Manual input is authoritative at once (no smoothing)."""
        self._manual.previous = normalize(value)
        return self._manual.previous

    @property
    def sensor_heading(self) -> Optional[float]:
        return self._sensor.previous

    @property
    def sensor_is_absolute(self) -> bool:
        return self._sensor_is_absolute

    @property
    def gps_heading(self) -> Optional[float]:
        return self._gps.previous

    @property
    def manual_heading(self) -> float:
        value = self._manual.previous
        return 0.0 if value is None else value

    def active_heading(self) -> ActiveHeading:
        """Return the highest-priority heading that is available."""
        sensor = self._sensor.previous
        if sensor is not None and self._sensor_is_absolute:
            return ActiveHeading(sensor, HeadingSource.SENSOR_ABSOLUTE)
        gps = self._gps.previous
        if gps is not None:
            return ActiveHeading(gps, HeadingSource.GPS_COURSE)
        if sensor is not None:
            return ActiveHeading(sensor, HeadingSource.SENSOR_RELATIVE)
        return ActiveHeading(self.manual_heading, HeadingSource.MANUAL)
