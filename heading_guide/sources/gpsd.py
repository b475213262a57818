"""
gpsd position source.
"""

import logging
from typing import Optional

from heading_guide.errors import PositionError
from heading_guide.gps_reader import connect_gpsd, get_current_fix
from heading_guide.sources.base import (
    Event,
    PositionEvent,
    PositionSource,
    SourceFailureEvent,
)

logger = logging.getLogger(__name__)


class GpsdPositionSource(PositionSource):
    """
    Position fixes from gpsd.

    gpsd keeps returning the latest packet, so a fix whose timestamp equals
    the previous one is not reported again. Failures are reported once until
    a fix arrives.
    """

    def __init__(self, gpsd_module: Optional[object]) -> None:
        self._gpsd = gpsd_module
        self._last_time: Optional[str] = None
        self._failing = False

    def poll(self) -> Optional[Event]:
        try:
            fix = get_current_fix(self._gpsd)
        except PositionError as e:
            if self._failing:
                return None
            self._failing = True
            return SourceFailureEvent(e)
        self._failing = False
        if fix.time_iso is not None and fix.time_iso == self._last_time:
            return None
        self._last_time = fix.time_iso
        return PositionEvent(fix)


def create_gpsd_source(host: str, port: int) -> Optional[GpsdPositionSource]:
    """Connect to gpsd. Returns None when gpsd is not reachable."""
    gpsd = connect_gpsd(host, port)
    if gpsd is None:
        return None
    logger.info("Using gpsd at %s:%s for position", host, port)
    return GpsdPositionSource(gpsd)
