"""
Position fixes, and reading them from gpsd.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from heading_guide.errors import PositionError, PositionFailure
from heading_guide.geo import GeoPoint, valid_coordinates

logger = logging.getLogger(__name__)


@dataclass
class PositionFix:
    """One position fix with optional course-over-ground (deg) and speed (m/s)."""

    point: GeoPoint
    course: Optional[float] = None
    speed_ms: Optional[float] = None
    time_iso: Optional[str] = None


def connect_gpsd(host: str = "127.0.0.1", port: int = 2947) -> Optional[object]:
    """
    Connect to gpsd and return the gpsd-py3 module as connection handle.

    Returns None on failure.
    """
    try:
        import gpsd  # type: ignore[import-untyped]

        gpsd.connect(host=host, port=port)
        return gpsd  # type: ignore[no-any-return]
    except Exception as e:
        logger.error("gpsd connect failed: %s", e)
        return None


def _packet_time_iso(packet: object) -> Optional[str]:
    t = getattr(packet, "time", None)
    if not t:
        return None
    if isinstance(t, (int, float)):
        return datetime.fromtimestamp(t, tz=timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
    return str(t)


def fix_from_packet(packet: object) -> PositionFix:
    """
    Convert a gpsd-py3 GpsResponse to a PositionFix.

    Raises PositionError(POSITION_UNAVAILABLE) when the packet has no fix.
    gpsd track becomes course and hspeed (or speed) becomes speed_ms; both
    stay None when gpsd does not report them.
    """
    mode = getattr(packet, "mode", 0) or 0
    if mode < 2:
        raise PositionError(PositionFailure.POSITION_UNAVAILABLE, "gpsd has no fix")
    lat = getattr(packet, "lat", None)
    lon = getattr(packet, "lon", None)
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        raise PositionError(
            PositionFailure.POSITION_UNAVAILABLE, "gpsd fix without coordinates"
        )
    if not valid_coordinates(lat, lon):
        raise PositionError(
            PositionFailure.POSITION_UNAVAILABLE, "gpsd fix with invalid coordinates"
        )
    speed = getattr(packet, "hspeed", None)
    if speed is None:
        speed = getattr(packet, "speed", None)
    track = getattr(packet, "track", None)
    error = getattr(packet, "error", None)
    accuracy = None
    if isinstance(error, dict):
        horizontal = [error.get(k) for k in ("x", "y")]
        horizontal = [float(v) for v in horizontal if isinstance(v, (int, float))]
        if horizontal:
            accuracy = max(horizontal)
    return PositionFix(
        point=GeoPoint(lat=lat, lon=lon, accuracy_m=accuracy),
        course=float(track) if isinstance(track, (int, float)) else None,
        speed_ms=float(speed) if isinstance(speed, (int, float)) else None,
        time_iso=_packet_time_iso(packet),
    )


def get_current_fix(gpsd_module: Optional[object]) -> PositionFix:
    """
    Get the current fix from gpsd.

    Raises PositionError when gpsd is not connected, unreachable, or has no fix.
    """
    if gpsd_module is None:
        raise PositionError(PositionFailure.POSITION_UNAVAILABLE, "gpsd not connected")
    try:
        packet = gpsd_module.get_current()  # type: ignore[attr-defined]
    except Exception as e:
        logger.debug("gpsd get_current error: %s", e)
        raise PositionError(PositionFailure.POSITION_UNAVAILABLE, str(e))
    if packet is None:
        raise PositionError(PositionFailure.POSITION_UNAVAILABLE, "no gpsd packet")
    return fix_from_packet(packet)
