"""
Configuration defaults and parsing for heading-guide.

The smoothing factors and movement/speed thresholds are empirical values;
they are kept as named constants and only overridden from the command line.
"""

import argparse
import math
from dataclasses import dataclass
from typing import Optional

from heading_guide.geo import valid_coordinates

SENSOR_SMOOTHING = 0.30
GPS_SMOOTHING = 0.35
MANUAL_SMOOTHING = 1.0
MIN_MOVEMENT_M = 4.0
MIN_COURSE_SPEED_MS = 0.5
AHEAD_TOLERANCE_DEG = 6.0


@dataclass
class Config:
    """Runtime configuration."""

    position_source: str = "remote"
    gpsd_host: str = "127.0.0.1"
    gpsd_port: int = 2947
    remote_host: str = "0.0.0.0"
    remote_port: int = 2949
    guidance_host: str = "127.0.0.1"
    guidance_port: int = 2950
    poll_rate_hz: float = 10.0
    output_rate_hz: float = 1.0
    sensor_smoothing: float = SENSOR_SMOOTHING
    gps_smoothing: float = GPS_SMOOTHING
    min_movement_m: float = MIN_MOVEMENT_M
    min_course_speed_ms: float = MIN_COURSE_SPEED_MS
    ahead_tolerance_deg: float = AHEAD_TOLERANCE_DEG
    manual_heading: float = 0.0
    target_lat: Optional[float] = None
    target_lon: Optional[float] = None
    target_label: Optional[str] = None
    debug: bool = False


def _smoothing_factor(value: str) -> float:
    """argparse type: float in (0, 1]."""
    try:
        factor = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not 0.0 < factor <= 1.0:
        raise argparse.ArgumentTypeError(f"must be in (0, 1]: {value}")
    return factor


def parse_args(args: Optional[list] = None) -> Config:
    """Parse command-line arguments into Config."""
    parser = argparse.ArgumentParser(
        description="Fuse compass, GPS course and manual heading; stream guidance "
        "toward a target."
    )
    parser.add_argument(
        "--position-source",
        choices=("remote", "gpsd", "auto"),
        default="remote",
        help="Position fixes from: remote (TCP JSON), gpsd, auto (default: remote)",
    )
    parser.add_argument(
        "--gpsd-host",
        default="127.0.0.1",
        help="gpsd host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--gpsd-port",
        type=int,
        default=2947,
        help="gpsd port (default: 2947)",
    )
    parser.add_argument(
        "--remote-host",
        default="0.0.0.0",
        help="Bind address for remote event listener (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--remote-port",
        type=int,
        default=2949,
        help="Port for remote event listener (default: 2949)",
    )
    parser.add_argument(
        "--guidance-host",
        default="127.0.0.1",
        help="Bind address for guidance TCP stream (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--guidance-port",
        type=int,
        default=2950,
        help="Port for guidance TCP stream (default: 2950)",
    )
    parser.add_argument(
        "--poll-rate",
        type=float,
        default=10.0,
        help="Source poll rate in Hz (default: 10)",
    )
    parser.add_argument(
        "--output-rate",
        type=float,
        default=1.0,
        help="Guidance heartbeat rate in Hz (default: 1)",
    )
    parser.add_argument(
        "--sensor-smoothing",
        type=_smoothing_factor,
        default=SENSOR_SMOOTHING,
        help=f"Orientation sensor smoothing 0-1 (default: {SENSOR_SMOOTHING})",
    )
    parser.add_argument(
        "--gps-smoothing",
        type=_smoothing_factor,
        default=GPS_SMOOTHING,
        help=f"GPS heading smoothing 0-1 (default: {GPS_SMOOTHING})",
    )
    parser.add_argument(
        "--min-movement",
        type=float,
        default=MIN_MOVEMENT_M,
        help=f"Displacement in m that counts as movement (default: {MIN_MOVEMENT_M})",
    )
    parser.add_argument(
        "--min-course-speed",
        type=float,
        default=MIN_COURSE_SPEED_MS,
        help="Speed in m/s above which reported course is trusted "
        f"(default: {MIN_COURSE_SPEED_MS})",
    )
    parser.add_argument(
        "--ahead-tolerance",
        type=float,
        default=AHEAD_TOLERANCE_DEG,
        help="Relative bearing in degrees still reported as ahead "
        f"(default: {AHEAD_TOLERANCE_DEG})",
    )
    parser.add_argument(
        "--manual-heading",
        type=float,
        default=0.0,
        help="Fallback heading in degrees when no sensor or GPS (default: 0)",
    )
    parser.add_argument(
        "--target-lat",
        type=float,
        default=None,
        help="Target latitude (requires --target-lon)",
    )
    parser.add_argument(
        "--target-lon",
        type=float,
        default=None,
        help="Target longitude (requires --target-lat)",
    )
    parser.add_argument(
        "--target-label",
        default=None,
        help="Display label for the target (default: coordinates)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parsed = parser.parse_args(args)
    if (parsed.target_lat is None) != (parsed.target_lon is None):
        parser.error("--target-lat and --target-lon must be given together")
    if parsed.target_lat is not None and not valid_coordinates(
        parsed.target_lat, parsed.target_lon
    ):
        parser.error("--target-lat/--target-lon must be finite and in range")
    if not math.isfinite(parsed.manual_heading):
        parser.error("--manual-heading must be a finite number")
    return Config(
        position_source=parsed.position_source,
        gpsd_host=parsed.gpsd_host,
        gpsd_port=parsed.gpsd_port,
        remote_host=parsed.remote_host,
        remote_port=parsed.remote_port,
        guidance_host=parsed.guidance_host,
        guidance_port=parsed.guidance_port,
        poll_rate_hz=parsed.poll_rate,
        output_rate_hz=parsed.output_rate,
        sensor_smoothing=parsed.sensor_smoothing,
        gps_smoothing=parsed.gps_smoothing,
        min_movement_m=parsed.min_movement,
        min_course_speed_ms=parsed.min_course_speed,
        ahead_tolerance_deg=parsed.ahead_tolerance,
        manual_heading=parsed.manual_heading,
        target_lat=parsed.target_lat,
        target_lon=parsed.target_lon,
        target_label=parsed.target_label,
        debug=parsed.debug,
    )
