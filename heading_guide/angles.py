"""
Angle math on the circle and on the sphere.

All angles are degrees. Headings and bearings are normalized to [0, 360),
clockwise from north. Differences between angles go through circular_delta,
never plain subtraction.
"""

import math
from typing import Optional

from heading_guide.geo import GeoPoint

EARTH_RADIUS_M = 6371000.0


def normalize(degrees: float) -> float:
    """Wrap any finite angle into [0, 360)."""
    angle = degrees % 360.0
    # float modulo of a tiny negative rounds up to exactly 360.0
    if angle >= 360.0:
        return 0.0
    return angle


def circular_delta(from_deg: float, to_deg: float) -> float:
    """
    Shortest signed rotation from from_deg to to_deg, in (-180, 180].

    Positive is clockwise (turn right). An exact half turn is reported as +180.
    """
    delta = ((to_deg - from_deg + 540.0) % 360.0) - 180.0
    if delta <= -180.0:
        return 180.0
    return delta


def smooth(previous: Optional[float], next_deg: float, factor: float) -> float:
    """
    Exponential moving average on the circle.

    Moves previous toward next_deg along the shortest arc by factor (0, 1].
    The first sample (previous is None) is taken as is, so 359 and 1 average
    near 0 rather than 180.
    """
    if previous is None:
        return normalize(next_deg)
    return normalize(previous + circular_delta(previous, next_deg) * factor)


def bearing(from_point: GeoPoint, to_point: GeoPoint) -> float:
    """Initial great-circle bearing (forward azimuth) in [0, 360)."""
    lat1 = math.radians(from_point.lat)
    lat2 = math.radians(to_point.lat)
    d_lon = math.radians(to_point.lon - from_point.lon)
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(
        lat2
    ) * math.cos(d_lon)
    return normalize(math.degrees(math.atan2(y, x)))


def distance_m(from_point: GeoPoint, to_point: GeoPoint) -> float:
    """Haversine distance in meters on a sphere of radius EARTH_RADIUS_M."""
    lat1 = math.radians(from_point.lat)
    lat2 = math.radians(to_point.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(to_point.lon - from_point.lon)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c
