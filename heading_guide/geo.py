"""
Geographic value types: points, targets, and coordinate helpers.
"""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GeoPoint:
    """A position on the sphere in decimal degrees, with optional accuracy radius."""

    lat: float
    lon: float
    accuracy_m: Optional[float] = None


@dataclass(frozen=True)
class Target:
    """Navigation destination: a point and the label shown for it."""

    point: GeoPoint
    label: str


def valid_coordinates(lat: float, lon: float) -> bool:
    """True when lat/lon are finite and inside [-90, 90] / [-180, 180]."""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def format_coordinates(point: GeoPoint, digits: int = 6) -> str:
    """Format as 'lat, lon' with a fixed number of decimals."""
    return f"{point.lat:.{digits}f}, {point.lon:.{digits}f}"
