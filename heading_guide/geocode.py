"""
Address lookup results -> Target.

The HTTP request itself is made by a client; this module builds the
Nominatim search parameters and validates the JSON it returns.
"""

import logging
from typing import Dict

from heading_guide.errors import AddressFailure, AddressResolutionError
from heading_guide.geo import GeoPoint, Target, valid_coordinates

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"


def build_search_params(address: str) -> Dict[str, str]:
    """Query parameters for a single-result Nominatim search."""
    query = address.strip() if isinstance(address, str) else ""
    if not query:
        raise ValueError("address is empty")
    return {"q": query, "format": "json", "limit": "1", "addressdetails": "1"}


def parse_search_results(data: object, address: str) -> Target:
    """
    Take the first search hit as the target.

    Raises AddressResolutionError(NO_MATCH) for an empty or non-list result and
    AddressResolutionError(INVALID_COORDINATES) when lat/lon are not usable.
    """
    if not isinstance(data, list) or not data:
        raise AddressResolutionError(
            AddressFailure.NO_MATCH, "No match found for that address."
        )
    top = data[0]
    if not isinstance(top, dict):
        raise AddressResolutionError(
            AddressFailure.INVALID_COORDINATES, "Geocoder returned invalid coordinates."
        )
    try:
        lat = float(top.get("lat"))
        lon = float(top.get("lon"))
    except (TypeError, ValueError, OverflowError):
        raise AddressResolutionError(
            AddressFailure.INVALID_COORDINATES, "Geocoder returned invalid coordinates."
        )
    if not valid_coordinates(lat, lon):
        raise AddressResolutionError(
            AddressFailure.INVALID_COORDINATES, "Geocoder returned invalid coordinates."
        )
    label = top.get("display_name")
    if not isinstance(label, str) or not label:
        label = address
    logger.debug("Geocoded %r -> %.5f, %.5f", address, lat, lon)
    return Target(point=GeoPoint(lat=lat, lon=lon), label=label)


class AddressResolver:
    """Resolves free-text addresses to targets."""

    def resolve(self, address: str) -> Target:
        """
        Return the Target for address.

        Raises AddressResolutionError with NO_MATCH, TRANSPORT_ERROR or
        INVALID_COORDINATES.
        """
        raise NotImplementedError
