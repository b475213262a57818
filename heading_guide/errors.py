"""
Categorized failures of upstream collaborators (position, orientation, geocoder).

The core never retries; these are raised or reported to the caller as is.
"""

from enum import Enum
from typing import Optional


class PositionFailure(Enum):
    PERMISSION_DENIED = "permission-denied"
    POSITION_UNAVAILABLE = "position-unavailable"
    TIMEOUT = "timeout"

    @classmethod
    def from_code(cls, code: object) -> "PositionFailure":
        """Map W3C geolocation error codes (1, 2, 3); anything else is unavailable."""
        if isinstance(code, bool) or not isinstance(code, int):
            return cls.POSITION_UNAVAILABLE
        return _POSITION_CODES.get(code, cls.POSITION_UNAVAILABLE)


_POSITION_CODES = {
    1: PositionFailure.PERMISSION_DENIED,
    2: PositionFailure.POSITION_UNAVAILABLE,
    3: PositionFailure.TIMEOUT,
}


class OrientationFailure(Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission-denied"


class AddressFailure(Enum):
    NO_MATCH = "no-match"
    TRANSPORT_ERROR = "transport-error"
    INVALID_COORDINATES = "invalid-coordinates"


class UpstreamUnavailable(RuntimeError):
    """A collaborator could not deliver data. `reason` is a category Enum."""

    source = "upstream"

    def __init__(self, reason: Enum, message: Optional[str] = None) -> None:
        self.reason = reason
        self.message = message or reason.value.replace("-", " ")
        super().__init__(f"{self.source}: {self.message}")


class PositionError(UpstreamUnavailable):
    source = "position"

    def __init__(self, reason: PositionFailure, message: Optional[str] = None) -> None:
        super().__init__(reason, message)


class OrientationError(UpstreamUnavailable):
    source = "orientation"

    def __init__(
        self, reason: OrientationFailure, message: Optional[str] = None
    ) -> None:
        super().__init__(reason, message)


class AddressResolutionError(UpstreamUnavailable):
    source = "address"

    def __init__(self, reason: AddressFailure, message: Optional[str] = None) -> None:
        super().__init__(reason, message)
