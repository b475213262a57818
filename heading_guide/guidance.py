"""
Guidance: distance and turn instruction toward a target from the current heading.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from heading_guide.angles import bearing, circular_delta, distance_m
from heading_guide.config import AHEAD_TOLERANCE_DEG
from heading_guide.geo import GeoPoint


class TurnDirection(Enum):
    AHEAD = "ahead"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Instruction:
    """Discrete instruction: a direction and how many degrees to turn."""

    direction: TurnDirection
    degrees: float = 0.0

    @property
    def text(self) -> str:
        if self.direction is TurnDirection.AHEAD:
            return "ahead"
        return f"turn {self.direction.value} {round(self.degrees)}°"


@dataclass(frozen=True)
class GuidanceResult:
    """
    Output of compute_guidance.

    has_guidance is False while position or target is missing; the other
    fields are then None.
    """

    has_guidance: bool
    distance_m: Optional[float] = None
    bearing_to_target: Optional[float] = None
    relative_bearing: Optional[float] = None
    instruction: Optional[Instruction] = None


def instruction_for(
    relative: float, tolerance_deg: float = AHEAD_TOLERANCE_DEG
) -> Instruction:
    """Map a signed relative bearing to an instruction with a dead-band."""
    if abs(relative) <= tolerance_deg:
        return Instruction(TurnDirection.AHEAD)
    if relative < 0:
        return Instruction(TurnDirection.LEFT, abs(relative))
    return Instruction(TurnDirection.RIGHT, relative)


def compute_guidance(
    current: Optional[GeoPoint],
    target: Optional[GeoPoint],
    heading: float,
    tolerance_deg: float = AHEAD_TOLERANCE_DEG,
) -> GuidanceResult:
    """
    Distance and relative bearing to target given the current heading.

    relative_bearing is in (-180, 180]; positive means the target is to the
    right.
    """
    if current is None or target is None:
        return GuidanceResult(has_guidance=False)
    bearing_to_target = bearing(current, target)
    relative = circular_delta(heading, bearing_to_target)
    return GuidanceResult(
        has_guidance=True,
        distance_m=distance_m(current, target),
        bearing_to_target=bearing_to_target,
        relative_bearing=relative,
        instruction=instruction_for(relative, tolerance_deg),
    )


def format_distance(meters: Optional[float]) -> str:
    """'--' when unknown, whole meters below 1 km, else km with 2 decimals."""
    if meters is None or not math.isfinite(meters):
        return "--"
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.2f} km"
