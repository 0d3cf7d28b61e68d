"""Per-node fillet/chamfer parameters and their distance/time arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal, Sequence

import numpy as np

from cornerfx.modeling.curves import Curve, signed_angle

NodeSatelliteType = Literal["fillet", "inverse_fillet", "chamfer", "inverse_chamfer", "invalid"]

FILLET: NodeSatelliteType = "fillet"
INVERSE_FILLET: NodeSatelliteType = "inverse_fillet"
CHAMFER: NodeSatelliteType = "chamfer"
INVERSE_CHAMFER: NodeSatelliteType = "inverse_chamfer"
INVALID: NodeSatelliteType = "invalid"

_TYPE_CODES: dict[NodeSatelliteType, str] = {
    FILLET: "F",
    INVERSE_FILLET: "IF",
    CHAMFER: "C",
    INVERSE_CHAMFER: "IC",
    INVALID: "KO",
}
_CODE_TYPES = {code: kind for kind, code in _TYPE_CODES.items()}


def satellite_type_from_code(code: str) -> NodeSatelliteType:
    """Map a short code (``F``, ``IF``, ``C``, ``IC``, ``KO``) or a type name to a type."""
    key = code.strip()
    if key in _CODE_TYPES:
        return _CODE_TYPES[key]
    lowered = key.lower()
    if lowered in _TYPE_CODES:
        return lowered  # type: ignore[return-value]
    raise ValueError(f"Unknown node satellite type {code!r}.")


def satellite_type_code(kind: NodeSatelliteType) -> str:
    return _TYPE_CODES[kind]


def time_at_arc_length(distance: float, curve: Curve) -> float:
    """Time on ``curve`` at arc length ``distance`` from its start, clamped to [0, 1]."""
    if distance <= 0 or curve.is_degenerate():
        return 0.0
    if distance >= curve.length():
        return 1.0
    return curve.time_at_length(distance)


def arc_length_at(time: float, curve: Curve) -> float:
    """Arc length of ``curve`` from its start up to ``time``."""
    if time <= 0 or curve.is_degenerate():
        return 0.0
    if time >= 1:
        return curve.length()
    return curve.length_at(time)


def _corner_angle(curve_in: Curve, time_in: float, curve_out: Curve, time_out: float) -> float:
    return abs(signed_angle(curve_in.unit_tangent_at(time_in), curve_out.unit_tangent_at(time_out)))


@dataclass
class NodeSatellite:
    """Join parameters of a single path node.

    ``amount`` is a distance along the adjacent curves, or a curve time in
    [0, 1] when ``is_time`` is set. Changing ``is_time`` does not convert the
    amount; callers that want to keep the visual size convert it themselves
    against the current curve.
    """

    type: NodeSatelliteType = FILLET
    amount: float = 0.0
    steps: int = 1
    is_time: bool = False
    has_mirror: bool = True
    hidden: bool = False
    selected: bool = False

    def __post_init__(self) -> None:
        if self.type not in _TYPE_CODES:
            raise ValueError(f"Unknown node satellite type {self.type!r}.")
        self.set_amount(self.amount)
        self.set_steps(self.steps)

    def copy(self) -> "NodeSatellite":
        return replace(self)

    # Setters -----------------------------------------------------------------

    def set_type(self, kind: NodeSatelliteType) -> None:
        if kind not in _TYPE_CODES:
            raise ValueError(f"Unknown node satellite type {kind!r}.")
        self.type = kind

    def set_amount(self, amount: float) -> None:
        amount = float(amount)
        self.amount = amount if math.isfinite(amount) and amount > 0 else 0.0

    def set_steps(self, steps: int) -> None:
        self.steps = max(int(steps), 1)

    def set_is_time(self, is_time: bool) -> None:
        self.is_time = bool(is_time)

    def set_has_mirror(self, has_mirror: bool) -> None:
        self.has_mirror = bool(has_mirror)

    def set_hidden(self, hidden: bool) -> None:
        self.hidden = bool(hidden)

    def set_selected(self, selected: bool) -> None:
        self.selected = bool(selected)

    def type_code(self) -> str:
        return _TYPE_CODES[self.type]

    # Curve arithmetic --------------------------------------------------------

    def time(self, curve: Curve, inverse: bool = False) -> float:
        """Time of the satellite's knot on ``curve``.

        With ``inverse`` the amount is measured back from the curve's end.
        """
        if not self.is_time:
            t = self.time_at(self.amount, not inverse, curve)
        elif inverse:
            t = 1.0 - self.amount
        else:
            t = self.amount
        return float(np.clip(t, 0.0, 1.0))

    def time_at(self, distance: float, from_start: bool, curve: Curve) -> float:
        """Time on ``curve`` for an explicit ``distance`` from its start or its end."""
        if distance <= 0:
            return 0.0 if from_start else 1.0
        if from_start:
            return time_at_arc_length(distance, curve)
        remaining = curve.length() - distance
        if remaining <= 0:
            return 0.0
        return time_at_arc_length(remaining, curve)

    def arc_distance(self, curve: Curve) -> float:
        """Absolute length of the stored amount on ``curve``."""
        if self.is_time:
            return arc_length_at(self.amount, curve)
        return self.amount

    def position(self, curve: Curve, inverse: bool = False) -> np.ndarray:
        return curve.point_at(self.time(curve, inverse))

    def set_position(self, point: Sequence[float], curve: Curve, inverse: bool = False) -> None:
        """Move the knot to the point of ``curve`` nearest to ``point``."""
        target = curve.reversed() if inverse else curve
        t = target.nearest_time(point)
        self.set_amount(t if self.is_time else arc_length_at(t, target))

    def rad_to_len(self, radius: float, curve_in: Curve, curve_out: Curve) -> float:
        """Knot distance on ``curve_out`` for a round join of ``radius``.

        Uses ``radius * tan(angle / 2)`` with the tangent directions at the
        corner. This is exact for straight neighbours. On curved neighbours it
        is only an estimate and differs from the point where the curves offset
        by ``radius`` would intersect.
        """
        if radius <= 0:
            return 0.0
        angle = _corner_angle(curve_in, 1.0, curve_out, 0.0)
        limit = curve_out.length()
        if angle <= 1e-9:
            return 0.0
        if angle >= math.pi - 1e-9:
            return limit
        return float(min(radius * math.tan(angle / 2.0), limit))

    def len_to_rad(self, distance: float, curve_in: Curve, curve_out: Curve) -> float:
        """Radius of the round join whose knots sit ``distance`` away from the corner."""
        time_in = self.time_at(distance, False, curve_in)
        time_out = time_at_arc_length(distance, curve_out)
        start = curve_in.point_at(time_in)
        end = curve_out.point_at(time_out)
        half_chord = 0.5 * float(np.linalg.norm(end - start))
        divisor = math.sin(_corner_angle(curve_in, time_in, curve_out, time_out) / 2.0)
        if divisor > 0:
            return half_chord / divisor
        return 0.0


__all__ = [
    "CHAMFER",
    "FILLET",
    "INVALID",
    "INVERSE_CHAMFER",
    "INVERSE_FILLET",
    "NodeSatellite",
    "NodeSatelliteType",
    "arc_length_at",
    "satellite_type_code",
    "satellite_type_from_code",
    "time_at_arc_length",
]
