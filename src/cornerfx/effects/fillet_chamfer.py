"""Fillet / chamfer corner transform.

For every node the two neighbouring curves are trimmed back by the node's
satellite amount and the gap is bridged by a join: a circular arc or a single
cubic for fillets, a straight cut (optionally stepped) for chamfers, and the
outward-bulging mirror of either for the inverse variants.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Literal, Sequence

import numpy as np

from cornerfx.modeling.curves import (
    CubicSegment,
    Curve,
    EllipticalArc,
    LineSegment,
    Segment,
    rotate,
    signed_angle,
    unit,
)
from cornerfx.modeling.path import Path, PathVector
from cornerfx.validation import require_linear_and_cubic, satellites_match

from .nodesatellite import (
    CHAMFER,
    FILLET,
    INVERSE_CHAMFER,
    INVERSE_FILLET,
    NodeSatellite,
    NodeSatelliteType,
    satellite_type_from_code,
)
from .satellites import PathVectorNodeSatellites

FilletMethod = Literal["auto", "arc", "bezier"]
FILLET_METHODS: tuple[FilletMethod, ...] = ("auto", "arc", "bezier")

GAP_HELPER = 0.00001
# Handle length ratio of a cubic approximating a quarter circle.
K = (4.0 / 3.0) * (math.sqrt(2.0) - 1.0)
_ANGLE_EPSILON = 1e-6


def _require_method(method: str) -> FilletMethod:
    key = method.strip().lower()
    if key not in FILLET_METHODS:
        raise ValueError(f"method must be one of {', '.join(FILLET_METHODS)}.")
    return key  # type: ignore[return-value]


class _PathBuilder:
    def __init__(self, start: np.ndarray) -> None:
        self.start = np.asarray(start, dtype=float)
        self.segments: List[Segment] = []

    @property
    def final_point(self) -> np.ndarray:
        return self.segments[-1].final_point if self.segments else self.start

    def append(self, segment: Segment) -> None:
        self.segments.append(segment)

    def prepend(self, segment: Segment) -> None:
        self.segments.insert(0, segment)
        self.start = segment.initial_point

    def to_path(self, closed: bool) -> Path:
        return Path(segments=self.segments, closed=closed)


def _ray_direction(knot_curve: Curve, anchor: np.ndarray, chord_to: np.ndarray, incoming: bool) -> np.ndarray:
    """Unit tangent of a trimmed curve at the join, pointing along the path direction."""
    if isinstance(knot_curve, CubicSegment):
        direction = anchor - knot_curve.p2 if incoming else knot_curve.p1 - anchor
        direction = unit(direction)
        if np.any(direction):
            return direction
    return unit(chord_to - anchor) if incoming else unit(anchor - chord_to)


def add_chamfer_steps(join: Segment, end_point: np.ndarray, steps: int) -> List[LineSegment]:
    """Resample ``join`` into ``steps`` chords at uniform parameter spacing."""
    steps = max(int(steps), 1)
    points = [join.point_at(i / steps) for i in range(1, steps)]
    points.append(np.asarray(end_point, dtype=float))
    chords: List[LineSegment] = []
    current = join.initial_point
    for point in points:
        chords.append(LineSegment(current, point))
        current = point
    return chords


def _join_segments(
    kind: NodeSatelliteType,
    steps: int,
    start: np.ndarray,
    end: np.ndarray,
    corner_in: np.ndarray,
    corner_out: np.ndarray,
    dir_1: np.ndarray,
    dir_2: np.ndarray,
    turn: float,
    elliptical: bool,
) -> List[Segment]:
    angle = abs(turn)
    k1 = float(np.linalg.norm(start - corner_in)) * K
    k2 = float(np.linalg.norm(corner_out - end)) * K
    inverse = kind in (INVERSE_FILLET, INVERSE_CHAMFER)

    if elliptical:
        radius = 0.5 * float(np.linalg.norm(end - start)) / math.sin(angle / 2.0)
        chord = end - start
        rotation = math.degrees(math.atan2(chord[1], chord[0]))
        join: Segment = EllipticalArc(
            start, end, radius, radius, rotation, large_arc=False, sweep=(turn > 0) != inverse
        )
    else:
        if inverse:
            handle_1 = start + rotate(dir_1, turn) * k1
            handle_2 = end - rotate(dir_2, -turn) * k2
        else:
            handle_1 = start + dir_1 * k1
            handle_2 = end - dir_2 * k2
        join = CubicSegment(start, handle_1, handle_2, end)

    if kind in (CHAMFER, INVERSE_CHAMFER):
        return add_chamfer_steps(join, end, steps)
    return [join]


def _fillet_chamfer_path(path: Path, satellites: Sequence[NodeSatellite], method: FilletMethod) -> Path:
    curves = path.curves()
    count = len(curves)
    if count == 0:
        return Path(segments=[], closed=path.closed)

    time0 = satellites[0].time(curves[0]) if path.closed else 0.0
    first_time0 = time0
    builder = _PathBuilder(curves[0].point_at(time0))
    closing_skipped = False

    for index, curve_in in enumerate(curves):
        if not path.closed and index == count - 1:
            if time0 < 1:
                tail = curve_in.portion(time0, 1.0).with_initial(builder.final_point)
                if not tail.is_degenerate():
                    builder.append(tail)
            break

        next_index = 0 if index == count - 1 else index + 1
        curve_out = curves[next_index]
        satellite = satellites[next_index]

        distance = satellite.arc_distance(curve_out)
        time1 = max(satellite.time_at(distance, False, curve_in), time0)
        time2 = min(satellite.time(curve_out), 1.0)

        knot_curve_1 = curve_in.portion(time0, time1).with_initial(builder.final_point)
        knot_curve_2 = curve_out.portion(time2, 1.0)
        start_arc_point = knot_curve_1.final_point
        end_arc_point = curve_out.point_at(time2)
        corner_in = curve_in.final_point
        corner_out = curve_out.initial_point

        # Nudge the ray anchors off fully consumed ends so the tangents stay defined.
        ray_start = curve_in.point_at(time1 + GAP_HELPER) if time1 == time0 else start_arc_point
        ray_end = curve_out.point_at(time2 - GAP_HELPER) if time2 == 1 else end_arc_point
        dir_1 = _ray_direction(knot_curve_1, ray_start, corner_in, incoming=True)
        dir_2 = _ray_direction(knot_curve_2, ray_end, corner_out, incoming=False)
        turn = signed_angle(dir_1, dir_2)
        angle = abs(turn)

        if (
            time1 >= 1
            or angle < _ANGLE_EPSILON
            or abs(angle - 2 * math.pi) < _ANGLE_EPSILON
            or curve_in.is_degenerate()
            or curve_out.is_degenerate()
        ):
            remainder = curve_in.portion(time0, 1.0).with_initial(builder.final_point)
            if not remainder.is_degenerate():
                builder.append(remainder)
            time0 = 0.0
            closing_skipped = next_index == 0
            continue

        if not knot_curve_1.is_degenerate():
            builder.append(knot_curve_1)
        elliptical = (curve_in.is_straight() and curve_out.is_straight() and method != "bezier") or method == "arc"
        for segment in _join_segments(
            satellite.type,
            satellite.steps,
            builder.final_point,
            end_arc_point,
            corner_in,
            corner_out,
            dir_1,
            dir_2,
            turn,
            elliptical,
        ):
            builder.append(segment)
        time0 = time2

    if path.closed and closing_skipped and first_time0 > 0:
        head = curves[0].portion(0.0, first_time0)
        if not head.is_degenerate():
            builder.prepend(head)
    return builder.to_path(closed=path.closed)


def fillet_chamfer(
    pathvector: PathVector,
    satellites: PathVectorNodeSatellites | None,
    method: FilletMethod = "auto",
) -> PathVector:
    """Apply every node satellite to its corner and return the new path vector.

    ``pathvector`` must contain only lines and cubics, otherwise
    ``ValidationError`` is raised before any corner is touched. Subpaths whose
    satellite count does not match their node count are passed through.
    The inputs are not modified.
    """
    method = _require_method(method)
    require_linear_and_cubic(pathvector)
    if satellites is None or satellites.get_total_node_satellites() == 0:
        return PathVector(list(pathvector))
    rows = satellites.node_satellites
    paths: List[Path] = []
    for index, path in enumerate(pathvector):
        row = rows[index] if index < len(rows) else []
        if len(row) != path.count_nodes() or len(row) == 0:
            paths.append(path)
            continue
        paths.append(_fillet_chamfer_path(path, row, method))
    return PathVector(paths)


@dataclass
class FilletChamferEffect:
    """Owns the satellites of one shape and applies the corner transform to it.

    ``radius`` is in user units scaled by ``unit_scale`` into path units, or a
    percentage of each curve when ``flexible`` is set.
    """

    radius: float = 0.0
    unit_scale: float = 1.0
    method: FilletMethod = "auto"
    mode: NodeSatelliteType = FILLET
    chamfer_steps: int = 1
    flexible: bool = False
    only_selected: bool = False
    use_knot_distance: bool = True
    hide_knots: bool = False
    apply_no_radius: bool = True
    apply_with_radius: bool = True
    satellites: PathVectorNodeSatellites | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not np.isfinite(self.radius) or self.radius < 0:
            raise ValueError("radius must be >= 0.")
        if not np.isfinite(self.unit_scale) or self.unit_scale <= 0:
            raise ValueError("unit_scale must be positive.")
        if int(self.chamfer_steps) < 1:
            raise ValueError("chamfer_steps must be >= 1.")
        self.method = _require_method(self.method)
        self.mode = satellite_type_from_code(self.mode)

    def power(self) -> float:
        if self.flexible:
            return float(self.radius) / 100.0
        return float(self.radius) * float(self.unit_scale)

    def default_satellite(self) -> NodeSatellite:
        return NodeSatellite(
            type=self.mode,
            amount=self.power(),
            steps=self.chamfer_steps,
            is_time=self.flexible,
            has_mirror=True,
            hidden=self.hide_knots,
        )

    def on_apply(self, pathvector: PathVector) -> None:
        """Create satellites for a shape that has none yet."""
        if self.satellites is None:
            self.satellites = PathVectorNodeSatellites()
        self.satellites.recalculate_for_new_pathvector(pathvector.to_linear_and_cubic(), self.default_satellite())

    def before_effect(self, pathvector: PathVector) -> PathVector:
        """Bring the satellites in line with ``pathvector`` and return the engine input."""
        pathv = pathvector.to_linear_and_cubic()
        if self.satellites is None or self.satellites.get_total_node_satellites() == 0:
            self.on_apply(pathv)
            return pathv
        satellites = self.satellites
        if satellites.get_total_node_satellites() != pathv.count_nodes() or not satellites_match(pathv, satellites):
            satellites.recalculate_for_new_pathvector(pathv, self.default_satellite())
        else:
            satellites.set_pathvector(pathv)
        satellites.convert_is_time(self.flexible)
        satellites.set_hidden(self.hide_knots)
        satellites.zero_open_endpoints()
        return pathv

    def do_effect(self, pathvector: PathVector) -> PathVector:
        pathv = self.before_effect(pathvector)
        return fillet_chamfer(pathv, self.satellites, self.method)

    def update_amount(self) -> None:
        if self.satellites is None:
            return
        self.satellites.update_amount(
            self.power(),
            self.apply_no_radius,
            self.apply_with_radius,
            self.only_selected,
            self.use_knot_distance,
            self.flexible,
        )

    def update_chamfer_steps(self) -> None:
        if self.satellites is None:
            return
        self.satellites.update_steps(self.chamfer_steps, self.apply_no_radius, self.apply_with_radius, self.only_selected)

    def update_node_satellite_type(self, kind: NodeSatelliteType) -> None:
        if self.satellites is None:
            return
        self.mode = satellite_type_from_code(kind)
        self.satellites.update_node_satellite_type(
            self.mode, self.apply_no_radius, self.apply_with_radius, self.only_selected
        )

    def select_nodes(self, points: Sequence[Sequence[float]]) -> None:
        if self.satellites is None:
            return
        self.satellites.select_nodes(points)


__all__ = [
    "FILLET_METHODS",
    "FilletChamferEffect",
    "FilletMethod",
    "K",
    "add_chamfer_steps",
    "fillet_chamfer",
]
