from __future__ import annotations

from typing import TYPE_CHECKING

from cornerfx.modeling.curves import CubicSegment, LineSegment
from cornerfx.modeling.path import PathVector

if TYPE_CHECKING:  # pragma: no cover - typing only
    from cornerfx.effects.satellites import PathVectorNodeSatellites


class ValidationError(ValueError):
    """Raised when validation constraints are violated."""


def satellites_match(pathvector: PathVector, satellites: "PathVectorNodeSatellites") -> bool:
    """True when every subpath has exactly one satellite per node."""
    rows = satellites.node_satellites
    if len(rows) != len(pathvector):
        return False
    return all(len(row) == path.count_nodes() for row, path in zip(rows, pathvector))


def require_linear_and_cubic(pathvector: PathVector) -> None:
    """Raise ``ValidationError`` if any curve is not a line or a cubic."""
    for index, path in enumerate(pathvector):
        for curve in path.curves():
            if not isinstance(curve, (LineSegment, CubicSegment)):
                raise ValidationError(
                    f"Subpath {index} contains {type(curve).__name__}; convert arcs with to_linear_and_cubic()."
                )


def validate_satellites(pathvector: PathVector, satellites: "PathVectorNodeSatellites") -> None:
    """Raise ``ValidationError`` unless the satellites can drive the corner engine."""
    require_linear_and_cubic(pathvector)
    rows = satellites.node_satellites
    if len(rows) != len(pathvector):
        raise ValidationError(f"Expected satellites for {len(pathvector)} subpaths, got {len(rows)}.")
    for index, (row, path) in enumerate(zip(rows, pathvector)):
        expected = path.count_nodes()
        if len(row) != expected:
            raise ValidationError(f"Subpath {index} has {expected} nodes but {len(row)} satellites.")
        for sat in row:
            if sat.amount < 0 or sat.steps < 1:
                raise ValidationError(f"Subpath {index} has a satellite with amount < 0 or steps < 1.")
            if sat.is_time and sat.amount > 1:
                raise ValidationError(f"Subpath {index} has a time amount outside [0, 1].")
