from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence

import numpy as np

from .curves import (
    EllipticalArc,
    LineSegment,
    Segment,
    _require_vec2,
    are_near,
)


@dataclass
class Path:
    """One subpath: an ordered run of segments, optionally closed.

    A closed path whose last segment does not return to its first point is
    closed by an implicit straight line, exactly like SVG ``Z``.
    """

    segments: List[Segment] = field(default_factory=list)
    closed: bool = False

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: bool = True) -> "Path":
        pts = [_require_vec2(p, "point") for p in points]
        if len(pts) < 2:
            raise ValueError("Path requires at least two points.")
        if closed and len(pts) > 2 and np.allclose(pts[0], pts[-1]):
            pts = pts[:-1]
        segments: List[Segment] = [LineSegment(pts[i], pts[i + 1]) for i in range(len(pts) - 1)]
        if closed and not np.allclose(pts[0], pts[-1]):
            segments.append(LineSegment(pts[-1], pts[0]))
        return cls(segments=segments, closed=closed)

    @property
    def initial_point(self) -> np.ndarray:
        if not self.segments:
            raise ValueError("Path has no segments.")
        return self.segments[0].initial_point

    @property
    def final_point(self) -> np.ndarray:
        if not self.segments:
            raise ValueError("Path has no segments.")
        return self.segments[-1].final_point

    def curves(self) -> List[Segment]:
        """Segments including the implicit closing line of a closed path."""
        curves = list(self.segments)
        if self.closed and curves and not are_near(curves[-1].final_point, curves[0].initial_point):
            curves.append(LineSegment(curves[-1].final_point, curves[0].initial_point))
        return curves

    def count_curves(self) -> int:
        return len(self.curves())

    def count_nodes(self) -> int:
        """Number of nodes: one per curve when closed, one extra endpoint when open."""
        curves = self.count_curves()
        if curves == 0:
            return 0
        return curves if self.closed else curves + 1

    def node_points(self) -> List[np.ndarray]:
        curves = self.curves()
        points = [curve.initial_point for curve in curves]
        if curves and not self.closed:
            points.append(curves[-1].final_point)
        return points

    def to_linear_and_cubic(self) -> "Path":
        """Return a copy where every elliptical arc is replaced by cubic Beziers."""
        segments: List[Segment] = []
        for segment in self.segments:
            if isinstance(segment, EllipticalArc):
                segments.extend(segment.to_cubics())
            else:
                segments.append(segment)
        return Path(segments=segments, closed=self.closed)

    def length(self) -> float:
        return float(sum(curve.length() for curve in self.curves()))

    def sample(
        self,
        segments_per_circle: int = 64,
        bezier_samples: int = 32,
    ) -> np.ndarray:
        curves = self.curves()
        if not curves:
            return np.zeros((0, 2), dtype=float)
        points = []
        for idx, segment in enumerate(curves):
            if isinstance(segment, LineSegment):
                seg_points = segment.sample()
            elif isinstance(segment, EllipticalArc):
                seg_points = segment.sample(segments_per_circle)
            else:
                seg_points = segment.sample(bezier_samples)
            if idx > 0 and seg_points.shape[0] > 0:
                seg_points = seg_points[1:]
            points.append(seg_points)
        return np.vstack(points)

    def to_polyline(self, z: float = 0.0, segments_per_circle: int = 64, bezier_samples: int = 32):
        """Return the sampled path as a ``pyvista.PolyData`` line."""
        import pyvista as pv

        pts = self.sample(segments_per_circle=segments_per_circle, bezier_samples=bezier_samples)
        pts3 = np.column_stack([pts, np.full((pts.shape[0], 1), float(z))])
        n_pts = pts3.shape[0]
        ids = np.arange(n_pts)
        if self.closed and n_pts > 2 and np.allclose(pts3[0], pts3[-1]):
            ids[-1] = 0
        cells = np.hstack(([n_pts], ids))
        return pv.PolyData(pts3, lines=cells)


@dataclass
class PathVector:
    """Ordered collection of subpaths."""

    paths: List[Path] = field(default_factory=list)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __getitem__(self, index: int) -> Path:
        return self.paths[index]

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: bool = True) -> "PathVector":
        return cls([Path.from_points(points, closed=closed)])

    def count_nodes(self) -> int:
        return sum(path.count_nodes() for path in self.paths)

    def count_curves(self) -> int:
        return sum(path.count_curves() for path in self.paths)

    def sample(self, segments_per_circle: int = 64, bezier_samples: int = 32) -> List[np.ndarray]:
        return [path.sample(segments_per_circle, bezier_samples) for path in self.paths]

    def to_linear_and_cubic(self) -> "PathVector":
        return PathVector([path.to_linear_and_cubic() for path in self.paths])

    def to_polydata(self, z: float = 0.0, segments_per_circle: int = 64, bezier_samples: int = 32):
        """Merge every subpath into one ``pyvista.PolyData`` with a line cell per subpath."""
        import pyvista as pv

        points = []
        cells = []
        offset = 0
        for path in self.paths:
            pts = path.sample(segments_per_circle=segments_per_circle, bezier_samples=bezier_samples)
            if pts.shape[0] < 2:
                continue
            points.append(np.column_stack([pts, np.full((pts.shape[0], 1), float(z))]))
            ids = np.arange(offset, offset + pts.shape[0])
            if path.closed and pts.shape[0] > 2 and np.allclose(pts[0], pts[-1]):
                ids[-1] = offset
            cells.append(np.hstack(([pts.shape[0]], ids)))
            offset += pts.shape[0]
        if not points:
            return pv.PolyData()
        return pv.PolyData(np.vstack(points), lines=np.hstack(cells))


__all__ = ["Path", "PathVector"]
