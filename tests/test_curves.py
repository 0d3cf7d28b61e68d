from __future__ import annotations

import math

import numpy as np
import pytest

from cornerfx.modeling.curves import (
    CubicSegment,
    EllipticalArc,
    LineSegment,
    rotate,
    signed_angle,
)
from cornerfx.modeling.path import Path, PathVector

K = (4.0 / 3.0) * (math.sqrt(2.0) - 1.0)


def _quarter_circle() -> CubicSegment:
    return CubicSegment((1, 0), (1, K), (K, 1), (0, 1))


def test_line_segment_portion_and_length():
    line = LineSegment((0, 0), (10, 0))
    part = line.portion(0.25, 0.75)
    assert np.allclose(part.start, [2.5, 0])
    assert np.allclose(part.end, [7.5, 0])
    assert line.length() == pytest.approx(10.0)
    assert line.time_at_length(4.0) == pytest.approx(0.4)
    assert line.time_at_length(40.0) == pytest.approx(1.0)


def test_line_segment_invalid_coordinate():
    with pytest.raises(ValueError):
        LineSegment((0, 0, 0), (1, 1))
    with pytest.raises(ValueError):
        LineSegment((0, float("nan")), (1, 1))


def test_cubic_length_matches_quarter_circle():
    curve = _quarter_circle()
    assert curve.length() == pytest.approx(math.pi / 2, rel=1e-3)


def test_cubic_time_at_length_inverts_length_at():
    curve = CubicSegment((0, 0), (2, 5), (6, -3), (10, 2))
    for t in (0.1, 0.35, 0.8):
        s = curve.length_at(t)
        assert curve.time_at_length(s) == pytest.approx(t, abs=1e-6)
    assert curve.time_at_length(curve.length() * 2) == 1.0
    assert curve.time_at_length(-1.0) == 0.0


def test_cubic_portion_endpoints_and_reverse():
    curve = CubicSegment((0, 0), (2, 5), (6, -3), (10, 2))
    part = curve.portion(0.2, 0.6)
    assert np.allclose(part.initial_point, curve.point_at(0.2))
    assert np.allclose(part.final_point, curve.point_at(0.6))
    assert np.allclose(part.point_at(0.5), curve.point_at(0.4))
    backwards = curve.portion(0.6, 0.2)
    assert np.allclose(backwards.initial_point, curve.point_at(0.6))


def test_cubic_straightness_and_degeneracy():
    assert CubicSegment((0, 0), (1, 0), (2, 0), (3, 0)).is_straight()
    assert not _quarter_circle().is_straight()
    assert CubicSegment((1, 1), (1, 1), (1, 1), (1, 1)).is_degenerate()


def test_cubic_retracted_handles_have_tangent():
    curve = CubicSegment((0, 0), (0, 0), (10, 0), (10, 10))
    assert np.allclose(curve.unit_tangent_at(0.0), [1, 0])


def test_cubic_nearest_time():
    curve = CubicSegment((0, 0), (10 / 3, 0), (20 / 3, 0), (10, 0))
    assert curve.nearest_time((4, 3)) == pytest.approx(0.4, abs=1e-6)


def test_signed_angle_and_rotate():
    assert signed_angle(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(math.pi / 2)
    assert signed_angle(np.array([1.0, 0.0]), np.array([0.0, -1.0])) == pytest.approx(-math.pi / 2)
    assert np.allclose(rotate(np.array([1.0, 0.0]), math.pi / 2), [0, 1])


def test_elliptical_arc_center_and_cubics():
    arc = EllipticalArc((10, 0), (0, 10), 10, 10, 0, large_arc=False, sweep=True)
    assert np.allclose(arc.center, [0, 0])
    assert np.linalg.norm(arc.point_at(0.5)) == pytest.approx(10.0)
    cubics = arc.to_cubics()
    assert len(cubics) == 1
    assert np.allclose(cubics[-1].final_point, [0, 10])
    assert np.linalg.norm(cubics[0].point_at(0.5)) == pytest.approx(10.0, rel=1e-3)


def test_elliptical_arc_scales_small_radii():
    arc = EllipticalArc((0, 0), (10, 0), 1, 1)
    assert arc.rx == pytest.approx(5.0)
    assert arc.length() == pytest.approx(5 * math.pi, rel=1e-3)


def test_path_closed_adds_implicit_closing_curve():
    path = Path(segments=[LineSegment((0, 0), (10, 0)), LineSegment((10, 0), (10, 10))], closed=True)
    curves = path.curves()
    assert len(curves) == 3
    assert np.allclose(curves[-1].final_point, [0, 0])
    assert path.count_nodes() == 3


def test_path_open_node_count():
    path = Path.from_points([(0, 0), (10, 0), (10, 10)], closed=False)
    assert path.count_curves() == 2
    assert path.count_nodes() == 3
    assert len(path.node_points()) == 3


def test_path_requires_two_points():
    with pytest.raises(ValueError):
        Path.from_points([(0, 0)], closed=False)


def test_pathvector_to_linear_and_cubic_replaces_arcs():
    arc = EllipticalArc((10, 0), (-10, 0), 10, 10, 0, large_arc=False, sweep=True)
    pathv = PathVector([Path(segments=[arc], closed=False)])
    converted = pathv.to_linear_and_cubic()
    assert all(isinstance(segment, CubicSegment) for segment in converted[0].segments)
    assert len(converted[0].segments) == 2


def test_pathvector_to_polydata(square):
    poly = square.to_polydata()
    assert poly.n_points > 0
    assert poly.n_lines == 1
    assert np.allclose(poly.points[:, 2], 0.0)
