from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

from cornerfx.effects.nodesatellite import (
    CHAMFER,
    FILLET,
    INVALID,
    INVERSE_CHAMFER,
    INVERSE_FILLET,
    NodeSatellite,
    arc_length_at,
    satellite_type_code,
    satellite_type_from_code,
    time_at_arc_length,
)
from cornerfx.modeling.curves import CubicSegment, LineSegment

BOTTOM = LineSegment((0, 0), (10, 0))
RIGHT = LineSegment((10, 0), (10, 10))


def test_type_codes_round_trip():
    for kind, code in (
        (FILLET, "F"),
        (INVERSE_FILLET, "IF"),
        (CHAMFER, "C"),
        (INVERSE_CHAMFER, "IC"),
        (INVALID, "KO"),
    ):
        assert satellite_type_code(kind) == code
        assert satellite_type_from_code(code) == kind
    assert satellite_type_from_code("Chamfer") == CHAMFER


def test_unknown_type_rejected():
    with pytest.raises(ValueError):
        satellite_type_from_code("X")
    with pytest.raises(ValueError):
        NodeSatellite(type="round")


def test_setters_clamp_values():
    sat = NodeSatellite()
    sat.set_amount(-2.0)
    assert sat.amount == 0.0
    sat.set_amount(float("inf"))
    assert sat.amount == 0.0
    sat.set_steps(0)
    assert sat.steps == 1
    sat.set_type(INVERSE_CHAMFER)
    assert sat.type_code() == "IC"


def test_satellite_fields_match_persisted_record():
    names = [field.name for field in dataclasses.fields(NodeSatellite)]
    assert names == ["type", "amount", "steps", "is_time", "has_mirror", "hidden", "selected"]


def test_copy_is_independent():
    sat = NodeSatellite(amount=2.0)
    other = sat.copy()
    other.set_amount(5.0)
    assert sat.amount == 2.0


def test_time_from_distance():
    sat = NodeSatellite(amount=3.0)
    assert sat.time(BOTTOM) == pytest.approx(0.3)
    assert sat.time(BOTTOM, inverse=True) == pytest.approx(0.7)


def test_time_from_time_amount():
    sat = NodeSatellite(amount=0.25, is_time=True)
    assert sat.time(BOTTOM) == pytest.approx(0.25)
    assert sat.time(BOTTOM, inverse=True) == pytest.approx(0.75)
    assert sat.arc_distance(BOTTOM) == pytest.approx(2.5)


def test_over_long_distance_clamps():
    sat = NodeSatellite(amount=50.0)
    assert sat.time(BOTTOM) == 1.0
    assert sat.time_at(50.0, False, BOTTOM) == 0.0


def test_time_at_zero_distance():
    sat = NodeSatellite()
    assert sat.time_at(0.0, True, BOTTOM) == 0.0
    assert sat.time_at(0.0, False, BOTTOM) == 1.0


def test_arc_length_helpers_on_degenerate_curve():
    point = LineSegment((1, 1), (1, 1))
    assert time_at_arc_length(3.0, point) == 0.0
    assert arc_length_at(0.5, point) == 0.0
    assert arc_length_at(1.0, BOTTOM) == pytest.approx(10.0)


def test_position_and_set_position():
    sat = NodeSatellite(amount=4.0)
    assert np.allclose(sat.position(BOTTOM), [4.0, 0.0])
    sat.set_position((6.0, 1.0), BOTTOM)
    assert sat.amount == pytest.approx(6.0)
    sat.set_position((6.0, 1.0), BOTTOM, inverse=True)
    assert sat.amount == pytest.approx(4.0)
    timed = NodeSatellite(is_time=True)
    timed.set_position((2.0, -1.0), BOTTOM)
    assert timed.amount == pytest.approx(0.2)


def test_rad_to_len_right_angle():
    sat = NodeSatellite()
    assert sat.rad_to_len(2.0, BOTTOM, RIGHT) == pytest.approx(2.0)
    assert sat.rad_to_len(0.0, BOTTOM, RIGHT) == 0.0


def test_rad_to_len_obtuse_corner():
    diagonal = LineSegment((10, 0), (10 + 10 * math.cos(math.pi / 3), 10 * math.sin(math.pi / 3)))
    sat = NodeSatellite()
    assert sat.rad_to_len(2.0, BOTTOM, diagonal) == pytest.approx(2.0 * math.tan(math.pi / 6))


def test_rad_to_len_straight_corner_is_zero():
    ahead = LineSegment((10, 0), (20, 0))
    assert NodeSatellite().rad_to_len(3.0, BOTTOM, ahead) == 0.0


def test_rad_to_len_clamped_to_outgoing_curve():
    short = LineSegment((10, 0), (10, 1))
    assert NodeSatellite().rad_to_len(5.0, BOTTOM, short) == pytest.approx(1.0)


def test_rad_to_len_on_curved_neighbour_uses_corner_tangents():
    bend = CubicSegment((10, 0), (10, 5), (5, 10), (0, 10))
    assert NodeSatellite().rad_to_len(2.0, BOTTOM, bend) == pytest.approx(2.0)


def test_len_to_rad_right_angle():
    sat = NodeSatellite()
    assert sat.len_to_rad(3.0, BOTTOM, RIGHT) == pytest.approx(3.0)


def test_time_on_cubic_uses_arc_length():
    curve = CubicSegment((0, 0), (0, 5), (10, 5), (10, 0))
    sat = NodeSatellite(amount=curve.length() / 2)
    t = sat.time(curve)
    assert t == pytest.approx(0.5, abs=1e-6)
