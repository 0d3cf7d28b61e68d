"""Stepped chamfers on an open polyline."""

from __future__ import annotations

from cornerfx.effects import CHAMFER, INVERSE_CHAMFER, FilletChamferEffect
from cornerfx.modeling import PathVector


def build():
    zigzag = PathVector.from_points([(0, 0), (10, 0), (10, 10), (20, 10), (20, 0)], closed=False)
    chamfer = FilletChamferEffect(radius=3.0, mode=CHAMFER, chamfer_steps=3)
    inverse = FilletChamferEffect(radius=2.0, mode=INVERSE_CHAMFER, chamfer_steps=2)
    return [zigzag, chamfer.do_effect(zigzag), inverse.do_effect(zigzag)]
