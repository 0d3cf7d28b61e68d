"""Rounded square example."""

from __future__ import annotations

from cornerfx.effects import FilletChamferEffect
from cornerfx.modeling import PathVector


def build():
    square = PathVector.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)
    effect = FilletChamferEffect(radius=3.0)
    return [square, effect.do_effect(square)]
