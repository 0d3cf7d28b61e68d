"""Example cornerfx model: a tab outline with mixed corner types."""

from __future__ import annotations

from cornerfx.effects import CHAMFER, INVERSE_FILLET, FilletChamferEffect
from cornerfx.modeling import PathVector


def build():
    """Fillet every corner, then chamfer the two top ones and scoop the base."""

    outline = PathVector.from_points([(0, 0), (30, 0), (30, 12), (22, 20), (8, 20), (0, 12)], closed=True)
    effect = FilletChamferEffect(radius=2.5)
    effect.on_apply(outline)
    sats = effect.satellites.node_satellites[0]
    sats[3].set_type(CHAMFER)
    sats[4].set_type(CHAMFER)
    sats[0].set_type(INVERSE_FILLET)
    return effect.do_effect(outline)
