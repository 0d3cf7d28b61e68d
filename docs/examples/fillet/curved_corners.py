"""Fillets between cubic curves, drawn as beziers."""

from __future__ import annotations

from cornerfx.effects import FilletChamferEffect
from cornerfx.io import parse_path_data


def build():
    shape = parse_path_data("M 0,0 C 4,-3 8,-3 12,0 L 12,8 Q 6,14 0,8 Z")
    effect = FilletChamferEffect(radius=2.0, method="bezier")
    return [shape, effect.do_effect(shape)]
