"""Corner effects: node satellites and the fillet/chamfer transform."""

from __future__ import annotations

from .nodesatellite import (
    CHAMFER,
    FILLET,
    INVALID,
    INVERSE_CHAMFER,
    INVERSE_FILLET,
    NodeSatellite,
    NodeSatelliteType,
)
from .satellites import PathVectorNodeSatellites
from .fillet_chamfer import FilletChamferEffect, FilletMethod, fillet_chamfer

__all__ = [
    "FILLET",
    "INVERSE_FILLET",
    "CHAMFER",
    "INVERSE_CHAMFER",
    "INVALID",
    "NodeSatellite",
    "NodeSatelliteType",
    "PathVectorNodeSatellites",
    "FilletChamferEffect",
    "FilletMethod",
    "fillet_chamfer",
]
