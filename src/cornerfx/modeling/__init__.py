"""Modeling utilities: curve primitives and path containers."""

from __future__ import annotations

from .curves import CubicSegment, EllipticalArc, LineSegment
from .path import Path, PathVector

__all__ = [
    "LineSegment",
    "CubicSegment",
    "EllipticalArc",
    "Path",
    "PathVector",
]
