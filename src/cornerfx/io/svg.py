"""SVG path data (the ``d`` attribute) to and from ``PathVector``."""

from __future__ import annotations

import re
from typing import List

import numpy as np

from cornerfx.modeling.curves import CubicSegment, EllipticalArc, LineSegment, Segment, are_near
from cornerfx.modeling.path import Path, PathVector

_COMMAND_RE = re.compile(r"[MmZzLlHhVvCcSsQqTtAa]")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_FLAG_RE = re.compile(r"[01]")
_SEPARATOR_RE = re.compile(r"[\s,]*")


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _skip(self) -> None:
        self.pos = _SEPARATOR_RE.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        self._skip()
        return self.pos >= len(self.text)

    def command(self) -> str | None:
        self._skip()
        match = _COMMAND_RE.match(self.text, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return match.group()

    def number(self) -> float:
        self._skip()
        match = _NUMBER_RE.match(self.text, self.pos)
        if match is None:
            raise ValueError(f"Expected a number at offset {self.pos} in path data.")
        self.pos = match.end()
        return float(match.group())

    def flag(self) -> bool:
        self._skip()
        match = _FLAG_RE.match(self.text, self.pos)
        if match is None:
            raise ValueError(f"Expected an arc flag at offset {self.pos} in path data.")
        self.pos = match.end()
        return match.group() == "1"


def _quadratic_to_cubic(p0: np.ndarray, q: np.ndarray, p2: np.ndarray) -> CubicSegment:
    return CubicSegment(p0, p0 + (2.0 / 3.0) * (q - p0), p2 + (2.0 / 3.0) * (q - p2), p2)


def parse_path_data(d: str) -> PathVector:
    """Parse SVG path data into a ``PathVector`` of lines and cubics.

    Quadratic segments are elevated to cubics and elliptical arcs are
    approximated with cubics. Raises ``ValueError`` on malformed data.
    """
    scanner = _Scanner(d)
    paths: List[Path] = []
    segments: List[Segment] = []
    current = np.zeros(2)
    subpath_start = np.zeros(2)
    last_control: np.ndarray | None = None
    last_quad: np.ndarray | None = None
    command: str | None = None

    def finish(close: bool) -> None:
        nonlocal segments
        if segments:
            paths.append(Path(segments=segments, closed=close))
        segments = []

    while not scanner.at_end():
        token = scanner.command()
        if token is None:
            if command is None or command in "Zz":
                raise ValueError(f"Unexpected data at offset {scanner.pos} in path data.")
        elif command is None and token not in "Mm":
            raise ValueError("Path data must start with a moveto.")
        else:
            command = token
        relative = command.islower()
        key = command.lower()
        origin = current if relative else np.zeros(2)

        if key == "z":
            finish(True)
            current = subpath_start.copy()
            last_control = last_quad = None
            continue

        def point() -> np.ndarray:
            return origin + np.array([scanner.number(), scanner.number()])

        if key == "m":
            finish(False)
            current = point()
            subpath_start = current.copy()
            # Coordinate pairs after a moveto are implicit linetos.
            command = "l" if relative else "L"
            last_control = last_quad = None
            continue
        if key == "l":
            end = point()
            segments.append(LineSegment(current, end))
            control = quad = None
        elif key == "h":
            x = scanner.number() + (current[0] if relative else 0.0)
            end = np.array([x, current[1]])
            segments.append(LineSegment(current, end))
            control = quad = None
        elif key == "v":
            y = scanner.number() + (current[1] if relative else 0.0)
            end = np.array([current[0], y])
            segments.append(LineSegment(current, end))
            control = quad = None
        elif key == "c":
            c1, c2, end = point(), point(), point()
            segments.append(CubicSegment(current, c1, c2, end))
            control, quad = c2, None
        elif key == "s":
            c1 = 2 * current - last_control if last_control is not None else current.copy()
            c2, end = point(), point()
            segments.append(CubicSegment(current, c1, c2, end))
            control, quad = c2, None
        elif key == "q":
            q, end = point(), point()
            segments.append(_quadratic_to_cubic(current, q, end))
            control, quad = None, q
        elif key == "t":
            q = 2 * current - last_quad if last_quad is not None else current.copy()
            end = point()
            segments.append(_quadratic_to_cubic(current, q, end))
            control, quad = None, q
        else:
            rx, ry, rotation = scanner.number(), scanner.number(), scanner.number()
            large_arc, sweep = scanner.flag(), scanner.flag()
            end = point()
            if abs(rx) <= 0 or abs(ry) <= 0:
                segments.append(LineSegment(current, end))
            elif not are_near(current, end, 1e-12):
                segments.extend(EllipticalArc(current, end, rx, ry, rotation, large_arc, sweep).to_cubics())
            control = quad = None

        current = end
        last_control, last_quad = control, quad

    finish(False)
    return PathVector(paths)


def _fmt(value: float) -> str:
    text = f"{float(value):.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _pt(point: np.ndarray) -> str:
    return f"{_fmt(point[0])},{_fmt(point[1])}"


def format_path_data(pathvector: PathVector) -> str:
    """Write ``pathvector`` as SVG path data using M, L, C, A and Z."""
    parts: List[str] = []
    for path in pathvector:
        segments = list(path.segments)
        if not segments:
            continue
        if (
            path.closed
            and len(segments) > 1
            and isinstance(segments[-1], LineSegment)
            and are_near(segments[-1].final_point, segments[0].initial_point)
        ):
            segments = segments[:-1]
        parts.append(f"M {_pt(segments[0].initial_point)}")
        for segment in segments:
            if isinstance(segment, LineSegment):
                parts.append(f"L {_pt(segment.end)}")
            elif isinstance(segment, CubicSegment):
                parts.append(f"C {_pt(segment.p1)} {_pt(segment.p2)} {_pt(segment.p3)}")
            else:
                parts.append(
                    f"A {_fmt(segment.rx)},{_fmt(segment.ry)} {_fmt(segment.rotation_deg)} "
                    f"{int(segment.large_arc)},{int(segment.sweep)} {_pt(segment.end)}"
                )
        if path.closed:
            parts.append("Z")
    return " ".join(parts)


__all__ = ["format_path_data", "parse_path_data"]
