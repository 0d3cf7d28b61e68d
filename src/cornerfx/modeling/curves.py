from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from cornerfx.cache import LRUCache

EPSILON = 1e-9

# 16-point Gauss-Legendre rule, applied piecewise for cubic arc length.
_GL_NODES, _GL_WEIGHTS = np.polynomial.legendre.leggauss(16)
_GL_PIECES = 4
_LENGTH_CACHE: LRUCache[tuple[float, ...], float] = LRUCache(max_size=2048)


def _to_vec2(value: Sequence[float]) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(2)


def _require_vec2(value: Sequence[float], label: str) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float).reshape(2)
    except Exception as exc:
        raise ValueError(f"{label} must be a 2D coordinate.") from exc
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{label} must be finite.")
    return arr


def cross(a: np.ndarray, b: np.ndarray) -> float:
    """Z component of the 2D cross product (positive for a counter-clockwise turn)."""
    return float(a[0] * b[1] - a[1] * b[0])


def signed_angle(a: np.ndarray, b: np.ndarray) -> float:
    """Signed angle in radians that rotates direction ``a`` onto ``b``, in (-pi, pi]."""
    return float(math.atan2(cross(a, b), float(np.dot(a, b))))


def rotate(vector: np.ndarray, angle: float) -> np.ndarray:
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([c * vector[0] - s * vector[1], s * vector[0] + c * vector[1]])


def unit(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    if norm < EPSILON * EPSILON:
        return np.zeros(2, dtype=float)
    return vector / norm


def are_near(a: np.ndarray, b: np.ndarray, eps: float = 1e-6) -> bool:
    return bool(np.linalg.norm(np.asarray(a) - np.asarray(b)) <= eps)


@dataclass(frozen=True)
class LineSegment:
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _require_vec2(self.start, "start"))
        object.__setattr__(self, "end", _require_vec2(self.end, "end"))

    @property
    def initial_point(self) -> np.ndarray:
        return self.start

    @property
    def final_point(self) -> np.ndarray:
        return self.end

    def point_at(self, t: float) -> np.ndarray:
        return (1.0 - t) * self.start + t * self.end

    def derivative_at(self, t: float) -> np.ndarray:
        return self.end - self.start

    def unit_tangent_at(self, t: float) -> np.ndarray:
        return unit(self.end - self.start)

    def portion(self, t0: float, t1: float) -> "LineSegment":
        return LineSegment(self.point_at(t0), self.point_at(t1))

    def reversed(self) -> "LineSegment":
        return LineSegment(self.end, self.start)

    def with_initial(self, point: Sequence[float]) -> "LineSegment":
        return LineSegment(point, self.end)

    def with_final(self, point: Sequence[float]) -> "LineSegment":
        return LineSegment(self.start, point)

    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    def length_at(self, t: float) -> float:
        return self.length() * float(np.clip(t, 0.0, 1.0))

    def time_at_length(self, s: float) -> float:
        total = self.length()
        if total <= EPSILON:
            return 0.0
        return float(np.clip(s / total, 0.0, 1.0))

    def nearest_time(self, point: Sequence[float]) -> float:
        delta = self.end - self.start
        denom = float(np.dot(delta, delta))
        if denom <= EPSILON * EPSILON:
            return 0.0
        t = float(np.dot(_to_vec2(point) - self.start, delta)) / denom
        return float(np.clip(t, 0.0, 1.0))

    def is_degenerate(self) -> bool:
        return are_near(self.start, self.end, EPSILON)

    def is_straight(self) -> bool:
        return True

    def sample(self) -> np.ndarray:
        return np.vstack([self.start, self.end])


@dataclass(frozen=True)
class CubicSegment:
    p0: np.ndarray
    p1: np.ndarray
    p2: np.ndarray
    p3: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "p0", _require_vec2(self.p0, "p0"))
        object.__setattr__(self, "p1", _require_vec2(self.p1, "p1"))
        object.__setattr__(self, "p2", _require_vec2(self.p2, "p2"))
        object.__setattr__(self, "p3", _require_vec2(self.p3, "p3"))

    @property
    def initial_point(self) -> np.ndarray:
        return self.p0

    @property
    def final_point(self) -> np.ndarray:
        return self.p3

    @property
    def control_points(self) -> np.ndarray:
        return np.vstack([self.p0, self.p1, self.p2, self.p3])

    def point_at(self, t: float) -> np.ndarray:
        mt = 1.0 - t
        return mt**3 * self.p0 + 3 * mt**2 * t * self.p1 + 3 * mt * t**2 * self.p2 + t**3 * self.p3

    def points_at(self, t: np.ndarray) -> np.ndarray:
        t = np.asarray(t, dtype=float).reshape(-1, 1)
        mt = 1.0 - t
        return mt**3 * self.p0 + 3 * mt**2 * t * self.p1 + 3 * mt * t**2 * self.p2 + t**3 * self.p3

    def derivative_at(self, t: float) -> np.ndarray:
        mt = 1.0 - t
        return 3 * (mt**2 * (self.p1 - self.p0) + 2 * mt * t * (self.p2 - self.p1) + t**2 * (self.p3 - self.p2))

    def _speeds(self, t: np.ndarray) -> np.ndarray:
        t = t.reshape(-1, 1)
        mt = 1.0 - t
        d = 3 * (mt**2 * (self.p1 - self.p0) + 2 * mt * t * (self.p2 - self.p1) + t**2 * (self.p3 - self.p2))
        return np.linalg.norm(d, axis=1)

    def unit_tangent_at(self, t: float) -> np.ndarray:
        tangent = unit(self.derivative_at(t))
        if np.any(tangent):
            return tangent
        # Retracted handles: fall back to the next control point that differs.
        if t >= 0.5:
            candidates = (self.p3 - self.p1, self.p3 - self.p0)
        else:
            candidates = (self.p2 - self.p0, self.p3 - self.p0)
        for candidate in candidates:
            tangent = unit(candidate)
            if np.any(tangent):
                return tangent
        return tangent

    def _blossom(self, a: float, b: float, c: float) -> np.ndarray:
        q0 = (1 - a) * self.p0 + a * self.p1
        q1 = (1 - a) * self.p1 + a * self.p2
        q2 = (1 - a) * self.p2 + a * self.p3
        r0 = (1 - b) * q0 + b * q1
        r1 = (1 - b) * q1 + b * q2
        return (1 - c) * r0 + c * r1

    def portion(self, t0: float, t1: float) -> "CubicSegment":
        """Sub-curve between ``t0`` and ``t1`` (reversed when ``t0 > t1``)."""
        return CubicSegment(
            self._blossom(t0, t0, t0),
            self._blossom(t0, t0, t1),
            self._blossom(t0, t1, t1),
            self._blossom(t1, t1, t1),
        )

    def reversed(self) -> "CubicSegment":
        return CubicSegment(self.p3, self.p2, self.p1, self.p0)

    def with_initial(self, point: Sequence[float]) -> "CubicSegment":
        point = _to_vec2(point)
        shift = point - self.p0
        return CubicSegment(point, self.p1 + shift, self.p2, self.p3)

    def with_final(self, point: Sequence[float]) -> "CubicSegment":
        point = _to_vec2(point)
        shift = point - self.p3
        return CubicSegment(self.p0, self.p1, self.p2 + shift, point)

    def _integrate_speed(self, t: float) -> float:
        if t <= 0.0:
            return 0.0
        edges = np.linspace(0.0, t, _GL_PIECES + 1)
        total = 0.0
        for a, b in zip(edges[:-1], edges[1:]):
            half = 0.5 * (b - a)
            nodes = half * _GL_NODES + 0.5 * (a + b)
            total += half * float(np.dot(_GL_WEIGHTS, self._speeds(nodes)))
        return total

    def length(self) -> float:
        key = tuple(float(v) for v in self.control_points.ravel())
        return _LENGTH_CACHE.get_or_compute(key, lambda: self._integrate_speed(1.0))

    def length_at(self, t: float) -> float:
        t = float(np.clip(t, 0.0, 1.0))
        if t >= 1.0:
            return self.length()
        return self._integrate_speed(t)

    def time_at_length(self, s: float) -> float:
        if s <= 0.0:
            return 0.0
        total = self.length()
        if total <= EPSILON or s >= total:
            return 1.0 if total > EPSILON else 0.0
        lo, hi = 0.0, 1.0
        t = s / total
        tolerance = EPSILON * max(total, 1.0)
        for _ in range(40):
            error = self.length_at(t) - s
            if abs(error) <= tolerance:
                break
            if error > 0:
                hi = t
            else:
                lo = t
            speed = float(np.linalg.norm(self.derivative_at(t)))
            candidate = t - error / speed if speed > EPSILON else -1.0
            t = candidate if lo < candidate < hi else 0.5 * (lo + hi)
        return float(t)

    def nearest_time(self, point: Sequence[float]) -> float:
        target = _to_vec2(point)
        ts = np.linspace(0.0, 1.0, 65)
        dists = np.linalg.norm(self.points_at(ts) - target, axis=1)
        t = float(ts[int(np.argmin(dists))])
        for _ in range(8):
            d1 = self.derivative_at(t)
            offset = self.point_at(t) - target
            mt = 1.0 - t
            d2 = 6 * (mt * (self.p2 - 2 * self.p1 + self.p0) + t * (self.p3 - 2 * self.p2 + self.p1))
            denom = float(np.dot(d1, d1) + np.dot(offset, d2))
            if abs(denom) <= EPSILON:
                break
            t = float(np.clip(t - float(np.dot(offset, d1)) / denom, 0.0, 1.0))
        return t

    def is_degenerate(self) -> bool:
        return all(are_near(p, self.p0, EPSILON) for p in (self.p1, self.p2, self.p3))

    def is_straight(self) -> bool:
        """True when every control point lies on the chord line."""
        chord = self.p3 - self.p0
        scale = float(np.linalg.norm(chord))
        if scale <= EPSILON:
            return self.is_degenerate()
        return all(abs(cross(chord, p - self.p0)) / scale <= 1e-6 for p in (self.p1, self.p2))

    def sample(self, samples: int) -> np.ndarray:
        samples = max(int(samples), 2)
        return self.points_at(np.linspace(0.0, 1.0, samples, endpoint=True))


@dataclass(frozen=True)
class EllipticalArc:
    """SVG-style elliptical arc from ``start`` to ``end``.

    ``rotation_deg`` is the x-axis rotation of the ellipse. ``sweep`` selects
    the positive-angle direction, ``large_arc`` the longer of the two
    candidate arcs. Radii that are too small to span the chord are scaled up.
    """

    start: np.ndarray
    end: np.ndarray
    rx: float
    ry: float
    rotation_deg: float = 0.0
    large_arc: bool = False
    sweep: bool = False
    center: np.ndarray = field(init=False, repr=False, compare=False)
    theta1: float = field(init=False, repr=False, compare=False)
    delta_theta: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _require_vec2(self.start, "start"))
        object.__setattr__(self, "end", _require_vec2(self.end, "end"))
        if not (np.isfinite(self.rx) and np.isfinite(self.ry)):
            raise ValueError("radii must be finite.")
        object.__setattr__(self, "rx", abs(float(self.rx)))
        object.__setattr__(self, "ry", abs(float(self.ry)))
        self._parameterize()

    def _parameterize(self) -> None:
        rx, ry = self.rx, self.ry
        if self.is_degenerate() or rx <= EPSILON or ry <= EPSILON:
            object.__setattr__(self, "center", 0.5 * (self.start + self.end))
            object.__setattr__(self, "theta1", 0.0)
            object.__setattr__(self, "delta_theta", 0.0)
            return
        phi = math.radians(self.rotation_deg)
        cos_phi, sin_phi = math.cos(phi), math.sin(phi)
        half = 0.5 * (self.start - self.end)
        x1p = cos_phi * half[0] + sin_phi * half[1]
        y1p = -sin_phi * half[0] + cos_phi * half[1]

        scale = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
        if scale > 1.0:
            rx *= math.sqrt(scale)
            ry *= math.sqrt(scale)
            object.__setattr__(self, "rx", rx)
            object.__setattr__(self, "ry", ry)

        num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
        den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
        coef = math.sqrt(max(num / den, 0.0)) if den > 0 else 0.0
        if self.large_arc == self.sweep:
            coef = -coef
        cxp = coef * rx * y1p / ry
        cyp = -coef * ry * x1p / rx
        mid = 0.5 * (self.start + self.end)
        center = np.array([cos_phi * cxp - sin_phi * cyp + mid[0], sin_phi * cxp + cos_phi * cyp + mid[1]])

        u = np.array([(x1p - cxp) / rx, (y1p - cyp) / ry])
        v = np.array([(-x1p - cxp) / rx, (-y1p - cyp) / ry])
        theta1 = math.atan2(u[1], u[0])
        delta = signed_angle(u, v)
        if self.sweep and delta < 0:
            delta += 2 * math.pi
        elif not self.sweep and delta > 0:
            delta -= 2 * math.pi
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "theta1", theta1)
        object.__setattr__(self, "delta_theta", delta)

    @property
    def initial_point(self) -> np.ndarray:
        return self.start

    @property
    def final_point(self) -> np.ndarray:
        return self.end

    def point_at(self, t: float) -> np.ndarray:
        if self.delta_theta == 0.0:
            return (1.0 - t) * self.start + t * self.end
        if t <= 0.0:
            return self.start.copy()
        if t >= 1.0:
            return self.end.copy()
        theta = self.theta1 + t * self.delta_theta
        local = np.array([self.rx * math.cos(theta), self.ry * math.sin(theta)])
        return self.center + rotate(local, math.radians(self.rotation_deg))

    def is_degenerate(self) -> bool:
        return are_near(self.start, self.end, EPSILON)

    def sample(self, segments_per_circle: int) -> np.ndarray:
        if segments_per_circle < 3:
            raise ValueError("segments_per_circle must be >= 3.")
        span = abs(self.delta_theta)
        steps = max(int(np.ceil(segments_per_circle * (span / (2 * np.pi)))), 2)
        return np.vstack([self.point_at(t) for t in np.linspace(0.0, 1.0, steps, endpoint=True)])

    def length(self) -> float:
        pts = self.sample(256)
        return float(np.linalg.norm(np.diff(pts, axis=0), axis=1).sum())

    def to_cubics(self) -> list[CubicSegment]:
        """Approximate the arc with cubic Beziers spanning at most a quarter turn each."""
        if self.delta_theta == 0.0:
            return [CubicSegment(self.start, self.start, self.end, self.end)]
        count = max(int(math.ceil(abs(self.delta_theta) / (0.5 * math.pi + 0.001))), 1)
        step = self.delta_theta / count
        handle = (4.0 / 3.0) * math.tan(0.25 * step)
        phi = math.radians(self.rotation_deg)

        def to_world(x: float, y: float) -> np.ndarray:
            return self.center + rotate(np.array([self.rx * x, self.ry * y]), phi)

        cubics: list[CubicSegment] = []
        current = self.start
        for idx in range(count):
            a = self.theta1 + idx * step
            b = a + step
            c1 = to_world(math.cos(a) - handle * math.sin(a), math.sin(a) + handle * math.cos(a))
            c2 = to_world(math.cos(b) + handle * math.sin(b), math.sin(b) - handle * math.cos(b))
            target = self.end if idx == count - 1 else to_world(math.cos(b), math.sin(b))
            cubics.append(CubicSegment(current, c1, c2, target))
            current = target
        return cubics


Curve = LineSegment | CubicSegment
Segment = LineSegment | CubicSegment | EllipticalArc


__all__ = [
    "Curve",
    "CubicSegment",
    "EllipticalArc",
    "LineSegment",
    "Segment",
    "are_near",
    "cross",
    "rotate",
    "signed_angle",
    "unit",
]
