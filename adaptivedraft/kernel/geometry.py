"""Core 2D geometry primitives and predicates used by the drafting tools.

Everything here is a pure function of its arguments: no module state is
read or written, so the helpers are safe to call from any tool, the
fillet/offset constructors or host code without coordination.

Angles are radians throughout.  Functions that take an angle also take an
explicit :class:`AngleUnit` so callers holding degrees say so instead of
relying on the magnitude of the value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import acos, atan2, cos, degrees, hypot, isclose, pi, radians, sin, sqrt, tan
from typing import Iterable, Optional, Sequence, Tuple

from ..errors import GeometryDegenerate
from .numeric import DEFAULT_TOLERANCE, TolerancePolicy, clamp

# A single tolerance used throughout the predicates.  Individual
# functions accept optional overrides when tighter/looser tolerances are
# required by callers.
EPSILON: float = DEFAULT_TOLERANCE.linear
TAU: float = 2.0 * pi


class AngleUnit(str, Enum):
    RADIANS = "rad"
    DEGREES = "deg"


@dataclass(frozen=True)
class Vec2:
    """A lightweight immutable 2D vector, also used as a point."""

    x: float
    y: float

    # --- basic arithmetic -------------------------------------------------
    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    # --- vector operations -------------------------------------------------
    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vec2") -> float:
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        return hypot(self.x, self.y)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self, eps: float = EPSILON) -> "Vec2":
        l = self.length()
        if l < eps:
            raise GeometryDegenerate("Cannot normalise near zero-length vector")
        return self / l

    def perpendicular(self) -> "Vec2":
        """Rotate by +90 degrees (left-hand normal)."""
        return Vec2(-self.y, self.x)

    def distance_to(self, other: "Vec2") -> float:
        return (self - other).length()

    def almost_equals(self, other: "Vec2", eps: float = EPSILON) -> bool:
        return isclose(self.x, other.x, abs_tol=eps) and isclose(self.y, other.y, abs_tol=eps)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


Point = Vec2
ORIGIN = Vec2(0.0, 0.0)


# --- Angle helpers --------------------------------------------------------


def to_radians(value: float, unit: AngleUnit = AngleUnit.RADIANS) -> float:
    if AngleUnit(unit) is AngleUnit.DEGREES:
        return radians(value)
    return float(value)


def from_radians(value: float, unit: AngleUnit = AngleUnit.RADIANS) -> float:
    if AngleUnit(unit) is AngleUnit.DEGREES:
        return degrees(value)
    return float(value)


def normalize_angle(theta: float) -> float:
    """Wrap an angle into ``[0, 2π)``."""

    wrapped = theta % TAU
    # ``-1e-17 % TAU`` rounds to TAU itself
    return 0.0 if wrapped >= TAU else wrapped


def signed_angle_delta(start: float, end: float) -> float:
    """Shortest signed rotation from ``start`` to ``end`` in ``(-π, π]``."""

    delta = normalize_angle(end - start)
    if delta > pi:
        delta -= TAU
    return delta


# --- Basic measures -------------------------------------------------------


def distance(a: Vec2, b: Vec2) -> float:
    return (b - a).length()


def angle(a: Vec2, b: Vec2) -> float:
    """Direction of ``b`` seen from ``a``; ``atan2`` range, not wrapped."""

    return atan2(b.y - a.y, b.x - a.x)


def midpoint(a: Vec2, b: Vec2) -> Vec2:
    return Vec2((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def point_from_distance_angle(
    origin: Vec2, dist: float, theta: float, unit: AngleUnit = AngleUnit.RADIANS
) -> Vec2:
    t = to_radians(theta, unit)
    return Vec2(origin.x + dist * cos(t), origin.y + dist * sin(t))


def angle_between(vertex: Vec2, p1: Vec2, p2: Vec2) -> float:
    """Unsigned angle in ``[0, π]`` between the rays vertex→p1 and vertex→p2."""

    v1 = p1 - vertex
    v2 = p2 - vertex
    m1 = v1.length()
    m2 = v2.length()
    if m1 < EPSILON or m2 < EPSILON:
        raise GeometryDegenerate("Angle is undefined for a zero-length ray")
    return acos(clamp(v1.dot(v2) / (m1 * m2), -1.0, 1.0))


def angle_bisector(p1: Vec2, vertex: Vec2, p2: Vec2) -> float:
    """Direction (radians) of the bisector of the angle p1-vertex-p2."""

    u1 = (p1 - vertex).normalized()
    u2 = (p2 - vertex).normalized()
    s = u1 + u2
    if s.length() < EPSILON:
        # Straight angle: the bisector is perpendicular to either ray
        return atan2(u1.x, -u1.y)
    return atan2(s.y, s.x)


# --- Geometric predicates -------------------------------------------------


def orientation(a: Vec2, b: Vec2, c: Vec2) -> float:
    """Signed area (twice) of the triangle ABC."""

    return (b - a).cross(c - a)


def is_colinear(a: Vec2, b: Vec2, c: Vec2, eps: float = EPSILON) -> bool:
    return abs(orientation(a, b, c)) <= eps


def distance_point_to_line(p: Vec2, a: Vec2, b: Vec2) -> float:
    """Distance from point ``p`` to the infinite line AB."""

    ab = b - a
    area2 = abs(ab.cross(p - a))
    length = ab.length()
    if length < EPSILON:
        return p.distance_to(a)
    return area2 / length


def perpendicular_foot(p: Vec2, a: Vec2, b: Vec2) -> Vec2:
    """Projection of ``p`` onto the infinite line AB."""

    ab = b - a
    denom = ab.dot(ab)
    if denom <= EPSILON:
        return a
    return a + ab * ((p - a).dot(ab) / denom)


def closest_point_on_segment(p: Vec2, a: Vec2, b: Vec2) -> Vec2:
    ab = b - a
    denom = ab.dot(ab)
    if denom <= EPSILON:
        return a
    t = (p - a).dot(ab) / denom
    t = max(0.0, min(1.0, t))
    return a + ab * t


def distance_point_to_segment(p: Vec2, a: Vec2, b: Vec2) -> float:
    """Distance to segment AB; projections outside AB snap to the nearer end."""

    return p.distance_to(closest_point_on_segment(p, a, b))


def segment_parameter(p: Vec2, a: Vec2, b: Vec2) -> float:
    """Parameter ``t`` of the projection of ``p`` on AB (0 at a, 1 at b)."""

    ab = b - a
    denom = ab.dot(ab)
    if denom <= EPSILON:
        return 0.0
    return (p - a).dot(ab) / denom


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """Even-odd ray casting test.

    Edges are treated half-open: a ray cast towards +x counts an edge when
    its y-span contains the point with the lower end inclusive.  For
    boundary points this puts the left and bottom edges inside and the
    right and top edges outside, the same answer every time.
    """

    n = len(polygon)
    if n < 3:
        return False
    inside = False
    j = n - 1
    for i in range(n):
        pi_, pj = polygon[i], polygon[j]
        if (pi_.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi_.x) * (point.y - pi_.y) / (pj.y - pi_.y) + pi_.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


# --- Intersection helpers -------------------------------------------------


def _clip_projection(t: float, eps: float = EPSILON) -> bool:
    return -eps <= t <= 1.0 + eps


def line_intersection(
    a0: Vec2,
    a1: Vec2,
    b0: Vec2,
    b1: Vec2,
    *,
    bounded: bool = True,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> Optional[Vec2]:
    """Intersection of AB with CD, or ``None``.

    Parallel and collinear inputs give ``None``.  With ``bounded`` the hit
    must lie on both segments; otherwise the infinite lines are used.
    """

    r = a1 - a0
    s = b1 - b0
    denom = r.cross(s)
    scale = r.length() * s.length()
    if scale <= tol.linear or abs(denom) <= tol.angular * scale:
        return None
    qp = b0 - a0
    t = qp.cross(s) / denom
    u = qp.cross(r) / denom
    if bounded and not (_clip_projection(t, tol.parametric) and _clip_projection(u, tol.parametric)):
        return None
    return a0 + r * t


def line_circle_intersection(
    a: Vec2, b: Vec2, center: Vec2, radius: float, eps: float = EPSILON
) -> Tuple[Vec2, ...]:
    """Intersections of segment AB with a circle: 0, 1 (tangent) or 2 points."""

    direction = b - a
    if direction.length() < eps:
        return tuple()
    foot = perpendicular_foot(center, a, b)
    h = center.distance_to(foot)
    band = eps * max(1.0, radius)
    if h > radius + band:
        return tuple()
    if abs(h - radius) <= band:
        candidates: Tuple[Vec2, ...] = (foot,)
    else:
        half_chord = sqrt(radius * radius - h * h)
        u = direction.normalized()
        candidates = (foot - u * half_chord, foot + u * half_chord)
    return tuple(pt for pt in candidates if _clip_projection(segment_parameter(pt, a, b), eps))


def tangent_points_from_external_point(
    point: Vec2, center: Vec2, radius: float
) -> Optional[Tuple[Vec2, Vec2]]:
    """The two points where tangents from ``point`` touch the circle.

    ``None`` when the point lies inside or on the circle.
    """

    d = point.distance_to(center)
    if d <= radius:
        return None
    phi = angle(center, point)
    alpha = acos(radius / d)
    return (
        point_from_distance_angle(center, radius, phi + alpha),
        point_from_distance_angle(center, radius, phi - alpha),
    )


# --- Polylines and polygons -----------------------------------------------


def polyline_length(points: Iterable[Vec2], closed: bool = False) -> float:
    total = 0.0
    first: Optional[Vec2] = None
    prev: Optional[Vec2] = None
    for pt in points:
        if prev is not None:
            total += prev.distance_to(pt)
        else:
            first = pt
        prev = pt
    if closed and first is not None and prev is not None:
        total += prev.distance_to(first)
    return total


def polygon_signed_area(points: Sequence[Vec2]) -> float:
    """Shoelace formula; positive for counter-clockwise vertex order."""

    n = len(points)
    if n < 3:
        return 0.0
    acc = 0.0
    for i in range(n):
        p, q = points[i], points[(i + 1) % n]
        acc += p.x * q.y - q.x * p.y
    return acc / 2.0


def polygon_area(points: Sequence[Vec2]) -> float:
    return abs(polygon_signed_area(points))


def polygon_perimeter(points: Sequence[Vec2]) -> float:
    return polyline_length(points, closed=True)


def fillet_tangent_distance(radius: float, theta: float) -> float:
    """Distance from a corner to the tangent points of a fillet of ``radius``."""

    return radius / tan(theta / 2.0)


__all__ = [
    "EPSILON",
    "TAU",
    "AngleUnit",
    "Vec2",
    "Point",
    "ORIGIN",
    "to_radians",
    "from_radians",
    "normalize_angle",
    "signed_angle_delta",
    "distance",
    "angle",
    "midpoint",
    "point_from_distance_angle",
    "angle_between",
    "angle_bisector",
    "orientation",
    "is_colinear",
    "distance_point_to_line",
    "perpendicular_foot",
    "closest_point_on_segment",
    "distance_point_to_segment",
    "segment_parameter",
    "point_in_polygon",
    "line_intersection",
    "line_circle_intersection",
    "tangent_points_from_external_point",
    "polyline_length",
    "polygon_signed_area",
    "polygon_area",
    "polygon_perimeter",
    "fillet_tangent_distance",
]
