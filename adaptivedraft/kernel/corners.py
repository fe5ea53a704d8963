"""Fillet and chamfer construction between two lines or along a polyline.

The two input lines do not need to touch.  Their corner ends are taken to
be the closest pair of endpoints and the corner itself is the intersection
of the two infinite lines, so a sketch where the lines stop short of (or
overshoot) each other still fillets cleanly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from itertools import product
from math import acos, pi, sin
from typing import Callable, List, Optional, Tuple, Union

from ..errors import ErrorKind, GeometryDegenerate, OpResult
from .entities import Arc, Line, Polyline
from .geometry import (
    Vec2,
    angle,
    fillet_tangent_distance,
    line_intersection,
    normalize_angle,
    segment_parameter,
    signed_angle_delta,
)
from .numeric import DEFAULT_TOLERANCE, TolerancePolicy, clamp

log = logging.getLogger("adaptivedraft.kernel")


class CornerFailure(str, Enum):
    PARALLEL = "parallel/non-intersecting"
    RADIUS_TOO_LARGE = "radius too large for segment length"
    DISTANCE_TOO_LARGE = "chamfer distance too large for segment length"
    DEGENERATE = "degenerate corner"


@dataclass(frozen=True)
class CornerResult:
    """Outcome of a successful fillet or chamfer.

    ``corner`` is the new :class:`Arc` (fillet) or :class:`Line` (chamfer).
    ``line1``/``line2`` are the trimmed inputs, or ``None`` when trimming
    consumed the whole line.  ``point1``/``point2`` are where the corner
    meets each line.
    """

    corner: Union[Arc, Line]
    line1: Optional[Line]
    line2: Optional[Line]
    vertex: Vec2
    point1: Vec2
    point2: Vec2


@dataclass(frozen=True)
class _Corner:
    vertex: Vec2
    u1: Vec2
    u2: Vec2
    theta: float
    near1_is_start: bool
    near2_is_start: bool


def _fail(reason: CornerFailure, kind: ErrorKind = ErrorKind.CONSTRAINT_VIOLATED) -> OpResult:
    log.debug("corner construction failed: %s", reason.value)
    return OpResult.failure(kind, reason.value.capitalize(), reason=reason)


def _locate_corner(line1: Line, line2: Line, tol: TolerancePolicy) -> OpResult[_Corner]:
    # Closest endpoint pair marks the corner ends
    best = min(
        product((True, False), (True, False)),
        key=lambda pair: (line1.start if pair[0] else line1.end).distance_to(
            line2.start if pair[1] else line2.end
        ),
    )
    near1_is_start, near2_is_start = best
    vertex = line_intersection(line1.start, line1.end, line2.start, line2.end, bounded=False, tol=tol)
    if vertex is None:
        return _fail(CornerFailure.PARALLEL, ErrorKind.GEOMETRY_DEGENERATE)

    far1 = line1.end if near1_is_start else line1.start
    near1 = line1.start if near1_is_start else line1.end
    far2 = line2.end if near2_is_start else line2.start
    near2 = line2.start if near2_is_start else line2.end
    u1 = (far1 - near1).normalized()
    u2 = (far2 - near2).normalized()
    theta = acos(clamp(u1.dot(u2), -1.0, 1.0))
    if theta <= tol.angular or pi - theta <= tol.angular:
        return _fail(CornerFailure.PARALLEL, ErrorKind.GEOMETRY_DEGENERATE)
    return OpResult.success(_Corner(vertex, u1, u2, theta, near1_is_start, near2_is_start))


def _on_segment(p: Vec2, line: Line, tol: TolerancePolicy) -> bool:
    t = segment_parameter(p, line.start, line.end)
    return -tol.parametric <= t <= 1.0 + tol.parametric


def _trimmed(line: Line, near_is_start: bool, point: Vec2) -> Optional[Line]:
    try:
        return replace(line, start=point) if near_is_start else replace(line, end=point)
    except GeometryDegenerate:
        return None


def fillet_lines(
    line1: Line,
    line2: Line,
    radius: float,
    *,
    trim: bool = True,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> OpResult[CornerResult]:
    """Round the corner between two lines with an arc of ``radius``."""

    if not radius > 0.0:
        return _fail(CornerFailure.DEGENERATE, ErrorKind.GEOMETRY_DEGENERATE)
    located = _locate_corner(line1, line2, tol)
    if not located:
        return located
    c = located.value
    half = c.theta / 2.0
    tangent = fillet_tangent_distance(radius, c.theta)
    p1 = c.vertex + c.u1 * tangent
    p2 = c.vertex + c.u2 * tangent
    if not (_on_segment(p1, line1, tol) and _on_segment(p2, line2, tol)):
        return _fail(CornerFailure.RADIUS_TOO_LARGE)

    bisector = (c.u1 + c.u2).normalized()
    center = c.vertex + bisector * (radius / sin(half))
    start_angle = normalize_angle(angle(center, p1))
    end_angle = normalize_angle(angle(center, p2))
    arc = Arc(
        center=center,
        radius=radius,
        start_angle=start_angle,
        end_angle=end_angle,
        counterclockwise=signed_angle_delta(start_angle, end_angle) > 0.0,
        layer=line1.layer,
        style=line1.style,
    )
    new1 = _trimmed(line1, c.near1_is_start, p1) if trim else line1
    new2 = _trimmed(line2, c.near2_is_start, p2) if trim else line2
    return OpResult.success(CornerResult(arc, new1, new2, c.vertex, p1, p2))


def chamfer_lines(
    line1: Line,
    line2: Line,
    distance1: float,
    distance2: Optional[float] = None,
    *,
    trim: bool = True,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> OpResult[CornerResult]:
    """Cut the corner with a straight line ``distance1``/``distance2`` from the vertex."""

    if distance2 is None:
        distance2 = distance1
    if not (distance1 > 0.0 and distance2 > 0.0):
        return _fail(CornerFailure.DEGENERATE, ErrorKind.GEOMETRY_DEGENERATE)
    located = _locate_corner(line1, line2, tol)
    if not located:
        return located
    c = located.value
    p1 = c.vertex + c.u1 * distance1
    p2 = c.vertex + c.u2 * distance2
    if not (_on_segment(p1, line1, tol) and _on_segment(p2, line2, tol)):
        return _fail(CornerFailure.DISTANCE_TOO_LARGE)
    if p1.almost_equals(p2, tol.linear):
        return _fail(CornerFailure.DEGENERATE, ErrorKind.GEOMETRY_DEGENERATE)
    bevel = Line(p1, p2, layer=line1.layer, style=line1.style)
    new1 = _trimmed(line1, c.near1_is_start, p1) if trim else line1
    new2 = _trimmed(line2, c.near2_is_start, p2) if trim else line2
    return OpResult.success(CornerResult(bevel, new1, new2, c.vertex, p1, p2))


# --- Polylines ------------------------------------------------------------


@dataclass(frozen=True)
class PolylineCornerResult:
    """Edges and corner entities in path order, plus the corners that failed."""

    entities: Tuple[Union[Line, Arc], ...]
    failed: Tuple[int, ...]


CornerFn = Callable[[Line, Line], OpResult[CornerResult]]


def _process_polyline(polyline: Polyline, corner_fn: CornerFn) -> PolylineCornerResult:
    pts = polyline.points
    n = len(pts)
    closed = polyline.closed and n > 2
    edge_count = n if closed else n - 1
    starts: List[Vec2] = [pts[i] for i in range(edge_count)]
    ends: List[Vec2] = [pts[(i + 1) % n] for i in range(edge_count)]
    corners: dict = {}
    failed: List[int] = []

    # Wrap-around corner goes last
    vertices = list(range(1, n)) + [0] if closed else list(range(1, n - 1))
    for i in vertices:
        prev_edge = (i - 1) % edge_count
        next_edge = i % edge_count
        try:
            incoming = Line(starts[prev_edge], pts[i])
            outgoing = Line(pts[i], ends[next_edge])
        except GeometryDegenerate:
            failed.append(i)
            continue
        result = corner_fn(incoming, outgoing)
        if not result:
            failed.append(i)
            continue
        ends[prev_edge] = result.value.point1
        starts[next_edge] = result.value.point2
        corners[i] = replace(result.value.corner, layer=polyline.layer, style=polyline.style)

    entities: List[Union[Line, Arc]] = []
    for e in range(edge_count):
        if not starts[e].almost_equals(ends[e]):
            entities.append(Line(starts[e], ends[e], layer=polyline.layer, style=polyline.style))
        corner = corners.get((e + 1) % n)
        if corner is not None:
            entities.append(corner)
    return PolylineCornerResult(tuple(entities), tuple(sorted(failed)))


def fillet_polyline(
    polyline: Polyline, radius: float, *, tol: TolerancePolicy = DEFAULT_TOLERANCE
) -> OpResult[PolylineCornerResult]:
    if not radius > 0.0:
        return _fail(CornerFailure.DEGENERATE, ErrorKind.GEOMETRY_DEGENERATE)
    result = _process_polyline(polyline, lambda a, b: fillet_lines(a, b, radius, tol=tol))
    if result.failed:
        log.debug("fillet_polyline: corners %s kept sharp", list(result.failed))
    return OpResult.success(result)


def chamfer_polyline(
    polyline: Polyline,
    distance1: float,
    distance2: Optional[float] = None,
    *,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> OpResult[PolylineCornerResult]:
    if distance2 is None:
        distance2 = distance1
    if not (distance1 > 0.0 and distance2 > 0.0):
        return _fail(CornerFailure.DEGENERATE, ErrorKind.GEOMETRY_DEGENERATE)
    result = _process_polyline(
        polyline, lambda a, b: chamfer_lines(a, b, distance1, distance2, tol=tol)
    )
    if result.failed:
        log.debug("chamfer_polyline: corners %s kept sharp", list(result.failed))
    return OpResult.success(result)


__all__ = [
    "CornerFailure",
    "CornerResult",
    "PolylineCornerResult",
    "fillet_lines",
    "chamfer_lines",
    "fillet_polyline",
    "chamfer_polyline",
]
