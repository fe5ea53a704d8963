"""Parallel offsets of lines, polylines, circles and arcs.

Positive distances move to the left of the drawing direction for lines and
polylines, and outward for circles and arcs.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..errors import ErrorKind, GeometryDegenerate, OpResult
from .entities import Arc, Circle, Entity, Line, Polyline, Style
from .geometry import EPSILON, Vec2, line_intersection
from .numeric import DEFAULT_TOLERANCE, TolerancePolicy

log = logging.getLogger("adaptivedraft.kernel")


def _restyle(entity, layer: Optional[str], style: Optional[Style]):
    changes = {}
    if layer is not None:
        changes["layer"] = layer
    if style is not None:
        changes["style"] = style
    return replace(entity, **changes) if changes else entity


def offset_line(
    line: Line, distance: float, *, layer: Optional[str] = None, style: Optional[Style] = None
) -> OpResult[Line]:
    normal = line.direction.perpendicular()
    shift = normal * distance
    moved = replace(line, start=line.start + shift, end=line.end + shift)
    return OpResult.success(_restyle(moved, layer, style))


def _dedupe(points: Sequence[Vec2], closed: bool) -> List[Vec2]:
    out: List[Vec2] = []
    for p in points:
        if not out or not out[-1].almost_equals(p):
            out.append(p)
    if closed and len(out) > 1 and out[0].almost_equals(out[-1]):
        out.pop()
    return out


def _offset_vertices(
    pts: np.ndarray, distance: float, closed: bool, tol: TolerancePolicy
) -> np.ndarray:
    seg_start = pts if closed else pts[:-1]
    seg_end = np.roll(pts, -1, axis=0) if closed else pts[1:]
    d = seg_end - seg_start
    lengths = np.hypot(d[:, 0], d[:, 1])
    normals = np.column_stack((-d[:, 1], d[:, 0])) / lengths[:, None]
    off_start = seg_start + normals * distance
    off_end = seg_end + normals * distance

    n_edges = len(d)
    result = np.empty((len(pts), 2), dtype=np.float64)
    for i in range(len(pts)):
        if closed:
            prev_e, next_e = (i - 1) % n_edges, i
        elif i == 0:
            result[i] = off_start[0]
            continue
        elif i == len(pts) - 1:
            result[i] = off_end[-1]
            continue
        else:
            prev_e, next_e = i - 1, i
        hit = line_intersection(
            Vec2(*off_start[prev_e]),
            Vec2(*off_end[prev_e]),
            Vec2(*off_start[next_e]),
            Vec2(*off_end[next_e]),
            bounded=False,
            tol=tol,
        )
        # Collinear neighbours share the offset vertex
        result[i] = off_start[next_e] if hit is None else hit.as_tuple()
    return result


def offset_polyline(
    polyline: Polyline,
    distance: float,
    *,
    layer: Optional[str] = None,
    style: Optional[Style] = None,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> OpResult[Polyline]:
    """Offset every edge and rejoin neighbours at their intersection.

    Closed polylines keep their vertex count, the last edge joining back to
    the first.
    """

    pts = _dedupe(polyline.points, polyline.closed)
    if len(pts) < 2:
        return OpResult.failure(ErrorKind.GEOMETRY_DEGENERATE, "Polyline has fewer than 2 distinct points")
    closed = polyline.closed and len(pts) > 2
    arr = np.array([p.as_tuple() for p in pts], dtype=np.float64)
    out = _offset_vertices(arr, distance, closed, tol)
    try:
        moved = replace(polyline, points=tuple(Vec2(float(x), float(y)) for x, y in out))
    except GeometryDegenerate as exc:
        return OpResult.from_error(exc)
    return OpResult.success(_restyle(moved, layer, style))


def offset_circle(
    circle: Circle, distance: float, *, layer: Optional[str] = None, style: Optional[Style] = None
) -> OpResult[Circle]:
    radius = circle.radius + distance
    if radius <= EPSILON:
        return OpResult.failure(
            ErrorKind.GEOMETRY_DEGENERATE, f"Offset radius {radius:g} is not positive"
        )
    return OpResult.success(_restyle(replace(circle, radius=radius), layer, style))


def offset_arc(
    arc: Arc, distance: float, *, layer: Optional[str] = None, style: Optional[Style] = None
) -> OpResult[Arc]:
    radius = arc.radius + distance
    if radius <= EPSILON:
        return OpResult.failure(
            ErrorKind.GEOMETRY_DEGENERATE, f"Offset radius {radius:g} is not positive"
        )
    return OpResult.success(_restyle(replace(arc, radius=radius), layer, style))


def offset_entity(
    entity: Entity,
    distance: float,
    *,
    layer: Optional[str] = None,
    style: Optional[Style] = None,
    tol: TolerancePolicy = DEFAULT_TOLERANCE,
) -> OpResult[Entity]:
    if isinstance(entity, Line):
        return offset_line(entity, distance, layer=layer, style=style)
    if isinstance(entity, Polyline):
        return offset_polyline(entity, distance, layer=layer, style=style, tol=tol)
    if isinstance(entity, Circle):
        return offset_circle(entity, distance, layer=layer, style=style)
    if isinstance(entity, Arc):
        return offset_arc(entity, distance, layer=layer, style=style)
    return OpResult.failure(
        ErrorKind.CONSTRAINT_VIOLATED, f"Cannot offset a {type(entity).__name__.lower()}"
    )


def parallel_copies(
    entity: Entity,
    distances: Iterable[float],
    *,
    layer: Optional[str] = None,
    style: Optional[Style] = None,
) -> List[Entity]:
    """Offset ``entity`` by each distance, skipping offsets that fail."""

    copies: List[Entity] = []
    for d in distances:
        result = offset_entity(entity, d, layer=layer, style=style)
        if result:
            copies.append(result.value)
        else:
            log.debug("skipping offset %g: %s", d, result.message)
    return copies


def offset_copies(
    entity: Entity,
    count: int,
    spacing: float,
    *,
    layer: Optional[str] = None,
    style: Optional[Style] = None,
) -> List[Entity]:
    return parallel_copies(
        entity, [spacing * (i + 1) for i in range(count)], layer=layer, style=style
    )


def bidirectional_offset(
    entity: Entity, distance: float, *, layer: Optional[str] = None, style: Optional[Style] = None
) -> List[Entity]:
    return parallel_copies(entity, [-distance, distance], layer=layer, style=style)


__all__ = [
    "offset_line",
    "offset_polyline",
    "offset_circle",
    "offset_arc",
    "offset_entity",
    "parallel_copies",
    "offset_copies",
    "bidirectional_offset",
]
