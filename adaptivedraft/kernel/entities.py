"""Drawing entities produced by the tools and the fillet/offset constructors.

Entities are immutable values.  Identity belongs to the entity store: the
kernel never keeps an id, and edits are made by building a new value with
:func:`dataclasses.replace` and handing it back to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from math import cos, pi, sin
from typing import ClassVar, Optional, Sequence, Tuple, Union

from ..errors import GeometryDegenerate
from .geometry import (
    EPSILON,
    TAU,
    Vec2,
    normalize_angle,
    polygon_area,
    polyline_length,
)


class EntityKind(str, Enum):
    LINE = "line"
    ARC = "arc"
    CIRCLE = "circle"
    POLYLINE = "polyline"
    RECTANGLE = "rectangle"
    DIMENSION = "dimension"


@dataclass(frozen=True)
class Style:
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    dash: Tuple[float, ...] = ()
    fill: Optional[str] = None


@dataclass(frozen=True)
class Line:
    kind: ClassVar[EntityKind] = EntityKind.LINE

    start: Vec2
    end: Vec2
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        if self.start.almost_equals(self.end):
            raise GeometryDegenerate("Line start and end coincide")

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Vec2:
        return (self.end - self.start).normalized()

    def points(self) -> Tuple[Vec2, ...]:
        return (self.start, self.end)


@dataclass(frozen=True)
class Arc:
    """Circular arc; ``counterclockwise`` sweeps toward increasing angles."""

    kind: ClassVar[EntityKind] = EntityKind.ARC

    center: Vec2
    radius: float
    start_angle: float
    end_angle: float
    counterclockwise: bool = True
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise GeometryDegenerate(f"Arc radius must be positive, got {self.radius}")

    @property
    def sweep(self) -> float:
        """Swept angle in ``(0, 2π]``, measured in the arc's direction."""

        if self.counterclockwise:
            delta = normalize_angle(self.end_angle - self.start_angle)
        else:
            delta = normalize_angle(self.start_angle - self.end_angle)
        if delta <= EPSILON and abs(self.end_angle - self.start_angle) > EPSILON:
            return TAU
        return delta

    @property
    def length(self) -> float:
        return self.radius * self.sweep

    def point_at(self, theta: float) -> Vec2:
        return Vec2(self.center.x + self.radius * cos(theta), self.center.y + self.radius * sin(theta))

    @property
    def start_point(self) -> Vec2:
        return self.point_at(self.start_angle)

    @property
    def end_point(self) -> Vec2:
        return self.point_at(self.end_angle)

    def points(self) -> Tuple[Vec2, ...]:
        return (self.center, self.start_point, self.end_point)


@dataclass(frozen=True)
class Circle:
    kind: ClassVar[EntityKind] = EntityKind.CIRCLE

    center: Vec2
    radius: float
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise GeometryDegenerate(f"Circle radius must be positive, got {self.radius}")

    @property
    def area(self) -> float:
        return pi * self.radius * self.radius

    @property
    def circumference(self) -> float:
        return 2.0 * pi * self.radius

    def points(self) -> Tuple[Vec2, ...]:
        return (self.center,)


@dataclass(frozen=True)
class Polyline:
    kind: ClassVar[EntityKind] = EntityKind.POLYLINE

    points: Tuple[Vec2, ...]
    closed: bool = False
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) < 2:
            raise GeometryDegenerate("Polyline needs at least 2 points")

    def edges(self) -> Tuple[Tuple[Vec2, Vec2], ...]:
        pts = self.points
        pairs = [(pts[i], pts[i + 1]) for i in range(len(pts) - 1)]
        if self.closed and len(pts) > 2:
            pairs.append((pts[-1], pts[0]))
        return tuple(pairs)

    @property
    def length(self) -> float:
        return polyline_length(self.points, closed=self.closed)

    @property
    def area(self) -> float:
        return polygon_area(self.points) if self.closed else 0.0


@dataclass(frozen=True)
class Rectangle:
    """Axis aligned rectangle anchored at ``corner``; width/height may be negative."""

    kind: ClassVar[EntityKind] = EntityKind.RECTANGLE

    corner: Vec2
    width: float
    height: float
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        if abs(self.width) <= EPSILON or abs(self.height) <= EPSILON:
            raise GeometryDegenerate("Rectangle needs non-zero width and height")

    @property
    def area(self) -> float:
        return abs(self.width * self.height)

    @property
    def perimeter(self) -> float:
        return 2.0 * (abs(self.width) + abs(self.height))

    def points(self) -> Tuple[Vec2, ...]:
        c = self.corner
        return (
            c,
            Vec2(c.x + self.width, c.y),
            Vec2(c.x + self.width, c.y + self.height),
            Vec2(c.x, c.y + self.height),
        )


class DimensionKind(str, Enum):
    LINEAR = "linear"
    ANGULAR = "angular"
    RADIAL = "radial"
    DIAMETRICAL = "diametrical"

    @property
    def required_points(self) -> int:
        return 3 if self in (DimensionKind.LINEAR, DimensionKind.ANGULAR) else 2


@dataclass(frozen=True)
class Dimension:
    kind: ClassVar[EntityKind] = EntityKind.DIMENSION

    dimension_kind: DimensionKind
    points: Tuple[Vec2, ...]
    value: float
    text: str
    extension_distance: float = 10.0
    offset_distance: float = 15.0
    layer: str = "0"
    style: Style = field(default_factory=Style)
    visible: bool = True
    locked: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        need = self.dimension_kind.required_points
        if len(self.points) != need:
            raise GeometryDegenerate(
                f"{self.dimension_kind.value} dimension needs {need} points, got {len(self.points)}"
            )


Entity = Union[Line, Arc, Circle, Polyline, Rectangle, Dimension]
ENTITY_TYPES: Tuple[type, ...] = (Line, Arc, Circle, Polyline, Rectangle, Dimension)


def entity_points(entity: Entity) -> Sequence[Vec2]:
    """Characteristic points of an entity, used for snapping and bounds."""

    return entity.points if isinstance(entity, (Polyline, Dimension)) else entity.points()


__all__ = [
    "EntityKind",
    "Style",
    "Line",
    "Arc",
    "Circle",
    "Polyline",
    "Rectangle",
    "DimensionKind",
    "Dimension",
    "Entity",
    "ENTITY_TYPES",
    "entity_points",
]
