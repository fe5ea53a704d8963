"""Point transforms and 2D affine matrices.

Matrices are stored as 3x3 homogeneous numpy arrays and exposed in the
compact ``[a, c, e, b, d, f]`` coefficient order::

    | a c e |
    | b d f |
    | 0 0 1 |

Composition order: ``m1 @ m2`` is the plain matrix product (``m2`` is
applied first), while :func:`multiply` and :func:`composite` take their
arguments in application order, left to right.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from math import cos, sin
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..errors import GeometryDegenerate
from .entities import Arc, Circle, Dimension, Entity, Line, Polyline, Rectangle
from .geometry import EPSILON, ORIGIN, AngleUnit, Vec2, normalize_angle, to_radians


class Axis(str, Enum):
    X = "x"  # mirror across the horizontal line y = value
    Y = "y"  # mirror across the vertical line x = value


# --- Point transforms ------------------------------------------------------


def translate(p: Vec2, dx: float, dy: float) -> Vec2:
    return Vec2(p.x + dx, p.y + dy)


def rotate(p: Vec2, center: Vec2, theta: float, unit: AngleUnit = AngleUnit.RADIANS) -> Vec2:
    t = to_radians(theta, unit)
    c, s = cos(t), sin(t)
    rx, ry = p.x - center.x, p.y - center.y
    return Vec2(center.x + rx * c - ry * s, center.y + rx * s + ry * c)


def scale(p: Vec2, center: Vec2, sx: float, sy: float) -> Vec2:
    return Vec2(center.x + (p.x - center.x) * sx, center.y + (p.y - center.y) * sy)


def uniform_scale(p: Vec2, center: Vec2, factor: float) -> Vec2:
    return scale(p, center, factor, factor)


def mirror_across_line(p: Vec2, line_start: Vec2, line_end: Vec2) -> Vec2:
    u = (line_end - line_start).normalized()
    rel = p - line_start
    foot = line_start + u * rel.dot(u)
    return p - (p - foot) * 2.0


def mirror_across_point(p: Vec2, center: Vec2) -> Vec2:
    return Vec2(2.0 * center.x - p.x, 2.0 * center.y - p.y)


def mirror_across_axis(p: Vec2, axis_value: float = 0.0, axis: Axis = Axis.X) -> Vec2:
    if Axis(axis) is Axis.X:
        return Vec2(p.x, 2.0 * axis_value - p.y)
    return Vec2(2.0 * axis_value - p.x, p.y)


# --- Affine matrices ------------------------------------------------------


class AffineMatrix:
    """Immutable 2D affine transform backed by a 3x3 numpy array."""

    __slots__ = ("_m",)

    def __init__(self, matrix: Optional[np.ndarray] = None) -> None:
        m = np.eye(3, dtype=np.float64) if matrix is None else np.array(matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError("AffineMatrix expects a 3x3 array")
        m[2] = (0.0, 0.0, 1.0)
        m.setflags(write=False)
        self._m = m

    # --- factories --------------------------------------------------------
    @staticmethod
    def identity() -> "AffineMatrix":
        return AffineMatrix()

    @staticmethod
    def from_coefficients(coefficients: Sequence[float]) -> "AffineMatrix":
        a, c, e, b, d, f = (float(v) for v in coefficients)
        return AffineMatrix(np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]]))

    @staticmethod
    def translation(dx: float, dy: float) -> "AffineMatrix":
        return AffineMatrix.from_coefficients((1.0, 0.0, dx, 0.0, 1.0, dy))

    @staticmethod
    def rotation(
        theta: float, center: Vec2 = ORIGIN, unit: AngleUnit = AngleUnit.RADIANS
    ) -> "AffineMatrix":
        t = to_radians(theta, unit)
        c, s = cos(t), sin(t)
        about_origin = AffineMatrix.from_coefficients((c, -s, 0.0, s, c, 0.0))
        return composite(
            [
                AffineMatrix.translation(-center.x, -center.y),
                about_origin,
                AffineMatrix.translation(center.x, center.y),
            ]
        )

    @staticmethod
    def scaling(sx: float, sy: Optional[float] = None, center: Vec2 = ORIGIN) -> "AffineMatrix":
        if sy is None:
            sy = sx
        return AffineMatrix.from_coefficients(
            (sx, 0.0, center.x - center.x * sx, 0.0, sy, center.y - center.y * sy)
        )

    @staticmethod
    def mirror(line_start: Vec2, line_end: Vec2) -> "AffineMatrix":
        u = (line_end - line_start).normalized()
        a = u.x * u.x - u.y * u.y
        b = 2.0 * u.x * u.y
        x0, y0 = line_start.x, line_start.y
        return AffineMatrix.from_coefficients(
            (a, b, (1.0 - a) * x0 - b * y0, b, -a, (1.0 + a) * y0 - b * x0)
        )

    # --- accessors --------------------------------------------------------
    @property
    def array(self) -> np.ndarray:
        return self._m

    @property
    def coefficients(self) -> List[float]:
        m = self._m
        return [float(m[0, 0]), float(m[0, 1]), float(m[0, 2]), float(m[1, 0]), float(m[1, 1]), float(m[1, 2])]

    def determinant(self) -> float:
        return float(np.linalg.det(self._m[:2, :2]))

    def is_similarity(self, eps: float = 1e-9) -> bool:
        """True when the linear part is a uniform scale times a rotation/reflection."""

        lin = self._m[:2, :2]
        gram = lin.T @ lin
        return bool(abs(gram[0, 1]) <= eps and abs(gram[0, 0] - gram[1, 1]) <= eps * max(1.0, gram[0, 0]))

    def scale_factor(self) -> float:
        return float(np.sqrt(abs(self.determinant())))

    def inverse(self) -> "AffineMatrix":
        if abs(self.determinant()) < EPSILON:
            raise GeometryDegenerate("Singular transform has no inverse")
        return AffineMatrix(np.linalg.inv(self._m))

    # --- application ------------------------------------------------------
    def apply(self, p: Vec2) -> Vec2:
        m = self._m
        return Vec2(
            float(m[0, 0] * p.x + m[0, 1] * p.y + m[0, 2]),
            float(m[1, 0] * p.x + m[1, 1] * p.y + m[1, 2]),
        )

    def apply_many(self, points: Iterable[Vec2]) -> List[Vec2]:
        pts = list(points)
        if not pts:
            return []
        xy1 = np.array([(p.x, p.y, 1.0) for p in pts], dtype=np.float64)
        out = xy1 @ self._m.T
        return [Vec2(float(x), float(y)) for x, y in out[:, :2]]

    def then(self, other: "AffineMatrix") -> "AffineMatrix":
        """Transform that applies ``self`` first and ``other`` second."""

        return AffineMatrix(other._m @ self._m)

    def __matmul__(self, other: "AffineMatrix") -> "AffineMatrix":
        return AffineMatrix(self._m @ other._m)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineMatrix):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(tuple(self.coefficients))

    def almost_equals(self, other: "AffineMatrix", eps: float = 1e-9) -> bool:
        return bool(np.allclose(self._m, other._m, atol=eps, rtol=0.0))

    def __repr__(self) -> str:
        a, c, e, b, d, f = self.coefficients
        return f"AffineMatrix([{a:.3f}, {c:.3f}, {e:.3f}, {b:.3f}, {d:.3f}, {f:.3f}])"


def multiply(first: AffineMatrix, second: AffineMatrix) -> AffineMatrix:
    """Compose two transforms in application order: ``first`` then ``second``."""

    return first.then(second)


def composite(matrices: Iterable[AffineMatrix]) -> AffineMatrix:
    """Fold ``multiply`` left to right from the identity; the first matrix applies first."""

    result = AffineMatrix.identity()
    for m in matrices:
        result = multiply(result, m)
    return result


def apply(p: Vec2, matrix: AffineMatrix) -> Vec2:
    return matrix.apply(p)


# --- Entity transforms ----------------------------------------------------


def _transform_arc(arc: Arc, matrix: AffineMatrix) -> Arc:
    center = matrix.apply(arc.center)
    start = matrix.apply(arc.start_point)
    reflect = matrix.determinant() < 0.0
    counterclockwise = arc.counterclockwise != reflect
    start_angle = normalize_angle(np.arctan2(start.y - center.y, start.x - center.x))
    # Carry the sweep over so a full turn stays a full turn
    sweep = arc.sweep
    end_angle = start_angle + sweep if counterclockwise else start_angle - sweep
    return replace(
        arc,
        center=center,
        radius=arc.radius * matrix.scale_factor(),
        start_angle=float(start_angle),
        end_angle=float(end_angle),
        counterclockwise=counterclockwise,
    )


def transform_entity(entity: Entity, matrix: AffineMatrix) -> Entity:
    """Apply ``matrix`` to an entity, returning a new value.

    Circles and arcs only survive similarity transforms; anything else would
    turn them into ellipses, which the kernel does not model.
    """

    if isinstance(entity, Line):
        start, end = matrix.apply_many((entity.start, entity.end))
        return replace(entity, start=start, end=end)
    if isinstance(entity, Polyline):
        return replace(entity, points=tuple(matrix.apply_many(entity.points)))
    if isinstance(entity, Rectangle):
        return Polyline(
            points=tuple(matrix.apply_many(entity.points())),
            closed=True,
            layer=entity.layer,
            style=entity.style,
            visible=entity.visible,
            locked=entity.locked,
        )
    if isinstance(entity, Dimension):
        return replace(entity, points=tuple(matrix.apply_many(entity.points)))
    if not matrix.is_similarity():
        raise GeometryDegenerate(f"{type(entity).__name__} needs a similarity transform")
    if isinstance(entity, Circle):
        return replace(entity, center=matrix.apply(entity.center), radius=entity.radius * matrix.scale_factor())
    if isinstance(entity, Arc):
        return _transform_arc(entity, matrix)
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


__all__ = [
    "Axis",
    "translate",
    "rotate",
    "scale",
    "uniform_scale",
    "mirror_across_line",
    "mirror_across_point",
    "mirror_across_axis",
    "AffineMatrix",
    "multiply",
    "composite",
    "apply",
    "transform_entity",
]
