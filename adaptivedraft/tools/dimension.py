"""Linear, angular, radial and diametrical dimension tool."""

from __future__ import annotations

from math import degrees
from typing import Optional, Sequence

from ..errors import GeometryDegenerate, OpResult
from ..kernel.entities import Dimension, DimensionKind
from ..kernel.geometry import Vec2, angle, distance, distance_point_to_line
from ..settings import DEFAULT_EXTENSION_DISTANCE, DEFAULT_OFFSET_DISTANCE, LINE_MIN_DELTA, DraftSettings
from .base import (
    PREVIEW_DASH,
    KeyEvent,
    PointerEvent,
    PreviewSurface,
    ToolContext,
    ToolSpec,
    cancel_tool,
    commit_entity,
    draw_markers,
    escape_step,
    incomplete,
    tool_style,
)
from .state import IDLE_STATE, Phase, add_point, move_cursor, reset

DIMENSION_SPEC = ToolSpec("dimension", "Dimension", "straighten", "crosshair", None, 3)


def dimension_value(kind: DimensionKind, points: Sequence[Vec2]) -> float:
    """Measured value; angular values are degrees in ``[0, 360)`` with the vertex first."""

    if kind is DimensionKind.ANGULAR:
        vertex, p2, p3 = points[:3]
        return degrees(angle(vertex, p3) - angle(vertex, p2)) % 360.0
    d = distance(points[0], points[1])
    return 2.0 * d if kind is DimensionKind.DIAMETRICAL else d


def degenerate_reason(kind: DimensionKind, points: Sequence[Vec2]) -> Optional[str]:
    """Why ``points`` cannot be measured, or ``None`` when they can."""

    if kind is DimensionKind.ANGULAR:
        vertex, p2, p3 = points[:3]
        if distance(vertex, p2) <= LINE_MIN_DELTA or distance(vertex, p3) <= LINE_MIN_DELTA:
            return "Angular dimension ray has no length"
        return None
    if distance(points[0], points[1]) <= LINE_MIN_DELTA:
        return "Dimension points coincide"
    return None


def format_dimension(
    kind: DimensionKind, value: float, settings: DraftSettings, override: Optional[str] = None
) -> str:
    if override:
        return override
    text = f"{value:.{settings.precision}f}"
    if not settings.show_units:
        return text
    if kind is DimensionKind.ANGULAR:
        return text + "°"
    return f"{text} {settings.units.value}"


class DimensionTool:
    def __init__(
        self,
        context: ToolContext,
        kind: DimensionKind = DimensionKind.LINEAR,
        spec: ToolSpec = DIMENSION_SPEC,
    ) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None
        self.text_override: Optional[str] = None
        self._kind = DimensionKind(kind)

    @property
    def kind(self) -> DimensionKind:
        return self._kind

    @kind.setter
    def kind(self, value: DimensionKind) -> None:
        self._kind = DimensionKind(value)
        self.state = reset(self.state)
        self._prompt_next()

    @property
    def required_points(self) -> int:
        return self._kind.required_points

    def _prompt_next(self) -> None:
        count = self.state.count
        if count == 0:
            first = "vertex" if self._kind is DimensionKind.ANGULAR else (
                "center" if self._kind in (DimensionKind.RADIAL, DimensionKind.DIAMETRICAL) else "first point"
            )
            self.context.prompt(f"Dimension ({self._kind.value}): specify {first}")
        elif count == self.required_points - 1 and self.required_points == 3:
            self.context.prompt(f"Dimension ({self._kind.value}): specify offset point")
        else:
            self.context.prompt(f"Dimension ({self._kind.value}): specify next point")

    def activate(self) -> None:
        self.state = reset()
        self._prompt_next()

    def deactivate(self) -> None:
        self.state = reset()

    def on_pointer_down(self, event: PointerEvent) -> None:
        self.state = add_point(self.state, event.point, self.required_points)
        if self.state.phase is Phase.READY:
            self.complete()
        else:
            self._prompt_next()

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)
        elif event.key == "Enter" and self.state.count >= self.required_points:
            self.complete()

    def complete(self) -> OpResult:
        need = self.required_points
        if self.state.count < need:
            return incomplete(self, need)
        kind = self._kind
        points = self.state.points[:need]
        reason = degenerate_reason(kind, points)
        value = dimension_value(kind, points) if reason is None else 0.0
        text = format_dimension(kind, value, self.context.settings, self.text_override)
        offset = DEFAULT_OFFSET_DISTANCE
        if kind is DimensionKind.LINEAR and reason is None:
            offset = distance_point_to_line(points[2], points[0], points[1])
        style = tool_style(self)
        layer = self.context.layer

        def build() -> Dimension:
            if reason is not None:
                raise GeometryDegenerate(reason)
            return Dimension(
                kind,
                points,
                value,
                text,
                extension_distance=DEFAULT_EXTENSION_DISTANCE,
                offset_distance=offset,
                layer=layer,
                style=style,
            )

        return commit_entity(self, build, f"Dimension: {text}")

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        pts = self.state.points
        cursor = self.state.cursor
        style = tool_style(self)
        if pts and cursor is not None and len(pts) < self.required_points:
            candidate = pts + (cursor,)
            surface.draw_polyline(
                candidate, color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH
            )
            if (
                len(candidate) >= 2
                and not (self._kind is DimensionKind.ANGULAR and len(candidate) < 3)
                and degenerate_reason(self._kind, candidate) is None
            ):
                value = dimension_value(self._kind, candidate)
                text = format_dimension(self._kind, value, self.context.settings, self.text_override)
                surface.draw_text(cursor, text, color=style.stroke_color)
        draw_markers(surface, pts)
