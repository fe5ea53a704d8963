"""Center / radius circle tool."""

from __future__ import annotations

from typing import Optional

from ..errors import GeometryDegenerate, OpResult
from ..kernel.entities import Circle
from ..kernel.geometry import distance
from ..settings import ARC_MIN_RADIUS
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

CIRCLE_SPEC = ToolSpec("circle", "Circle", "circle", "crosshair", None, 2)


class CircleTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = CIRCLE_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None

    def activate(self) -> None:
        self.state = reset()
        self.context.prompt("Circle: specify center")

    def deactivate(self) -> None:
        self.state = reset()

    def on_pointer_down(self, event: PointerEvent) -> None:
        self.state = add_point(self.state, event.point, self.spec.required_points)
        if self.state.phase is Phase.READY:
            self.complete()
        else:
            self.context.prompt("Circle: specify radius")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)

    def complete(self) -> OpResult:
        if self.state.count < 2:
            return incomplete(self, 2)
        center, edge = self.state.points[:2]
        style = tool_style(self)
        layer = self.context.layer

        def build() -> Circle:
            radius = distance(center, edge)
            if radius <= ARC_MIN_RADIUS:
                raise GeometryDegenerate(f"Circle radius {radius:g} is too small")
            return Circle(center, radius, layer=layer, style=style)

        return commit_entity(self, build, "Circle: specify center")

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        pts = self.state.points
        cursor = self.state.cursor
        if len(pts) == 1 and cursor is not None:
            style = tool_style(self)
            radius = distance(pts[0], cursor)
            if radius > ARC_MIN_RADIUS:
                surface.draw_circle(
                    pts[0], radius, color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH
                )
        draw_markers(surface, pts)
