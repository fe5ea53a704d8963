"""Two-corner rectangle tool."""

from __future__ import annotations

from typing import Optional

from ..errors import OpResult
from ..kernel.entities import Rectangle
from ..kernel.geometry import Vec2
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

RECTANGLE_SPEC = ToolSpec("rectangle", "Rectangle", "crop_square", "crosshair", None, 2)


def rectangle_from_corners(a: Vec2, b: Vec2, **kwargs) -> Rectangle:
    return Rectangle(a, b.x - a.x, b.y - a.y, **kwargs)


class RectangleTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = RECTANGLE_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None

    def activate(self) -> None:
        self.state = reset()
        self.context.prompt("Rectangle: specify first corner")

    def deactivate(self) -> None:
        self.state = reset()

    def on_pointer_down(self, event: PointerEvent) -> None:
        self.state = add_point(self.state, event.point, self.spec.required_points)
        if self.state.phase is Phase.READY:
            self.complete()
        else:
            self.context.prompt("Rectangle: specify opposite corner")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)

    def complete(self) -> OpResult:
        if self.state.count < 2:
            return incomplete(self, 2)
        a, b = self.state.points[:2]
        style = tool_style(self)
        layer = self.context.layer
        return commit_entity(
            self,
            lambda: rectangle_from_corners(a, b, layer=layer, style=style),
            "Rectangle: specify first corner",
        )

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        pts = self.state.points
        cursor = self.state.cursor
        if len(pts) == 1 and cursor is not None:
            a, b = pts[0], cursor
            corners = (a, Vec2(b.x, a.y), b, Vec2(a.x, b.y))
            style = tool_style(self)
            surface.draw_polyline(
                corners, color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH, closed=True
            )
        draw_markers(surface, pts)
