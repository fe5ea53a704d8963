"""Two-click line tool."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import OpResult
from ..kernel.entities import Line
from ..kernel.geometry import Vec2
from ..settings import LINE_MIN_DELTA
from .base import (
    KeyEvent,
    PointerEvent,
    PreviewSurface,
    ToolContext,
    ToolSpec,
    cancel_tool,
    commit_entity,
    draw_rubber_band,
    escape_step,
    incomplete,
    tool_style,
)
from .state import IDLE_STATE, Phase, add_point, move_cursor, reset

log = logging.getLogger("adaptivedraft.tools")

LINE_SPEC = ToolSpec("line", "Line", "show_chart", "crosshair", None, 2)


def _distinct(a: Vec2, b: Vec2) -> bool:
    return abs(a.x - b.x) > LINE_MIN_DELTA or abs(a.y - b.y) > LINE_MIN_DELTA


class LineTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = LINE_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None

    def activate(self) -> None:
        self.state = reset()
        self.context.prompt("Line: specify first point")

    def deactivate(self) -> None:
        self.state = reset()

    def on_pointer_down(self, event: PointerEvent) -> None:
        first = self.state.first
        if first is not None and not _distinct(first, event.point):
            log.debug("line: second point too close to the first, ignored")
            return
        self.state = add_point(self.state, event.point, self.spec.required_points)
        if self.state.phase is Phase.READY:
            self.complete()
        else:
            self.context.prompt("Line: specify end point")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)

    def complete(self) -> OpResult:
        if self.state.count < 2:
            return incomplete(self, 2)
        start, end = self.state.points[:2]
        style = tool_style(self)
        layer = self.context.layer
        return commit_entity(
            self,
            lambda: Line(start, end, layer=layer, style=style),
            "Line: specify first point",
        )

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        draw_rubber_band(surface, self)
