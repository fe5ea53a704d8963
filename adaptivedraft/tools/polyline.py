"""Open or closed polyline tool with an unbounded number of points.

* double click with two or more points commits an open polyline
* clicking near the first point with three or more points closes it
* ``C`` closes, ``Enter`` commits open
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import OpResult
from ..kernel.entities import Polyline
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

POLYLINE_SPEC = ToolSpec("polyline", "Polyline", "timeline", "crosshair", None, 2)


class PolylineTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = POLYLINE_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None

    def activate(self) -> None:
        self.state = reset()
        self.context.prompt("Polyline: specify first point")

    def deactivate(self) -> None:
        self.state = reset()

    def _near_first(self, event: PointerEvent) -> bool:
        first = self.state.first
        return first is not None and first.distance_to(event.point) <= self.context.settings.close_tolerance

    def on_pointer_down(self, event: PointerEvent) -> None:
        count = self.state.count
        if event.is_double_click and count >= 2:
            self.complete(closed=False)
            return
        if count >= 3 and self._near_first(event):
            self.complete(closed=True)
            return
        self.state = add_point(self.state, event.point)
        if self.state.count >= 2:
            self.context.prompt("Polyline: next point, Enter to finish, C to close")
        else:
            self.context.prompt("Polyline: specify next point")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        key = event.key
        if key == "Escape":
            escape_step(self)
        elif key in ("c", "C"):
            if self.state.count >= 3:
                self.complete(closed=True)
            else:
                log.debug("polyline: close needs 3 points, have %d", self.state.count)
        elif key == "Enter":
            if self.state.count >= 2:
                self.complete(closed=False)

    def complete(self, closed: bool = False) -> OpResult:
        needed = 3 if closed else 2
        if self.state.count < needed:
            return incomplete(self, needed)
        points = self.state.points
        style = tool_style(self)
        layer = self.context.layer
        return commit_entity(
            self,
            lambda: Polyline(points, closed=closed, layer=layer, style=style),
            "Polyline: specify first point",
        )

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        draw_rubber_band(surface, self)
