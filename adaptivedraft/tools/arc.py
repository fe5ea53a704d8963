"""Center / start / end arc tool.

The arc always sweeps counter-clockwise from the start point to the end
point.  With the snap modifier held the sweep is rounded to the nearest
quarter turn.
"""

from __future__ import annotations

import logging
from math import pi
from typing import Optional, Tuple

from ..errors import GeometryDegenerate, OpResult
from ..kernel.entities import Arc
from ..kernel.geometry import EPSILON, TAU, Vec2, angle, distance, normalize_angle
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

log = logging.getLogger("adaptivedraft.tools")

ARC_SPEC = ToolSpec("arc", "Arc", "radio_button_unchecked", "crosshair", None, 3)

SNAP_SWEEPS = (pi / 2.0, pi, 3.0 * pi / 2.0, TAU)


def snap_sweep(sweep: float) -> float:
    """Nearest of 90, 180, 270 or 360 degrees."""

    return min(SNAP_SWEEPS, key=lambda s: abs(s - sweep))


def arc_angles(center: Vec2, start: Vec2, end: Vec2, snap: bool = False) -> Tuple[float, float]:
    """Start angle and (unwrapped) end angle of a counter-clockwise arc."""

    start_angle = normalize_angle(angle(center, start))
    sweep = normalize_angle(angle(center, end) - start_angle)
    if snap:
        sweep = snap_sweep(sweep)
    return start_angle, start_angle + sweep


class ArcTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = ARC_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None

    def activate(self) -> None:
        self.state = reset()
        self.context.prompt("Arc: specify center")

    def deactivate(self) -> None:
        self.state = reset()

    def on_pointer_down(self, event: PointerEvent) -> None:
        self.state = add_point(self.state, event.point, self.spec.required_points)
        if self.state.phase is Phase.READY:
            self.complete(snap=event.shift)
        elif self.state.count == 1:
            self.context.prompt("Arc: specify start point")
        else:
            self.context.prompt("Arc: specify end point (Shift snaps to 90°)")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)

    def complete(self, snap: Optional[bool] = None) -> OpResult:
        """Commit the arc; ``snap`` defaults to the modifier of the last pointer move."""

        if self.state.count < 3:
            return incomplete(self, 3)
        if snap is None:
            snap = self.state.snap
        center, start, end = self.state.points[:3]
        style = tool_style(self)
        layer = self.context.layer

        def build() -> Arc:
            radius = distance(center, start)
            if radius <= ARC_MIN_RADIUS:
                raise GeometryDegenerate(f"Arc radius {radius:g} is too small")
            if distance(center, end) <= ARC_MIN_RADIUS:
                raise GeometryDegenerate("Arc end point lies on the center")
            start_angle, end_angle = arc_angles(center, start, end, snap)
            if end_angle - start_angle <= EPSILON:
                raise GeometryDegenerate("Arc end point lies on the start direction")
            return Arc(center, radius, start_angle, end_angle, True, layer=layer, style=style)

        return commit_entity(self, build, "Arc: specify center")

    def cancel(self) -> None:
        cancel_tool(self)

    def render_preview(self, surface: PreviewSurface) -> None:
        style = tool_style(self)
        pts = self.state.points
        cursor = self.state.cursor
        if len(pts) == 1 and cursor is not None:
            radius = distance(pts[0], cursor)
            surface.draw_polyline(
                (pts[0], cursor), color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH
            )
            if radius > ARC_MIN_RADIUS:
                surface.draw_circle(
                    pts[0], radius, color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH
                )
        elif len(pts) >= 2 and cursor is not None:
            radius = distance(pts[0], pts[1])
            if radius > ARC_MIN_RADIUS and distance(pts[0], cursor) > ARC_MIN_RADIUS:
                start_angle, end_angle = arc_angles(pts[0], pts[1], cursor, self.state.snap)
                surface.draw_arc(
                    pts[0],
                    radius,
                    start_angle,
                    end_angle,
                    True,
                    color=style.stroke_color,
                    width=style.stroke_width,
                    dash=PREVIEW_DASH,
                )
        draw_markers(surface, pts)
