"""Selection based fillet (and chamfer) tool.

The tool works on existing Line entities instead of temp points:

1. click near a line to pick it
2. click near a different line to pick the second one; the corner is built
   right away, or with Shift held the tool waits in the radius step until
   Enter confirms the radius set by the host
3. ``+``/``-`` change the working radius, ``C`` toggles chamfer mode

Ids picked earlier are looked up again before each use because the host may
delete or replace entities between two clicks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from ..errors import ErrorKind, OpResult
from ..kernel.corners import CornerResult, chamfer_lines, fillet_lines
from ..kernel.entities import Arc, EntityKind, Line
from ..kernel.geometry import Vec2, distance_point_to_segment
from ..settings import MIN_FILLET_RADIUS
from .base import (
    PREVIEW_DASH,
    KeyEvent,
    PointerEvent,
    PreviewSurface,
    ToolContext,
    ToolSpec,
    tool_style,
)
from .state import IDLE_STATE, Phase, move_cursor, reset

log = logging.getLogger("adaptivedraft.tools")

FILLET_SPEC = ToolSpec("fillet", "Fillet", "rounded_corner", "crosshair", None, 0)


class FilletStep(str, Enum):
    FIRST_LINE = "first_line"
    SECOND_LINE = "second_line"
    EDIT_RADIUS = "edit_radius"


@dataclass(frozen=True)
class FilletSelection:
    step: FilletStep = FilletStep.FIRST_LINE
    first_id: Optional[str] = None
    second_id: Optional[str] = None


class FilletTool:
    def __init__(self, context: ToolContext, spec: ToolSpec = FILLET_SPEC) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None
        self.selection = FilletSelection()
        self.radius = context.settings.fillet_radius
        self.chamfer = False

    # --- prompts ----------------------------------------------------------
    @property
    def _noun(self) -> str:
        return "chamfer" if self.chamfer else "fillet"

    def _prompt_first(self, prefix: str = "") -> None:
        self.context.prompt(f"{prefix}Select the first line for the {self._noun}")

    def _prompt_second(self) -> None:
        self.context.prompt(f"Select the second line for the {self._noun}")

    def _prompt_radius(self) -> None:
        label = "Chamfer distance" if self.chamfer else "Fillet radius"
        self.context.prompt(f"{label}: {self.radius:.2f}")

    # --- lifecycle --------------------------------------------------------
    def activate(self) -> None:
        self._reset()
        self._prompt_first()

    def deactivate(self) -> None:
        self._reset()
        self.context.prompt("")

    def _reset(self) -> None:
        self.selection = FilletSelection()
        self.state = reset(self.state)

    def _back_to_first(self, prefix: str = "") -> None:
        self._reset()
        self.context.store.clear_selection()
        self._prompt_first(prefix)

    def _back_to_second(self, first_id: str) -> None:
        self.selection = FilletSelection(FilletStep.SECOND_LINE, first_id)
        self.context.store.select_entities([first_id])
        self._prompt_second()

    def cancel(self) -> None:
        self._reset()
        self.context.store.clear_selection()
        self.last_outcome = Phase.CANCELLED

    # --- picking ----------------------------------------------------------
    def find_line_at(self, point: Vec2, exclude: Optional[str] = None) -> Optional[str]:
        """Nearest visible, unlocked line within the pick tolerance."""

        tolerance = self.context.settings.pick_tolerance
        best: Optional[Tuple[float, str]] = None
        for entity_id, entity in self.context.store.entities(EntityKind.LINE).items():
            if entity_id == exclude or not entity.visible or entity.locked:
                continue
            d = distance_point_to_segment(point, entity.start, entity.end)
            if d <= tolerance and (best is None or d < best[0]):
                best = (d, entity_id)
        return best[1] if best else None

    def _line(self, entity_id: Optional[str]) -> Optional[Line]:
        if entity_id is None:
            return None
        entity = self.context.store.get_entity(entity_id)
        return entity if isinstance(entity, Line) else None

    # --- input ------------------------------------------------------------
    def on_pointer_down(self, event: PointerEvent) -> None:
        sel = self.selection
        if sel.step is FilletStep.FIRST_LINE:
            picked = self.find_line_at(event.point)
            if picked is None:
                log.debug("fillet: no line under %s", event.point)
                return
            self.selection = FilletSelection(FilletStep.SECOND_LINE, picked)
            self.context.store.select_entities([picked])
            self._prompt_second()
        elif sel.step is FilletStep.SECOND_LINE:
            if self._line(sel.first_id) is None:
                log.warning("fillet: first line %s is gone", sel.first_id)
                self._back_to_first("First line no longer exists. ")
                return
            picked = self.find_line_at(event.point, exclude=sel.first_id)
            if picked is None:
                log.debug("fillet: no second line under %s", event.point)
                return
            self.selection = replace(sel, second_id=picked)
            self.context.store.select_entities([sel.first_id, picked])
            if event.shift:
                self.selection = replace(self.selection, step=FilletStep.EDIT_RADIUS)
                self._prompt_radius()
            else:
                self.apply()

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def set_radius(self, radius: float) -> None:
        self.radius = max(MIN_FILLET_RADIUS, float(radius))
        self._prompt_radius()

    def on_key_down(self, event: KeyEvent) -> None:
        key = event.key
        step = self.context.settings.fillet_radius_step
        if key in ("+", "="):
            self.set_radius(self.radius + step)
        elif key in ("-", "_"):
            self.set_radius(self.radius - step)
        elif key in ("c", "C"):
            self.chamfer = not self.chamfer
            self.context.prompt(f"Mode: {self._noun}")
        elif key == "Enter":
            if self.selection.step is FilletStep.EDIT_RADIUS:
                self.apply()
        elif key == "Escape":
            self._escape()

    def _escape(self) -> None:
        sel = self.selection
        if sel.second_id is not None and sel.first_id is not None:
            self._back_to_second(sel.first_id)
        elif sel.first_id is not None:
            self._back_to_first()
        else:
            self._reset()
            self.context.exit_tool()

    # --- construction -----------------------------------------------------
    def _construct(self, line1: Line, line2: Line, trim: bool = True) -> OpResult[CornerResult]:
        tol = self.context.settings.tolerance
        if self.chamfer:
            return chamfer_lines(line1, line2, self.radius, trim=trim, tol=tol)
        return fillet_lines(line1, line2, self.radius, trim=trim, tol=tol)

    def complete(self) -> OpResult:
        if self.selection.second_id is None:
            return OpResult.failure(ErrorKind.INPUT_INCOMPLETE, "Select two lines first")
        return self.apply()

    def apply(self) -> OpResult:
        """Build the corner between the two picked lines and update the store."""

        sel = self.selection
        line1 = self._line(sel.first_id)
        if line1 is None:
            log.warning("fillet: first line %s is gone", sel.first_id)
            self._back_to_first("First line no longer exists. ")
            return OpResult.failure(ErrorKind.SELECTION_INVALID, "First line no longer exists")
        line2 = self._line(sel.second_id)
        if line2 is None:
            log.warning("fillet: second line %s is gone", sel.second_id)
            self._back_to_second(sel.first_id)
            return OpResult.failure(ErrorKind.SELECTION_INVALID, "Second line no longer exists")

        result = self._construct(line1, line2)
        if not result:
            log.info("fillet: %s", result.message)
            self._back_to_first(f"{result.message}. ")
            return result

        store = self.context.store
        corner = result.value
        corner_id = store.add_entity(corner.corner)
        for entity_id, trimmed in ((sel.first_id, corner.line1), (sel.second_id, corner.line2)):
            if trimmed is None:
                store.delete_entity(entity_id)
            else:
                store.update_entity(entity_id, {"start": trimmed.start, "end": trimmed.end})
        log.info("fillet: %s %s created (r=%.4g)", self._noun, corner_id, self.radius)
        self.last_outcome = Phase.COMMITTED
        noun = self._noun.capitalize()
        self._back_to_first(f"{noun} created. ")
        return OpResult.success(corner_id)

    def render_preview(self, surface: PreviewSurface) -> None:
        sel = self.selection
        if sel.step is not FilletStep.EDIT_RADIUS:
            return
        line1, line2 = self._line(sel.first_id), self._line(sel.second_id)
        if line1 is None or line2 is None:
            return
        result = self._construct(line1, line2, trim=False)
        if not result:
            return
        style = tool_style(self)
        corner = result.value.corner
        if isinstance(corner, Arc):
            surface.draw_arc(
                corner.center,
                corner.radius,
                corner.start_angle,
                corner.end_angle,
                corner.counterclockwise,
                color=style.stroke_color,
                width=style.stroke_width,
                dash=PREVIEW_DASH,
            )
        else:
            surface.draw_polyline(
                corner.points(), color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH
            )
