"""Read-only measurement probe.

The probe takes input like a drafting tool but never adds, updates or
deletes entities; completed measurements go into an append-only history
that the host can display or export.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from math import degrees
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..errors import ErrorKind, GeometryDegenerate, OpResult
from ..kernel.entities import Arc, Circle, Entity, Line, Polyline, Rectangle
from ..kernel.geometry import Vec2, angle_between, distance, polygon_area, polygon_perimeter
from .base import (
    KeyEvent,
    PointerEvent,
    PreviewSurface,
    ToolContext,
    ToolSpec,
    cancel_tool,
    draw_rubber_band,
    escape_step,
    incomplete,
)
from .state import IDLE_STATE, Phase, add_point, move_cursor, reset

log = logging.getLogger("adaptivedraft.measure")

MEASURE_SPEC = ToolSpec("measure", "Measure", "straighten", "crosshair", None, 2)


class MeasureKind(str, Enum):
    DISTANCE = "distance"
    ANGLE = "angle"
    AREA = "area"
    PERIMETER = "perimeter"
    RADIUS = "radius"
    COORDINATES = "coordinates"


# Fixed point counts; AREA and PERIMETER are open ended (3 or more)
_FIXED_POINTS = {
    MeasureKind.DISTANCE: 2,
    MeasureKind.ANGLE: 3,
    MeasureKind.RADIUS: 2,
    MeasureKind.COORDINATES: 1,
}
_MIN_LOOP_POINTS = 3


@dataclass(frozen=True)
class Measurement:
    kind: MeasureKind
    value: Optional[float]
    unit: str
    points: Tuple[Vec2, ...]
    description: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "unit": self.unit,
            "points": [list(p.as_tuple()) for p in self.points],
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MeasurementProbe:
    def __init__(
        self,
        context: ToolContext,
        kind: MeasureKind = MeasureKind.DISTANCE,
        *,
        clock: Callable[[], datetime] = _utc_now,
        spec: ToolSpec = MEASURE_SPEC,
    ) -> None:
        self.spec = spec
        self.context = context
        self.state = IDLE_STATE
        self.last_outcome: Optional[Phase] = None
        self.clock = clock
        self._kind = MeasureKind(kind)
        self._history: List[Measurement] = []

    # --- configuration ----------------------------------------------------
    @property
    def kind(self) -> MeasureKind:
        return self._kind

    @kind.setter
    def kind(self, value: MeasureKind) -> None:
        self._kind = MeasureKind(value)
        self.state = reset(self.state)
        self.context.prompt(f"Measure {self._kind.value}: specify first point")

    @property
    def history(self) -> Tuple[Measurement, ...]:
        return tuple(self._history)

    @property
    def _units(self) -> str:
        return self.context.settings.units.value

    def _fmt(self, value: float) -> str:
        return f"{value:.{self.context.settings.precision}f}"

    # --- lifecycle --------------------------------------------------------
    def activate(self) -> None:
        self.state = reset()
        self.context.prompt(f"Measure {self._kind.value}: specify first point")

    def deactivate(self) -> None:
        self.state = reset()

    def cancel(self) -> None:
        cancel_tool(self)

    def on_pointer_down(self, event: PointerEvent) -> None:
        fixed = _FIXED_POINTS.get(self._kind)
        if fixed is None and event.is_double_click and self.state.count >= _MIN_LOOP_POINTS:
            self.complete()
            return
        self.state = add_point(self.state, event.point, fixed)
        if self.state.phase is Phase.READY:
            self.complete()
        else:
            self.context.prompt(f"Measure {self._kind.value}: specify next point")

    def on_pointer_move(self, event: PointerEvent) -> None:
        self.state = move_cursor(self.state, event.point, event.shift)

    def on_key_down(self, event: KeyEvent) -> None:
        if event.key == "Escape":
            escape_step(self)
        elif event.key == "Enter" and self._kind not in _FIXED_POINTS:
            if self.state.count >= _MIN_LOOP_POINTS:
                self.complete()

    # --- computation ------------------------------------------------------
    def _record(
        self, kind: MeasureKind, value: Optional[float], unit: str, points: Iterable[Vec2], description: str
    ) -> Measurement:
        m = Measurement(kind, value, unit, tuple(points), description, self.clock())
        self._history.append(m)
        log.info("measure: %s", description)
        return m

    def measure_points(self, kind: MeasureKind, points: Tuple[Vec2, ...]) -> Measurement:
        """Compute and record a measurement; raises GeometryDegenerate for unusable input."""

        units = self._units
        fmt = self._fmt
        if kind is MeasureKind.DISTANCE:
            d = distance(points[0], points[1])
            return self._record(kind, d, units, points, f"Distance: {fmt(d)} {units}")
        if kind is MeasureKind.ANGLE:
            a = degrees(angle_between(points[1], points[0], points[2]))
            return self._record(kind, a, "°", points, f"Angle: {fmt(a)}°")
        if kind is MeasureKind.AREA:
            area = polygon_area(points)
            return self._record(kind, area, f"{units}²", points, f"Area: {fmt(area)} {units}²")
        if kind is MeasureKind.PERIMETER:
            p = polygon_perimeter(points)
            return self._record(kind, p, units, points, f"Perimeter: {fmt(p)} {units}")
        if kind is MeasureKind.RADIUS:
            r = distance(points[0], points[1])
            return self._record(kind, r, units, points, f"Radius: {fmt(r)} {units}")
        pt = points[0]
        return self._record(kind, None, units, points, f"X: {fmt(pt.x)}, Y: {fmt(pt.y)}")

    def complete(self) -> OpResult:
        need = _FIXED_POINTS.get(self._kind, _MIN_LOOP_POINTS)
        if self.state.count < need:
            return incomplete(self, need)
        try:
            m = self.measure_points(self._kind, self.state.points)
        except GeometryDegenerate as exc:
            self.state = reset(self.state)
            self.context.prompt(str(exc))
            log.debug("measure: rejected: %s", exc)
            return OpResult.from_error(exc)
        self.state = reset(self.state)
        self.last_outcome = Phase.COMMITTED
        self.context.prompt(m.description)
        return OpResult.success(m)

    def measure_entity(self, entity: Entity) -> OpResult[List[Measurement]]:
        units = self._units
        fmt = self._fmt
        if isinstance(entity, Line):
            d = entity.length
            out = [self._record(MeasureKind.DISTANCE, d, units, entity.points(), f"Line length: {fmt(d)} {units}")]
        elif isinstance(entity, Arc):
            d = entity.length
            out = [self._record(MeasureKind.DISTANCE, d, units, entity.points(), f"Arc length: {fmt(d)} {units}")]
        elif isinstance(entity, Circle):
            area, circ = entity.area, entity.circumference
            pts = entity.points()
            out = [
                self._record(MeasureKind.AREA, area, f"{units}²", pts, f"Circle area: {fmt(area)} {units}²"),
                self._record(MeasureKind.PERIMETER, circ, units, pts, f"Circle circumference: {fmt(circ)} {units}"),
            ]
        elif isinstance(entity, Rectangle):
            area, per = entity.area, entity.perimeter
            pts = entity.points()
            out = [
                self._record(MeasureKind.AREA, area, f"{units}²", pts, f"Rectangle area: {fmt(area)} {units}²"),
                self._record(MeasureKind.PERIMETER, per, units, pts, f"Rectangle perimeter: {fmt(per)} {units}"),
            ]
        elif isinstance(entity, Polyline) and entity.closed:
            area, per = entity.area, entity.length
            out = [
                self._record(MeasureKind.AREA, area, f"{units}²", entity.points, f"Polygon area: {fmt(area)} {units}²"),
                self._record(MeasureKind.PERIMETER, per, units, entity.points, f"Polygon perimeter: {fmt(per)} {units}"),
            ]
        elif isinstance(entity, Polyline):
            d = entity.length
            out = [self._record(MeasureKind.DISTANCE, d, units, entity.points, f"Polyline length: {fmt(d)} {units}")]
        else:
            return OpResult.failure(
                ErrorKind.SELECTION_INVALID, f"Cannot measure a {type(entity).__name__.lower()}"
            )
        self.context.prompt("; ".join(m.description for m in out))
        return OpResult.success(out)

    def measure_selection(self, ids: Iterable[str]) -> List[Measurement]:
        results: List[Measurement] = []
        for entity_id in ids:
            entity = self.context.store.get_entity(entity_id)
            if entity is None:
                log.debug("measure: entity %s not found", entity_id)
                continue
            measured = self.measure_entity(entity)
            if measured:
                results.extend(measured.value)
        return results

    # --- history ----------------------------------------------------------
    def clear_history(self) -> None:
        self._history.clear()

    def export(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._history]

    def export_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.export(), indent=indent, ensure_ascii=False)

    def render_preview(self, surface: PreviewSurface) -> None:
        closed = self._kind in (MeasureKind.AREA, MeasureKind.PERIMETER)
        draw_rubber_band(surface, self, closed=closed)


__all__ = ["MeasureKind", "Measurement", "MeasurementProbe"]
