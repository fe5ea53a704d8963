"""Immutable interaction state shared by the point-based tools.

Tools never mutate a :class:`ToolState`; every input event produces a new
value through one of the transition functions below.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from ..kernel.geometry import Vec2


class Phase(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    READY = "ready"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ToolState:
    phase: Phase = Phase.IDLE
    points: Tuple[Vec2, ...] = ()
    cursor: Optional[Vec2] = None
    snap: bool = False

    @property
    def count(self) -> int:
        return len(self.points)

    @property
    def first(self) -> Optional[Vec2]:
        return self.points[0] if self.points else None

    @property
    def last(self) -> Optional[Vec2]:
        return self.points[-1] if self.points else None


IDLE_STATE = ToolState()


def add_point(state: ToolState, point: Vec2, required: Optional[int] = None) -> ToolState:
    """Append ``point``; the state turns READY once ``required`` points exist."""

    points = state.points + (point,)
    ready = required is not None and required > 0 and len(points) >= required
    return replace(state, points=points, phase=Phase.READY if ready else Phase.COLLECTING)


def move_cursor(state: ToolState, point: Vec2, snap: bool = False) -> ToolState:
    return replace(state, cursor=point, snap=snap)


def drop_last(state: ToolState) -> ToolState:
    points = state.points[:-1]
    return replace(state, points=points, phase=Phase.COLLECTING if points else Phase.IDLE)


def reset(state: Optional[ToolState] = None) -> ToolState:
    """Back to IDLE, keeping only the cursor so the preview follows the pointer."""

    if state is None:
        return IDLE_STATE
    return ToolState(cursor=state.cursor, snap=state.snap)


__all__ = ["Phase", "ToolState", "IDLE_STATE", "add_point", "move_cursor", "drop_last", "reset"]
