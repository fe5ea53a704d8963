"""Shared contract for the drafting tools.

There is no tool base class.  Every tool satisfies :class:`ToolProtocol`
structurally and reuses the helper functions in this module for the parts
of the lifecycle they have in common (Escape step-back, commit, cancel and
the dashed preview).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from ..errors import DraftingError, ErrorKind, OpResult, ToolConfigurationError
from ..kernel.entities import Entity, Style
from ..kernel.geometry import Vec2
from ..settings import DraftSettings
from ..store import EntityStore
from .state import Phase, ToolState, drop_last, reset

log = logging.getLogger("adaptivedraft.tools")

FIRST_MARKER_COLOR = "#FF0000"
MARKER_COLOR = "#0066FF"
MARKER_SIZE = 3.0
PREVIEW_DASH: Tuple[float, ...] = (5.0, 5.0)


@dataclass(frozen=True)
class ToolSpec:
    """Identity and defaults of a tool as shown by the host."""

    id: str
    name: str
    icon: str = ""
    cursor: str = "crosshair"
    default_style: Optional[Style] = None
    required_points: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ToolConfigurationError("ToolSpec.id must not be empty")
        if self.required_points < 0:
            raise ToolConfigurationError(
                f"{self.id}: required_points must be >= 0, got {self.required_points}"
            )


@dataclass(frozen=True)
class PointerEvent:
    """Pointer input in drawing units."""

    point: Vec2
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    click_count: int = 1

    @property
    def is_double_click(self) -> bool:
        return self.click_count >= 2


@dataclass(frozen=True)
class KeyEvent:
    key: str
    shift: bool = False
    ctrl: bool = False
    alt: bool = False


def _no_exit() -> None:
    return None


@dataclass
class ToolContext:
    """Capabilities handed to a tool: the document, the settings and a way out."""

    store: EntityStore
    settings: DraftSettings = field(default_factory=DraftSettings)
    exit_tool: Callable[[], None] = _no_exit

    @property
    def layer(self) -> str:
        return self.settings.layer or self.store.active_layer

    def prompt(self, text: str) -> None:
        self.store.set_command_prompt(text)


# --- Preview surface ------------------------------------------------------


@runtime_checkable
class PreviewSurface(Protocol):
    def draw_polyline(
        self, points: Sequence[Vec2], *, color: str, width: float, dash: Sequence[float], closed: bool = False
    ) -> None: ...

    def draw_circle(
        self, center: Vec2, radius: float, *, color: str, width: float, dash: Sequence[float]
    ) -> None: ...

    def draw_arc(
        self,
        center: Vec2,
        radius: float,
        start_angle: float,
        end_angle: float,
        counterclockwise: bool,
        *,
        color: str,
        width: float,
        dash: Sequence[float],
    ) -> None: ...

    def draw_marker(self, point: Vec2, *, color: str, size: float) -> None: ...

    def draw_text(self, point: Vec2, text: str, *, color: str) -> None: ...


@dataclass(frozen=True)
class DrawCall:
    op: str
    args: Dict[str, Any]


class RecordingSurface:
    """Surface that records draw calls instead of painting them."""

    def __init__(self) -> None:
        self.calls: List[DrawCall] = []

    def _record(self, op: str, **args: Any) -> None:
        self.calls.append(DrawCall(op, args))

    def draw_polyline(self, points, *, color, width, dash, closed=False):
        self._record("polyline", points=tuple(points), color=color, width=width, dash=tuple(dash), closed=closed)

    def draw_circle(self, center, radius, *, color, width, dash):
        self._record("circle", center=center, radius=radius, color=color, width=width, dash=tuple(dash))

    def draw_arc(self, center, radius, start_angle, end_angle, counterclockwise, *, color, width, dash):
        self._record(
            "arc",
            center=center,
            radius=radius,
            start_angle=start_angle,
            end_angle=end_angle,
            counterclockwise=counterclockwise,
            color=color,
            width=width,
            dash=tuple(dash),
        )

    def draw_marker(self, point, *, color, size):
        self._record("marker", point=point, color=color, size=size)

    def draw_text(self, point, text, *, color):
        self._record("text", point=point, text=text, color=color)

    def ops(self) -> List[str]:
        return [c.op for c in self.calls]

    def of(self, op: str) -> List[DrawCall]:
        return [c for c in self.calls if c.op == op]

    def clear(self) -> None:
        self.calls.clear()


# --- Tool protocol --------------------------------------------------------


@runtime_checkable
class ToolProtocol(Protocol):
    spec: ToolSpec
    state: ToolState
    context: ToolContext
    last_outcome: Optional[Phase]

    def activate(self) -> None: ...

    def deactivate(self) -> None: ...

    def on_pointer_down(self, event: PointerEvent) -> None: ...

    def on_pointer_move(self, event: PointerEvent) -> None: ...

    def on_key_down(self, event: KeyEvent) -> None: ...

    def complete(self) -> OpResult: ...

    def cancel(self) -> None: ...

    def render_preview(self, surface: PreviewSurface) -> None: ...


# --- Shared lifecycle helpers ---------------------------------------------


def merge_style(base: Style, override: Optional[Style]) -> Style:
    """Fields of ``override`` that differ from the defaults win over ``base``."""

    if override is None:
        return base
    defaults = Style()
    changes = {
        f.name: getattr(override, f.name)
        for f in fields(Style)
        if getattr(override, f.name) != getattr(defaults, f.name)
    }
    return Style(**{**{f.name: getattr(base, f.name) for f in fields(Style)}, **changes})


def tool_style(tool: ToolProtocol) -> Style:
    return merge_style(tool.context.settings.default_style, tool.spec.default_style)


def escape_step(tool: ToolProtocol) -> None:
    """Drop the last temp point, or leave the tool when there is none."""

    if tool.state.points:
        tool.state = drop_last(tool.state)
        log.debug("%s: stepped back to %d point(s)", tool.spec.id, tool.state.count)
        return
    tool.state = reset(tool.state)
    log.debug("%s: exit requested", tool.spec.id)
    tool.context.exit_tool()


def cancel_tool(tool: ToolProtocol) -> None:
    tool.state = reset(tool.state)
    tool.last_outcome = Phase.CANCELLED
    log.debug("%s: cancelled", tool.spec.id)


def incomplete(tool: ToolProtocol, needed: int) -> OpResult:
    return OpResult.failure(
        ErrorKind.INPUT_INCOMPLETE,
        f"{tool.spec.name} needs {needed} point(s), has {tool.state.count}",
    )


def commit_entity(
    tool: ToolProtocol, build: Callable[[], Entity], prompt: str
) -> OpResult[str]:
    """Build the entity and add it to the store, or report why it failed.

    On failure the last temp point is dropped so the user can place it again.
    """

    try:
        entity = build()
    except DraftingError as exc:
        tool.state = drop_last(tool.state)
        tool.context.prompt(str(exc))
        log.debug("%s: commit rejected: %s", tool.spec.id, exc)
        return OpResult.from_error(exc)
    entity_id = tool.context.store.add_entity(entity)
    tool.state = reset(tool.state)
    tool.last_outcome = Phase.COMMITTED
    tool.context.prompt(prompt)
    log.info("%s: committed %s %s", tool.spec.id, entity.kind.value, entity_id)
    return OpResult.success(entity_id)


def draw_markers(surface: PreviewSurface, points: Sequence[Vec2]) -> None:
    for i, p in enumerate(points):
        surface.draw_marker(p, color=FIRST_MARKER_COLOR if i == 0 else MARKER_COLOR, size=MARKER_SIZE)


def draw_rubber_band(
    surface: PreviewSurface, tool: ToolProtocol, *, closed: bool = False, with_cursor: bool = True
) -> None:
    """Dashed path through the temp points and the cursor, then the markers."""

    style = tool_style(tool)
    path = list(tool.state.points)
    if with_cursor and tool.state.cursor is not None and path:
        path.append(tool.state.cursor)
    if len(path) >= 2:
        surface.draw_polyline(
            path, color=style.stroke_color, width=style.stroke_width, dash=PREVIEW_DASH, closed=closed
        )
    draw_markers(surface, tool.state.points)


__all__ = [
    "FIRST_MARKER_COLOR",
    "MARKER_COLOR",
    "PREVIEW_DASH",
    "ToolSpec",
    "PointerEvent",
    "KeyEvent",
    "ToolContext",
    "PreviewSurface",
    "DrawCall",
    "RecordingSurface",
    "ToolProtocol",
    "merge_style",
    "tool_style",
    "escape_step",
    "cancel_tool",
    "incomplete",
    "commit_entity",
    "draw_markers",
    "draw_rubber_band",
]
