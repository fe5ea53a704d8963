"""Keeps at most one tool active and routes host input to it."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Union

from ..errors import ToolConfigurationError
from ..settings import DraftSettings
from ..store import EntityStore
from .arc import ArcTool
from .base import KeyEvent, PointerEvent, PreviewSurface, ToolContext, ToolProtocol
from .circle import CircleTool
from .dimension import DimensionTool
from .fillet import FilletTool
from .line import LineTool
from .measure import MeasurementProbe
from .polyline import PolylineTool
from .rectangle import RectangleTool

log = logging.getLogger("adaptivedraft.tools")

DraftingTool = Union[
    LineTool, ArcTool, CircleTool, RectangleTool, PolylineTool, DimensionTool, FilletTool, MeasurementProbe
]

ToolFactory = Callable[[ToolContext], ToolProtocol]

DEFAULT_TOOLS: Dict[str, ToolFactory] = {
    "line": LineTool,
    "arc": ArcTool,
    "circle": CircleTool,
    "rectangle": RectangleTool,
    "polyline": PolylineTool,
    "dimension": DimensionTool,
    "fillet": FilletTool,
    "measure": MeasurementProbe,
}


class ToolManager:
    def __init__(
        self,
        store: EntityStore,
        settings: Optional[DraftSettings] = None,
        *,
        default_tool: Optional[str] = None,
        factories: Optional[Dict[str, ToolFactory]] = None,
    ) -> None:
        self.store = store
        self.settings = settings or DraftSettings()
        self.factories: Dict[str, ToolFactory] = dict(DEFAULT_TOOLS if factories is None else factories)
        if default_tool is not None and default_tool not in self.factories:
            raise ToolConfigurationError(f"Unknown default tool {default_tool!r}")
        self.default_tool = default_tool
        self.context = ToolContext(store, self.settings, self.exit_tool)
        self._active: Optional[ToolProtocol] = None

    @property
    def active_tool(self) -> Optional[ToolProtocol]:
        return self._active

    @property
    def active_tool_id(self) -> Optional[str]:
        return self._active.spec.id if self._active is not None else None

    def register(self, tool_id: str, factory: ToolFactory) -> None:
        self.factories[tool_id] = factory

    def activate(self, tool_id: str) -> ToolProtocol:
        factory = self.factories.get(tool_id)
        if factory is None:
            raise ToolConfigurationError(f"Unknown tool {tool_id!r}")
        self.deactivate()
        tool = factory(self.context)
        self._active = tool
        tool.activate()
        log.debug("tool manager: %s active", tool_id)
        return tool

    def deactivate(self) -> None:
        tool = self._active
        if tool is None:
            return
        tool.deactivate()
        self.store.clear_selection()
        self._active = None
        log.debug("tool manager: %s deactivated", tool.spec.id)

    def exit_tool(self) -> None:
        """Called by a tool that has nothing left to step back through."""

        if self.default_tool is None:
            self.deactivate()
        else:
            # The default tool stays active; a fresh instance starts it over
            self.activate(self.default_tool)

    # --- dispatch ---------------------------------------------------------
    def on_pointer_down(self, event: PointerEvent) -> None:
        if self._active is not None:
            self._active.on_pointer_down(event)

    def on_pointer_move(self, event: PointerEvent) -> None:
        if self._active is not None:
            self._active.on_pointer_move(event)

    def on_key_down(self, event: KeyEvent) -> None:
        if self._active is not None:
            self._active.on_key_down(event)

    def render_preview(self, surface: PreviewSurface) -> None:
        if self._active is not None:
            self._active.render_preview(surface)
