import pytest

from adaptivedraft.errors import ToolConfigurationError
from adaptivedraft.kernel.entities import EntityKind, Line
from adaptivedraft.kernel.geometry import Vec2
from adaptivedraft.store import MemoryEntityStore
from adaptivedraft.tools import (
    DEFAULT_TOOLS,
    FilletTool,
    KeyEvent,
    LineTool,
    PointerEvent,
    RecordingSurface,
    ToolManager,
    ToolProtocol,
)


def _click(manager, x, y):
    manager.on_pointer_down(PointerEvent(Vec2(float(x), float(y))))


def test_every_default_tool_satisfies_the_protocol():
    manager = ToolManager(MemoryEntityStore())
    for tool_id in DEFAULT_TOOLS:
        tool = manager.activate(tool_id)
        assert isinstance(tool, ToolProtocol)
        assert manager.active_tool_id == tool_id


def test_activate_unknown_tool():
    manager = ToolManager(MemoryEntityStore())
    with pytest.raises(ToolConfigurationError):
        manager.activate("spline")
    with pytest.raises(ToolConfigurationError):
        ToolManager(MemoryEntityStore(), default_tool="spline")


def test_dispatch_reaches_active_tool():
    store = MemoryEntityStore()
    manager = ToolManager(store)
    _click(manager, 0, 0)  # no tool yet
    manager.activate("line")
    assert store.prompt == "Line: specify first point"
    _click(manager, 0, 0)
    manager.on_pointer_move(PointerEvent(Vec2(3.0, 3.0)))
    surface = RecordingSurface()
    manager.render_preview(surface)
    assert "polyline" in surface.ops()
    _click(manager, 5, 0)
    assert len(store.entities(EntityKind.LINE)) == 1


def test_switching_tools_discards_temp_points_and_selection():
    store = MemoryEntityStore()
    store.add_entity(Line(Vec2(0.0, 0.0), Vec2(10.0, 0.0)))
    manager = ToolManager(store)
    manager.activate("fillet")
    _click(manager, 5, 0)
    assert store.selection == {"e1"}
    line = manager.activate("line")
    assert store.selection == set()
    _click(manager, 1, 1)
    manager.activate("circle")
    assert line.state.count == 0
    assert len(store) == 1


def test_escape_with_nothing_left_returns_to_default_tool():
    manager = ToolManager(MemoryEntityStore(), default_tool="line")
    manager.activate("fillet")
    manager.on_key_down(KeyEvent("Escape"))
    assert manager.active_tool_id == "line"
    manager.on_key_down(KeyEvent("Escape"))
    assert manager.active_tool_id == "line"


def test_escape_in_default_tool_restarts_it():
    store = MemoryEntityStore()
    store.add_entity(Line(Vec2(0.0, 0.0), Vec2(10.0, 0.0)))
    manager = ToolManager(store, default_tool="line")
    first = manager.activate("line")
    store.select_entities(["e1"])
    _click(manager, 1, 1)
    manager.on_key_down(KeyEvent("Escape"))
    assert manager.active_tool is first
    manager.on_key_down(KeyEvent("Escape"))
    assert manager.active_tool_id == "line"
    assert manager.active_tool.state.count == 0
    assert store.selection == set()
    assert store.prompt == "Line: specify first point"
    _click(manager, 0, 5)
    _click(manager, 5, 5)
    assert len(store.entities(EntityKind.LINE)) == 2


def test_escape_without_default_deactivates():
    manager = ToolManager(MemoryEntityStore())
    manager.activate("rectangle")
    manager.on_key_down(KeyEvent("Escape"))
    assert manager.active_tool is None


def test_custom_factories():
    manager = ToolManager(MemoryEntityStore(), factories={"only-line": LineTool})
    assert isinstance(manager.activate("only-line"), LineTool)
    with pytest.raises(ToolConfigurationError):
        manager.activate("fillet")
    manager.register("fillet", FilletTool)
    assert isinstance(manager.activate("fillet"), FilletTool)
