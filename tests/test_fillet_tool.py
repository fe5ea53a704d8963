import pytest

from adaptivedraft.errors import ErrorKind
from adaptivedraft.kernel.entities import Arc, EntityKind, Line
from adaptivedraft.kernel.geometry import Vec2
from adaptivedraft.settings import DraftSettings
from adaptivedraft.store import MemoryEntityStore
from adaptivedraft.tools.base import KeyEvent, PointerEvent, RecordingSurface, ToolContext
from adaptivedraft.tools.fillet import FilletStep, FilletTool


def _setup(*lines, radius=2.0):
    store = MemoryEntityStore()
    for line in lines:
        store.add_entity(line)
    exits = []
    ctx = ToolContext(store, DraftSettings(fillet_radius=radius), lambda: exits.append(True))
    tool = FilletTool(ctx)
    tool.activate()
    return store, tool, exits


def _corner():
    return Line(Vec2(0.0, 0.0), Vec2(10.0, 0.0)), Line(Vec2(10.0, 0.0), Vec2(10.0, 10.0))


def _click(tool, x, y, shift=False):
    tool.on_pointer_down(PointerEvent(Vec2(float(x), float(y)), shift=shift))


def _key(tool, name):
    tool.on_key_down(KeyEvent(name))


def test_fillet_two_lines():
    store, tool, _ = _setup(*_corner())
    _click(tool, 5, 0.5)
    assert tool.selection.step is FilletStep.SECOND_LINE
    assert store.selection == {"e1"}
    assert store.prompt == "Select the second line for the fillet"
    _click(tool, 10.5, 5)

    arcs = store.entities(EntityKind.ARC)
    assert list(arcs) == ["e3"]
    arc = arcs["e3"]
    assert isinstance(arc, Arc)
    assert arc.radius == pytest.approx(2.0)
    assert arc.center.almost_equals(Vec2(8.0, 2.0))
    assert store.get_entity("e1").end.almost_equals(Vec2(8.0, 0.0))
    assert store.get_entity("e2").start.almost_equals(Vec2(10.0, 2.0))
    assert store.selection == set()
    assert store.prompt == "Fillet created. Select the first line for the fillet"
    assert tool.selection.step is FilletStep.FIRST_LINE


def test_click_on_empty_space_picks_nothing():
    store, tool, _ = _setup(*_corner())
    _click(tool, 50, 50)
    assert tool.selection.step is FilletStep.FIRST_LINE
    assert store.selection == set()


def test_locked_lines_are_not_picked():
    store, tool, _ = _setup(Line(Vec2(0.0, 0.0), Vec2(10.0, 0.0), locked=True))
    _click(tool, 5, 0)
    assert tool.selection.step is FilletStep.FIRST_LINE


def test_parallel_lines_leave_store_untouched():
    a = Line(Vec2(0.0, 0.0), Vec2(10.0, 0.0))
    b = Line(Vec2(0.0, 20.0), Vec2(10.0, 20.0))
    store, tool, _ = _setup(a, b)
    _click(tool, 5, 0)
    _click(tool, 5, 20)
    assert store.entities() == {"e1": a, "e2": b}
    assert store.prompt == "Parallel/non-intersecting. Select the first line for the fillet"
    assert tool.selection.step is FilletStep.FIRST_LINE


def test_radius_too_large_reports_reason():
    store, tool, _ = _setup(*_corner(), radius=50.0)
    _click(tool, 5, 0)
    _click(tool, 10, 5)
    assert len(store) == 2
    assert store.prompt.startswith("Radius too large for segment length")


def test_first_line_deleted_between_clicks():
    store, tool, _ = _setup(*_corner())
    _click(tool, 5, 0)
    store.delete_entity("e1")
    _click(tool, 10, 5)
    assert tool.selection.step is FilletStep.FIRST_LINE
    assert store.prompt == "First line no longer exists. Select the first line for the fillet"
    assert len(store.entities(EntityKind.ARC)) == 0


def test_second_line_deleted_before_apply():
    store, tool, _ = _setup(*_corner())
    _click(tool, 5, 0)
    _click(tool, 10, 5, shift=True)
    store.delete_entity("e2")
    result = tool.apply()
    assert not result
    assert result.kind is ErrorKind.SELECTION_INVALID
    assert tool.selection.step is FilletStep.SECOND_LINE
    assert tool.selection.first_id == "e1"


def test_shift_waits_for_radius_then_enter_applies():
    store, tool, _ = _setup(*_corner())
    _click(tool, 5, 0)
    _click(tool, 10, 5, shift=True)
    assert tool.selection.step is FilletStep.EDIT_RADIUS
    _key(tool, "+")
    assert tool.radius == pytest.approx(3.0)
    assert store.prompt == "Fillet radius: 3.00"

    surface = RecordingSurface()
    tool.render_preview(surface)
    assert surface.ops() == ["arc"]
    assert surface.calls[0].args["radius"] == pytest.approx(3.0)
    assert len(store) == 2

    _key(tool, "Enter")
    arc = list(store.entities(EntityKind.ARC).values())[0]
    assert arc.radius == pytest.approx(3.0)


def test_radius_is_clamped():
    _, tool, _ = _setup(*_corner())
    tool.set_radius(0.0)
    assert tool.radius == pytest.approx(0.1)
    _key(tool, "-")
    assert tool.radius == pytest.approx(0.1)


def test_chamfer_mode():
    store, tool, _ = _setup(*_corner())
    _key(tool, "c")
    assert tool.chamfer
    assert store.prompt == "Mode: chamfer"
    _click(tool, 5, 0)
    _click(tool, 10, 5)
    lines = store.entities(EntityKind.LINE)
    assert len(lines) == 3
    bevel = lines["e3"]
    assert bevel.start.almost_equals(Vec2(8.0, 0.0))
    assert bevel.end.almost_equals(Vec2(10.0, 2.0))
    assert store.prompt.startswith("Chamfer created.")


def test_fillet_consuming_a_line_deletes_it():
    short = Line(Vec2(8.0, 0.0), Vec2(10.0, 0.0))
    store, tool, _ = _setup(short, Line(Vec2(10.0, 0.0), Vec2(10.0, 10.0)))
    _click(tool, 9, 0)
    _click(tool, 10, 5)
    assert "e1" not in store
    assert "e2" in store
    assert len(store.entities(EntityKind.ARC)) == 1


def test_escape_steps_back():
    store, tool, exits = _setup(*_corner())
    _click(tool, 5, 0)
    _click(tool, 10, 5, shift=True)
    _key(tool, "Escape")
    assert tool.selection.step is FilletStep.SECOND_LINE
    assert store.selection == {"e1"}
    _key(tool, "Escape")
    assert tool.selection.step is FilletStep.FIRST_LINE
    assert store.selection == set()
    assert exits == []
    _key(tool, "Escape")
    assert exits == [True]


def test_complete_without_selection():
    _, tool, _ = _setup(*_corner())
    assert tool.complete().kind is ErrorKind.INPUT_INCOMPLETE
