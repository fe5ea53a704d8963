import math

import pytest

from adaptivedraft.errors import ErrorKind, ToolConfigurationError
from adaptivedraft.kernel.entities import Arc, Circle, EntityKind, Line, Polyline, Rectangle, Style
from adaptivedraft.kernel.geometry import Vec2
from adaptivedraft.settings import DraftSettings
from adaptivedraft.store import MemoryEntityStore
from adaptivedraft.tools.arc import ArcTool, snap_sweep
from adaptivedraft.tools.base import (
    FIRST_MARKER_COLOR,
    MARKER_COLOR,
    KeyEvent,
    PointerEvent,
    RecordingSurface,
    ToolContext,
    ToolSpec,
)
from adaptivedraft.tools.circle import CircleTool
from adaptivedraft.tools.line import LineTool
from adaptivedraft.tools.polyline import PolylineTool
from adaptivedraft.tools.rectangle import RectangleTool
from adaptivedraft.tools.state import Phase, add_point


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def exits():
    return []


@pytest.fixture
def context(store, exits):
    return ToolContext(store, DraftSettings(), lambda: exits.append(True))


def click(tool, x, y, **kwargs):
    tool.on_pointer_down(PointerEvent(Vec2(float(x), float(y)), **kwargs))


def move(tool, x, y, **kwargs):
    tool.on_pointer_move(PointerEvent(Vec2(float(x), float(y)), **kwargs))


def key(tool, name):
    tool.on_key_down(KeyEvent(name))


def only(store, kind):
    items = list(store.entities(kind).values())
    assert len(items) == 1
    return items[0]


def test_negative_required_points_rejected():
    with pytest.raises(ToolConfigurationError):
        ToolSpec("broken", "Broken", required_points=-1)


# --- Line -----------------------------------------------------------------


def test_line_commits_on_second_click(store, context):
    tool = LineTool(context)
    tool.activate()
    click(tool, 0, 0)
    assert tool.state.phase is Phase.COLLECTING
    click(tool, 10, 5)
    line = only(store, EntityKind.LINE)
    assert line == Line(Vec2(0.0, 0.0), Vec2(10.0, 5.0))
    assert tool.state.phase is Phase.IDLE
    assert tool.last_outcome is Phase.COMMITTED


def test_line_ignores_second_click_on_first_point(store, context):
    tool = LineTool(context)
    click(tool, 1, 1)
    click(tool, 1.0005, 1.0)
    assert len(store) == 0
    assert tool.state.count == 1
    click(tool, 1.002, 1.0)
    assert len(store) == 1


def test_line_uses_settings_layer_and_style(store):
    style = Style(stroke_color="#00FF00", stroke_width=2.0)
    store.active_layer = "active"
    tool = LineTool(ToolContext(store, DraftSettings(default_style=style, layer="override")))
    click(tool, 0, 0)
    click(tool, 1, 0)
    line = only(store, EntityKind.LINE)
    assert line.layer == "override"
    assert line.style == style

    tool = LineTool(ToolContext(store, DraftSettings()))
    click(tool, 0, 5)
    click(tool, 1, 5)
    assert {e.layer for e in store.entities().values()} == {"override", "active"}


def test_pointer_move_never_adds_points(store, context):
    tool = LineTool(context)
    click(tool, 0, 0)
    for i in range(5):
        move(tool, i, i)
    assert tool.state.count == 1
    assert tool.state.cursor == Vec2(4.0, 4.0)
    assert len(store) == 0


def test_escape_steps_back_then_exits(context, exits):
    tool = LineTool(context)
    click(tool, 0, 0)
    key(tool, "Escape")
    assert tool.state.count == 0
    assert tool.state.phase is Phase.IDLE
    assert exits == []
    key(tool, "Escape")
    assert exits == [True]


def test_cancel_records_outcome(context):
    tool = LineTool(context)
    click(tool, 0, 0)
    tool.cancel()
    assert tool.state.count == 0
    assert tool.last_outcome is Phase.CANCELLED


def test_complete_without_points_is_incomplete(context):
    result = LineTool(context).complete()
    assert not result
    assert result.kind is ErrorKind.INPUT_INCOMPLETE


def test_line_preview_markers_and_dash(store, context):
    tool = LineTool(context)
    click(tool, 0, 0)
    move(tool, 5, 5)
    surface = RecordingSurface()
    tool.render_preview(surface)
    assert surface.ops() == ["polyline", "marker"]
    stroke = surface.of("polyline")[0]
    assert stroke.args["points"] == (Vec2(0.0, 0.0), Vec2(5.0, 5.0))
    assert stroke.args["dash"]
    assert surface.of("marker")[0].args["color"] == FIRST_MARKER_COLOR
    assert len(store) == 0


# --- Arc ------------------------------------------------------------------


def test_arc_three_clicks(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    click(tool, 0, 5)
    arc = only(store, EntityKind.ARC)
    assert isinstance(arc, Arc)
    assert arc.radius == pytest.approx(5.0)
    assert arc.counterclockwise
    assert arc.sweep == pytest.approx(math.pi / 2)
    assert arc.end_point.almost_equals(Vec2(0.0, 5.0))


def test_arc_snap_from_placing_click(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    # 100 degrees snaps to 90
    t = math.radians(100.0)
    click(tool, 5 * math.cos(t), 5 * math.sin(t), shift=True)
    arc = only(store, EntityKind.ARC)
    assert arc.sweep == pytest.approx(math.pi / 2)


def test_arc_snap_full_turn(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    t = math.radians(350.0)
    click(tool, 5 * math.cos(t), 5 * math.sin(t), shift=True)
    assert only(store, EntityKind.ARC).sweep == pytest.approx(2 * math.pi)


def test_arc_complete_uses_last_move_modifier(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    move(tool, 0, 5, shift=True)
    tool.state = add_point(tool.state, Vec2(-5.0, 0.5))
    tool.complete()
    assert only(store, EntityKind.ARC).sweep == pytest.approx(math.pi)


def test_snap_sweep_nearest():
    assert snap_sweep(math.radians(130)) == pytest.approx(math.pi / 2)
    assert snap_sweep(math.radians(140)) == pytest.approx(math.pi)
    assert snap_sweep(math.radians(250)) == pytest.approx(3 * math.pi / 2)


def test_arc_degenerate_radius_stays_collecting(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 0.0005, 0)
    click(tool, 0, 5)
    assert len(store) == 0
    assert tool.state.phase is Phase.COLLECTING
    assert tool.state.count == 2
    assert "too small" in store.prompt


def test_arc_end_on_center_rejected(store, context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 0, 5)
    click(tool, 0, 0)
    assert len(store) == 0
    assert tool.state.phase is Phase.COLLECTING
    assert tool.state.count == 2
    assert "center" in store.prompt
    click(tool, -5, 0)
    assert only(store, EntityKind.ARC).sweep == pytest.approx(math.pi / 2)


def test_arc_preview_skips_cursor_on_center(context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    move(tool, 0, 0)
    surface = RecordingSurface()
    tool.render_preview(surface)
    assert "arc" not in surface.ops()


def test_arc_preview_draws_arc(context):
    tool = ArcTool(context)
    click(tool, 0, 0)
    click(tool, 5, 0)
    move(tool, 0, 5)
    surface = RecordingSurface()
    tool.render_preview(surface)
    assert "arc" in surface.ops()
    colors = [c.args["color"] for c in surface.of("marker")]
    assert colors == [FIRST_MARKER_COLOR, MARKER_COLOR]


# --- Circle and rectangle -------------------------------------------------


def test_circle_center_radius(store, context):
    tool = CircleTool(context)
    click(tool, 1, 1)
    click(tool, 4, 5)
    circle = only(store, EntityKind.CIRCLE)
    assert isinstance(circle, Circle)
    assert circle.radius == pytest.approx(5.0)


def test_rectangle_two_corners(store, context):
    tool = RectangleTool(context)
    click(tool, 0, 0)
    click(tool, 4, -2)
    rect = only(store, EntityKind.RECTANGLE)
    assert isinstance(rect, Rectangle)
    assert rect.area == pytest.approx(8.0)


def test_rectangle_zero_height_rejected(store, context):
    tool = RectangleTool(context)
    click(tool, 0, 0)
    click(tool, 4, 0)
    assert len(store) == 0
    assert tool.state.count == 1


# --- Polyline -------------------------------------------------------------


def test_polyline_closes_near_first_point(store, context):
    tool = PolylineTool(context)
    for x, y in ((0, 0), (10, 0), (10, 10), (0, 0.5)):
        click(tool, x, y)
    poly = only(store, EntityKind.POLYLINE)
    assert isinstance(poly, Polyline)
    assert poly.closed
    assert len(poly.points) == 3


def test_polyline_double_click_commits_open(store, context):
    tool = PolylineTool(context)
    click(tool, 0, 0)
    click(tool, 10, 0)
    click(tool, 10, 0, click_count=2)
    poly = only(store, EntityKind.POLYLINE)
    assert not poly.closed
    assert len(poly.points) == 2


def test_polyline_keys(store, context):
    tool = PolylineTool(context)
    click(tool, 0, 0)
    click(tool, 10, 0)
    key(tool, "C")
    assert len(store) == 0  # closing needs 3 points
    key(tool, "Enter")
    assert not only(store, EntityKind.POLYLINE).closed

    for x, y in ((0, 20), (10, 20), (10, 30)):
        click(tool, x, y)
    key(tool, "c")
    closed = [p for p in store.entities(EntityKind.POLYLINE).values() if p.closed]
    assert len(closed) == 1 and len(closed[0].points) == 3


def test_polyline_close_tolerance_scales_with_pixel_size(store):
    tool = PolylineTool(ToolContext(store, DraftSettings(pixel_size=0.01)))
    for x, y in ((0, 0), (10, 0), (10, 10), (0, 0.5)):
        click(tool, x, y)
    # 10 px is only 0.1 units here, so the last click adds a point
    assert len(store) == 0
    assert tool.state.count == 4
