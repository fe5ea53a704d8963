import json
import math
from datetime import datetime, timezone

import pytest

from adaptivedraft.errors import ErrorKind
from adaptivedraft.kernel.entities import (
    Arc,
    Circle,
    Dimension,
    DimensionKind,
    Line,
    Polyline,
    Rectangle,
)
from adaptivedraft.kernel.geometry import Vec2
from adaptivedraft.settings import DraftSettings
from adaptivedraft.store import MemoryEntityStore
from adaptivedraft.tools.base import KeyEvent, PointerEvent, ToolContext
from adaptivedraft.tools.measure import MeasureKind, MeasurementProbe
from adaptivedraft.units import Units

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _probe(kind=MeasureKind.DISTANCE, store=None, settings=None):
    store = store if store is not None else MemoryEntityStore()
    probe = MeasurementProbe(ToolContext(store, settings or DraftSettings()), kind, clock=lambda: FIXED_TIME)
    probe.activate()
    return store, probe


def _click(probe, x, y, clicks=1):
    probe.on_pointer_down(PointerEvent(Vec2(float(x), float(y)), click_count=clicks))


def test_distance():
    store, probe = _probe()
    _click(probe, 0, 0)
    _click(probe, 3, 4)
    (m,) = probe.history
    assert m.value == pytest.approx(5.0)
    assert m.unit == "mm"
    assert m.description == "Distance: 5.00 mm"
    assert store.prompt == "Distance: 5.00 mm"
    assert m.timestamp == FIXED_TIME


def test_angle_vertex_is_second_point():
    _, probe = _probe(MeasureKind.ANGLE)
    _click(probe, 1, 0)
    _click(probe, 0, 0)
    _click(probe, 0, 1)
    m = probe.history[-1]
    assert m.value == pytest.approx(90.0)
    assert m.description == "Angle: 90.00°"


def test_area_completes_on_enter():
    _, probe = _probe(MeasureKind.AREA)
    for x, y in ((0, 0), (1, 0), (1, 1)):
        _click(probe, x, y)
    assert probe.history == ()
    _click(probe, 0, 1)
    probe.on_key_down(KeyEvent("Enter"))
    m = probe.history[-1]
    assert m.value == pytest.approx(1.0)
    assert m.unit == "mm²"


def test_perimeter_completes_on_double_click():
    _, probe = _probe(MeasureKind.PERIMETER)
    for x, y in ((0, 0), (2, 0), (2, 2), (0, 2)):
        _click(probe, x, y)
    _click(probe, 0, 2, clicks=2)
    assert probe.history[-1].value == pytest.approx(8.0)
    assert len(probe.history[-1].points) == 4


def test_area_needs_three_points():
    _, probe = _probe(MeasureKind.AREA)
    _click(probe, 0, 0)
    _click(probe, 1, 0)
    probe.on_key_down(KeyEvent("Enter"))
    assert probe.history == ()
    assert probe.complete().kind is ErrorKind.INPUT_INCOMPLETE


def test_radius_and_coordinates():
    _, probe = _probe(MeasureKind.RADIUS)
    _click(probe, 0, 0)
    _click(probe, 0, 2)
    assert probe.history[-1].description == "Radius: 2.00 mm"

    probe.kind = MeasureKind.COORDINATES
    _click(probe, 1.5, -2)
    m = probe.history[-1]
    assert m.value is None
    assert m.description == "X: 1.50, Y: -2.00"


def test_degenerate_angle_is_reported_not_recorded():
    store, probe = _probe(MeasureKind.ANGLE)
    _click(probe, 0, 0)
    _click(probe, 0, 0)
    _click(probe, 1, 1)
    assert probe.history == ()
    assert probe.state.count == 0


def test_measure_entities():
    _, probe = _probe()
    assert probe.measure_entity(Line(Vec2(0.0, 0.0), Vec2(0.0, 7.0))).value[0].value == pytest.approx(7.0)

    arc = Arc(Vec2(0.0, 0.0), 2.0, 0.0, math.pi)
    assert probe.measure_entity(arc).value[0].value == pytest.approx(2.0 * math.pi)

    area, circ = probe.measure_entity(Circle(Vec2(0.0, 0.0), 1.0)).value
    assert area.value == pytest.approx(math.pi)
    assert circ.value == pytest.approx(2.0 * math.pi)

    area, per = probe.measure_entity(Rectangle(Vec2(0.0, 0.0), 2.0, -3.0)).value
    assert area.value == pytest.approx(6.0)
    assert per.value == pytest.approx(10.0)

    square = (Vec2(0.0, 0.0), Vec2(1.0, 0.0), Vec2(1.0, 1.0), Vec2(0.0, 1.0))
    area, per = probe.measure_entity(Polyline(square, closed=True)).value
    assert area.value == pytest.approx(1.0)
    assert per.value == pytest.approx(4.0)
    (length,) = probe.measure_entity(Polyline(square)).value
    assert length.value == pytest.approx(3.0)


def test_dimension_cannot_be_measured():
    _, probe = _probe()
    dim = Dimension(DimensionKind.RADIAL, (Vec2(0.0, 0.0), Vec2(1.0, 0.0)), 1.0, "1.00 mm")
    result = probe.measure_entity(dim)
    assert not result
    assert result.kind is ErrorKind.SELECTION_INVALID


def test_probe_never_mutates_the_store():
    store = MemoryEntityStore()
    ids = [
        store.add_entity(Line(Vec2(0.0, 0.0), Vec2(4.0, 0.0))),
        store.add_entity(Circle(Vec2(0.0, 0.0), 1.0)),
    ]
    before = store.entities()
    _, probe = _probe(MeasureKind.AREA, store=store)
    results = probe.measure_selection(ids + ["missing"])
    assert len(results) == 3
    for x, y in ((0, 0), (4, 0), (4, 4)):
        _click(probe, x, y)
    probe.on_key_down(KeyEvent("Enter"))
    assert store.entities() == before


def test_export_and_clear():
    _, probe = _probe()
    _click(probe, 0, 0)
    _click(probe, 1, 0)
    exported = probe.export()
    assert exported == [
        {
            "kind": "distance",
            "value": 1.0,
            "unit": "mm",
            "points": [[0.0, 0.0], [1.0, 0.0]],
            "description": "Distance: 1.00 mm",
            "timestamp": FIXED_TIME.isoformat(),
        }
    ]
    assert json.loads(probe.export_json()) == exported
    probe.clear_history()
    assert probe.history == ()
    assert probe.export() == []


def test_precision_and_units_follow_settings():
    _, probe = _probe(settings=DraftSettings(precision=3, units=Units.CM))
    _click(probe, 0, 0)
    _click(probe, 1, 1)
    assert probe.history[-1].description == "Distance: 1.414 cm"
