import importlib

import pytest

from adaptivedraft.errors import ConfigurationError, SelectionInvalid
from adaptivedraft.kernel.entities import Circle, EntityKind, Line, Style
from adaptivedraft.kernel.geometry import Vec2
from adaptivedraft.kernel.numeric import TolerancePolicy
from adaptivedraft.settings import DraftSettings
from adaptivedraft.store import EntityStore, MemoryEntityStore
from adaptivedraft.units import Units


def test_module_defaults():
    settings = importlib.import_module("adaptivedraft.settings")
    assert settings.DEFAULT_PRECISION == 2
    assert settings.DEFAULT_UNITS is Units.MM
    assert settings.MIN_FILLET_RADIUS == pytest.approx(0.1)


def test_draft_settings_defaults():
    s = DraftSettings()
    assert s.precision == 2
    assert s.units is Units.MM
    assert s.layer is None
    assert s.pick_tolerance == pytest.approx(5.0)
    assert s.close_tolerance == pytest.approx(10.0)


def test_tolerances_scale_with_pixel_size():
    s = DraftSettings(pixel_size=0.5)
    assert s.pick_tolerance == pytest.approx(2.5)
    assert s.close_tolerance == pytest.approx(5.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"precision": -1},
        {"precision": 5},
        {"precision": 1.5},
        {"precision": True},
        {"units": "mm"},
        {"pixel_size": 0.0},
        {"fillet_radius": 0.05},
        {"fillet_radius_step": -1.0},
    ],
)
def test_invalid_settings_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        DraftSettings(**kwargs)


def test_from_mapping_coerces_values():
    s = DraftSettings.from_mapping(
        {
            "units": "in",
            "precision": 3,
            "default_style": {"stroke_color": "#FF00FF", "dash": [2, 2]},
            "tolerance": {"linear": 1e-6},
        }
    )
    assert s.units is Units.IN
    assert s.default_style == Style(stroke_color="#FF00FF", dash=(2, 2))
    assert s.tolerance == TolerancePolicy(linear=1e-6)


def test_from_mapping_rejects_bad_input():
    with pytest.raises(ConfigurationError, match="colour"):
        DraftSettings.from_mapping({"colour": "red"})
    with pytest.raises(ConfigurationError):
        DraftSettings.from_mapping({"units": "furlong"})
    with pytest.raises(ConfigurationError):
        DraftSettings.from_mapping({"default_style": {"thickness": 2}})


def test_memory_store_crud():
    store = MemoryEntityStore()
    assert isinstance(store, EntityStore)
    a = store.add_entity(Line(Vec2(0.0, 0.0), Vec2(1.0, 0.0)))
    b = store.add_entity(Circle(Vec2(0.0, 0.0), 2.0))
    assert (a, b) == ("e1", "e2")
    assert list(store.entities(EntityKind.CIRCLE)) == ["e2"]

    store.update_entity(a, {"end": Vec2(3.0, 0.0)})
    assert store.get_entity(a).length == pytest.approx(3.0)

    store.select_entities([a, "nope"])
    assert store.selection == {a}
    store.delete_entity(a)
    assert a not in store
    assert store.selection == set()
    assert store.get_entity(a) is None

    with pytest.raises(SelectionInvalid):
        store.delete_entity(a)
    with pytest.raises(SelectionInvalid):
        store.update_entity(a, {"end": Vec2(1.0, 1.0)})


def test_store_ids_are_not_reused():
    store = MemoryEntityStore()
    first = store.add_entity(Circle(Vec2(0.0, 0.0), 1.0))
    store.delete_entity(first)
    assert store.add_entity(Circle(Vec2(0.0, 0.0), 1.0)) == "e2"


def test_prompt_history():
    store = MemoryEntityStore()
    assert store.prompt == ""
    store.set_command_prompt("one")
    store.set_command_prompt("two")
    assert store.prompts == ["one", "two"]
    assert store.prompt == "two"
