"""Tests for style entity detection and editing."""

import pytest

from mapskin.style.entities import (
    EntityRegistry,
    collect_style_entities,
    detect_entity_key,
    format_entity_label,
)


@pytest.mark.parametrize(
    "layer,expected",
    [
        ({"id": "road-primary", "source-layer": "Transportation"}, "transportation"),
        ({"id": "road-primary-casing"}, "road-primary"),
        ({"id": "Background"}, "background"),
        ({"id": "--odd--id--"}, "odd-id"),
        ({"id": ""}, "layer"),
    ],
)
def test_detect_entity_key(layer, expected):
    assert detect_entity_key(layer) == expected


def test_format_entity_label():
    assert format_entity_label("water_name") == "Water Name"
    assert format_entity_label("road-primary") == "Road Primary"


def test_entities_sorted_by_layer_count(loaded_engine):
    entities = collect_style_entities(loaded_engine, reserved_prefix="markers-")
    keys = [entity.key for entity in entities]

    assert keys[0] == "transportation"
    assert entities[0].layer_ids == ["road-primary", "road-minor"]
    # Ties keep style order
    assert keys[1:4] == ["background", "water", "waterway"]
    assert "poi" not in keys


def test_capabilities_follow_defined_properties(loaded_engine):
    entities = {e.key: e for e in collect_style_entities(loaded_engine, "markers-")}

    water = entities["water"]
    assert (water.has_color, water.has_opacity, water.has_width) == (True, True, False)

    park = entities["park"]
    assert (park.has_color, park.has_opacity, park.has_width) == (True, False, False)

    roads = entities["transportation"]
    assert (roads.has_color, roads.has_opacity, roads.has_width) == (True, True, True)
    assert roads.layers[0].opacity_prop is None
    assert roads.layers[1].opacity_prop == "line-opacity"

    place = entities["place"]
    assert place.layers[0].color_prop == "text-color"
    assert place.layers[0].width_prop == "text-halo-width"


def test_listing_uses_live_values_then_overrides(loaded_engine):
    registry = EntityRegistry(loaded_engine, "markers-")
    rows = {row.key: row for row in registry.listing()}

    assert rows["water"].color == "#a0c8f0"
    assert rows["water"].opacity == 90
    assert rows["water"].width is None
    assert rows["park"].color == "#c8e6b4"
    # Constant width of the second layer is used when the first is an expression
    assert rows["transportation"].width == 1.0
    assert rows["transportation"].opacity == 80
    assert rows["transportation"].layer_count == 2

    rows = {
        row.key: row
        for row in registry.listing({"water": {"color": "#112233", "visible": False}})
    }
    assert rows["water"].color == "#112233"
    assert rows["water"].visible is False


def test_apply_patch(loaded_engine):
    registry = EntityRegistry(loaded_engine, "markers-")
    touched = registry.apply_patch(
        {
            "transportation": {"color": "#000000", "opacity": 50, "width": 3},
            "water": {"visible": False},
            "unknown": {"visible": False},
            "park": {},
        }
    )

    assert touched == 2
    assert loaded_engine.get_paint_property("road-primary", "line-color") == "#000000"
    assert loaded_engine.get_paint_property("road-minor", "line-color") == "#000000"
    assert loaded_engine.get_paint_property("road-minor", "line-opacity") == 0.5
    # Layers without the property are left alone
    assert loaded_engine.get_paint_property("road-primary", "line-opacity") is None
    assert loaded_engine.get_paint_property("road-primary", "line-width") == 3.0
    assert loaded_engine.get_layout_property("water", "visibility") == "none"


def test_capture_snapshot(loaded_engine):
    loaded_engine.set_layout_property("building", "visibility", "none")
    registry = EntityRegistry(loaded_engine, "markers-")
    snapshot = registry.capture_snapshot()

    assert snapshot["building"] == {"visible": False, "color": "#d9d0c9"}
    assert snapshot["water"] == {"visible": True, "color": "#a0c8f0", "opacity": 90}
    assert snapshot["place"]["width"] == 1.5
    assert "opacity" not in snapshot["park"]
