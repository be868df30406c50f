"""Baseline capture and feature amplification."""

import pytest

from mapskin.style.baseline import BaselineStore

ROAD_WIDTH = ["interpolate", ["linear"], ["zoom"], 5, 0.5, 14, 4]


def line_width(engine, layer_id):
    return engine.get_paint_property(layer_id, "line-width")


def test_capture_feature_paint(loaded_engine):
    store = BaselineStore()
    store.capture_feature_paint(
        loaded_engine,
        {"water": ["water", "waterway-river"], "roadsMajor": ["road-primary"], "labelsRoad": ["road-label"]},
    )

    assert store.paint("waterway-river", "line-width") == 1.2
    assert store.paint("water", "fill-opacity") == 0.9
    assert store.paint("road-primary", "line-width") == ROAD_WIDTH
    # Undefined values and label groups are not recorded
    assert store.paint("road-primary", "line-opacity") is None
    assert ("road-label", "text-size") not in store.feature_paint


def test_baseline_copies_are_detached(loaded_engine):
    store = BaselineStore()
    store.capture_feature_paint(loaded_engine, {"roadsMajor": ["road-primary"]})
    copy_a = store.paint("road-primary", "line-width")
    copy_a[4] = 100
    assert store.paint("road-primary", "line-width") == ROAD_WIDTH


def test_capture_labels(loaded_engine):
    store = BaselineStore()
    store.capture_labels(loaded_engine, ["road-label", "place-city", "water"])

    assert store.label_size("road-label") == 12
    assert store.label_text_field("place-city") == "{name}"
    assert store.label_size("water") is None


def test_river_boost_scales_from_baseline_and_reverts(studio, engine):
    assert line_width(engine, "waterway-river") == 1.2

    studio.update_creative(river_boost=150)
    assert line_width(engine, "waterway-river") == pytest.approx(1.8)

    studio.update_creative(river_boost=100)
    assert line_width(engine, "waterway-river") == 1.2
    # Roads are untouched by the river boost
    assert line_width(engine, "road-primary") == ROAD_WIDTH


def test_ink_boost_scales_constant_road_width_and_reverts(engine, scheduler, studio_defaults):
    from mapskin.studio import StyleStudio

    for layer in studio_defaults.basemaps["light"]["layers"]:
        if layer["id"] == "road-primary":
            layer["paint"]["line-width"] = 1.2
    studio = StyleStudio(engine, scheduler, studio_defaults)
    studio.start()
    scheduler.run_until_idle()
    assert studio.classification()["roadsMajor"] == ["road-primary"]

    studio.update_creative(ink_boost=150)
    assert line_width(engine, "road-primary") == pytest.approx(1.8)

    studio.update_creative(ink_boost=100)
    assert line_width(engine, "road-primary") == 1.2


def test_ink_boost_scales_expression_outputs(studio, engine):
    studio.update_creative(ink_boost=200)

    assert line_width(engine, "road-primary") == ["interpolate", ["linear"], ["zoom"], 5, 1.0, 14, 8]
    assert line_width(engine, "road-minor") == 2
    assert line_width(engine, "boundary-country") == 4
    assert line_width(engine, "waterway-river") == pytest.approx(2.4)


def test_feature_focus_fades_other_groups(studio, engine):
    studio.update_creative(feature_focus="water", feature_focus_strength=100)

    assert line_width(engine, "waterway-river") == pytest.approx(1.2 * 2.25)
    # Other groups fade to 28% of their baseline opacity
    assert engine.get_paint_property("road-minor", "line-opacity") == pytest.approx(0.8 * 0.28)
    assert engine.get_paint_property("water", "fill-opacity") == 0.9


def test_label_size_scale_uses_baseline(studio, engine):
    studio.config.base_label_styles.base_label_size_scale = 200
    studio.apply_base_label_style("baseLabelSizeScale")
    assert engine.get_layout_property("road-label", "text-size") == 24

    studio.config.base_label_styles.base_label_size_scale = 100
    studio.apply_base_label_style("baseLabelSizeScale")
    assert engine.get_layout_property("road-label", "text-size") == 12
