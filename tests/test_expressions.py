"""Tests for expression-aware paint value scaling."""

import pytest

from mapskin.style.expressions import (
    Constant,
    Interpolate,
    Opaque,
    Step,
    StopList,
    parse_paint_value,
    scale_paint_value,
    scale_text_size_value,
)

INTERPOLATE = ["interpolate", ["linear"], ["zoom"], 5, 0.5, 14, 4]


class TestParsePaintValue:
    def test_variants(self):
        assert parse_paint_value(2) == Constant(2)
        assert isinstance(parse_paint_value(["step", ["zoom"], 1, 10, 2]), Step)
        assert isinstance(parse_paint_value(INTERPOLATE), Interpolate)
        assert isinstance(parse_paint_value({"stops": [[5, 1], [10, 2]]}), StopList)
        assert isinstance(parse_paint_value(["get", "width"]), Opaque)

    @pytest.mark.parametrize("value", [None, "wide", True, {"base": 1.2}])
    def test_unscalable(self, value):
        assert parse_paint_value(value) is None


SCALABLE_SHAPES = [
    pytest.param(1.2, id="constant"),
    pytest.param(["step", ["zoom"], 1, 10, 2.5, 15, 3], id="step"),
    pytest.param(INTERPOLATE, id="interpolate"),
    pytest.param({"base": 1.4, "stops": [[5, 0.75], [12, 3]]}, id="stops"),
]


def assert_close(actual, expected):
    """Structural equality with float tolerance on the numbers."""
    if isinstance(expected, (list, tuple)):
        assert isinstance(actual, list) and len(actual) == len(expected)
        for left, right in zip(actual, expected):
            assert_close(left, right)
    elif isinstance(expected, dict):
        assert isinstance(actual, dict) and actual.keys() == expected.keys()
        for key in expected:
            assert_close(actual[key], expected[key])
    elif isinstance(expected, (int, float)) and not isinstance(expected, bool):
        assert actual == pytest.approx(expected)
    else:
        assert actual == expected


class TestScalePaintValue:
    @pytest.mark.parametrize("base", SCALABLE_SHAPES)
    def test_factor_one_returns_equal_copy(self, base):
        scaled = scale_paint_value(base, 1)
        assert scaled == base
        if not isinstance(base, float):
            assert scaled is not base

    def test_factor_one_copy_is_detached(self):
        scaled = scale_paint_value(INTERPOLATE, 1)
        scaled[4] = 99
        assert INTERPOLATE[4] == 0.5

    @pytest.mark.parametrize("factor", [0.25, 0.8, 1.5, 3])
    @pytest.mark.parametrize("base", SCALABLE_SHAPES)
    def test_inverse_factor_restores_baseline(self, base, factor):
        scaled = scale_paint_value(base, factor)
        assert_close(scale_paint_value(scaled, 1 / factor), base)

    def test_constant(self):
        assert scale_paint_value(2, 1.5) == 3
        assert scale_paint_value(2, 20, maximum=10) == 10

    def test_interpolate_keeps_inputs(self):
        scaled = scale_paint_value(INTERPOLATE, 2)
        assert scaled == ["interpolate", ["linear"], ["zoom"], 5, 1.0, 14, 8]

    def test_step_scales_default_and_outputs(self):
        scaled = scale_paint_value(["step", ["zoom"], 1, 10, 2, 15, 3], 2)
        assert scaled == ["step", ["zoom"], 2, 10, 4, 15, 6]

    def test_stops_skip_malformed_pairs(self):
        scaled = scale_paint_value({"base": 1.4, "stops": [[5, 1], [10, 2], "bad"]}, 3)
        assert scaled == {"base": 1.4, "stops": [[5, 3], [10, 6], "bad"]}

    def test_expression_output_multiplied_at_render_time(self):
        scaled = scale_paint_value(["interpolate", ["linear"], ["zoom"], 5, ["get", "w"]], 2)
        assert scaled[4] == ["*", ["get", "w"], 2]

    def test_opaque_is_wrapped_with_bounds(self):
        scaled = scale_paint_value(["get", "w"], 2, minimum=0, maximum=1)
        assert scaled == ["min", 1, ["max", 0, ["*", ["get", "w"], 2]]]

    def test_missing_or_unscalable_base(self):
        assert scale_paint_value(None, 2) is None
        assert scale_paint_value("wide", 2) is None


def test_text_size_never_below_one_pixel():
    assert scale_text_size_value(12, 0.05) == 1
    assert scale_text_size_value(["interpolate", ["linear"], ["zoom"], 4, 11, 10, 18], 0.5) == [
        "interpolate",
        ["linear"],
        ["zoom"],
        4,
        5.5,
        10,
        9.0,
    ]
