# src/mapskin/style/expressions.py
"""
Expression-aware scaling of paint values.

A paint value in a vendor style is either a plain number, a ``step`` or
``interpolate`` expression, a legacy ``{"stops": [...]}`` function, or some
other expression the engine evaluates. Each shape is parsed into one of the
variants below, and scaling multiplies every output slot by a factor while
leaving the shape (inputs, thresholds, interpolation type) untouched.
"""

import copy
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .colors import clamp, is_number


@dataclass(frozen=True)
class Bounds:
    """Optional lower/upper clamp applied to scaled values."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def clamp(self, value: float) -> float:
        low = self.minimum if self.minimum is not None else float("-inf")
        high = self.maximum if self.maximum is not None else float("inf")
        return clamp(value, low, high)

    def wrap(self, expression: Any) -> Any:
        """Clamp an expression at render time: ``["min", max, ["max", min, e]]``."""
        wrapped = expression
        if self.minimum is not None:
            wrapped = ["max", self.minimum, wrapped]
        if self.maximum is not None:
            wrapped = ["min", self.maximum, wrapped]
        return wrapped


def scale_output(value: Any, factor: float, bounds: Bounds) -> Any:
    """Scale a single output slot, deferring non-numeric outputs to the engine."""
    if is_number(value):
        return bounds.clamp(value * factor)
    return bounds.wrap(["*", copy.deepcopy(value), factor])


@dataclass(frozen=True)
class Constant:
    value: float

    def scale(self, factor: float, bounds: Bounds) -> float:
        return bounds.clamp(self.value * factor)


@dataclass(frozen=True)
class Step:
    """``["step", input, default, stop1, value1, ...]``"""

    expression: List[Any]

    def scale(self, factor: float, bounds: Bounds) -> List[Any]:
        scaled = copy.deepcopy(self.expression)
        if len(scaled) > 2:
            scaled[2] = scale_output(scaled[2], factor, bounds)
        for index in range(4, len(scaled), 2):
            scaled[index] = scale_output(scaled[index], factor, bounds)
        return scaled


@dataclass(frozen=True)
class Interpolate:
    """``["interpolate", interpolation, input, in1, out1, ...]``"""

    expression: List[Any]

    def scale(self, factor: float, bounds: Bounds) -> List[Any]:
        scaled = copy.deepcopy(self.expression)
        for index in range(4, len(scaled), 2):
            scaled[index] = scale_output(scaled[index], factor, bounds)
        return scaled


@dataclass(frozen=True)
class StopList:
    """Legacy zoom function ``{"stops": [[zoom, value], ...], ...}``"""

    function: dict

    def scale(self, factor: float, bounds: Bounds) -> dict:
        scaled = copy.deepcopy(self.function)
        stops = []
        for pair in scaled["stops"]:
            if not isinstance(pair, list) or len(pair) < 2:
                # Malformed pairs are passed through verbatim
                stops.append(pair)
                continue
            stops.append([pair[0], scale_output(pair[1], factor, bounds)])
        scaled["stops"] = stops
        return scaled


@dataclass(frozen=True)
class Opaque:
    """Any other expression; the engine multiplies it at render time."""

    expression: List[Any]

    def scale(self, factor: float, bounds: Bounds) -> List[Any]:
        return bounds.wrap(["*", copy.deepcopy(self.expression), factor])


PaintValue = Union[Constant, Step, Interpolate, StopList, Opaque]


def parse_paint_value(value: Any) -> Optional[PaintValue]:
    """Classify a raw paint value into a scalable variant, or None."""
    if is_number(value):
        return Constant(value)

    if isinstance(value, list):
        operator = value[0] if value else None
        if operator == "step":
            return Step(value)
        if operator == "interpolate":
            return Interpolate(value)
        return Opaque(value)

    if isinstance(value, dict) and isinstance(value.get("stops"), list):
        return StopList(value)

    return None


def scale_paint_value(
    base: Any,
    factor: float,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> Any:
    """
    Multiply a paint value by ``factor`` keeping its expression shape.

    Args:
        base: Baseline paint value (number, expression list or stops dict)
        factor: Multiplier; 1 returns an unmodified deep copy
        minimum: Optional lower clamp
        maximum: Optional upper clamp

    Returns:
        The scaled value, or None when the baseline is missing or not scalable
    """
    if base is None:
        return None
    if factor == 1:
        return copy.deepcopy(base)

    parsed = parse_paint_value(base)
    if parsed is None:
        return None
    return parsed.scale(factor, Bounds(minimum, maximum))


def scale_text_size_value(base: Any, factor: float) -> Any:
    """Scale a ``text-size`` layout value; sizes never drop below 1px."""
    return scale_paint_value(base, factor, minimum=1)
