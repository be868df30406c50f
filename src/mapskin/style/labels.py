# src/mapskin/style/labels.py
"""
Base label styling: color, halo, size scale and text transform.
"""

import copy
from typing import Any, Optional

from mapskin.engine.base import safe_set_layout, safe_set_paint

from .colors import clamp, hex_to_rgba
from .expressions import scale_text_size_value


def infer_text_transform(text_field: Any) -> str:
    """Detect an ``upcase``/``downcase`` wrapper on a ``text-field``."""
    if isinstance(text_field, list) and len(text_field) > 1:
        if text_field[0] == "upcase":
            return "uppercase"
        if text_field[0] == "downcase":
            return "lowercase"
    return "none"


def build_text_field_transform(base_text_field: Any, transform: str) -> Any:
    """
    Wrap a baseline ``text-field`` in ``upcase``/``downcase``.

    ``format`` expressions and legacy object fields are returned unchanged,
    wrapping them would break the engine's expression type checks.
    """
    if not base_text_field or transform == "none":
        return copy.deepcopy(base_text_field)
    if isinstance(base_text_field, dict):
        return copy.deepcopy(base_text_field)
    if isinstance(base_text_field, list) and base_text_field[0] == "format":
        return copy.deepcopy(base_text_field)

    if transform == "uppercase":
        return ["upcase", copy.deepcopy(base_text_field)]
    if transform == "lowercase":
        return ["downcase", copy.deepcopy(base_text_field)]
    return copy.deepcopy(base_text_field)


def apply_base_label_styles(ctx, styles=None) -> None:
    """Apply all base label settings to every label layer."""
    if not ctx.style_ready:
        return
    styles = styles or ctx.config.base_label_styles
    engine = ctx.engine

    text_color = hex_to_rgba(
        styles.base_label_color, clamp(styles.base_label_opacity / 100, 0, 1)
    )
    scale = styles.base_label_size_scale / 100

    for layer_id in ctx.base_label_ids():
        safe_set_paint(engine, layer_id, "text-color", text_color)
        safe_set_paint(engine, layer_id, "text-opacity", 1)
        safe_set_paint(engine, layer_id, "text-halo-color", styles.base_label_halo_color)
        safe_set_paint(engine, layer_id, "text-halo-width", float(styles.base_label_halo_width))
        _apply_size(ctx, layer_id, scale)
        _apply_transform(ctx, layer_id, styles.base_label_transform)


def apply_base_label_style(ctx, control_key: str) -> None:
    """Apply a single base label control (``baseLabelColor``, ``baseLabelSizeScale``...)."""
    if not ctx.style_ready:
        return
    styles = ctx.config.base_label_styles
    engine = ctx.engine

    for layer_id in ctx.base_label_ids():
        if control_key in ("baseLabelColor", "baseLabelOpacity"):
            opacity = clamp(styles.base_label_opacity / 100, 0, 1)
            safe_set_paint(engine, layer_id, "text-color", hex_to_rgba(styles.base_label_color, opacity))
            safe_set_paint(engine, layer_id, "text-opacity", 1)
        elif control_key == "baseLabelHaloColor":
            safe_set_paint(engine, layer_id, "text-halo-color", styles.base_label_halo_color)
        elif control_key == "baseLabelHaloWidth":
            safe_set_paint(engine, layer_id, "text-halo-width", float(styles.base_label_halo_width))
        elif control_key == "baseLabelTransform":
            _apply_transform(ctx, layer_id, styles.base_label_transform)
        elif control_key == "baseLabelSizeScale":
            _apply_size(ctx, layer_id, styles.base_label_size_scale / 100)


def _apply_size(ctx, layer_id: str, scale: float) -> None:
    base: Optional[Any] = ctx.baselines.label_size(layer_id)
    if base is None:
        return
    scaled = scale_text_size_value(base, scale)
    if scaled is not None:
        safe_set_layout(ctx.engine, layer_id, "text-size", scaled)


def _apply_transform(ctx, layer_id: str, transform: str) -> None:
    base = ctx.baselines.label_text_field(layer_id)
    if base is None:
        return
    safe_set_layout(ctx.engine, layer_id, "text-field", build_text_field_transform(base, transform))
