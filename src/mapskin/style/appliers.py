# src/mapskin/style/appliers.py
"""
Replay of a studio configuration onto the loaded style.

All appliers are no-ops until the context reports the style as ready, and
all writes go through the tolerant setters: a layer that does not define a
property is skipped.
"""

from typing import Optional

from loguru import logger

from mapskin.engine.base import safe_set_layout, safe_set_paint
from mapskin.studio.models import ComponentStyles, LayerVisibility

from .bindings import (
    COMPONENT_CONTROL_BINDINGS,
    COMPONENT_CONTROLS_BY_KEY,
    FOCUS_GROUPS,
    LAYER_TOGGLE_BINDINGS,
    ComponentControl,
)
from .classifier import FEATURE_GROUPS
from .colors import clamp
from .expressions import scale_paint_value
from .labels import apply_base_label_styles

# Layer type -> (color property, opacity property) driven by component controls
_COMPONENT_PROPS = {
    "background": ("background-color", "background-opacity"),
    "fill": ("fill-color", "fill-opacity"),
    "line": ("line-color", "line-opacity"),
}


def set_group_visibility(ctx, group_key: str, visible: bool) -> None:
    value = "visible" if visible else "none"
    for layer_id in ctx.groups.get(group_key, []):
        safe_set_layout(ctx.engine, layer_id, "visibility", value)


def apply_layer_visibility(ctx, visibility: Optional[LayerVisibility] = None) -> None:
    if not ctx.style_ready:
        return
    values = (visibility or ctx.config.layer_visibility).model_dump(by_alias=True)
    for toggle, group_key in LAYER_TOGGLE_BINDINGS:
        set_group_visibility(ctx, group_key, values[toggle])


def _apply_component_control(ctx, control: ComponentControl, styles: ComponentStyles) -> None:
    value = styles.model_dump(by_alias=True)[control.key]
    if control.kind == "opacity":
        value = value / 100

    for layer_id in ctx.groups.get(control.group, []):
        layer = ctx.engine.get_layer(layer_id)
        if not layer or layer.get("type") not in _COMPONENT_PROPS:
            continue
        color_prop, opacity_prop = _COMPONENT_PROPS[layer["type"]]
        name = color_prop if control.kind == "color" else opacity_prop
        safe_set_paint(ctx.engine, layer_id, name, value)


def apply_component_styles(ctx, styles: Optional[ComponentStyles] = None) -> None:
    """Apply every component color/opacity control to its group."""
    if not ctx.style_ready:
        return
    styles = styles or ctx.config.component_styles
    for control in COMPONENT_CONTROL_BINDINGS:
        _apply_component_control(ctx, control, styles)


def apply_component_style(ctx, control_key: str) -> None:
    """Apply one component control (``waterColor``...); unknown keys apply all."""
    if not ctx.style_ready:
        return
    control = COMPONENT_CONTROLS_BY_KEY.get(control_key)
    if control is None:
        apply_component_styles(ctx)
        return
    _apply_component_control(ctx, control, ctx.config.component_styles)


def apply_group_line_width(ctx, group_key: str, scale: float = 1.0) -> None:
    for layer_id in ctx.groups.get(group_key, []):
        layer = ctx.engine.get_layer(layer_id)
        if not layer or layer.get("type") != "line":
            continue
        scaled = scale_paint_value(ctx.baselines.paint(layer_id, "line-width"), scale)
        if scaled is not None:
            safe_set_paint(ctx.engine, layer_id, "line-width", scaled)


def apply_group_opacity(ctx, group_key: str, scale: float = 1.0) -> None:
    for layer_id in ctx.groups.get(group_key, []):
        layer = ctx.engine.get_layer(layer_id)
        if not layer or layer.get("type") not in ("line", "fill"):
            continue
        name = f"{layer['type']}-opacity"
        scaled = scale_paint_value(ctx.baselines.paint(layer_id, name), scale, 0, 1)
        if scaled is not None:
            safe_set_paint(ctx.engine, layer_id, name, scaled)


def apply_creative_feature_amplification(ctx) -> None:
    """
    Scale feature widths and opacities from their baselines.

    Ink boost thickens roads, boundaries and water (water also by the river
    boost). A feature focus widens the focused group and fades the others.
    """
    if not ctx.style_ready:
        return
    creative = ctx.config.creative
    ink_boost = creative.ink_boost / 100
    river_boost = creative.river_boost / 100
    focus_group = FOCUS_GROUPS.get(creative.feature_focus)
    focus_strength = creative.feature_focus_strength / 100

    for group_key in FEATURE_GROUPS:
        width_scale = 1.0
        opacity_scale = 1.0

        if group_key in ("roadsMajor", "roadsMinor", "boundaries"):
            width_scale *= ink_boost
        elif group_key == "water":
            width_scale *= ink_boost * river_boost

        if focus_group and focus_strength > 0:
            focused = group_key == focus_group or (
                focus_group == "roadsMajor" and group_key == "roadsMinor"
            )
            if focused:
                width_scale *= 1 + focus_strength * 1.25
            else:
                opacity_scale *= clamp(1 - focus_strength * 0.72, 0.18, 1)

        apply_group_line_width(ctx, group_key, width_scale)
        apply_group_opacity(ctx, group_key, opacity_scale)


def apply_entity_overrides(ctx) -> None:
    if not ctx.style_ready:
        return
    ctx.entities.apply_patch(ctx.config.entity_patch())


def apply_camera(ctx) -> None:
    camera = ctx.config.camera
    lng, lat = camera.center
    ctx.engine.jump_to([lng, lat], camera.zoom, camera.pitch, camera.bearing)


def apply_style_config(ctx) -> None:
    """Visibility, component styles, base labels and entity overrides."""
    apply_layer_visibility(ctx)
    apply_component_styles(ctx)
    apply_base_label_styles(ctx)
    apply_entity_overrides(ctx)


def apply_session_state(ctx) -> None:
    """Re-apply the session-level parts only; the style keeps its own colors."""
    apply_layer_visibility(ctx)
    apply_creative_feature_amplification(ctx)
    apply_entity_overrides(ctx)


def apply_all_style_controls(ctx) -> None:
    """Apply the full configuration; it is authoritative over the style."""
    if not ctx.style_ready:
        logger.debug("Style not ready, skipping full apply")
        return
    apply_style_config(ctx)
    apply_creative_feature_amplification(ctx)
    # Entity overrides win over group-level colors and amplification
    apply_entity_overrides(ctx)
