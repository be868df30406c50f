# src/mapskin/style/snapshot.py
"""
Style snapshot capture.

Reads the live state of a freshly loaded style (group visibility, first
readable component colors and opacities, base label styling, entities) into
a :class:`StyleSnapshot`, falling back to configured defaults wherever the
style has nothing readable.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from mapskin.engine.base import RenderingEngine, read_layout_property, read_paint_property
from mapskin.studio.models import (
    BaseLabelStyles,
    ComponentStyles,
    EntityOverride,
    LayerVisibility,
    StudioConfig,
    StyleSnapshot,
)

from .bindings import COMPONENT_CONTROL_BINDINGS, GROUP_TO_TOGGLE, LAYER_TOGGLE_BINDINGS
from .classifier import base_label_ids
from .colors import extract_opacity_percent, is_number, parse_color, round_half_up
from .entities import EntityRegistry, paint_props_for_layer_type
from .labels import infer_text_transform

Groups = Mapping[str, List[str]]


def is_group_visible(
    engine: RenderingEngine, groups: Groups, group_key: str, defaults: LayerVisibility
) -> bool:
    """
    True when any layer of the group is not hidden.

    An empty group reports the default of its toggle, so a style without
    e.g. POI labels does not flip the user's preference.
    """
    ids = groups.get(group_key, [])
    if not ids:
        toggle = GROUP_TO_TOGGLE.get(group_key)
        return defaults.model_dump(by_alias=True).get(toggle, True) if toggle else True

    for layer_id in ids:
        if read_layout_property(engine, layer_id, "visibility") != "none":
            return True
    return False


def _group_layers(engine: RenderingEngine, groups: Groups, group_key: str):
    for layer_id in groups.get(group_key, []):
        layer = engine.get_layer(layer_id)
        if layer:
            yield layer_id, paint_props_for_layer_type(layer.get("type"))


def find_group_color(engine: RenderingEngine, groups: Groups, group_key: str) -> Optional[str]:
    for layer_id, props in _group_layers(engine, groups, group_key):
        for name in props.color:
            parsed = parse_color(read_paint_property(engine, layer_id, name))
            if parsed:
                return parsed.hex
    return None


def find_group_opacity(engine: RenderingEngine, groups: Groups, group_key: str) -> Optional[int]:
    for layer_id, props in _group_layers(engine, groups, group_key):
        for name in props.opacity:
            opacity = extract_opacity_percent(read_paint_property(engine, layer_id, name))
            if opacity is not None:
                return opacity
    return None


def capture_layer_visibility(
    engine: RenderingEngine, groups: Groups, defaults: LayerVisibility
) -> LayerVisibility:
    values = {
        toggle: is_group_visible(engine, groups, group_key, defaults)
        for toggle, group_key in LAYER_TOGGLE_BINDINGS
    }
    return LayerVisibility.model_validate(values)


def layer_toggle_availability(groups: Groups) -> Dict[str, bool]:
    """Toggles whose group has at least one layer in the active style."""
    return {toggle: bool(groups.get(group_key)) for toggle, group_key in LAYER_TOGGLE_BINDINGS}


def capture_component_style_availability(engine: RenderingEngine, groups: Groups) -> Dict[str, bool]:
    availability = {}
    for control in COMPONENT_CONTROL_BINDINGS:
        if control.kind == "color":
            found = find_group_color(engine, groups, control.group) is not None
        else:
            found = find_group_opacity(engine, groups, control.group) is not None
        availability[control.key] = found
    return availability


def capture_component_styles(
    engine: RenderingEngine, groups: Groups, defaults: ComponentStyles
) -> ComponentStyles:
    default_values = defaults.model_dump(by_alias=True)
    values = {}
    for control in COMPONENT_CONTROL_BINDINGS:
        if control.kind == "color":
            found = find_group_color(engine, groups, control.group)
        else:
            found = find_group_opacity(engine, groups, control.group)
        values[control.key] = default_values[control.key] if found is None else found
    return ComponentStyles.model_validate(values)


def capture_base_label_styles(
    engine: RenderingEngine, label_ids: Iterable[str], defaults: BaseLabelStyles
) -> BaseLabelStyles:
    """
    Capture label typography from the first label layers that define it.

    The size scale is always 100: sizes are scaled from their baseline.
    """
    ids = list(label_ids)
    color = defaults.base_label_color
    opacity = defaults.base_label_opacity
    halo_color = defaults.base_label_halo_color
    halo_width = defaults.base_label_halo_width
    transform = defaults.base_label_transform

    for layer_id in ids:
        parsed = parse_color(read_paint_property(engine, layer_id, "text-color"))
        if parsed:
            color = parsed.hex
            opacity = round_half_up(parsed.alpha * 100)
            text_opacity = extract_opacity_percent(
                read_paint_property(engine, layer_id, "text-opacity")
            )
            if text_opacity is not None:
                opacity = text_opacity
            break

    for layer_id in ids:
        parsed = parse_color(read_paint_property(engine, layer_id, "text-halo-color"))
        if parsed:
            halo_color = parsed.hex
            break

    for layer_id in ids:
        value = read_paint_property(engine, layer_id, "text-halo-width")
        if is_number(value):
            halo_width = min(max(float(value), 0.0), 24.0)
            break

    for layer_id in ids:
        transform = infer_text_transform(read_layout_property(engine, layer_id, "text-field"))
        if transform != "none":
            break

    return BaseLabelStyles(
        base_label_color=color,
        base_label_opacity=opacity,
        base_label_halo_color=halo_color,
        base_label_halo_width=halo_width,
        base_label_size_scale=100,
        base_label_transform=transform,
    )


def capture_style_snapshot(
    engine: RenderingEngine,
    groups: Groups,
    entities: EntityRegistry,
    basemap: str,
    defaults: StudioConfig,
) -> StyleSnapshot:
    """Full snapshot of a freshly loaded style."""
    entity_entries: Dict[str, Any] = entities.capture_snapshot()
    return StyleSnapshot(
        basemap=basemap,
        layer_visibility=capture_layer_visibility(engine, groups, defaults.layer_visibility),
        component_style_availability=capture_component_style_availability(engine, groups),
        component_styles=capture_component_styles(engine, groups, defaults.component_styles),
        base_label_styles=capture_base_label_styles(
            engine, base_label_ids(groups), defaults.base_label_styles
        ),
        style_entity_visibility={
            key: EntityOverride.model_validate(entry) for key, entry in entity_entries.items()
        },
    )
