# src/mapskin/style/entities.py
"""
Style entity detection and editing.

An entity is a finer-grained feature class than a semantic group: all layers
sharing a ``source-layer`` (or, without one, the same two leading id tokens)
form one entity that can be shown/hidden, recolored, faded or restroked as a
unit. Capabilities depend on the paint properties the constituent layers
actually define.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from mapskin.engine.base import (
    RenderingEngine,
    read_layout_property,
    read_paint_property,
    safe_set_layout,
    safe_set_paint,
)

from .colors import extract_opacity_percent, extract_width, parse_color

FALLBACK_COLOR = "#808080"
FALLBACK_OPACITY = 100
FALLBACK_WIDTH = 1


@dataclass(frozen=True)
class PaintProps:
    """Candidate paint properties for color, opacity and width editing."""

    color: Tuple[str, ...] = ()
    opacity: Tuple[str, ...] = ()
    width: Tuple[str, ...] = ()


_PAINT_PROPS_BY_TYPE = {
    "background": PaintProps(("background-color",), ("background-opacity",), ()),
    "fill": PaintProps(("fill-color",), ("fill-opacity",), ()),
    "line": PaintProps(("line-color",), ("line-opacity",), ("line-width",)),
    "circle": PaintProps(("circle-color",), ("circle-opacity",), ("circle-radius",)),
    "symbol": PaintProps(
        ("text-color", "icon-color"),
        ("text-opacity", "icon-opacity"),
        ("text-halo-width",),
    ),
}


def paint_props_for_layer_type(layer_type: Optional[str]) -> PaintProps:
    return _PAINT_PROPS_BY_TYPE.get(layer_type, PaintProps())


def detect_entity_key(layer: Mapping[str, Any]) -> str:
    """
    Derive the entity key of a layer.

    ``source-layer`` wins; otherwise the first two non-empty hyphen tokens of
    the lower-cased id (``road-primary-casing`` -> ``road-primary``).
    """
    source_layer = str(layer.get("source-layer") or "").strip().lower()
    if source_layer:
        return source_layer

    layer_id = str(layer.get("id") or "").strip().lower()
    if not layer_id:
        return "layer"

    chunks = [chunk for chunk in layer_id.split("-") if chunk]
    return "-".join(chunks[:2]) or layer_id


def format_entity_label(entity_key: str) -> str:
    """``water_name`` -> ``Water Name``"""
    spaced = re.sub(r"[_-]+", " ", entity_key)
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), spaced)


@dataclass
class EntityLayer:
    id: str
    color_prop: Optional[str] = None
    opacity_prop: Optional[str] = None
    width_prop: Optional[str] = None


@dataclass
class StyleEntity:
    key: str
    label: str
    layers: List[EntityLayer] = field(default_factory=list)
    has_color: bool = False
    has_opacity: bool = False
    has_width: bool = False

    @property
    def layer_ids(self) -> List[str]:
        return [layer.id for layer in self.layers]


@dataclass
class EntityListing:
    """Editable view of an entity with its effective values."""

    key: str
    label: str
    layer_count: int
    visible: bool
    has_color: bool
    has_opacity: bool
    has_width: bool
    color: Optional[str] = None
    opacity: Optional[int] = None
    width: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "layerCount": self.layer_count,
            "visible": self.visible,
            "hasColor": self.has_color,
            "hasOpacity": self.has_opacity,
            "hasWidth": self.has_width,
            "color": self.color,
            "opacity": self.opacity,
            "width": self.width,
        }


def _first_defined(engine: RenderingEngine, layer_id: str, candidates: Iterable[str]) -> Optional[str]:
    for name in candidates:
        if read_paint_property(engine, layer_id, name) is not None:
            return name
    return None


def collect_style_entities(
    engine: RenderingEngine, reserved_prefix: Optional[str] = None
) -> List[StyleEntity]:
    """
    Group the layers of the current style into entities.

    Returns:
        Entities sorted by descending layer count (ties keep style order)
    """
    entities: Dict[str, StyleEntity] = {}

    for layer in engine.layers:
        layer_id = layer.get("id") if layer else None
        if not layer_id:
            continue
        if reserved_prefix and layer_id.startswith(reserved_prefix):
            continue

        key = detect_entity_key(layer)
        entity = entities.get(key)
        if entity is None:
            entity = entities[key] = StyleEntity(key=key, label=format_entity_label(key))

        props = paint_props_for_layer_type(layer.get("type"))
        entry = EntityLayer(
            id=layer_id,
            color_prop=_first_defined(engine, layer_id, props.color),
            opacity_prop=_first_defined(engine, layer_id, props.opacity),
            width_prop=_first_defined(engine, layer_id, props.width),
        )
        entity.layers.append(entry)
        entity.has_color = entity.has_color or entry.color_prop is not None
        entity.has_opacity = entity.has_opacity or entry.opacity_prop is not None
        entity.has_width = entity.has_width or entry.width_prop is not None

    return sorted(entities.values(), key=lambda item: len(item.layers), reverse=True)


def is_entity_visible(engine: RenderingEngine, entity: StyleEntity) -> bool:
    """Visible as soon as one constituent layer is not hidden."""
    for layer in entity.layers:
        visibility = read_layout_property(engine, layer.id, "visibility") or "visible"
        if visibility != "none":
            return True
    return False


def capture_entity_color(engine: RenderingEngine, entity: StyleEntity) -> Optional[str]:
    for layer in entity.layers:
        if not layer.color_prop:
            continue
        parsed = parse_color(read_paint_property(engine, layer.id, layer.color_prop))
        if parsed:
            return parsed.hex
    return None


def capture_entity_opacity(engine: RenderingEngine, entity: StyleEntity) -> Optional[int]:
    for layer in entity.layers:
        if not layer.opacity_prop:
            continue
        opacity = extract_opacity_percent(
            read_paint_property(engine, layer.id, layer.opacity_prop)
        )
        if opacity is not None:
            return opacity
    return None


def capture_entity_width(engine: RenderingEngine, entity: StyleEntity) -> Optional[float]:
    for layer in entity.layers:
        if not layer.width_prop:
            continue
        width = extract_width(read_paint_property(engine, layer.id, layer.width_prop))
        if width is not None:
            return width
    return None


def _override_field(override: Any, name: str) -> Any:
    if override is None:
        return None
    if isinstance(override, Mapping):
        return override.get(name)
    return getattr(override, name, None)


class EntityRegistry:
    """Entities of the active style, keyed by entity key."""

    def __init__(self, engine: RenderingEngine, reserved_prefix: Optional[str] = None):
        self.engine = engine
        self.reserved_prefix = reserved_prefix
        self._entities: Dict[str, StyleEntity] = {}

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: str) -> bool:
        return key in self._entities

    def clear(self) -> None:
        self._entities = {}

    def rebuild(self) -> List[StyleEntity]:
        entities = collect_style_entities(self.engine, self.reserved_prefix)
        self._entities = {entity.key: entity for entity in entities}
        logger.debug(f"Detected {len(entities)} style entities")
        return entities

    def get(self, key: str) -> Optional[StyleEntity]:
        return self._entities.get(key)

    def entities(self) -> List[StyleEntity]:
        return list(self._entities.values())

    def apply_patch(self, patch: Mapping[str, Mapping[str, Any]]) -> int:
        """
        Apply per-entity visibility/color/opacity/width changes.

        Only the fields present in each entry are applied. Unknown entity keys
        are skipped. The registry is rebuilt first when it is still empty.

        Args:
            patch: ``{entity_key: {"visible"?, "color"?, "opacity"?, "width"?}}``

        Returns:
            Number of entities touched
        """
        if not patch:
            return 0
        if not self._entities:
            self.rebuild()

        touched = 0
        for key, entry in patch.items():
            entity = self._entities.get(key)
            if entity is None or not entry:
                continue
            touched += 1

            if entry.get("visible") is not None:
                visibility = "visible" if entry["visible"] else "none"
                for layer in entity.layers:
                    safe_set_layout(self.engine, layer.id, "visibility", visibility)

            if entry.get("color") is not None:
                for layer in entity.layers:
                    if layer.color_prop:
                        safe_set_paint(self.engine, layer.id, layer.color_prop, entry["color"])

            if entry.get("opacity") is not None:
                for layer in entity.layers:
                    if layer.opacity_prop:
                        safe_set_paint(
                            self.engine, layer.id, layer.opacity_prop, float(entry["opacity"]) / 100
                        )

            if entry.get("width") is not None:
                for layer in entity.layers:
                    if layer.width_prop:
                        safe_set_paint(self.engine, layer.id, layer.width_prop, float(entry["width"]))

        return touched

    def capture_snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Live visibility and first readable color/opacity/width per entity."""
        entries: Dict[str, Dict[str, Any]] = {}
        for entity in collect_style_entities(self.engine, self.reserved_prefix):
            entry: Dict[str, Any] = {"visible": is_entity_visible(self.engine, entity)}
            color = capture_entity_color(self.engine, entity) if entity.has_color else None
            opacity = capture_entity_opacity(self.engine, entity) if entity.has_opacity else None
            width = capture_entity_width(self.engine, entity) if entity.has_width else None
            if color:
                entry["color"] = color
            if opacity is not None:
                entry["opacity"] = opacity
            if width is not None:
                entry["width"] = width
            entries[entity.key] = entry
        return entries

    def listing(self, overrides: Optional[Mapping[str, Any]] = None) -> List[EntityListing]:
        """
        Editable listing with effective values.

        Effective value = configured override, else the first constituent's
        live value, else the fallback (``#808080`` / ``100`` / ``1``).
        """
        overrides = overrides or {}
        if not self._entities:
            self.rebuild()

        rows = []
        for entity in self._entities.values():
            override = overrides.get(entity.key)

            visible = _override_field(override, "visible")
            if visible is None:
                visible = is_entity_visible(self.engine, entity)

            row = EntityListing(
                key=entity.key,
                label=entity.label,
                layer_count=len(entity.layers),
                visible=bool(visible),
                has_color=entity.has_color,
                has_opacity=entity.has_opacity,
                has_width=entity.has_width,
            )
            if entity.has_color:
                row.color = (
                    _override_field(override, "color")
                    or capture_entity_color(self.engine, entity)
                    or FALLBACK_COLOR
                )
            if entity.has_opacity:
                opacity = _override_field(override, "opacity")
                if opacity is None:
                    opacity = capture_entity_opacity(self.engine, entity)
                row.opacity = FALLBACK_OPACITY if opacity is None else opacity
            if entity.has_width:
                width = _override_field(override, "width")
                if width is None:
                    width = capture_entity_width(self.engine, entity)
                row.width = FALLBACK_WIDTH if width is None else width
            rows.append(row)
        return rows
