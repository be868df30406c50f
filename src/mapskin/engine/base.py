# src/mapskin/engine/base.py
"""
Rendering engine interface.

The studio never talks to a renderer directly; it goes through the
``RenderingEngine`` interface below. A concrete engine owns the style
document (layers and sources), validates paint/layout property names against
the layer type, and notifies listeners with ``style.load`` once a new style
has been fully loaded.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from mapskin.exceptions import LayerNotFoundError

# Paint properties each layer type accepts (subset of the MapLibre style spec)
PAINT_PROPERTIES: Dict[str, frozenset] = {
    "background": frozenset(
        {"background-color", "background-opacity", "background-pattern"}
    ),
    "fill": frozenset(
        {
            "fill-antialias",
            "fill-color",
            "fill-opacity",
            "fill-outline-color",
            "fill-pattern",
            "fill-translate",
            "fill-translate-anchor",
        }
    ),
    "line": frozenset(
        {
            "line-blur",
            "line-color",
            "line-dasharray",
            "line-gap-width",
            "line-gradient",
            "line-offset",
            "line-opacity",
            "line-pattern",
            "line-translate",
            "line-translate-anchor",
            "line-width",
        }
    ),
    "circle": frozenset(
        {
            "circle-blur",
            "circle-color",
            "circle-opacity",
            "circle-pitch-alignment",
            "circle-pitch-scale",
            "circle-radius",
            "circle-stroke-color",
            "circle-stroke-opacity",
            "circle-stroke-width",
            "circle-translate",
            "circle-translate-anchor",
        }
    ),
    "symbol": frozenset(
        {
            "icon-color",
            "icon-halo-blur",
            "icon-halo-color",
            "icon-halo-width",
            "icon-opacity",
            "icon-translate",
            "icon-translate-anchor",
            "text-color",
            "text-halo-blur",
            "text-halo-color",
            "text-halo-width",
            "text-opacity",
            "text-translate",
            "text-translate-anchor",
        }
    ),
    "fill-extrusion": frozenset(
        {
            "fill-extrusion-base",
            "fill-extrusion-color",
            "fill-extrusion-height",
            "fill-extrusion-opacity",
            "fill-extrusion-pattern",
            "fill-extrusion-translate",
            "fill-extrusion-vertical-gradient",
        }
    ),
    "raster": frozenset(
        {
            "raster-brightness-max",
            "raster-brightness-min",
            "raster-contrast",
            "raster-fade-duration",
            "raster-hue-rotate",
            "raster-opacity",
            "raster-saturation",
        }
    ),
    "hillshade": frozenset(
        {
            "hillshade-accent-color",
            "hillshade-exaggeration",
            "hillshade-highlight-color",
            "hillshade-illumination-anchor",
            "hillshade-illumination-direction",
            "hillshade-shadow-color",
        }
    ),
    "heatmap": frozenset(
        {"heatmap-color", "heatmap-intensity", "heatmap-opacity", "heatmap-radius", "heatmap-weight"}
    ),
}

_COMMON_LAYOUT = frozenset({"visibility"})

LAYOUT_PROPERTIES: Dict[str, frozenset] = {
    "background": _COMMON_LAYOUT,
    "fill": _COMMON_LAYOUT | {"fill-sort-key"},
    "line": _COMMON_LAYOUT
    | {"line-cap", "line-join", "line-miter-limit", "line-round-limit", "line-sort-key"},
    "circle": _COMMON_LAYOUT | {"circle-sort-key"},
    "symbol": _COMMON_LAYOUT
    | {
        "icon-allow-overlap",
        "icon-anchor",
        "icon-ignore-placement",
        "icon-image",
        "icon-offset",
        "icon-size",
        "symbol-placement",
        "symbol-sort-key",
        "symbol-spacing",
        "text-allow-overlap",
        "text-anchor",
        "text-field",
        "text-font",
        "text-ignore-placement",
        "text-justify",
        "text-letter-spacing",
        "text-line-height",
        "text-max-width",
        "text-offset",
        "text-optional",
        "text-padding",
        "text-rotate",
        "text-size",
        "text-transform",
    },
    "fill-extrusion": _COMMON_LAYOUT,
    "raster": _COMMON_LAYOUT,
    "hillshade": _COMMON_LAYOUT,
    "heatmap": _COMMON_LAYOUT,
}


class EventEmitter:
    """Minimal listener registry with ``on``/``off``/``once``/``emit``."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}

    def on(self, event: str, callback: Callable[..., Any]) -> Callable[..., Any]:
        self._listeners.setdefault(event, []).append(callback)
        return callback

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        for registered in list(listeners):
            if registered is callback or getattr(registered, "_wrapped", None) is callback:
                listeners.remove(registered)

    def once(self, event: str, callback: Callable[..., Any]) -> Callable[..., Any]:
        """Register a listener removed right before its first invocation."""

        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            return callback(*args, **kwargs)

        wrapper._wrapped = callback
        return self.on(event, wrapper)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(*args)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))


class RenderingEngine(EventEmitter, ABC):
    """
    Interface of the map renderer the studio drives.

    Events:
        ``style.load``: a style set through :meth:`set_style` is fully loaded
        ``load``: the very first style is loaded
        ``error``: a style could not be loaded
    """

    @abstractmethod
    def get_style(self) -> Dict[str, Any]:
        """Return the current style document (``layers``, ``sources``...)"""
        pass

    @abstractmethod
    def get_layer(self, layer_id: str) -> Optional[Dict[str, Any]]:
        """Return a layer by id, or None if the style has no such layer"""
        pass

    @abstractmethod
    def get_paint_property(self, layer_id: str, name: str) -> Any:
        pass

    @abstractmethod
    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        pass

    @abstractmethod
    def get_layout_property(self, layer_id: str, name: str) -> Any:
        pass

    @abstractmethod
    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None:
        pass

    @abstractmethod
    def set_style(self, source: Any) -> None:
        """Start loading a new style; completion is signalled by ``style.load``"""
        pass

    @abstractmethod
    def jump_to(
        self,
        center: List[float],
        zoom: float,
        pitch: float = 0.0,
        bearing: float = 0.0,
    ) -> None:
        pass

    @abstractmethod
    def add_source(self, source_id: str, source: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def add_layer(self, layer: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def set_source_data(self, source_id: str, data: Dict[str, Any]) -> None:
        pass

    def get_source(self, source_id: str) -> Optional[Dict[str, Any]]:
        return (self.get_style().get("sources") or {}).get(source_id)

    @property
    def layers(self) -> List[Dict[str, Any]]:
        return list(self.get_style().get("layers") or [])


# =============================================================================
# Tolerant accessors
# =============================================================================


def safe_set_paint(engine: RenderingEngine, layer_id: str, name: str, value: Any) -> bool:
    """Set a paint property, ignoring layers that do not define it."""
    try:
        engine.set_paint_property(layer_id, name, value)
        return True
    except Exception as e:
        logger.debug(f"Skipped paint {name} on {layer_id}: {e}")
        return False


def safe_set_layout(engine: RenderingEngine, layer_id: str, name: str, value: Any) -> bool:
    """Set a layout property, ignoring layers that do not define it."""
    try:
        engine.set_layout_property(layer_id, name, value)
        return True
    except Exception as e:
        logger.debug(f"Skipped layout {name} on {layer_id}: {e}")
        return False


def read_paint_property(engine: RenderingEngine, layer_id: str, name: str) -> Any:
    try:
        return engine.get_paint_property(layer_id, name)
    except Exception:
        return None


def read_layout_property(engine: RenderingEngine, layer_id: str, name: str) -> Any:
    try:
        return engine.get_layout_property(layer_id, name)
    except Exception:
        return None


def require_layer(engine: RenderingEngine, layer_id: str) -> Dict[str, Any]:
    layer = engine.get_layer(layer_id)
    if layer is None:
        raise LayerNotFoundError(f"Layer '{layer_id}' not found in style")
    return layer
