# src/mapskin/engine/memory.py
"""
In-memory rendering engine.

Holds a MapLibre/Mapbox GL style document, enforces the per-layer-type
property tables and delivers style load completion asynchronously through a
scheduler, like a real renderer would after fetching tiles and sprites. Used
by the CLI to re-skin style documents offline and by the test suite.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests
from loguru import logger

from mapskin.engine.base import (
    LAYOUT_PROPERTIES,
    PAINT_PROPERTIES,
    RenderingEngine,
    require_layer,
)
from mapskin.engine.scheduling import Handle, Scheduler
from mapskin.exceptions import MapSkinError, StyleLoadError, UnsupportedPropertyError

StyleSource = Union[Dict[str, Any], Path, str]


def is_remote_source(source: StyleSource) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def load_style_document(source: StyleSource, timeout: float = 30.0) -> Dict[str, Any]:
    """
    Read a style document from a dict, a local JSON file or an http(s) URL.

    Args:
        source: Style dictionary, file path or URL
        timeout: HTTP timeout in seconds

    Returns:
        A private copy of the style document

    Raises:
        StyleLoadError: If the document cannot be read, parsed or has no layers
    """
    if isinstance(source, dict):
        document = copy.deepcopy(source)
    elif is_remote_source(source):
        logger.debug(f"Fetching style from {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            document = response.json()
        except requests.RequestException as e:
            raise StyleLoadError(f"Cannot fetch style {source}: {e}") from e
        except ValueError as e:
            raise StyleLoadError(f"Style at {source} is not valid JSON: {e}") from e
    elif isinstance(source, (str, Path)):
        path = Path(source)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StyleLoadError(f"Cannot read style file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StyleLoadError(f"Style file {path} is not valid JSON: {e}") from e
    else:
        raise StyleLoadError(f"Unsupported style source: {source!r}")

    if not isinstance(document, dict) or not isinstance(document.get("layers"), list):
        raise StyleLoadError("Style document has no 'layers' list")

    document.setdefault("sources", {})
    return document


class InMemoryEngine(RenderingEngine):
    """Rendering engine backed by a plain style dictionary."""

    def __init__(
        self,
        scheduler: Scheduler,
        load_delay: float = 0.0,
        request_timeout: float = 30.0,
    ):
        super().__init__()
        self.scheduler = scheduler
        self.load_delay = load_delay
        self.request_timeout = request_timeout
        self.load_history: List[Any] = []
        self.camera: Dict[str, Any] = {}

        self._style: Dict[str, Any] = {"version": 8, "sources": {}, "layers": []}
        self._layer_index: Dict[str, Dict[str, Any]] = {}
        self._pending_load: Optional[Handle] = None
        self._loaded_once = False

    # ------------------------------------------------------------------
    # Style lifecycle
    # ------------------------------------------------------------------

    def set_style(self, source: StyleSource) -> None:
        """
        Start loading ``source``; completion is signalled with ``style.load``.

        A newer call supersedes a load still in flight. When the scheduler is
        an asyncio loop, remote documents are fetched in its default executor
        so the loop keeps running during the HTTP request.
        """
        self.load_history.append(source)
        if self._pending_load is not None:
            self._pending_load.cancel()

        run_in_executor = getattr(self.scheduler, "run_in_executor", None)
        if run_in_executor is not None and is_remote_source(source):
            future = run_in_executor(None, load_style_document, source, self.request_timeout)
            future.add_done_callback(self._handle_fetched)
            self._pending_load = future
            return

        self._schedule_completion(source)

    def _schedule_completion(self, source: StyleSource) -> None:
        if self.load_delay > 0:
            self._pending_load = self.scheduler.call_later(
                self.load_delay, self._complete_load, source
            )
        else:
            self._pending_load = self.scheduler.call_soon(self._complete_load, source)

    def _handle_fetched(self, future) -> None:
        # Superseded fetches finish in the executor but are dropped here
        if future is not self._pending_load or future.cancelled():
            return
        try:
            document = future.result()
        except StyleLoadError as e:
            self._pending_load = None
            self._fail_load(e)
            return
        self._schedule_completion(document)

    def _fail_load(self, error: StyleLoadError) -> None:
        logger.error(f"Style load failed: {error}")
        self.emit("error", error)

    def _complete_load(self, source: StyleSource) -> None:
        self._pending_load = None
        try:
            document = load_style_document(source, timeout=self.request_timeout)
        except StyleLoadError as e:
            self._fail_load(e)
            return

        self._style = document
        self._reindex()
        logger.debug(f"Style loaded with {len(document['layers'])} layers")

        self.emit("style.load")
        if not self._loaded_once:
            self._loaded_once = True
            self.emit("load")

    def _reindex(self) -> None:
        self._layer_index = {
            layer["id"]: layer
            for layer in self._style["layers"]
            if isinstance(layer, dict) and layer.get("id")
        }

    @property
    def is_loading(self) -> bool:
        return self._pending_load is not None

    def get_style(self) -> Dict[str, Any]:
        return self._style

    def export_style(self) -> Dict[str, Any]:
        """Deep copy of the current style document, safe to serialize."""
        return copy.deepcopy(self._style)

    def get_layer(self, layer_id: str) -> Optional[Dict[str, Any]]:
        return self._layer_index.get(layer_id)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _check_property(
        self, layer: Dict[str, Any], name: str, table: Dict[str, frozenset]
    ) -> None:
        allowed = table.get(layer.get("type"), frozenset())
        if name not in allowed:
            raise UnsupportedPropertyError(layer["id"], layer.get("type"), name)

    def get_paint_property(self, layer_id: str, name: str) -> Any:
        layer = require_layer(self, layer_id)
        self._check_property(layer, name, PAINT_PROPERTIES)
        return copy.deepcopy((layer.get("paint") or {}).get(name))

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        layer = require_layer(self, layer_id)
        self._check_property(layer, name, PAINT_PROPERTIES)
        paint = layer.setdefault("paint", {})
        if value is None:
            paint.pop(name, None)
        else:
            paint[name] = copy.deepcopy(value)

    def get_layout_property(self, layer_id: str, name: str) -> Any:
        layer = require_layer(self, layer_id)
        self._check_property(layer, name, LAYOUT_PROPERTIES)
        return copy.deepcopy((layer.get("layout") or {}).get(name))

    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None:
        layer = require_layer(self, layer_id)
        self._check_property(layer, name, LAYOUT_PROPERTIES)
        layout = layer.setdefault("layout", {})
        if value is None:
            layout.pop(name, None)
        else:
            layout[name] = copy.deepcopy(value)

    # ------------------------------------------------------------------
    # Camera, sources and overlay layers
    # ------------------------------------------------------------------

    def jump_to(
        self,
        center: List[float],
        zoom: float,
        pitch: float = 0.0,
        bearing: float = 0.0,
    ) -> None:
        self.camera = {
            "center": list(center),
            "zoom": zoom,
            "pitch": pitch,
            "bearing": bearing,
        }

    def add_source(self, source_id: str, source: Dict[str, Any]) -> None:
        sources = self._style.setdefault("sources", {})
        if source_id in sources:
            raise MapSkinError(f"Source '{source_id}' already exists")
        sources[source_id] = copy.deepcopy(source)

    def add_layer(self, layer: Dict[str, Any]) -> None:
        layer_id = layer.get("id")
        if not layer_id:
            raise MapSkinError("Layer definition has no id")
        if layer_id in self._layer_index:
            raise MapSkinError(f"Layer '{layer_id}' already exists")
        if layer.get("source") and layer["source"] not in self._style.get("sources", {}):
            raise MapSkinError(f"Source '{layer['source']}' for layer '{layer_id}' not found")

        stored = copy.deepcopy(layer)
        self._style["layers"].append(stored)
        self._layer_index[layer_id] = stored

    def set_source_data(self, source_id: str, data: Dict[str, Any]) -> None:
        source = self.get_source(source_id)
        if source is None:
            raise MapSkinError(f"Source '{source_id}' not found")
        if source.get("type") != "geojson":
            raise MapSkinError(f"Source '{source_id}' is not a GeoJSON source")
        source["data"] = copy.deepcopy(data)
