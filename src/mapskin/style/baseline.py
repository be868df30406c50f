# src/mapskin/style/baseline.py
"""
Baseline capture of scalable style values.

Label sizes and text fields, and the widths/opacities of feature layers, are
recorded once right after a style loads. Every later scaling step reads the
baseline instead of the displayed value, so scaling by 1.5 then by 1.0 goes
back to the original value exactly.
"""

import copy
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from mapskin.engine.base import RenderingEngine, read_layout_property, read_paint_property

from .classifier import FEATURE_GROUPS
from .colors import is_number


class BaselineStore:
    """Pre-customization values of the active style."""

    def __init__(self):
        self.label_sizes: Dict[str, Any] = {}
        self.label_text_fields: Dict[str, Any] = {}
        self.feature_paint: Dict[Tuple[str, str], Any] = {}

    def clear(self) -> None:
        self.label_sizes.clear()
        self.label_text_fields.clear()
        self.feature_paint.clear()

    def capture_labels(self, engine: RenderingEngine, label_ids: Iterable[str]) -> None:
        """Record ``text-size`` and ``text-field`` of every label layer."""
        self.label_sizes.clear()
        self.label_text_fields.clear()

        for layer_id in label_ids:
            text_size = read_layout_property(engine, layer_id, "text-size")
            if text_size is not None:
                self.label_sizes[layer_id] = copy.deepcopy(text_size)

            text_field = read_layout_property(engine, layer_id, "text-field")
            if text_field is not None:
                self.label_text_fields[layer_id] = copy.deepcopy(text_field)

    def _save_paint(self, engine: RenderingEngine, layer_id: str, name: str) -> None:
        value = read_paint_property(engine, layer_id, name)
        if is_number(value):
            self.feature_paint[(layer_id, name)] = value
        elif isinstance(value, (list, dict)):
            self.feature_paint[(layer_id, name)] = copy.deepcopy(value)

    def capture_feature_paint(
        self, engine: RenderingEngine, groups: Mapping[str, Iterable[str]]
    ) -> None:
        """Record line width/opacity and fill opacity of feature group layers."""
        self.feature_paint.clear()

        for group_key in FEATURE_GROUPS:
            for layer_id in groups.get(group_key, []):
                layer = engine.get_layer(layer_id)
                if not layer:
                    continue
                if layer.get("type") == "line":
                    self._save_paint(engine, layer_id, "line-width")
                    self._save_paint(engine, layer_id, "line-opacity")
                elif layer.get("type") == "fill":
                    self._save_paint(engine, layer_id, "fill-opacity")

    def paint(self, layer_id: str, name: str) -> Optional[Any]:
        """Deep copy of a captured paint baseline, or None."""
        value = self.feature_paint.get((layer_id, name))
        return copy.deepcopy(value) if value is not None else None

    def label_size(self, layer_id: str) -> Optional[Any]:
        value = self.label_sizes.get(layer_id)
        return copy.deepcopy(value) if value is not None else None

    def label_text_field(self, layer_id: str) -> Optional[Any]:
        value = self.label_text_fields.get(layer_id)
        return copy.deepcopy(value) if value is not None else None
