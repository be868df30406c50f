# src/mapskin/style/context.py
"""
Per-style mutable state owned by the studio.

Everything derived from the active style (groups, baselines, entities,
snapshot, ready flag) lives here so a style switch can drop it in one call.
"""

from typing import Dict, List, Optional

from loguru import logger

from mapskin.engine.base import RenderingEngine
from mapskin.studio.models import StudioConfig, StyleSnapshot

from .baseline import BaselineStore
from .classifier import base_label_ids, classify_layers, empty_groups
from .entities import EntityRegistry
from .snapshot import capture_style_snapshot


class StyleContext:
    """Derived state of the active style plus the current configuration."""

    def __init__(
        self,
        engine: RenderingEngine,
        config: StudioConfig,
        reserved_prefix: Optional[str] = None,
    ):
        self.engine = engine
        self.config = config
        self.reserved_prefix = reserved_prefix
        self.groups: Dict[str, List[str]] = empty_groups()
        self.baselines = BaselineStore()
        self.entities = EntityRegistry(engine, reserved_prefix)
        self.snapshot: Optional[StyleSnapshot] = None
        self.style_ready = False
        self.current_basemap: Optional[str] = config.basemap

    def reset(self) -> None:
        """Forget everything derived from the previous style."""
        self.entities.clear()
        self.snapshot = None
        self.style_ready = False

    def base_label_ids(self) -> List[str]:
        return base_label_ids(self.groups)

    def reload(self, basemap: str, defaults: StudioConfig) -> StyleSnapshot:
        """
        Classify the loaded style, capture baselines and take a snapshot.

        Args:
            basemap: Key of the style that just loaded
            defaults: Fallback values for anything the style does not define

        Returns:
            The captured snapshot (also stored on the context)
        """
        self.current_basemap = basemap
        self.groups = classify_layers(self.engine.layers, self.reserved_prefix)
        self.baselines.capture_labels(self.engine, self.base_label_ids())
        self.baselines.capture_feature_paint(self.engine, self.groups)
        self.entities.rebuild()
        self.snapshot = capture_style_snapshot(
            self.engine, self.groups, self.entities, basemap, defaults
        )
        self.style_ready = True

        counts = ", ".join(f"{key}={len(ids)}" for key, ids in self.groups.items() if ids)
        logger.debug(f"Classified '{basemap}': {counts or 'no groups'}")
        return self.snapshot
