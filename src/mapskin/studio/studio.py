# src/mapskin/studio/studio.py
"""
Style studio facade.

Ties a rendering engine, the style switch orchestrator and the per-style
context together and exposes the imperative entry points of the studio:
switch basemap, apply preset, patch entities, re-apply everything, update
point markers and move the camera.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from mapskin.config.models import StudioSettings
from mapskin.engine.base import RenderingEngine
from mapskin.engine.scheduling import Scheduler
from mapskin.exceptions import ConfigurationValidationError
from mapskin.style import appliers, creative, labels
from mapskin.style.context import StyleContext
from mapskin.style.entities import EntityListing
from mapskin.style.orchestrator import StyleSwitchOrchestrator
from mapskin.style.reconcile import (
    SwitchContext,
    build_config_from_preset,
    build_next_config,
)

from .defaults import StudioDefaults
from .markers import (
    PointRecord,
    apply_marker_styles,
    ensure_marker_layers,
    update_marker_source,
)
from .models import Camera, EntityOverride, StudioConfig, StyleSnapshot


def _camel_keys(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {to_camel(k) if "_" in k else k: v for k, v in values.items()}


class StyleStudio:
    """
    Interactive re-skinning session over one rendering engine.

    Args:
        engine: Rendering engine displaying the basemap
        scheduler: Event loop (or compatible) for deferred callbacks
        defaults: Packaged startup configuration, presets and basemaps
        settings: Runtime settings (failsafe timeout, marker prefix)
    """

    def __init__(
        self,
        engine: RenderingEngine,
        scheduler: Scheduler,
        defaults: StudioDefaults,
        settings: Optional[StudioSettings] = None,
    ):
        self.engine = engine
        self.scheduler = scheduler
        self.defaults = defaults
        self.settings = settings or StudioSettings()
        self.marker_prefix = self.settings.marker_layer_prefix
        self.points: List[PointRecord] = []
        self.loading = False

        self.context = StyleContext(
            engine, defaults.startup.clone(), reserved_prefix=self.marker_prefix
        )
        self.orchestrator = StyleSwitchOrchestrator(
            engine,
            scheduler,
            resolve_source=defaults.basemap_source,
            on_style_ready=self._handle_style_ready,
            on_reset=self.context.reset,
            on_loading=self._set_loading,
            is_known_target=defaults.is_known_basemap,
            failsafe_timeout=self.settings.failsafe_timeout,
        )
        self._started = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> StudioConfig:
        return self.context.config

    @property
    def snapshot(self) -> Optional[StyleSnapshot]:
        return self.context.snapshot

    @property
    def style_ready(self) -> bool:
        return self.context.style_ready

    @property
    def current_basemap(self) -> Optional[str]:
        return self.orchestrator.current_target

    def classification(self) -> Dict[str, List[str]]:
        return {key: list(ids) for key, ids in self.context.groups.items()}

    def entity_listing(self) -> List[EntityListing]:
        return self.context.entities.listing(self.config.style_entity_visibility)

    def export_config(self) -> Dict[str, Any]:
        return self.config.to_dict()

    def export_style(self) -> Dict[str, Any]:
        """Deep copy of the re-skinned style document."""
        export = getattr(self.engine, "export_style", None)
        if export is not None:
            return export()
        return dict(self.engine.get_style())

    def _set_loading(self, loading: bool) -> None:
        self.loading = loading

    async def wait_until_idle(self) -> None:
        """Wait until no style switch is in flight or pending."""
        if self.orchestrator.is_idle:
            return
        future = asyncio.get_running_loop().create_future()

        def _done() -> None:
            if not future.done():
                future.set_result(None)

        self.orchestrator.add_idle_callback(_done)
        await future

    # ------------------------------------------------------------------
    # Style switching
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Load the startup basemap; later calls are ignored."""
        if self._started:
            logger.debug("Studio already started")
            return False
        self._started = True
        return self.orchestrator.request(self.defaults.startup.basemap, SwitchContext.startup())

    def request_basemap(self, key: str) -> bool:
        """Switch to another basemap; the new style keeps its own colors."""
        return self.orchestrator.request(key, SwitchContext.manual())

    def apply_preset(self, name: str, switch_basemap: bool = True) -> bool:
        """
        Apply a named preset.

        A preset naming another basemap goes through a full style switch;
        otherwise it is layered on the current snapshot and applied in place.

        Returns:
            True if the preset was applied or a switch was queued
        """
        preset = self.defaults.presets.get(name)
        if preset is None:
            logger.warning(f"Ignoring unknown preset '{name}'")
            return False

        target = preset.basemap or self.current_basemap
        needs_switch = (
            switch_basemap
            and preset.basemap is not None
            and preset.basemap != self.current_basemap
        )
        if needs_switch or not self.orchestrator.is_idle:
            return self.orchestrator.request(target, SwitchContext.preset(name))

        if self.snapshot is None:
            logger.warning(f"Cannot apply preset '{name}' before a style is loaded")
            return False

        self.context.config = build_config_from_preset(
            preset, self.snapshot, self.config, self.defaults.startup
        )
        self._apply_everything()
        logger.info(f"Preset applied: {name}")
        return True

    def load_config(self, config: Union[StudioConfig, Mapping[str, Any]]) -> bool:
        """
        Restore a saved configuration.

        Raises:
            ConfigurationValidationError: If ``config`` is not a valid configuration
        """
        if not isinstance(config, StudioConfig):
            try:
                config = StudioConfig.from_dict(dict(config))
            except ValidationError as e:
                raise ConfigurationValidationError(f"Invalid studio configuration: {e}") from e

        if not self.defaults.is_known_basemap(config.basemap):
            logger.warning(f"Saved configuration uses unknown basemap '{config.basemap}'")
            return False

        self.context.config = config.clone()
        if config.basemap != self.current_basemap or not self.orchestrator.is_idle:
            return self.orchestrator.request(config.basemap, SwitchContext.restore())

        self._apply_everything()
        return True

    def _handle_style_ready(self, target: str, context: SwitchContext) -> None:
        snapshot = self.context.reload(target, self.defaults.startup)
        self.context.config = build_next_config(
            context,
            snapshot,
            self.config,
            self.defaults.startup,
            self.defaults.presets,
        )
        ensure_marker_layers(self.engine, self.marker_prefix)

        if context.is_preset or context.mode == "restore":
            appliers.apply_all_style_controls(self.context)
        else:
            appliers.apply_session_state(self.context)

        apply_marker_styles(self.engine, self.config.marker_styles, self.marker_prefix)
        update_marker_source(self.engine, self.points, self.config.marker_styles, self.marker_prefix)
        appliers.apply_camera(self.context)

    # ------------------------------------------------------------------
    # In-place edits
    # ------------------------------------------------------------------

    def _apply_everything(self) -> None:
        appliers.apply_all_style_controls(self.context)
        apply_marker_styles(self.engine, self.config.marker_styles, self.marker_prefix)
        update_marker_source(self.engine, self.points, self.config.marker_styles, self.marker_prefix)

    def reapply_all(self) -> None:
        """Push the whole configuration onto the current style again."""
        if not self.style_ready:
            logger.debug("Style not ready, nothing to re-apply")
            return
        self._apply_everything()

    def apply_entity_patch(self, patch: Mapping[str, Mapping[str, Any]]) -> int:
        """
        Record entity overrides and apply them.

        Args:
            patch: entity key -> ``{visible, color, opacity, width}`` (any subset)

        Returns:
            Number of entities touched on the current style
        """
        overrides = dict(self.config.style_entity_visibility)
        applied: Dict[str, Dict[str, Any]] = {}

        for key, entry in patch.items():
            try:
                update = EntityOverride.model_validate(
                    {k: v for k, v in dict(entry).items() if v is not None}
                )
            except ValidationError as e:
                raise ConfigurationValidationError(f"Invalid override for '{key}': {e}") from e
            existing = overrides.get(key)
            merged = existing.as_patch() if existing is not None else {}
            merged.update(update.as_patch())
            overrides[key] = EntityOverride.model_validate(merged)
            applied[key] = update.as_patch()

        self.config.style_entity_visibility = overrides
        if not self.style_ready:
            return 0
        return self.context.entities.apply_patch(applied)

    def update_component_styles(self, **values: Any) -> None:
        """Set component style values (camelCase or snake_case) and apply them."""
        values = _camel_keys(values)
        data = self.config.component_styles.model_dump(by_alias=True)
        data.update(values)
        self.config.component_styles = type(self.config.component_styles).model_validate(data)
        for key in values:
            self.apply_component_style(key)

    def apply_component_style(self, control_key: str) -> None:
        appliers.apply_component_style(self.context, control_key)

    def apply_base_label_style(self, control_key: str) -> None:
        labels.apply_base_label_style(self.context, control_key)

    def update_creative(self, **values: Any) -> None:
        """Set creative values and re-run the creative controls."""
        data = self.config.creative.model_dump(by_alias=True)
        data.update(_camel_keys(values))
        self.config.creative = type(self.config.creative).model_validate(data)
        self.apply_creative_controls()

    def apply_creative_controls(self) -> None:
        """
        Label density and palette, then visibility, colors, labels and
        feature amplification.
        """
        if not self.style_ready:
            return
        self.context.config = creative.apply_creative_tone(self.config)
        appliers.apply_layer_visibility(self.context)
        appliers.apply_component_styles(self.context)
        labels.apply_base_label_styles(self.context)
        appliers.apply_creative_feature_amplification(self.context)

    def apply_creative_profile(self, name: str) -> None:
        """
        Raises:
            UnknownPresetError: If the profile does not exist
        """
        self.context.config = creative.apply_creative_profile(
            self.config, name, self.defaults.creative_profiles
        )
        if name != "free":
            self.apply_creative_controls()

    def reset_creative(self) -> None:
        self.context.config = creative.reset_creative(self.config, self.defaults.startup)
        self.apply_creative_controls()

    # ------------------------------------------------------------------
    # Markers and camera
    # ------------------------------------------------------------------

    def update_points(self, points: Iterable[Union[PointRecord, Mapping[str, Any]]]) -> None:
        self.points = [
            p if isinstance(p, PointRecord) else PointRecord.from_dict(dict(p)) for p in points
        ]
        if self.style_ready:
            update_marker_source(
                self.engine, self.points, self.config.marker_styles, self.marker_prefix
            )

    def set_camera(
        self,
        center: Optional[List[float]] = None,
        zoom: Optional[float] = None,
        pitch: Optional[float] = None,
        bearing: Optional[float] = None,
    ) -> Camera:
        data = self.config.camera.model_dump()
        for name, value in (("center", center), ("zoom", zoom), ("pitch", pitch), ("bearing", bearing)):
            if value is not None:
                data[name] = value
        self.config.camera = Camera.model_validate(data)
        appliers.apply_camera(self.context)
        return self.config.camera

    def reset_camera(self) -> Camera:
        self.config.camera = self.defaults.startup.camera.model_copy(deep=True)
        appliers.apply_camera(self.context)
        return self.config.camera
