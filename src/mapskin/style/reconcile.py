# src/mapskin/style/reconcile.py
"""
Configuration reconciliation after a style load.

A freshly loaded style is captured into a snapshot; depending on why the
style was loaded, the snapshot is merged with the startup defaults, with the
session state the user already had, or with a preset.

==================  =======================================================
Context             Result
==================  =======================================================
``startup``         snapshot + startup sections, basemap and visibility
                    flags forced to startup values
``manual``          snapshot + current camera/markers/canvas, entity
                    overrides reduced to their ``visible`` flag
``preset[name]``    snapshot with the preset's sections layered on top
``restore``         the saved configuration as-is, on the loaded basemap
==================  =======================================================
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from loguru import logger
from pydantic.alias_generators import to_camel

from mapskin.studio.models import (
    Atmosphere,
    Camera,
    Canvas,
    Creative,
    EntityOverride,
    MarkerStyles,
    Preset,
    StudioConfig,
    StyleSnapshot,
)
from mapskin.utils.dicts import merge_dicts

PRESET_SECTIONS = (
    "layer_visibility",
    "component_styles",
    "base_label_styles",
    "camera",
    "marker_styles",
    "canvas",
    "atmosphere",
    "creative",
)


@dataclass(frozen=True)
class SwitchContext:
    """Why a style is being (re)loaded."""

    mode: str = "manual"
    preset_name: Optional[str] = None

    @classmethod
    def startup(cls) -> "SwitchContext":
        return cls("startup")

    @classmethod
    def manual(cls) -> "SwitchContext":
        return cls("manual")

    @classmethod
    def preset(cls, name: str) -> "SwitchContext":
        return cls("preset", name)

    @classmethod
    def restore(cls) -> "SwitchContext":
        return cls("restore")

    @property
    def is_preset(self) -> bool:
        return self.mode == "preset"

    def __str__(self) -> str:
        if self.is_preset:
            return f"preset[{self.preset_name}]"
        return self.mode


def build_config_from_snapshot(
    snapshot: StyleSnapshot,
    defaults: StudioConfig,
    camera: Optional[Camera] = None,
    marker_styles: Optional[MarkerStyles] = None,
    canvas: Optional[Canvas] = None,
    atmosphere: Optional[Atmosphere] = None,
    creative: Optional[Creative] = None,
    entity_overrides: Optional[Mapping[str, EntityOverride]] = None,
) -> StudioConfig:
    """
    Turn a snapshot into a complete configuration.

    Sections the snapshot does not carry come from the arguments, or from
    ``defaults`` when an argument is omitted, so no field is ever undefined.
    """
    return StudioConfig(
        basemap=snapshot.basemap,
        layer_visibility=snapshot.layer_visibility.model_copy(deep=True),
        component_styles=snapshot.component_styles.model_copy(deep=True),
        base_label_styles=snapshot.base_label_styles.model_copy(deep=True),
        camera=(camera or defaults.camera).model_copy(deep=True),
        marker_styles=(marker_styles or defaults.marker_styles).model_copy(deep=True),
        canvas=(canvas or defaults.canvas).model_copy(deep=True),
        atmosphere=(atmosphere or defaults.atmosphere).model_copy(deep=True),
        creative=(creative or defaults.creative).model_copy(deep=True),
        style_entity_visibility={
            key: override.model_copy(deep=True)
            for key, override in (entity_overrides or {}).items()
        },
    )


def build_startup_config(snapshot: StyleSnapshot, startup: StudioConfig) -> StudioConfig:
    config = build_config_from_snapshot(
        snapshot,
        startup,
        entity_overrides=startup.style_entity_visibility,
    )
    config.basemap = startup.basemap
    config.layer_visibility = startup.layer_visibility.model_copy(deep=True)
    return config


def build_visibility_only_overrides(
    entries: Mapping[str, EntityOverride],
) -> Dict[str, EntityOverride]:
    """Keep only the ``visible`` flag of each entity override."""
    return {
        key: EntityOverride(visible=entry.visible)
        for key, entry in (entries or {}).items()
        if entry.visible is not None
    }


def build_manual_basemap_config(
    snapshot: StyleSnapshot, current: StudioConfig, defaults: StudioConfig
) -> StudioConfig:
    """
    Reconcile after a user-initiated basemap switch.

    The new style keeps its own colors; the user's framing and markers
    survive, and only hidden/shown entity choices carry over.
    """
    return build_config_from_snapshot(
        snapshot,
        defaults,
        camera=current.camera,
        marker_styles=current.marker_styles,
        canvas=current.canvas,
        entity_overrides=build_visibility_only_overrides(current.style_entity_visibility),
    )


def build_config_from_preset(
    preset: Preset,
    snapshot: StyleSnapshot,
    current: StudioConfig,
    defaults: StudioConfig,
) -> StudioConfig:
    """
    Layer a preset on top of a snapshot.

    The camera stays where it is unless the preset sets one; the preset's
    entity overrides replace any previous ones.
    """
    base = build_config_from_snapshot(snapshot, defaults, camera=current.camera)
    data = base.model_dump(by_alias=True)

    for name in PRESET_SECTIONS:
        section = preset.section(name)
        if section:
            alias = to_camel(name)
            data[alias] = merge_dicts(data[alias], section)

    data["styleEntityVisibility"] = preset.section("style_entity_visibility")
    return StudioConfig.model_validate(data)


def build_next_config(
    context: SwitchContext,
    snapshot: StyleSnapshot,
    current: StudioConfig,
    startup: StudioConfig,
    presets: Mapping[str, Preset],
) -> StudioConfig:
    """Pick the reconciliation for ``context``; unknown presets reconcile as manual."""
    if context.is_preset:
        preset = presets.get(context.preset_name)
        if preset is not None:
            return build_config_from_preset(preset, snapshot, current, startup)
        logger.warning(f"Unknown preset '{context.preset_name}', reconciling as manual switch")
        return build_manual_basemap_config(snapshot, current, startup)

    if context.mode == "manual":
        return build_manual_basemap_config(snapshot, current, startup)

    if context.mode == "restore":
        restored = current.clone()
        restored.basemap = snapshot.basemap
        return restored

    return build_startup_config(snapshot, startup)
