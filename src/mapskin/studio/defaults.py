# src/mapskin/studio/defaults.py
"""
Packaged studio defaults: basemap catalogue, startup configuration,
built-in presets and creative profiles.
"""

from dataclasses import dataclass, field
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from mapskin.exceptions import (
    ConfigurationNotFoundError,
    ConfigurationValidationError,
    UnknownBasemapError,
    UnknownPresetError,
)

from .models import Preset, StudioConfig

DEFAULTS_RESOURCE = "studio_defaults.yaml"
PRESETS_RESOURCE = "presets.yaml"


@dataclass
class StudioDefaults:
    """Everything the studio needs besides a rendering engine."""

    startup: StudioConfig
    presets: Dict[str, Preset] = field(default_factory=dict)
    creative_profiles: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    basemaps: Dict[str, Any] = field(default_factory=dict)

    def is_known_basemap(self, key: str) -> bool:
        return key in self.basemaps

    def basemap_source(self, key: str) -> Any:
        try:
            return self.basemaps[key]
        except KeyError:
            raise UnknownBasemapError(f"Unknown basemap: {key}") from None

    def get_preset(self, name: str) -> Preset:
        try:
            return self.presets[name]
        except KeyError:
            raise UnknownPresetError(f"Unknown preset: {name}") from None


def _read_yaml_resource(name: str) -> Dict[str, Any]:
    text = files("mapskin.data").joinpath(name).read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def _parse_presets(data: Mapping[str, Any], origin: str) -> Dict[str, Preset]:
    presets = {}
    for name, body in (data or {}).items():
        try:
            presets[name] = Preset.model_validate(body or {})
        except ValidationError as e:
            raise ConfigurationValidationError(
                f"Invalid preset '{name}' in {origin}: {e}"
            ) from e
    return presets


def load_presets_file(path: Union[str, Path]) -> Dict[str, Preset]:
    """
    Read user presets from a YAML file.

    Raises:
        ConfigurationNotFoundError: If the file does not exist
        ConfigurationValidationError: If the YAML or a preset is invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationNotFoundError(path, "Presets file")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationValidationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationValidationError(f"Presets file {path} must contain a mapping")

    presets = _parse_presets(data, str(path))
    logger.debug(f"Loaded {len(presets)} presets from {path}")
    return presets


def load_studio_defaults(
    presets_file: Optional[Union[str, Path]] = None,
    basemaps: Optional[Mapping[str, Any]] = None,
    startup_basemap: Optional[str] = None,
) -> StudioDefaults:
    """
    Load the packaged defaults, optionally extended by user presets/basemaps.

    Args:
        presets_file: Extra presets YAML; same names override built-ins
        basemaps: Extra basemaps (key -> style URL, path or dict)
        startup_basemap: Basemap shown on startup instead of the packaged one

    Returns:
        StudioDefaults ready to build a studio
    """
    try:
        data = _read_yaml_resource(DEFAULTS_RESOURCE)
        startup = StudioConfig.from_dict(data.get("startup"))
        presets = _parse_presets(_read_yaml_resource(PRESETS_RESOURCE), PRESETS_RESOURCE)
    except yaml.YAMLError as e:
        raise ConfigurationValidationError(f"Invalid packaged defaults: {e}") from e
    except ValidationError as e:
        raise ConfigurationValidationError(f"Invalid startup configuration: {e}") from e

    catalogue = dict(data.get("basemaps") or {})
    catalogue.update(basemaps or {})

    if presets_file:
        presets.update(load_presets_file(presets_file))

    if startup_basemap:
        startup.basemap = startup_basemap

    if startup.basemap not in catalogue:
        raise ConfigurationValidationError(
            f"Startup basemap '{startup.basemap}' is not in the basemap catalogue"
        )

    return StudioDefaults(
        startup=startup,
        presets=presets,
        creative_profiles=dict(data.get("creative_profiles") or {}),
        basemaps=catalogue,
    )
