# src/mapskin/studio/__init__.py
"""
Style studio: configuration models, packaged defaults and the facade.
"""

from .models import (
    Atmosphere,
    BaseLabelStyles,
    Camera,
    Canvas,
    ComponentStyles,
    Creative,
    EntityOverride,
    LayerVisibility,
    MarkerStyles,
    Preset,
    StudioConfig,
    StyleSnapshot,
)
from .defaults import StudioDefaults, load_presets_file, load_studio_defaults
from .markers import PointRecord
from .studio import StyleStudio

__all__ = [
    "Atmosphere",
    "BaseLabelStyles",
    "Camera",
    "Canvas",
    "ComponentStyles",
    "Creative",
    "EntityOverride",
    "LayerVisibility",
    "MarkerStyles",
    "PointRecord",
    "Preset",
    "StudioConfig",
    "StudioDefaults",
    "StyleSnapshot",
    "StyleStudio",
    "load_presets_file",
    "load_studio_defaults",
]
