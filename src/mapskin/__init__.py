# src/mapskin/__init__.py
"""
mapskin - re-skin vector basemap styles.

Classifies the layers of a MapLibre/Mapbox GL style into semantic groups,
replays a portable studio configuration onto it and keeps that configuration
consistent across basemap switches.
"""

from mapskin._version import __version__
from mapskin.exceptions import (
    LayerNotFoundError,
    MapSkinError,
    StyleLoadError,
    UnknownBasemapError,
    UnknownPresetError,
    UnsupportedPropertyError,
)
from mapskin.studio import StudioConfig, StyleStudio, load_studio_defaults

__all__ = [
    "LayerNotFoundError",
    "MapSkinError",
    "StudioConfig",
    "StyleLoadError",
    "StyleStudio",
    "UnknownBasemapError",
    "UnknownPresetError",
    "UnsupportedPropertyError",
    "__version__",
    "load_studio_defaults",
]
