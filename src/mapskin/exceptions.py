# src/mapskin/exceptions.py
"""
Exceptions raised by the rendering engine adapters, the studio facade and
the configuration loaders. Everything derives from ``MapSkinError``.
"""

from pathlib import Path


class MapSkinError(Exception):
    """Base exception for mapskin"""

    pass


class StyleLoadError(MapSkinError):
    """Raised when a style document cannot be read or parsed"""

    pass


class LayerNotFoundError(MapSkinError):
    """Raised when a layer or source id is not part of the active style"""

    pass


class UnsupportedPropertyError(MapSkinError):
    """Raised when a layer type does not define the requested property"""

    def __init__(self, layer_id: str, layer_type: str, property_name: str):
        self.layer_id = layer_id
        self.layer_type = layer_type
        self.property_name = property_name
        super().__init__(
            f"Layer '{layer_id}' of type '{layer_type}' has no property '{property_name}'"
        )


class UnknownBasemapError(MapSkinError):
    """Raised when a basemap key is not part of the catalogue"""

    pass


class UnknownPresetError(MapSkinError):
    """Raised when a preset name is not registered"""

    pass


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(MapSkinError):
    """Application configuration, preset catalogue or saved studio configuration error"""

    pass


class ConfigurationNotFoundError(ConfigurationError):
    """Raised when an explicitly requested configuration or presets file does not exist"""

    def __init__(self, path, kind: str = "Configuration file"):
        self.path = Path(path)
        super().__init__(f"{kind} not found: {self.path}")


class ConfigurationValidationError(ConfigurationError):
    """Raised when YAML cannot be parsed or does not validate against its model"""

    pass
