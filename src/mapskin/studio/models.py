# src/mapskin/studio/models.py
"""
Studio configuration models.

The Configuration is the portable state of a customized map: which feature
groups are shown, component colors, base label typography, camera, marker
styling and creative controls, plus per-entity overrides. It serializes to
JSON/YAML with camelCase keys and canonical ``#rrggbb`` colors.
"""

import copy
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from mapskin.style.colors import normalize_hex


def _canonical_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    hex_value = normalize_hex(v)
    if hex_value is None:
        raise ValueError(f"Invalid color: {v!r}")
    return hex_value


class CamelModel(BaseModel):
    """Base model with camelCase aliases; accepts both spellings on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class LayerVisibility(CamelModel):
    show_water: bool = True
    show_parks: bool = True
    show_landuse: bool = True
    show_roads_major: bool = True
    show_roads_minor: bool = True
    show_buildings: bool = True
    show_boundaries: bool = True
    show_road_labels: bool = True
    show_place_labels: bool = True
    show_poi_labels: bool = True
    show_water_labels: bool = True


class ComponentStyles(CamelModel):
    bg_color: str = "#f3efe6"
    water_color: str = "#a9c8d8"
    water_opacity: int = Field(100, ge=0, le=100)
    park_color: str = "#c8d9b8"
    park_opacity: int = Field(100, ge=0, le=100)
    landuse_color: str = "#e6e0d2"
    landuse_opacity: int = Field(100, ge=0, le=100)
    road_major_color: str = "#d9a066"
    road_major_opacity: int = Field(100, ge=0, le=100)
    road_minor_color: str = "#ffffff"
    road_minor_opacity: int = Field(100, ge=0, le=100)
    building_color: str = "#ddd6c8"
    building_opacity: int = Field(100, ge=0, le=100)
    boundary_color: str = "#9a8f80"
    boundary_opacity: int = Field(100, ge=0, le=100)

    @field_validator(
        "bg_color",
        "water_color",
        "park_color",
        "landuse_color",
        "road_major_color",
        "road_minor_color",
        "building_color",
        "boundary_color",
    )
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _canonical_color(v)


class BaseLabelStyles(CamelModel):
    base_label_color: str = "#3b3a36"
    base_label_opacity: int = Field(100, ge=0, le=100)
    base_label_halo_color: str = "#ffffff"
    base_label_halo_width: float = Field(1.0, ge=0, le=24)
    base_label_size_scale: int = Field(100, ge=10, le=400)
    base_label_transform: Literal["none", "uppercase", "lowercase"] = "none"

    @field_validator("base_label_color", "base_label_halo_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _canonical_color(v)


class Camera(CamelModel):
    center: List[float] = Field(default_factory=lambda: [2.1734, 41.3851])
    zoom: float = Field(12.0, ge=0, le=24)
    pitch: float = Field(0.0, ge=0, le=85)
    bearing: float = 0.0

    @field_validator("center")
    @classmethod
    def validate_center(cls, v: List[float]) -> List[float]:
        if len(v) != 2:
            raise ValueError("center must be [lng, lat]")
        lng, lat = v
        if not -180 <= lng <= 180 or not -90 <= lat <= 90:
            raise ValueError(f"center out of range: {v}")
        return [float(lng), float(lat)]


class MarkerStyles(CamelModel):
    marker_variant: Literal["badge", "dot", "ring", "target"] = "badge"
    marker_color: str = "#c2410c"
    marker_stroke: str = "#ffffff"
    marker_radius: float = Field(7.0, ge=1, le=40)
    stroke_weight: float = Field(2.0, ge=0, le=12)
    marker_opacity: int = Field(100, ge=0, le=100)
    halo_color: str = "#c2410c"
    halo_size: float = Field(6.0, ge=0, le=40)
    halo_opacity: int = Field(24, ge=0, le=100)
    show_labels: bool = True
    label_mode: Literal["name", "index", "indexName"] = "name"
    label_transform: Literal["none", "uppercase", "capitalize"] = "none"
    label_size: float = Field(12.0, ge=6, le=48)
    label_color: str = "#1f2933"
    label_halo_color: str = "#ffffff"
    label_halo_width: float = Field(1.2, ge=0, le=12)

    @field_validator("marker_color", "marker_stroke", "halo_color", "label_color", "label_halo_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _canonical_color(v)


class Canvas(CamelModel):
    canvas_ratio: Literal["free", "1:1", "4:5", "3:4", "16:9", "9:16", "a4"] = "free"
    canvas_padding: int = Field(0, ge=0, le=200)
    fit_padding: int = Field(48, ge=0, le=400)


class Atmosphere(CamelModel):
    map_brightness: int = Field(100, ge=0, le=200)
    map_contrast: int = Field(100, ge=0, le=200)
    map_saturation: int = Field(100, ge=0, le=300)
    map_grayscale: int = Field(0, ge=0, le=100)
    map_hue: int = Field(0, ge=-180, le=180)
    tint_color: str = "#ffffff"
    tint_opacity: int = Field(0, ge=0, le=100)
    vignette_opacity: int = Field(0, ge=0, le=100)
    grain_opacity: int = Field(0, ge=0, le=100)

    @field_validator("tint_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _canonical_color(v)

    def css_filter(self) -> str:
        """CSS filter chain a front end applies to the map canvas."""
        return " ".join(
            [
                f"brightness({self.map_brightness}%)",
                f"contrast({self.map_contrast}%)",
                f"saturate({self.map_saturation}%)",
                f"grayscale({self.map_grayscale}%)",
                f"hue-rotate({self.map_hue}deg)",
            ]
        )


FocusKey = Literal["none", "water", "roads", "parks", "buildings", "boundaries"]
AccentTarget = Literal["roads", "water", "parks", "boundaries"]


class Creative(CamelModel):
    creative_profile: str = "free"
    label_density_preset: Literal["silent", "balanced", "dense"] = "balanced"
    accent_target: AccentTarget = "water"
    accent_strength: int = Field(0, ge=0, le=100)
    ink_boost: int = Field(100, ge=10, le=400)
    river_boost: int = Field(100, ge=10, le=400)
    feature_focus: FocusKey = "none"
    feature_focus_strength: int = Field(0, ge=0, le=100)
    distort_rotate: float = 0.0
    distort_skew_x: float = 0.0
    distort_skew_y: float = 0.0
    distort_scale_x: float = 100.0
    distort_scale_y: float = 100.0
    palette_bg_color: Optional[str] = None
    palette_ink_color: Optional[str] = None
    palette_accent_color: Optional[str] = None

    @field_validator("palette_bg_color", "palette_ink_color", "palette_accent_color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return _canonical_color(v)


class EntityOverride(CamelModel):
    """Explicit per-entity override; unset fields keep the style's value."""

    visible: Optional[bool] = None
    color: Optional[str] = None
    opacity: Optional[int] = Field(None, ge=0, le=100)
    width: Optional[float] = Field(None, ge=0, le=24)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return _canonical_color(v)

    def as_patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class StudioConfig(CamelModel):
    """Complete, serializable studio configuration."""

    basemap: str = "cartoPositron"
    layer_visibility: LayerVisibility = Field(default_factory=LayerVisibility)
    component_styles: ComponentStyles = Field(default_factory=ComponentStyles)
    base_label_styles: BaseLabelStyles = Field(default_factory=BaseLabelStyles)
    camera: Camera = Field(default_factory=Camera)
    marker_styles: MarkerStyles = Field(default_factory=MarkerStyles)
    canvas: Canvas = Field(default_factory=Canvas)
    atmosphere: Atmosphere = Field(default_factory=Atmosphere)
    creative: Creative = Field(default_factory=Creative)
    style_entity_visibility: Dict[str, EntityOverride] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudioConfig":
        return cls.model_validate(data or {})

    def clone(self) -> "StudioConfig":
        return self.model_copy(deep=True)

    def entity_patch(self) -> Dict[str, Dict[str, Any]]:
        """Entity overrides in the shape the entity registry applies."""
        return {
            key: override.as_patch()
            for key, override in self.style_entity_visibility.items()
        }


class StyleSnapshot(CamelModel):
    """Values captured from a freshly loaded style."""

    basemap: str
    layer_visibility: LayerVisibility
    component_style_availability: Dict[str, bool] = Field(default_factory=dict)
    component_styles: ComponentStyles
    base_label_styles: BaseLabelStyles
    style_entity_visibility: Dict[str, EntityOverride] = Field(default_factory=dict)


class Preset(CamelModel):
    """
    Named bundle of partial configuration sections.

    Sections are kept as raw camelCase dictionaries and layered on top of a
    style snapshot when the preset is applied.
    """

    description: str = ""
    basemap: Optional[str] = None
    layer_visibility: Dict[str, Any] = Field(default_factory=dict)
    component_styles: Dict[str, Any] = Field(default_factory=dict)
    base_label_styles: Dict[str, Any] = Field(default_factory=dict)
    camera: Dict[str, Any] = Field(default_factory=dict)
    marker_styles: Dict[str, Any] = Field(default_factory=dict)
    canvas: Dict[str, Any] = Field(default_factory=dict)
    atmosphere: Dict[str, Any] = Field(default_factory=dict)
    creative: Dict[str, Any] = Field(default_factory=dict)
    style_entity_visibility: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def section(self, name: str) -> Dict[str, Any]:
        return copy.deepcopy(getattr(self, name))
