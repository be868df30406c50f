# src/mapskin/style/creative.py
"""
Creative controls: label density presets, palette mixing and profiles.

These functions only compute configuration; the appliers push the result
onto the style.
"""

from typing import Any, Dict, Mapping

from loguru import logger

from mapskin.exceptions import UnknownPresetError
from mapskin.studio.models import Creative, StudioConfig

from .colors import clamp, mix_hex_colors

LABEL_DENSITY_PRESETS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "silent": {
        "layer_visibility": {
            "show_road_labels": False,
            "show_place_labels": True,
            "show_poi_labels": False,
            "show_water_labels": False,
        },
        "base_label_styles": {"base_label_opacity": 72, "base_label_size_scale": 84},
    },
    "balanced": {
        "layer_visibility": {
            "show_road_labels": False,
            "show_place_labels": True,
            "show_poi_labels": False,
            "show_water_labels": False,
        },
        "base_label_styles": {"base_label_opacity": 82, "base_label_size_scale": 92},
    },
    "dense": {
        "layer_visibility": {
            "show_road_labels": True,
            "show_place_labels": True,
            "show_poi_labels": True,
            "show_water_labels": True,
        },
        "base_label_styles": {"base_label_opacity": 92, "base_label_size_scale": 104},
    },
}

# Palette mixes: (from, to, ratio) where "bg" and "ink" name the palette colors
PALETTE_MIXES = {
    "landuse_color": ("bg", "ink", 0.2),
    "building_color": ("bg", "ink", 0.28),
    "boundary_color": ("ink", "bg", 0.25),
    "road_minor_color": ("bg", "ink", 0.16),
    "road_major_color": ("ink", "bg", 0.14),
    "water_color": ("bg", "ink", 0.32),
    "park_color": ("bg", "ink", 0.26),
}


def apply_label_density_preset(config: StudioConfig) -> StudioConfig:
    """Return a copy with the label toggles/typography of the density preset."""
    preset = LABEL_DENSITY_PRESETS.get(config.creative.label_density_preset)
    if preset is None:
        preset = LABEL_DENSITY_PRESETS["balanced"]

    updated = config.clone()
    updated.layer_visibility = updated.layer_visibility.model_copy(
        update=preset["layer_visibility"]
    )
    updated.base_label_styles = updated.base_label_styles.model_copy(
        update=preset["base_label_styles"]
    )
    return updated


def apply_creative_palette(config: StudioConfig) -> StudioConfig:
    """
    Derive component colors from the creative palette.

    Background and ink are blended into every component; the accent color is
    then mixed into the accent target, strongly for the main component and
    softly for minor roads.
    """
    creative = config.creative
    styles = config.component_styles

    palette = {
        "bg": creative.palette_bg_color or styles.bg_color,
        "ink": creative.palette_ink_color or styles.road_major_color,
    }
    accent = creative.palette_accent_color or styles.water_color
    strength = clamp(creative.accent_strength / 100, 0, 1)
    mix_strong = 0.35 + strength * 0.65
    mix_soft = 0.18 + strength * 0.38

    values = {"bg_color": palette["bg"]}
    for name, (source, target, ratio) in PALETTE_MIXES.items():
        values[name] = mix_hex_colors(palette[source], palette[target], ratio)

    target = creative.accent_target
    if target == "roads":
        values["road_major_color"] = mix_hex_colors(values["road_major_color"], accent, mix_strong)
        values["road_minor_color"] = mix_hex_colors(values["road_minor_color"], accent, mix_soft)
    elif target == "water":
        values["water_color"] = mix_hex_colors(values["water_color"], accent, mix_strong)
    elif target == "parks":
        values["park_color"] = mix_hex_colors(values["park_color"], accent, mix_strong)
    elif target == "boundaries":
        values["boundary_color"] = mix_hex_colors(values["boundary_color"], accent, mix_strong)

    updated = config.clone()
    updated.component_styles = styles.model_copy(update=values)
    return updated


def apply_creative_tone(config: StudioConfig) -> StudioConfig:
    """Label density followed by palette, as the creative panel applies them."""
    return apply_creative_palette(apply_label_density_preset(config))


def apply_creative_profile(
    config: StudioConfig, name: str, profiles: Mapping[str, Mapping[str, Any]]
) -> StudioConfig:
    """
    Merge a named creative profile into the creative section.

    ``free`` only records the profile name and keeps manual values.

    Raises:
        UnknownPresetError: If the profile does not exist
    """
    if name != "free" and name not in profiles:
        raise UnknownPresetError(f"Unknown creative profile: {name}")

    data = config.creative.model_dump(by_alias=True)
    data["creativeProfile"] = name
    if name != "free":
        data.update(profiles[name])

    updated = config.clone()
    updated.creative = Creative.model_validate(data)
    logger.info(f"Creative profile applied: {name}")
    return updated


def reset_creative(config: StudioConfig, defaults: StudioConfig) -> StudioConfig:
    updated = config.clone()
    updated.creative = defaults.creative.model_copy(deep=True)
    return updated
