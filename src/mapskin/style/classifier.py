# src/mapskin/style/classifier.py
"""
Heuristic layer classifier.

Vendor styles name their layers freely (``water``, ``road-primary``,
``place_label_city``...). The classifier buckets every layer of a style into
one semantic group using the layer type plus keywords found in the layer id
and its ``source-layer`` tag.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

GROUP_KEYS = (
    "background",
    "water",
    "parks",
    "landuse",
    "roadsMajor",
    "roadsMinor",
    "buildings",
    "boundaries",
    "labelsRoad",
    "labelsPlace",
    "labelsPoi",
    "labelsWater",
)

LABEL_GROUPS = ("labelsRoad", "labelsPlace", "labelsPoi", "labelsWater")

# Groups whose paint is captured as baseline and amplified by creative controls
FEATURE_GROUPS = (
    "water",
    "parks",
    "landuse",
    "roadsMajor",
    "roadsMinor",
    "buildings",
    "boundaries",
)

WATER_KEYWORDS = ("water", "waterway", "ocean", "sea", "river", "lake", "canal")
PARK_ID_KEYWORDS = ("park", "landcover", "grass", "wood")

ROAD_LINE_KEYWORDS = (
    "road",
    "street",
    "highway",
    "motorway",
    "trunk",
    "transport",
    "bridge",
    "tunnel",
    "path",
    "trail",
    "rail",
)

ROAD_LABEL_KEYWORDS = (
    "road",
    "street",
    "highway",
    "motorway",
    "trunk",
    "route",
    "shield",
    "transportation_name",
    "transport",
)

WATER_LABEL_KEYWORDS = WATER_KEYWORDS + ("water_name", "marine")

POI_LABEL_KEYWORDS = (
    "poi",
    "airport",
    "aerodrome",
    "transit",
    "station",
    "amenity",
    "school",
    "hospital",
    "shop",
)

PLACE_LABEL_KEYWORDS = (
    "place",
    "settlement",
    "subnational",
    "country",
    "state",
    "province",
    "city",
    "town",
    "village",
    "neighborhood",
    "neighbourhood",
    "district",
    "region",
    "continent",
    "locality",
)

MAJOR_ROAD_PATTERN = re.compile(r"(motorway|trunk|primary|secondary|tertiary|major)")


def empty_groups() -> Dict[str, List[str]]:
    return {key: [] for key in GROUP_KEYS}


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def classify_layer(layer: Dict[str, Any]) -> Optional[str]:
    """
    Return the semantic group of a single style layer.

    Fill/line rules are tried in a fixed order (water, parks, landuse,
    buildings, boundaries, roads) and the first match wins, so a layer never
    lands in two visibility groups.

    Args:
        layer: Style layer dictionary (``id``, ``type``, optional ``source-layer``)

    Returns:
        Group key, or None when no rule matches
    """
    layer_id = str(layer.get("id") or "").lower()
    layer_type = layer.get("type")
    source_layer = str(layer.get("source-layer") or "").lower()

    if layer_type == "background":
        return "background"

    tags = f"{layer_id} {source_layer}"

    if layer_type == "symbol":
        if contains_any(tags, ROAD_LABEL_KEYWORDS):
            return "labelsRoad"
        if contains_any(tags, WATER_LABEL_KEYWORDS):
            return "labelsWater"
        if contains_any(tags, POI_LABEL_KEYWORDS):
            return "labelsPoi"
        if contains_any(tags, PLACE_LABEL_KEYWORDS) or "label" in layer_id:
            return "labelsPlace"
        return None

    if layer_type not in ("fill", "line"):
        return None

    is_water = contains_any(tags, WATER_KEYWORDS)
    is_park = contains_any(layer_id, PARK_ID_KEYWORDS) or source_layer == "park"
    is_landuse = "landuse" in layer_id or source_layer in ("landuse", "landcover")
    is_building = "building" in layer_id or source_layer == "building"
    is_boundary = "boundary" in layer_id or source_layer == "boundary"
    is_road = layer_type == "line" and (
        contains_any(tags, ROAD_LINE_KEYWORDS) or "transportation" in source_layer
    )

    if is_water:
        return "water"
    if is_park and layer_type == "fill":
        return "parks"
    if is_landuse and layer_type == "fill":
        return "landuse"
    if is_building:
        return "buildings"
    if is_boundary and layer_type == "line":
        return "boundaries"
    if is_road:
        return "roadsMajor" if MAJOR_ROAD_PATTERN.search(layer_id) else "roadsMinor"
    return None


def classify_layers(
    layers: Iterable[Dict[str, Any]], reserved_prefix: Optional[str] = None
) -> Dict[str, List[str]]:
    """
    Partition style layers into semantic groups.

    Layers owned by the marker overlay (ids starting with ``reserved_prefix``)
    are skipped. Every group key is present in the result, possibly empty.
    """
    groups = empty_groups()
    for layer in layers or []:
        if not layer or not layer.get("id"):
            continue
        if reserved_prefix and str(layer["id"]).startswith(reserved_prefix):
            continue
        group = classify_layer(layer)
        if group:
            groups[group].append(layer["id"])
    return groups


def base_label_ids(groups: Dict[str, List[str]]) -> List[str]:
    """All label layer ids in road, place, POI, water order."""
    ids: List[str] = []
    for key in LABEL_GROUPS:
        ids.extend(groups.get(key, []))
    return ids
