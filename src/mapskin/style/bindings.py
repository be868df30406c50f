# src/mapskin/style/bindings.py
"""
Mapping between configuration controls and semantic groups.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

# (layerVisibility key, group key)
LAYER_TOGGLE_BINDINGS: Tuple[Tuple[str, str], ...] = (
    ("showWater", "water"),
    ("showParks", "parks"),
    ("showLanduse", "landuse"),
    ("showRoadsMajor", "roadsMajor"),
    ("showRoadsMinor", "roadsMinor"),
    ("showBuildings", "buildings"),
    ("showBoundaries", "boundaries"),
    ("showRoadLabels", "labelsRoad"),
    ("showPlaceLabels", "labelsPlace"),
    ("showPoiLabels", "labelsPoi"),
    ("showWaterLabels", "labelsWater"),
)


@dataclass(frozen=True)
class ComponentControl:
    key: str
    group: str
    kind: str  # "color" or "opacity"


COMPONENT_CONTROL_BINDINGS: Tuple[ComponentControl, ...] = (
    ComponentControl("bgColor", "background", "color"),
    ComponentControl("waterColor", "water", "color"),
    ComponentControl("waterOpacity", "water", "opacity"),
    ComponentControl("parkColor", "parks", "color"),
    ComponentControl("parkOpacity", "parks", "opacity"),
    ComponentControl("landuseColor", "landuse", "color"),
    ComponentControl("landuseOpacity", "landuse", "opacity"),
    ComponentControl("roadMajorColor", "roadsMajor", "color"),
    ComponentControl("roadMajorOpacity", "roadsMajor", "opacity"),
    ComponentControl("roadMinorColor", "roadsMinor", "color"),
    ComponentControl("roadMinorOpacity", "roadsMinor", "opacity"),
    ComponentControl("buildingColor", "buildings", "color"),
    ComponentControl("buildingOpacity", "buildings", "opacity"),
    ComponentControl("boundaryColor", "boundaries", "color"),
    ComponentControl("boundaryOpacity", "boundaries", "opacity"),
)

COMPONENT_CONTROLS_BY_KEY: Dict[str, ComponentControl] = {
    control.key: control for control in COMPONENT_CONTROL_BINDINGS
}

GROUP_TO_TOGGLE: Dict[str, str] = {group: key for key, group in LAYER_TOGGLE_BINDINGS}

# Creative "feature focus" choices and the group each one widens
FOCUS_GROUPS: Dict[str, str] = {
    "water": "water",
    "roads": "roadsMajor",
    "parks": "parks",
    "buildings": "buildings",
    "boundaries": "boundaries",
}
