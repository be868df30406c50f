# src/mapskin/studio/markers.py
"""
Point marker overlay.

The overlay owns one GeoJSON source and a small stack of circle/symbol layers,
all named with the reserved marker prefix so the classifier and the entity
registry leave them alone.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from mapskin.engine.base import RenderingEngine, safe_set_layout, safe_set_paint
from mapskin.style.colors import clamp, hex_to_rgba

from .models import MarkerStyles

DEFAULT_MARKER_PREFIX = "markers-"


@dataclass
class PointRecord:
    """A named point shown on the map."""

    name: str
    lat: float
    lng: float
    properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointRecord":
        extra = {k: v for k, v in data.items() if k not in ("name", "lat", "lng")}
        return cls(
            name=str(data.get("name", "")),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            properties=extra,
        )


def marker_ids(prefix: str = DEFAULT_MARKER_PREFIX) -> Dict[str, str]:
    return {
        "source": f"{prefix}source",
        "halo": f"{prefix}halo",
        "accent": f"{prefix}accent",
        "core": f"{prefix}core",
        "label": f"{prefix}label",
    }


def transform_label(label: str, mode: str) -> str:
    if mode == "uppercase":
        return label.upper()
    if mode == "capitalize":
        return " ".join(part[:1].upper() + part[1:].lower() for part in label.split(" "))
    return label


def label_for_point(point: PointRecord, index: int, mode: str) -> str:
    if mode == "index":
        return str(index + 1)
    if mode == "indexName":
        return f"{index + 1}. {point.name}"
    return point.name


def build_point_collection(
    points: Iterable[PointRecord],
    label_mode: str = "name",
    label_transform: str = "none",
) -> Dict[str, Any]:
    """
    Build the GeoJSON FeatureCollection fed to the marker source.

    Args:
        points: Points in display order
        label_mode: ``name``, ``index`` or ``indexName``
        label_transform: ``none``, ``uppercase`` or ``capitalize``

    Returns:
        GeoJSON FeatureCollection dictionary
    """
    features = []
    for index, point in enumerate(points):
        label = transform_label(label_for_point(point, index, label_mode), label_transform)
        properties = dict(point.properties)
        properties.update(
            {"name": point.name, "label": label, "markerIndex": str(index + 1)}
        )
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [point.lng, point.lat]},
                "properties": properties,
            }
        )
    return {"type": "FeatureCollection", "features": features}


def ensure_marker_layers(engine: RenderingEngine, prefix: str = DEFAULT_MARKER_PREFIX) -> None:
    """Add the marker source and layers if the active style lacks them."""
    ids = marker_ids(prefix)
    source_id = ids["source"]

    if engine.get_source(source_id) is None:
        engine.add_source(
            source_id,
            {"type": "geojson", "data": {"type": "FeatureCollection", "features": []}},
        )

    circles = [
        (ids["halo"], {"circle-color": "#c2410c", "circle-radius": 13, "circle-opacity": 0.24}),
        (ids["accent"], {"circle-color": "#ffffff", "circle-radius": 3, "circle-opacity": 0}),
        (
            ids["core"],
            {
                "circle-color": "#c2410c",
                "circle-stroke-color": "#ffffff",
                "circle-stroke-width": 2,
                "circle-radius": 7,
                "circle-opacity": 1,
            },
        ),
    ]
    for layer_id, paint in circles:
        if engine.get_layer(layer_id) is None:
            engine.add_layer({"id": layer_id, "type": "circle", "source": source_id, "paint": paint})

    if engine.get_layer(ids["label"]) is None:
        engine.add_layer(
            {
                "id": ids["label"],
                "type": "symbol",
                "source": source_id,
                "layout": {
                    "text-field": ["get", "label"],
                    "text-size": 12,
                    "text-offset": [0, -1.2],
                    "text-anchor": "top",
                },
                "paint": {
                    "text-color": "#1f2933",
                    "text-halo-color": "#ffffff",
                    "text-halo-width": 1.2,
                },
            }
        )


def build_marker_variant_style(styles: MarkerStyles) -> Dict[str, Dict[str, Any]]:
    """Resolve paint values of the halo/accent/core layers for the marker variant."""
    radius = styles.marker_radius
    stroke = styles.stroke_weight
    halo_size = styles.halo_size
    marker_opacity = styles.marker_opacity / 100
    halo_opacity = styles.halo_opacity / 100

    halo = {"color": styles.halo_color, "radius": radius + halo_size, "opacity": halo_opacity}
    accent = {"color": styles.marker_stroke, "radius": max(2.0, radius * 0.42), "opacity": 0.0}
    core = {
        "color": styles.marker_color,
        "stroke_color": styles.marker_stroke,
        "stroke_width": stroke,
        "radius": radius,
        "opacity": marker_opacity,
    }

    variant = styles.marker_variant
    if variant == "dot":
        halo["radius"] = radius + max(2.0, halo_size * 0.55)
        halo["opacity"] = halo_opacity * 0.55
        core["stroke_width"] = max(1.0, stroke * 0.75)
    elif variant == "ring":
        halo["radius"] = radius + max(4.0, halo_size * 0.75)
        halo["opacity"] = halo_opacity * 0.72
        core["color"] = hex_to_rgba(styles.marker_color, 0)
        core["stroke_color"] = styles.marker_color
        core["stroke_width"] = max(2.0, stroke + 1.5)
    elif variant == "target":
        halo["radius"] = radius + max(5.0, halo_size * 0.7)
        halo["opacity"] = halo_opacity * 0.65
        accent["opacity"] = marker_opacity
        core["color"] = hex_to_rgba(styles.marker_color, 0)
        core["stroke_color"] = styles.marker_color
        core["stroke_width"] = max(2.0, stroke + 1)

    halo["opacity"] = clamp(halo["opacity"], 0, 1)
    return {"halo": halo, "accent": accent, "core": core}


def apply_marker_styles(
    engine: RenderingEngine,
    styles: MarkerStyles,
    prefix: str = DEFAULT_MARKER_PREFIX,
) -> None:
    ids = marker_ids(prefix)
    if engine.get_layer(ids["core"]) is None:
        return

    resolved = build_marker_variant_style(styles)
    halo, accent, core = resolved["halo"], resolved["accent"], resolved["core"]

    safe_set_paint(engine, ids["halo"], "circle-color", halo["color"])
    safe_set_paint(engine, ids["halo"], "circle-radius", halo["radius"])
    safe_set_paint(engine, ids["halo"], "circle-opacity", halo["opacity"])

    safe_set_layout(engine, ids["accent"], "visibility", "visible" if accent["opacity"] > 0 else "none")
    safe_set_paint(engine, ids["accent"], "circle-color", accent["color"])
    safe_set_paint(engine, ids["accent"], "circle-radius", accent["radius"])
    safe_set_paint(engine, ids["accent"], "circle-opacity", accent["opacity"])

    safe_set_paint(engine, ids["core"], "circle-color", core["color"])
    safe_set_paint(engine, ids["core"], "circle-stroke-color", core["stroke_color"])
    safe_set_paint(engine, ids["core"], "circle-stroke-width", core["stroke_width"])
    safe_set_paint(engine, ids["core"], "circle-radius", core["radius"])
    safe_set_paint(engine, ids["core"], "circle-opacity", core["opacity"])

    safe_set_layout(engine, ids["label"], "visibility", "visible" if styles.show_labels else "none")
    safe_set_layout(engine, ids["label"], "text-size", styles.label_size)
    safe_set_paint(engine, ids["label"], "text-color", styles.label_color)
    safe_set_paint(engine, ids["label"], "text-halo-color", styles.label_halo_color)
    safe_set_paint(engine, ids["label"], "text-halo-width", styles.label_halo_width)


def update_marker_source(
    engine: RenderingEngine,
    points: List[PointRecord],
    styles: MarkerStyles,
    prefix: str = DEFAULT_MARKER_PREFIX,
) -> Optional[Dict[str, Any]]:
    """Push the points to the marker source; returns the collection or None."""
    source_id = marker_ids(prefix)["source"]
    if engine.get_source(source_id) is None:
        return None
    collection = build_point_collection(points, styles.label_mode, styles.label_transform)
    engine.set_source_data(source_id, collection)
    return collection
