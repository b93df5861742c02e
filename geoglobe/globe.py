# ========================================
# 3D globe of the guesses (pydeck)
# ========================================
import math
from typing import Dict, Iterable, Optional

import pydeck as pdk

from .data import CountryIndex
from .engine import Country, GuessRecord, MultiPolygon, Polygon, Tier

ALPHA = 204

TIER_COLORS = {
    Tier.CORRECT: [52, 211, 153, ALPHA],
    Tier.VERY_CLOSE: [74, 98, 138, ALPHA],
    Tier.CLOSE: [122, 178, 211, ALPHA],
    Tier.FAR: [185, 229, 232, ALPHA],
    Tier.VERY_FAR: [223, 242, 235, ALPHA],
}

LEGEND = [
    (Tier.CORRECT, "Correct"),
    (Tier.VERY_CLOSE, "< 1000 km"),
    (Tier.CLOSE, "< 2500 km"),
    (Tier.FAR, "< 5000 km"),
    (Tier.VERY_FAR, "> 5000 km"),
]

LAND_COLOR = [40, 40, 40, 160]
REVEAL_COLOR = [220, 53, 69, ALPHA]


def rgba_css(color) -> str:
    r, g, b, a = color
    return f"rgba({r}, {g}, {b}, {a / 255:.1f})"


def tier_color(tier: Tier):
    return TIER_COLORS[tier]


def format_distance(distance_km) -> str:
    if not math.isfinite(distance_km):
        return "? km"
    return f"{round(distance_km):,} km"


def _geojson_geometry(geometry) -> Dict:
    if isinstance(geometry, MultiPolygon):
        return {"type": "MultiPolygon", "coordinates": [[list(map(list, ring))] for ring in geometry.rings]}
    if isinstance(geometry, Polygon):
        return {"type": "Polygon", "coordinates": [list(map(list, geometry.ring))]}
    raise TypeError(f"cannot draw {type(geometry).__name__}")


def _feature(country: Country, **properties) -> Dict:
    return {
        "type": "Feature",
        "properties": {"name": country.name, **properties},
        "geometry": _geojson_geometry(country.geometry),
    }


def guesses_feature_collection(records: Iterable[GuessRecord], index: CountryIndex) -> Dict:
    features = []
    for record in records:
        country = index.find(record.guess)
        if country is None:
            continue
        features.append(_feature(
            country,
            distance=format_distance(record.distance_km),
            tier=record.tier.value,
            color=tier_color(record.tier),
        ))
    return {"type": "FeatureCollection", "features": features}


def build_globe(records, index: CountryIndex, reveal: Optional[Country] = None) -> pdk.Deck:
    """Globe with every country as a dark base and the guesses on top."""
    land = {
        "type": "FeatureCollection",
        "features": [_feature(c, distance="", tier="", color=LAND_COLOR) for c in index],
    }
    layers = [
        pdk.Layer(
            "GeoJsonLayer",
            id="land",
            data=land,
            stroked=True,
            filled=True,
            get_fill_color=LAND_COLOR,
            get_line_color=[255, 255, 255, 40],
            line_width_min_pixels=0.5,
        ),
        pdk.Layer(
            "GeoJsonLayer",
            id="guesses",
            data=guesses_feature_collection(records, index),
            stroked=True,
            filled=True,
            get_fill_color="properties.color",
            get_line_color=[255, 255, 255, 80],
            line_width_min_pixels=0.5,
            pickable=True,
        ),
    ]
    if reveal is not None:
        layers.append(pdk.Layer(
            "GeoJsonLayer",
            id="target",
            data={"type": "FeatureCollection", "features": [_feature(reveal, distance="Answer", tier="", color=REVEAL_COLOR)]},
            filled=True,
            get_fill_color=REVEAL_COLOR,
            pickable=True,
        ))

    view_state = pdk.ViewState(
        latitude=20,
        longitude=0,
        zoom=0.5,
        min_zoom=0,
        max_zoom=5,
    )

    return pdk.Deck(
        layers=layers,
        views=[pdk.View(type="_GlobeView", controller=True)],
        initial_view_state=view_state,
        tooltip={"text": "{name}\n{distance}"},
        map_provider=None,
        map_style=None,
        height=600,
    )
