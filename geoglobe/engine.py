"""Target selection, centroid and proximity scoring.

Everything in here is a pure function of its arguments and never reads
the clock. The Streamlit page and the session object call into it.
"""
import logging
import math
from datetime import date
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371
ORIGIN = (0.0, 0.0)

# Seed multipliers for the daily target
YEAR_FACTOR = 373
MONTH_FACTOR = 37
DAY_FACTOR = 7


class GeometryError(ValueError):
    """Raised when a boundary cannot be turned into a Polygon/MultiPolygon."""


class CentroidError(ValueError):
    """Raised by compute_centroid for malformed geometry."""


# ==================== Geometry ====================
class Polygon(NamedTuple):
    ring: Sequence[Sequence[float]]


class MultiPolygon(NamedTuple):
    rings: Sequence[Sequence[Sequence[float]]]


Geometry = Union[Polygon, MultiPolygon]


def geometry_from_geojson(mapping) -> Geometry:
    """Build the tagged geometry from a GeoJSON geometry mapping.

    Only outer rings are kept; holes play no part in the centroid.
    """
    if not mapping:
        raise GeometryError("missing geometry")
    kind = mapping.get("type")
    coords = mapping.get("coordinates") or []
    if kind == "Polygon":
        return Polygon(_as_ring(coords[0]) if coords else ())
    if kind == "MultiPolygon":
        return MultiPolygon(tuple(_as_ring(part[0]) for part in coords if part))
    raise GeometryError(f"unsupported geometry type: {kind!r}")


def geometry_from_shape(shape) -> Geometry:
    """Same as geometry_from_geojson, for shapely geometries."""
    if shape is None or shape.is_empty:
        raise GeometryError("empty geometry")
    if shape.geom_type == "Polygon":
        return Polygon(_as_ring(shape.exterior.coords))
    if shape.geom_type == "MultiPolygon":
        return MultiPolygon(tuple(_as_ring(part.exterior.coords) for part in shape.geoms))
    raise GeometryError(f"unsupported geometry type: {shape.geom_type!r}")


def _as_ring(points):
    # shapely may hand back 3D coordinates
    return tuple((p[0], p[1]) for p in points)


# ==================== Records ====================
class Country(NamedTuple):
    name: str
    geometry: Geometry
    region: Optional[str] = None
    iso_code: Optional[str] = None


class Tier(Enum):
    CORRECT = "Correct"
    VERY_CLOSE = "VeryClose"
    CLOSE = "Close"
    FAR = "Far"
    VERY_FAR = "VeryFar"


class Score(NamedTuple):
    distance_km: float
    tier: Tier


class GuessRecord(NamedTuple):
    target: str
    guess: str
    distance_km: float
    tier: Tier

    def to_dict(self):
        return {
            "target": self.target,
            "guess": self.guess,
            "distance_km": self.distance_km,
            "tier": self.tier.value,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            target=data["target"],
            guess=data["guess"],
            distance_km=float(data["distance_km"]),
            tier=Tier(data["tier"]),
        )


# ==================== Daily Target ====================
def daily_seed(day: date) -> int:
    return day.year * YEAR_FACTOR + day.month * MONTH_FACTOR + day.day * DAY_FACTOR


def resolve(countries: Sequence[Country], day: date) -> Country:
    """Return the target country for ``day``.

    Stable only for a fixed ordering of ``countries``.
    """
    if not countries:
        raise ValueError("country dataset is empty")
    return countries[daily_seed(day) % len(countries)]


# ==================== Centroid ====================
def _ring_mean(ring) -> Tuple[float, float]:
    if ring is None:
        return ORIGIN
    try:
        if len(ring) == 0:
            return ORIGIN
        points = np.asarray(ring, dtype=float)
    except (TypeError, ValueError, OverflowError) as exc:
        raise CentroidError(f"non-numeric coordinates: {exc}") from exc
    if points.ndim != 2 or points.shape[1] < 2:
        raise CentroidError(f"expected (lon, lat) points, got shape {points.shape}")
    lon, lat = points[:, 0].mean(), points[:, 1].mean()
    return float(lon), float(lat)


def compute_centroid(geometry: Optional[Geometry]) -> Tuple[float, float]:
    """Unweighted vertex average of a Polygon, or of the MultiPolygon ring
    with the most points. Raises CentroidError on malformed input."""
    if geometry is None:
        return ORIGIN
    if isinstance(geometry, Polygon):
        return _ring_mean(geometry.ring)
    if isinstance(geometry, MultiPolygon):
        if geometry.rings is None:
            return ORIGIN
        try:
            if len(geometry.rings) == 0:
                return ORIGIN
            # max() keeps the first ring on ties
            largest = max(geometry.rings, key=len)
        except TypeError as exc:
            raise CentroidError(f"malformed rings: {exc}") from exc
        return _ring_mean(largest)
    raise CentroidError(f"unknown geometry object: {type(geometry).__name__}")


def centroid(geometry: Optional[Geometry]) -> Tuple[float, float]:
    """Like compute_centroid, but falls back to ORIGIN instead of raising."""
    try:
        return compute_centroid(geometry)
    except CentroidError as exc:
        logger.warning("Centroid failed, using origin: %s", exc)
        return ORIGIN


# ==================== Proximity ====================
def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    if a > 1:
        # rounding near antipodes
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def tier_for_distance(distance_km: float) -> Tier:
    if not math.isfinite(distance_km):
        return Tier.VERY_FAR
    if distance_km == 0:
        return Tier.CORRECT
    if distance_km < 1000:
        return Tier.VERY_CLOSE
    if distance_km < 2500:
        return Tier.CLOSE
    if distance_km < 5000:
        return Tier.FAR
    return Tier.VERY_FAR


def score(lat1: float, lon1: float, lat2: float, lon2: float) -> Score:
    """Great-circle distance in km between two points and its tier."""
    try:
        distance = haversine(lat1, lon1, lat2, lon2)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Distance failed, treating as very far: %s", exc)
        distance = math.inf
    if not math.isfinite(distance):
        distance = math.inf
    return Score(distance, tier_for_distance(distance))


def score_countries(target: Country, guess: Country) -> GuessRecord:
    target_lon, target_lat = centroid(target.geometry)
    guess_lon, guess_lat = centroid(guess.geometry)
    distance, tier = score(guess_lat, guess_lon, target_lat, target_lon)
    return GuessRecord(target.name, guess.name, distance, tier)
