"""Geo Globe Game: guess the country of the day on a 3D globe."""
from .engine import (
    Country,
    GuessRecord,
    MultiPolygon,
    Polygon,
    Score,
    Tier,
    centroid,
    resolve,
    score,
)

__all__ = [
    "Country",
    "GuessRecord",
    "MultiPolygon",
    "Polygon",
    "Score",
    "Tier",
    "centroid",
    "resolve",
    "score",
]
