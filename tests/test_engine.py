import math
from datetime import date, timedelta

import pytest
from shapely.geometry import MultiPolygon as ShapelyMultiPolygon
from shapely.geometry import Point
from shapely.geometry import Polygon as ShapelyPolygon

from geoglobe.engine import (
    ORIGIN,
    CentroidError,
    Country,
    GeometryError,
    GuessRecord,
    MultiPolygon,
    Polygon,
    Tier,
    centroid,
    compute_centroid,
    daily_seed,
    geometry_from_geojson,
    geometry_from_shape,
    haversine,
    resolve,
    score,
    score_countries,
    tier_for_distance,
)


def make_countries(n):
    return [Country(f"Country {i}", Polygon(((i, 0), (i, 1), (i + 1, 1)))) for i in range(n)]


# ==================== Daily Target ====================
def test_daily_seed():
    assert daily_seed(date(2024, 1, 1)) == 2024 * 373 + 37 + 7


def test_resolve_picks_seed_modulo_size(countries):
    assert resolve(countries, date(2024, 1, 1)).name == "Farland"


def test_resolve_is_deterministic(countries):
    day = date(2025, 6, 14)
    assert resolve(countries, day) == resolve(list(countries), day)


def test_resolve_empty_dataset():
    with pytest.raises(ValueError):
        resolve([], date(2025, 1, 1))


def test_consecutive_days_never_repeat():
    countries = make_countries(197)
    day = date(2025, 1, 1)
    previous = resolve(countries, day)
    while day < date(2026, 1, 2):
        day += timedelta(days=1)
        current = resolve(countries, day)
        assert current != previous, day
        previous = current


def test_no_short_cycle_within_a_month():
    countries = make_countries(197)
    picks = {resolve(countries, date(2025, 3, d)).name for d in range(1, 29)}
    assert len(picks) == 28


# ==================== Centroid ====================
def test_centroid_of_square():
    assert centroid(Polygon([(0, 0), (0, 2), (2, 2), (2, 0)])) == (1, 1)


def test_centroid_is_vertex_average_not_area_centroid():
    # extra vertices along one edge pull the average toward that edge
    ring = [(0, 0), (0, 1), (0, 2), (2, 2), (2, 0)]
    lon, lat = centroid(Polygon(ring))
    assert lon == pytest.approx(0.8)
    assert lat == pytest.approx(1.0)


def test_multipolygon_uses_ring_with_most_points():
    small = [(50, 50), (50, 51), (51, 51)]
    big = [(0, 0), (0, 4), (4, 4), (4, 0), (2, -2)]
    assert centroid(MultiPolygon([small, big])) == pytest.approx((2.0, 1.2))


def test_multipolygon_tie_keeps_first_ring():
    first = [(0, 0), (0, 2), (2, 2), (2, 0)]
    second = [(10, 10), (10, 12), (12, 12), (12, 10)]
    assert centroid(MultiPolygon([first, second])) == (1, 1)


@pytest.mark.parametrize("geometry", [None, Polygon([]), MultiPolygon([]), MultiPolygon(None), Polygon(None)])
def test_empty_geometry_gives_origin(geometry):
    assert centroid(geometry) == ORIGIN == (0, 0)


@pytest.mark.parametrize("geometry", [
    Polygon([("north", "south"), (1, 2), (3, 4)]),
    Polygon([(1,), (2,), (3,)]),
    Polygon([(1, 2), (3,), (4, 5)]),
    MultiPolygon([5, 6]),
    Polygon([(10 ** 400, 0), (0, 0), (0, 1)]),
    [(0, 0), (0, 2), (2, 2)],
])
def test_malformed_geometry(geometry):
    with pytest.raises(CentroidError):
        compute_centroid(geometry)
    assert centroid(geometry) == ORIGIN


def test_centroid_returns_plain_floats():
    lon, lat = centroid(Polygon([(0, 0), (0, 2), (2, 2), (2, 0)]))
    assert type(lon) is float and type(lat) is float


# ==================== Geometry Loading ====================
def test_geojson_polygon_keeps_outer_ring_only():
    geometry = geometry_from_geojson({
        "type": "Polygon",
        "coordinates": [
            [[0, 0], [0, 4], [4, 4], [4, 0], [0, 0]],
            [[1, 1], [1, 2], [2, 2], [1, 1]],
        ],
    })
    assert isinstance(geometry, Polygon)
    assert len(geometry.ring) == 5


def test_geojson_multipolygon():
    geometry = geometry_from_geojson({
        "type": "MultiPolygon",
        "coordinates": [
            [[[0, 0], [0, 1], [1, 1], [0, 0]]],
            [[[5, 5], [5, 6], [6, 6], [6, 5], [5, 5]]],
        ],
    })
    assert isinstance(geometry, MultiPolygon)
    assert [len(r) for r in geometry.rings] == [4, 5]
    assert centroid(geometry) == pytest.approx((5.4, 5.4))


@pytest.mark.parametrize("mapping", [None, {}, {"type": "Point", "coordinates": [1, 2]}])
def test_geojson_rejects_other_shapes(mapping):
    with pytest.raises(GeometryError):
        geometry_from_geojson(mapping)


def test_geometry_from_shapely_polygon():
    geometry = geometry_from_shape(ShapelyPolygon([(0, 0), (0, 2), (2, 2), (2, 0)]))
    assert isinstance(geometry, Polygon)
    # shapely closes the ring
    assert len(geometry.ring) == 5
    assert geometry.ring[0] == geometry.ring[-1]


def test_geometry_from_shapely_multipolygon_drops_z():
    shape = ShapelyMultiPolygon([
        ShapelyPolygon([(0, 0, 1), (0, 1, 1), (1, 1, 1)]),
        ShapelyPolygon([(5, 5, 1), (5, 6, 1), (6, 6, 1), (6, 5, 1)]),
    ])
    geometry = geometry_from_shape(shape)
    assert isinstance(geometry, MultiPolygon)
    assert all(len(p) == 2 for ring in geometry.rings for p in ring)


@pytest.mark.parametrize("shape", [None, Point(1, 2), ShapelyPolygon()])
def test_geometry_from_shape_rejects(shape):
    with pytest.raises(GeometryError):
        geometry_from_shape(shape)


# ==================== Proximity ====================
def test_one_degree_of_latitude():
    assert haversine(0, 0, 1, 0) == pytest.approx(6371 * math.pi / 180)


def test_score_at_origin_is_correct():
    distance, tier = score(0, 0, 0, 0)
    assert distance == 0
    assert tier is Tier.CORRECT


@pytest.mark.parametrize("lat, lon", [(51.5, -0.12), (-33.9, 151.2), (64.1, -21.9), (-54.8, -68.3), (89.9, 179.9)])
def test_identical_points_are_correct_everywhere(lat, lon):
    assert score(lat, lon, lat, lon).tier is Tier.CORRECT


@pytest.mark.parametrize("a, b, c, d", [(11, 11, 11, 15), (52.5, 13.4, -33.9, 18.4), (0, 179, 0, -179), (10, 20, -10, -160)])
def test_score_is_symmetric(a, b, c, d):
    forward = score(a, b, c, d)
    backward = score(c, d, a, b)
    assert forward.distance_km == pytest.approx(backward.distance_km)
    assert forward.tier is backward.tier


def test_score_crosses_the_antimeridian():
    # two degrees apart across 180°, not 358
    assert score(0, 179, 0, -179).distance_km == pytest.approx(2 * 6371 * math.pi / 180)


def test_antipodes_are_very_far():
    distance, tier = score(0, 0, 0, 180)
    assert distance == pytest.approx(math.pi * 6371)
    assert tier is Tier.VERY_FAR


@pytest.mark.parametrize("distance, tier", [
    (0, Tier.CORRECT),
    (0.001, Tier.VERY_CLOSE),
    (999.99, Tier.VERY_CLOSE),
    (1000, Tier.CLOSE),
    (2499.9, Tier.CLOSE),
    (2500, Tier.FAR),
    (4999.9, Tier.FAR),
    (5000, Tier.VERY_FAR),
    (20000, Tier.VERY_FAR),
    (math.inf, Tier.VERY_FAR),
    (math.nan, Tier.VERY_FAR),
])
def test_tier_boundaries(distance, tier):
    assert tier_for_distance(distance) is tier


@pytest.mark.parametrize("args", [
    (math.nan, 0, 0, 0),
    (0, math.inf, 0, 0),
    ("north", 0, 0, 0),
    (None, 0, 0, 0),
    (10 ** 400, 0, 0, 0),
])
def test_non_finite_input_is_very_far(args):
    distance, tier = score(*args)
    assert math.isinf(distance)
    assert tier is Tier.VERY_FAR


# ==================== Countries ====================
def test_end_to_end_identical_geometry():
    geometry = geometry_from_geojson({"type": "Polygon", "coordinates": [[(10, 10), (10, 12), (12, 12), (12, 10)]]})
    assert centroid(geometry) == (11, 11)
    target = Country("Target", geometry)
    guess = Country("Target", geometry)
    record = score_countries(target, guess)
    assert record.distance_km == 0
    assert record.tier is Tier.CORRECT


def test_score_countries(countries):
    squareland, farland, nearland, _, southland = countries
    assert score_countries(squareland, nearland).tier is Tier.VERY_CLOSE
    assert score_countries(squareland, southland).tier is Tier.FAR
    record = score_countries(squareland, farland)
    assert record.target == "Squareland"
    assert record.guess == "Farland"
    assert record.tier is Tier.VERY_FAR


def test_guess_record_dict():
    record = GuessRecord("Squareland", "Farland", 12345.6, Tier.VERY_FAR)
    data = record.to_dict()
    assert data["tier"] == "VeryFar"
    assert GuessRecord.from_dict(data) == record
