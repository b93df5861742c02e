import os
import sys

import pytest

# Ensure the repository root (containing the `geoglobe` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from geoglobe.data import CountryIndex
from geoglobe.engine import Country, MultiPolygon, Polygon
from geoglobe.stats import JsonStore


def square(lon, lat, size=2):
    return ((lon, lat), (lon, lat + size), (lon + size, lat + size), (lon + size, lat))


@pytest.fixture()
def countries():
    return [
        Country("Squareland", Polygon(square(10, 10)), region="Europe", iso_code="SQL"),
        Country("Farland", Polygon(square(100, -40)), region="Oceania", iso_code="FAR"),
        Country("Nearland", Polygon(square(14, 10)), region="Europe", iso_code="NRL"),
        Country(
            "Islandia",
            MultiPolygon((square(-30, 60, 1)[:3], square(-20, 62) + ((-20, 62),))),
            region="Europe",
            iso_code="ISL",
        ),
        Country("Southland", Polygon(square(20, -30)), region="Africa"),
    ]


@pytest.fixture()
def index(countries):
    return CountryIndex(countries)


@pytest.fixture()
def store(tmp_path):
    return JsonStore(str(tmp_path / 'store.json'))
