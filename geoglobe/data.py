"""Loading the country dataset and looking countries up by name."""
import logging
import os
from typing import Dict, Iterable, List, Optional

import geopandas as gpd
import pandas as pd
import requests
from shapely.geometry import shape

from .engine import Country, GeometryError, geometry_from_shape

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("NAME", "ADMIN")
REGION_COLUMNS = ("CONTINENT", "REGION_UN")
ISO_COLUMNS = ("ISO_A3", "ADM0_A3")


class DatasetError(RuntimeError):
    pass


# ==================== Download ====================
def download_dataset(url, path, timeout=30):
    """Fetch the GeoJSON boundary file to ``path``."""
    logger.info("Downloading country boundaries from %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as exc:
        raise DatasetError(f"could not download {url}: {exc}") from exc
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(r.content)
    return path


# ==================== Prepare Geo Data ====================
def _first_value(row, columns):
    for column in columns:
        value = row.get(column)
        # "-99" is Natural Earth's placeholder for a missing code
        if value is not None and not pd.isna(value) and str(value).strip() and str(value) != "-99":
            return str(value).strip()
    return None


def _to_country(properties, geom) -> Optional[Country]:
    name = _first_value(properties, NAME_COLUMNS)
    if not name:
        logger.warning("Skipping feature without a name")
        return None
    try:
        geometry = geometry_from_shape(geom)
    except GeometryError as exc:
        logger.warning("Skipping %s: %s", name, exc)
        return None
    return Country(
        name=name,
        geometry=geometry,
        region=_first_value(properties, REGION_COLUMNS),
        iso_code=_first_value(properties, ISO_COLUMNS),
    )


def countries_from_geodataframe(gdf) -> List[Country]:
    if gdf.crs and gdf.crs.to_epsg() != 4326:
        gdf = gdf.to_crs(epsg=4326)
    countries = []
    for _, row in gdf.iterrows():
        country = _to_country(row, row.geometry)
        if country is not None:
            countries.append(country)
    return countries


def countries_from_features(features: Iterable[Dict]) -> List[Country]:
    """Countries from raw GeoJSON features, in the order given."""
    countries = []
    for feature in features:
        raw = feature.get("geometry")
        geom = shape(raw) if raw else None
        country = _to_country(feature.get("properties") or {}, geom)
        if country is not None:
            countries.append(country)
    return countries


def load_countries(path) -> List[Country]:
    if not os.path.exists(path):
        raise DatasetError(f"dataset not found: {path}")
    try:
        gdf = gpd.read_file(path)
    except Exception as exc:
        raise DatasetError(f"could not read {path}: {exc}") from exc
    countries = countries_from_geodataframe(gdf)
    if not countries:
        raise DatasetError(f"no usable countries in {path}")
    logger.info("Loaded %d countries from %s", len(countries), path)
    return countries


# ==================== Lookup ====================
def normalize_name(name) -> str:
    return (name or "").strip().lower()


class CountryIndex:
    """Read-only, order-preserving view over the dataset."""

    def __init__(self, countries: Iterable[Country]):
        self.countries = tuple(countries)
        self._by_name = {}
        for country in self.countries:
            key = normalize_name(country.name)
            if key in self._by_name:
                logger.warning("Duplicate country name %r, keeping the first", country.name)
                continue
            self._by_name[key] = country

    def __len__(self):
        return len(self.countries)

    def __iter__(self):
        return iter(self.countries)

    def find(self, name) -> Optional[Country]:
        return self._by_name.get(normalize_name(name))

    def names(self) -> List[str]:
        return [c.name for c in self.countries]

    def regions(self) -> List[str]:
        return sorted({c.region for c in self.countries if c.region})

    def suggest(self, text, limit=5, region=None) -> List[str]:
        needle = normalize_name(text)
        if not needle:
            return []
        matches = []
        for country in self.countries:
            if region and country.region != region:
                continue
            if needle in country.name.lower():
                matches.append(country.name)
                if len(matches) >= limit:
                    break
        return matches
