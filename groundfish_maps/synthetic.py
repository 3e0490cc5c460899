# synthetic.py
# ------------
# Seeded survey data and in-memory map layers for quick runs without
# shapefiles.
#
# Exposes:
#   - make_synthetic_survey(nx, ny, seed, ...)   -> observation DataFrame
#   - make_synthetic_layers(region, crs)         -> MapLayers

from __future__ import annotations
from typing import Tuple
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import LineString, Polygon

from groundfish_maps.layers import build_layers, region_info
from groundfish_maps.models import MapLayers


# -----------------------------
# Survey stations
# -----------------------------

def make_synthetic_survey(
    nx: int = 15,
    ny: int = 10,
    seed: int = 0,
    region: str = "bs.south",
    zero_fraction: float = 0.2,
    peak_cpue: float = 500.0,
    common_name: str = "walleye pollock",
) -> pd.DataFrame:
    """
    Stations on a regular lon/lat lattice inside the region's survey box, with
    CPUE from a smooth hotspot plus lognormal noise. A share of stations is
    set to zero catch.
    """
    rng = np.random.default_rng(seed)
    lon_lo, lon_hi, lat_lo, lat_hi = _survey_box(region)
    lons = np.linspace(lon_lo + 0.5, lon_hi - 0.5, nx)
    lats = np.linspace(lat_lo + 0.3, lat_hi - 0.3, ny)
    lon, lat = np.meshgrid(lons, lats)
    lon, lat = lon.ravel(), lat.ravel()

    c_lon, c_lat = 0.5 * (lon_lo + lon_hi), 0.5 * (lat_lo + lat_hi)
    field = peak_cpue * np.exp(-(((lon - c_lon) ** 2) / 20.0 + ((lat - c_lat) ** 2) / 3.0))
    cpue = field * rng.lognormal(0.0, 0.3, lon.size)
    cpue[rng.random(lon.size) < zero_fraction] = 0.0

    n = lon.size
    return pd.DataFrame({
        "VESSEL": np.where(np.arange(n) % 2 == 0, 94, 162),
        "CRUISE": 202301,
        "HAUL": np.arange(1, n + 1),
        "STATIONID": [f"{chr(65 + i // nx % 26)}-{i % nx + 1:02d}" for i in range(n)],
        "COMMON_NAME": common_name,
        "LATITUDE": lat,
        "LONGITUDE": lon,
        "BOTTOM_DEPTH": np.round(30.0 + (lat_hi - lat) * 25.0, 0),
        "CPUE_KGHA": np.round(cpue, 3),
    })


def _survey_box(region: str) -> Tuple[float, float, float, float]:
    box = region_info(region)["extrap_box"]
    return box["xmn"] + 1.5, box["xmx"] - 2.0, box["ymn"] + 1.0, box["ymx"] - 1.0


# -----------------------------
# Map layers
# -----------------------------

def make_synthetic_layers(region: str = "bs.south", crs="auto") -> MapLayers:
    """Rectangular survey area, a block of land to the east and three isobaths."""
    lon_lo, lon_hi, lat_lo, lat_hi = _survey_box(region)

    survey = Polygon([(lon_lo, lat_lo), (lon_hi, lat_lo), (lon_hi, lat_hi), (lon_lo, lat_hi)])
    land = Polygon([(lon_hi + 0.5, lat_lo + 1.0), (lon_hi + 8.0, lat_lo + 1.0),
                    (lon_hi + 8.0, lat_hi + 3.0), (lon_hi + 0.5, lat_hi + 3.0)])
    isobaths = [LineString([(lon_lo, lat), (lon_hi, lat)])
                for lat in np.linspace(lat_lo + 1.0, lat_hi - 1.0, 3)]

    wgs = "EPSG:4326"
    return build_layers(
        region,
        crs,
        akland=gpd.GeoDataFrame({"name": ["mainland"]}, geometry=[land], crs=wgs),
        survey_area=gpd.GeoDataFrame({"SURVEY": [region]}, geometry=[survey], crs=wgs),
        bathymetry=gpd.GeoDataFrame({"METERS": [50, 100, 200]}, geometry=isobaths, crs=wgs),
    )
