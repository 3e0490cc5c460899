# layers.py
from __future__ import annotations
import logging
import os
from typing import Dict, Optional

import geopandas as gpd

from groundfish_maps.config import (
    BATHYMETRY_FILE,
    DATA_DIR,
    LAND_FILE,
    REGION_ALIASES,
    REGIONS,
)
from groundfish_maps.geometry import make_graticule, projected_boundary, resolve_crs
from groundfish_maps.models import MapLayers

log = logging.getLogger(__name__)


def region_key(select_region: str) -> str:
    key = str(select_region).lower()
    key = REGION_ALIASES.get(key, key)
    if key not in REGIONS:
        valid = sorted(list(REGIONS) + list(REGION_ALIASES))
        raise ValueError(f"Unknown region '{select_region}'. Valid regions: {', '.join(valid)}")
    return key


def region_info(select_region: str) -> Dict:
    return REGIONS[region_key(select_region)]


def _read_layer(data_dir: str, filename: str, crs) -> gpd.GeoDataFrame:
    path = os.path.join(data_dir, filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Map layer not found: {path}")
    gdf = gpd.read_file(path)
    if gdf.crs is None:
        log.warning(f"{filename} has no CRS; assuming EPSG:4326")
        gdf = gdf.set_crs("EPSG:4326")
    return gdf.to_crs(crs)


def get_base_layers(select_region: str, set_crs="auto", data_dir: Optional[str] = None) -> MapLayers:
    """
    Load land, survey area and bathymetry layers for a region and project them.
    Graticule and plot boundary are derived from the region's lon/lat breaks.
    """
    key = region_key(select_region)
    info = REGIONS[key]
    crs = resolve_crs(set_crs)
    data_dir = data_dir or DATA_DIR

    akland = _read_layer(data_dir, LAND_FILE, crs)
    survey_area = _read_layer(data_dir, info["survey_area"], crs)
    bathymetry = _read_layer(data_dir, BATHYMETRY_FILE, crs)
    log.info(f"Loaded base layers for {key} from {data_dir}")

    return build_layers(key, crs, akland=akland, survey_area=survey_area, bathymetry=bathymetry)


def get_survey_bathymetry(select_region: str, set_crs="auto", data_dir: Optional[str] = None) -> gpd.GeoDataFrame:
    """Historical survey bathymetry (50/100/200 m contours) for a region."""
    info = region_info(select_region)
    return _read_layer(data_dir or DATA_DIR, info["survey_bathymetry"], resolve_crs(set_crs))


def build_layers(
    select_region: str,
    set_crs,
    akland: gpd.GeoDataFrame,
    survey_area: gpd.GeoDataFrame,
    bathymetry: gpd.GeoDataFrame,
) -> MapLayers:
    """Assemble a MapLayers bundle from already-loaded frames."""
    info = region_info(select_region)
    crs = resolve_crs(set_crs)
    pb = info["plot_boundary"]
    return MapLayers(
        akland=akland.to_crs(crs),
        survey_area=survey_area.to_crs(crs),
        bathymetry=bathymetry.to_crs(crs),
        graticule=make_graticule(info["lon_breaks"], info["lat_breaks"], crs),
        crs=crs,
        lon_breaks=list(info["lon_breaks"]),
        lat_breaks=list(info["lat_breaks"]),
        plot_boundary=projected_boundary(pb["x"], pb["y"], crs),
    )
