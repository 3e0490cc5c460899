import matplotlib
matplotlib.use("Agg")

import geopandas as gpd
import matplotlib.pyplot as plt
import pytest
from shapely.geometry import LineString, Polygon

from groundfish_maps.config import BATHYMETRY_FILE, LAND_FILE, REGIONS
from groundfish_maps.synthetic import make_synthetic_layers, make_synthetic_survey


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def survey():
    return make_synthetic_survey(nx=12, ny=8, seed=7)


@pytest.fixture
def layers():
    return make_synthetic_layers("bs.south")


@pytest.fixture
def layer_dir(tmp_path):
    """Shapefiles for bs.south written under tmp_path."""
    info = REGIONS["bs.south"]
    wgs = "EPSG:4326"
    land = Polygon([(-160, 57), (-150, 57), (-150, 64), (-160, 64)])
    survey = Polygon([(-178, 55), (-159, 55), (-159, 62), (-178, 62)])
    gpd.GeoDataFrame({"name": ["ak"]}, geometry=[land], crs=wgs).to_file(tmp_path / LAND_FILE)
    gpd.GeoDataFrame({"SURVEY": ["EBS"]}, geometry=[survey], crs=wgs).to_file(tmp_path / info["survey_area"])
    gpd.GeoDataFrame(
        {"METERS": [50, 100, 200]},
        geometry=[LineString([(-178, lat), (-160, lat)]) for lat in (57, 58, 59)],
        crs=wgs,
    ).to_file(tmp_path / BATHYMETRY_FILE)
    gpd.GeoDataFrame(
        {"METERS": [50, 100]},
        geometry=[LineString([(-176, lat), (-162, lat)]) for lat in (58.5, 60.5)],
        crs=wgs,
    ).to_file(tmp_path / info["survey_bathymetry"])
    return str(tmp_path)
