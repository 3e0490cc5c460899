# config.py
import os

DATA_DIR = os.environ.get("GROUNDFISH_MAPS_DATA", os.path.join(os.getcwd(), "data"))
LOG_LEVEL = os.environ.get("GROUNDFISH_MAPS_LOG_LEVEL", "INFO")

DEFAULT_IN_CRS = "EPSG:4326"
DEFAULT_CRS = "EPSG:3338"  # NAD83 / Alaska Albers

DEFAULT_GRID_CELL = (0.05, 0.05)  # degrees (lon, lat)

# Shared layer files; survey area and survey bathymetry are per region
LAND_FILE = "alaska_canada_dcw.shp"
BATHYMETRY_FILE = "npac_0-200_meters.shp"

# region Survey Regions
REGIONS = {
    "bs.south": {
        "extrap_box": {"xmn": -179.5, "xmx": -157.0, "ymn": 54.0, "ymx": 63.0},
        "plot_boundary": {"x": (-177.3, -154.3), "y": (54.0, 62.0)},
        "lon_breaks": list(range(-180, -149, 5)),
        "lat_breaks": list(range(54, 65, 2)),
        "survey_area": "ebs_survey_boundary.shp",
        "survey_bathymetry": "ebs_survey_bathymetry.shp",
    },
    "bs.north": {
        "extrap_box": {"xmn": -176.5, "xmx": -159.5, "ymn": 60.0, "ymx": 66.0},
        "plot_boundary": {"x": (-177.3, -154.3), "y": (60.0, 66.5)},
        "lon_breaks": list(range(-180, -149, 5)),
        "lat_breaks": list(range(60, 69, 2)),
        "survey_area": "nbs_survey_boundary.shp",
        "survey_bathymetry": "nbs_survey_bathymetry.shp",
    },
    "bs.all": {
        "extrap_box": {"xmn": -179.5, "xmx": -157.0, "ymn": 54.0, "ymx": 68.0},
        "plot_boundary": {"x": (-177.8, -154.7), "y": (54.5, 65.5)},
        "lon_breaks": list(range(-180, -149, 5)),
        "lat_breaks": list(range(54, 69, 2)),
        "survey_area": "ebs_nbs_survey_boundary.shp",
        "survey_bathymetry": "ebs_nbs_survey_bathymetry.shp",
    },
}

REGION_ALIASES = {"sebs": "bs.south", "ebs": "bs.all", "nbs": "bs.north"}
# endregion

# region Styling
# ColorBrewer Blues (9 classes), R indices 2, 4, 6, 8, 9
CPUE_PALETTE = ["#FFFFFF", "#DEEBF7", "#9ECAE1", "#4292C6", "#08519C", "#08306B"]
LAND_COLOR = "#CCCCCC"       # grey80
GRATICULE_COLOR = "#B3B3B3"  # grey70
GRATICULE_ALPHA = 0.3
NO_CATCH_LABEL = "No catch"
CPUE_UNITS = "CPUE (kg/ha)"
# endregion
