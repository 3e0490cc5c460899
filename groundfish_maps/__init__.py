from groundfish_maps.maps import make_idw_map, make_interpolated_map, make_kriged_map
from groundfish_maps.layers import get_base_layers, get_survey_bathymetry

__all__ = [
    "make_idw_map",
    "make_kriged_map",
    "make_interpolated_map",
    "get_base_layers",
    "get_survey_bathymetry",
]
