# region Imports
from __future__ import annotations
from typing import Dict, Sequence, Tuple
import numpy as np
import geopandas as gpd
from pyproj import CRS, Transformer
from shapely.geometry import LineString

from groundfish_maps.config import DEFAULT_CRS
# endregion

# region CRS Helpers
def resolve_crs(crs) -> CRS:
    """'auto' selects Alaska Albers; anything else goes through pyproj."""
    if crs is None or (isinstance(crs, str) and crs.lower() == "auto"):
        return CRS.from_user_input(DEFAULT_CRS)
    return CRS.from_user_input(crs)


def make_transformer(in_crs, out_crs) -> Transformer:
    return Transformer.from_crs(resolve_crs(in_crs), resolve_crs(out_crs), always_xy=True)


def project_points(lon, lat, in_crs, out_crs) -> Tuple[np.ndarray, np.ndarray]:
    t = make_transformer(in_crs, out_crs)
    x, y = t.transform(np.asarray(lon, dtype=np.float64), np.asarray(lat, dtype=np.float64))
    return np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)


def unproject_points(x, y, in_crs, out_crs) -> Tuple[np.ndarray, np.ndarray]:
    """Inverse of project_points: (x, y) in out_crs back to in_crs."""
    return project_points(x, y, out_crs, in_crs)
# endregion

# region Bounds
def projected_bounds(lon_range: Sequence[float], lat_range: Sequence[float], in_crs, out_crs,
                     densify_pts: int = 21) -> Tuple[float, float, float, float]:
    """(minx, miny, maxx, maxy) of a lon/lat box after projection, edges densified."""
    t = make_transformer(in_crs, out_crs)
    return t.transform_bounds(min(lon_range), min(lat_range), max(lon_range), max(lat_range),
                              densify_pts=densify_pts)


def projected_boundary(lon_range, lat_range, out_crs, in_crs="EPSG:4326") -> Dict[str, Tuple[float, float]]:
    minx, miny, maxx, maxy = projected_bounds(lon_range, lat_range, in_crs, out_crs)
    return {"x": (minx, maxx), "y": (miny, maxy)}
# endregion

# region Graticule
def make_graticule(
    lon_breaks: Sequence[float],
    lat_breaks: Sequence[float],
    crs,
    n_pts: int = 100,
    pad: float = 5.0,
) -> gpd.GeoDataFrame:
    """
    Meridians and parallels at the break values, projected to crs. Lines run
    pad degrees past the outer breaks so they reach the map frame.
    """
    lon_min, lon_max = min(lon_breaks) - pad, max(lon_breaks) + pad
    lat_min, lat_max = min(lat_breaks) - pad, max(lat_breaks) + pad
    lines, kinds, degrees = [], [], []

    lats = np.linspace(lat_min, lat_max, n_pts)
    for lon in lon_breaks:
        lines.append(LineString(zip(np.full_like(lats, lon), lats)))
        kinds.append("meridian"); degrees.append(float(lon))

    lons = np.linspace(lon_min, lon_max, n_pts)
    for lat in lat_breaks:
        lines.append(LineString(zip(lons, np.full_like(lons, lat))))
        kinds.append("parallel"); degrees.append(float(lat))

    gdf = gpd.GeoDataFrame({"kind": kinds, "degree": degrees}, geometry=lines, crs="EPSG:4326")
    return gdf.to_crs(resolve_crs(crs))


def degree_label(value: float, kind: str) -> str:
    if kind == "meridian":
        hemi = "W" if value < 0 else "E"
    else:
        hemi = "S" if value < 0 else "N"
    v = abs(value)
    text = f"{int(v)}" if float(v).is_integer() else f"{v:g}"
    return f"{text}°{hemi}"
# endregion
