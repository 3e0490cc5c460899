# region Imports
from __future__ import annotations
import logging
from typing import Dict, Mapping, Optional, Sequence
import numpy as np
import geopandas as gpd
from rasterio.features import geometry_mask
from rasterio.transform import from_bounds

from groundfish_maps.geometry import projected_bounds, resolve_crs
from groundfish_maps.layers import region_info
from groundfish_maps.models import ExtrapolationGrid, GridSpec
# endregion

log = logging.getLogger(__name__)

_BOX_KEYS = ("xmn", "xmx", "ymn", "ymx")

# region Extrapolation Box
def extrap_box_for_region(region: str, extrap_box: Optional[Mapping[str, float]] = None) -> Dict[str, float]:
    if extrap_box is None:
        return dict(region_info(region)["extrap_box"])

    if not isinstance(extrap_box, Mapping):
        vals = list(extrap_box)
        if len(vals) != 4:
            raise ValueError("extrap_box needs four values: xmn, xmx, ymn, ymx")
        extrap_box = dict(zip(_BOX_KEYS, vals))

    missing = [k for k in _BOX_KEYS if k not in extrap_box]
    if missing:
        raise ValueError(f"extrap_box missing {missing}")
    box = {k: float(extrap_box[k]) for k in _BOX_KEYS}
    if not all(np.isfinite(list(box.values()))):
        raise ValueError("extrap_box values must be finite")
    if box["xmx"] <= box["xmn"] or box["ymx"] <= box["ymn"]:
        raise ValueError(f"extrap_box is empty: {box}")
    return box


def grid_spec(box: Mapping[str, float], grid_cell: Sequence[float] = (0.05, 0.05)) -> GridSpec:
    cell = list(grid_cell) if np.ndim(grid_cell) else [grid_cell, grid_cell]
    if len(cell) == 1:
        cell = cell * 2
    if len(cell) != 2 or min(cell) <= 0:
        raise ValueError("grid_cell must be one or two positive values (lon, lat)")
    return GridSpec(box["xmn"], box["xmx"], box["ymn"], box["ymx"], float(cell[0]), float(cell[1]))
# endregion

# region Grid Construction
def make_extrapolation_grid(spec: GridSpec, in_crs, out_crs) -> ExtrapolationGrid:
    """
    Regular grid in out_crs covering the projected lon/lat box, with the same
    number of rows and columns the degree cell size gives.
    """
    minx, miny, maxx, maxy = projected_bounds((spec.xmn, spec.xmx), (spec.ymn, spec.ymx), in_crs, out_crs)
    W, H = spec.ncol, spec.nrow
    transform = from_bounds(minx, miny, maxx, maxy, W, H)
    log.debug(f"Extrapolation grid {H}x{W}, cell {transform.a:.1f} x {-transform.e:.1f}")
    return ExtrapolationGrid(
        values=np.full((H, W), np.nan, dtype=np.float64),
        transform=transform,
        crs=resolve_crs(out_crs),
        mask=np.ones((H, W), dtype=bool),
    )


def area_mask(grid: ExtrapolationGrid, polygons: gpd.GeoDataFrame) -> np.ndarray:
    """True where the cell centre falls inside any polygon."""
    geoms = [g for g in polygons.to_crs(grid.crs).geometry if g is not None and not g.is_empty]
    if not geoms:
        return np.zeros(grid.shape, dtype=bool)
    return geometry_mask(geoms, out_shape=grid.shape, transform=grid.transform, invert=True)


def mask_to_area(grid: ExtrapolationGrid, polygons: gpd.GeoDataFrame) -> ExtrapolationGrid:
    inside = area_mask(grid, polygons)
    values = np.where(inside, grid.values, np.nan)
    return ExtrapolationGrid(values=values, transform=grid.transform, crs=grid.crs, mask=inside)
# endregion
