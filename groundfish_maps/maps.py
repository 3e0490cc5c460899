"""
Interpolated CPUE maps for Alaska groundfish survey regions.

make_idw_map / make_kriged_map run one pipeline per call:
observations -> projected points -> fitted model -> station + grid
predictions -> legend breaks -> classified grid -> figure.
"""

from __future__ import annotations
import dataclasses
import logging
from typing import Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from groundfish_maps.breaks import break_style, build_legend, classify, validate_breaks
from groundfish_maps.config import DEFAULT_GRID_CELL, DEFAULT_IN_CRS
from groundfish_maps.export import write_station_predictions
from groundfish_maps.geometry import project_points, resolve_crs
from groundfish_maps.grid import area_mask, extrap_box_for_region, grid_spec, make_extrapolation_grid
from groundfish_maps.interpolation import make_model
from groundfish_maps.layers import get_base_layers, get_survey_bathymetry, region_key
from groundfish_maps.models import ClassifiedGrid, ExtrapolationGrid, MapLayers, MapResult
from groundfish_maps.viz import render_map

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("LATITUDE", "LONGITUDE", "CPUE_KGHA")
OPTIONAL_COLUMNS = ("COMMON_NAME", "VESSEL", "CRUISE", "HAUL", "STATIONID", "BOTTOM_DEPTH")

BreakSpec = Union[str, Sequence[float]]


# region Observations
def prepare_observations(
    x: Optional[pd.DataFrame] = None,
    COMMON_NAME=None,
    LATITUDE=None,
    LONGITUDE=None,
    CPUE_KGHA=None,
) -> pd.DataFrame:
    """
    Observation table with upper-case column names. Vectors are assembled
    into a frame when x is None.
    """
    if x is None:
        if LATITUDE is None or LONGITUDE is None or CPUE_KGHA is None:
            raise ValueError("Pass a data frame or LATITUDE, LONGITUDE and CPUE_KGHA vectors")
        x = pd.DataFrame({
            "LATITUDE": np.atleast_1d(LATITUDE),
            "LONGITUDE": np.atleast_1d(LONGITUDE),
            "CPUE_KGHA": np.atleast_1d(CPUE_KGHA),
        })
        if COMMON_NAME is not None:
            x["COMMON_NAME"] = COMMON_NAME
    elif not isinstance(x, pd.DataFrame):
        x = pd.DataFrame(x)

    obs = x.copy()
    obs.columns = [str(c).upper() for c in obs.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in obs.columns]
    if missing:
        raise ValueError(f"Observations missing required columns: {missing}")
    if obs.empty:
        raise ValueError("Observation set is empty")

    for col in REQUIRED_COLUMNS:
        obs[col] = pd.to_numeric(obs[col], errors="coerce").astype(np.float64)
        bad = ~np.isfinite(obs[col].to_numpy())
        if bad.any():
            raise ValueError(f"{int(bad.sum())} non-finite value(s) in {col}")

    if (obs["LATITUDE"].abs() > 90).any():
        raise ValueError("LATITUDE outside [-90, 90]")
    return obs.reset_index(drop=True)


def resolve_key_title(obs: pd.DataFrame, key_title: Optional[str]) -> str:
    if key_title is None:
        return ""
    if key_title != "auto":
        return key_title
    if "COMMON_NAME" in obs.columns and obs["COMMON_NAME"].notna().any():
        return str(obs["COMMON_NAME"].dropna().iloc[0])
    return ""
# endregion

# region Layers
def _load_layers(region, out_crs, use_survey_bathymetry, map_layers, data_dir) -> MapLayers:
    if map_layers is not None:
        return map_layers
    layers = get_base_layers(region, set_crs=out_crs, data_dir=data_dir)
    if use_survey_bathymetry:
        layers = dataclasses.replace(
            layers, bathymetry=get_survey_bathymetry(region, set_crs=layers.crs, data_dir=data_dir)
        )
    return layers
# endregion

# region Pipeline
def make_interpolated_map(
    method: str = "idw",
    x: Optional[pd.DataFrame] = None,
    COMMON_NAME=None,
    LATITUDE=None,
    LONGITUDE=None,
    CPUE_KGHA=None,
    region: str = "bs.south",
    extrap_box: Optional[Mapping[str, float]] = None,
    set_breaks: BreakSpec = "jenks",
    grid_cell: Sequence[float] = DEFAULT_GRID_CELL,
    in_crs: str = DEFAULT_IN_CRS,
    out_crs: str = "auto",
    key_title: Optional[str] = "auto",
    log_transform: bool = False,
    use_survey_bathymetry: bool = True,
    return_continuous_grid: bool = True,
    map_layers: Optional[MapLayers] = None,
    data_dir: Optional[str] = None,
    export_path: Optional[str] = None,
    n_classes: int = 5,
    **model_params,
) -> MapResult:
    # Guard checks before touching any layers or numerics
    obs = prepare_observations(x, COMMON_NAME, LATITUDE, LONGITUDE, CPUE_KGHA)
    key = region_key(region)
    key_title = resolve_key_title(obs, key_title)
    box = extrap_box_for_region(key, extrap_box)
    spec = grid_spec(box, grid_cell)
    model = make_model(method, log_transform=log_transform, **model_params)
    if isinstance(set_breaks, str):
        break_style(set_breaks)
    else:
        validate_breaks(set_breaks)

    layers = _load_layers(key, out_crs, use_survey_bathymetry, map_layers, data_dir)
    crs = resolve_crs(layers.crs)

    # Stations
    sx, sy = project_points(obs["LONGITUDE"].to_numpy(), obs["LATITUDE"].to_numpy(), in_crs, crs)
    model.fit(sx, sy, obs["CPUE_KGHA"].to_numpy())
    stn_pred = model.predict(sx, sy)
    log.info(f"{model.name} fitted on {len(obs)} stations ({key})")

    # Extrapolation grid, predicted inside the survey area only
    grid = make_extrapolation_grid(spec, in_crs, crs)
    inside = area_mask(grid, layers.survey_area)
    values = np.full(grid.shape, np.nan, dtype=np.float64)
    if inside.any():
        gx, gy = grid.cell_centers()
        flat = inside.ravel()
        pred = np.full(flat.size, np.nan)
        pred[flat] = model.predict(gx[flat], gy[flat])
        values = pred.reshape(grid.shape)
    else:
        log.warning(f"Extrapolation grid does not overlap the {key} survey area")
    grid = ExtrapolationGrid(values=values, transform=grid.transform, crs=grid.crs, mask=inside)
    log.debug(f"Predicted {int(inside.sum())} of {inside.size} grid cells")

    # Legend + classification
    legend = build_legend(obs["CPUE_KGHA"].to_numpy(), stn_pred, grid.values, set_breaks, n_classes=n_classes)
    classified = ClassifiedGrid(
        codes=classify(grid.values, legend.breaks),
        labels=legend.labels,
        breaks=legend.breaks,
        transform=grid.transform,
        crs=grid.crs,
    )

    fig = render_map(classified, layers, key_title)

    stations = obs.copy()
    stations["X"], stations["Y"] = sx, sy
    stations["VAR1_PRED"] = stn_pred
    stations["LEVEL"] = [
        legend.labels[c] if c >= 0 else None for c in classify(stn_pred, legend.breaks)
    ]
    if export_path:
        write_station_predictions(stations, export_path)

    return MapResult(
        plot=fig,
        map_layers=layers,
        extrapolation_grid=classified,
        continuous_grid=grid if return_continuous_grid else None,
        station_predictions=stations,
        region=region,
        n_breaks=legend.n_levels,
        key_title=key_title,
        crs=crs.to_wkt(),
        extras={"method": model.name, "digits": legend.digits, "alt_round": legend.alt_round},
    )
# endregion

# region Public Entry Points
def make_idw_map(x=None, *, idw_nmax: Optional[int] = 4, idp: float = 2.0, **kwargs) -> MapResult:
    """Inverse-distance-weighted CPUE map (nmax nearest stations, power idp)."""
    return make_interpolated_map("idw", x, nmax=idw_nmax, idp=idp, **kwargs)


def make_kriged_map(x=None, *, variogram_model: str = "spherical", nlags: int = 6, **kwargs) -> MapResult:
    """Ordinary-kriging CPUE map."""
    return make_interpolated_map("kriging", x, variogram_model=variogram_model, nlags=nlags, **kwargs)
# endregion
