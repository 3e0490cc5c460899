# models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any

import numpy as np
import pandas as pd
import geopandas as gpd
from rasterio.transform import Affine, xy


@dataclass
class GridSpec:
    xmn: float
    xmx: float
    ymn: float
    ymx: float
    cell_lon: float = 0.05
    cell_lat: float = 0.05

    @property
    def ncol(self) -> int:
        return max(1, int(round((self.xmx - self.xmn) / self.cell_lon)))

    @property
    def nrow(self) -> int:
        return max(1, int(round((self.ymx - self.ymn) / self.cell_lat)))


@dataclass
class MapLayers:
    akland: gpd.GeoDataFrame
    survey_area: gpd.GeoDataFrame
    bathymetry: gpd.GeoDataFrame
    graticule: gpd.GeoDataFrame
    crs: Any                             # pyproj.CRS
    lon_breaks: List[float]
    lat_breaks: List[float]
    plot_boundary: Dict[str, Tuple[float, float]]  # projected {"x": (..), "y": (..)}


@dataclass
class ExtrapolationGrid:
    values: np.ndarray   # (H,W) float, NaN outside survey area
    transform: Affine
    crs: Any
    mask: np.ndarray     # (H,W) bool, True = inside survey area

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(left, right, bottom, top) for imshow."""
        H, W = self.values.shape
        left, top = self.transform.c, self.transform.f
        right = left + self.transform.a * W
        bottom = top + self.transform.e * H
        return left, right, bottom, top

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        H, W = self.values.shape
        rows, cols = np.meshgrid(np.arange(H), np.arange(W), indexing="ij")
        xs, ys = xy(self.transform, rows.ravel(), cols.ravel(), offset="center")
        return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)

    def to_frame(self) -> pd.DataFrame:
        xs, ys = self.cell_centers()
        return pd.DataFrame({"x": xs, "y": ys, "var1_pred": self.values.ravel()})


@dataclass
class ClassifiedGrid:
    codes: np.ndarray    # (H,W) int, -1 = no prediction
    labels: List[str]
    breaks: np.ndarray
    transform: Affine
    crs: Any

    @property
    def n_levels(self) -> int:
        return len(self.labels)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        H, W = self.codes.shape
        left, top = self.transform.c, self.transform.f
        return left, left + self.transform.a * W, top + self.transform.e * H, top

    def level_at(self, r: int, c: int) -> Optional[str]:
        code = int(self.codes[r, c])
        return None if code < 0 else self.labels[code]


@dataclass
class MapResult:
    plot: Any                         # matplotlib.figure.Figure
    map_layers: MapLayers
    extrapolation_grid: ClassifiedGrid
    continuous_grid: Optional[ExtrapolationGrid]
    station_predictions: pd.DataFrame
    region: str          # as passed by the caller, aliases included
    n_breaks: int
    key_title: str
    crs: str                          # WKT2:2019
    extras: Dict[str, Any] = field(default_factory=dict)
