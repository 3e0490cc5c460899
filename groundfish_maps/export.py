# region Imports
from __future__ import annotations
import logging
import os
from typing import Optional
import pandas as pd

from groundfish_maps.models import ExtrapolationGrid
# endregion

log = logging.getLogger(__name__)

# region Delimiter
def _sep_for(path: str, sep: Optional[str]) -> str:
    if sep is not None:
        return sep
    return "," if os.path.splitext(path)[1].lower() == ".csv" else "\t"
# endregion

# region Station Predictions
def write_station_predictions(frame: pd.DataFrame, path: str, sep: Optional[str] = None) -> str:
    """Write observations with projected coordinates and predictions as delimited text."""
    frame.to_csv(path, sep=_sep_for(path, sep), index=False)
    log.info(f"Wrote {len(frame)} station predictions to {path}")
    return path
# endregion

# region Grid Export
def write_grid(grid: ExtrapolationGrid, path: str, sep: Optional[str] = None, dropna: bool = True) -> str:
    """Cell centres (x, y in the grid CRS) and continuous predictions."""
    df = grid.to_frame()
    if dropna:
        df = df.dropna(subset=["var1_pred"])
    df.to_csv(path, sep=_sep_for(path, sep), index=False)
    log.info(f"Wrote {len(df)} grid cells to {path}")
    return path
# endregion
