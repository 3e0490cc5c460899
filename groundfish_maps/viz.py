# region Imports
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import numpy as np
import matplotlib
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap, to_hex
from matplotlib.patches import Patch
from shapely.geometry import LineString

from groundfish_maps.config import (
    CPUE_PALETTE,
    CPUE_UNITS,
    GRATICULE_ALPHA,
    GRATICULE_COLOR,
    LAND_COLOR,
)
from groundfish_maps.geometry import degree_label
from groundfish_maps.models import ClassifiedGrid, MapLayers
# endregion

# region Palette
def cpue_colors(n_levels: int) -> List[str]:
    """White for the "No catch" level, then Blues."""
    if n_levels <= len(CPUE_PALETTE):
        return list(CPUE_PALETTE[:n_levels])
    blues = matplotlib.colormaps["Blues"]
    ramp = [to_hex(blues(v)) for v in np.linspace(0.15, 1.0, n_levels - 1)]
    return [CPUE_PALETTE[0]] + ramp
# endregion

# region Graticule Labels
def graticule_ticks(layers: MapLayers) -> Tuple[List[Tuple[float, str]], List[Tuple[float, str]]]:
    """(x ticks, y ticks): where meridians cross the bottom edge and parallels the left edge."""
    (xmin, xmax), (ymin, ymax) = layers.plot_boundary["x"], layers.plot_boundary["y"]
    bottom = LineString([(xmin, ymin), (xmax, ymin)])
    left = LineString([(xmin, ymin), (xmin, ymax)])

    xt, yt = [], []
    for geom, kind, deg in zip(layers.graticule.geometry, layers.graticule["kind"], layers.graticule["degree"]):
        edge = bottom if kind == "meridian" else left
        hit = geom.intersection(edge)
        if hit.is_empty:
            continue
        pt = hit if hit.geom_type == "Point" else hit.centroid
        if kind == "meridian":
            xt.append((pt.x, degree_label(deg, kind)))
        else:
            yt.append((pt.y, degree_label(deg, kind)))
    return sorted(xt), sorted(yt)
# endregion

# region Map Rendering
def render_map(
    classified: ClassifiedGrid,
    layers: MapLayers,
    key_title: str = "",
    figsize: Tuple[float, float] = (8.0, 6.5),
    colors: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
):
    """
    Classified CPUE raster under survey boundary, land, bathymetry and
    graticule layers. Returns the Figure; nothing is shown.
    """
    n = classified.n_levels
    colors = list(colors) if colors is not None else cpue_colors(n)
    if len(colors) < n:
        raise ValueError(f"{n} legend levels but only {len(colors)} colors")

    fig, ax = plt.subplots(figsize=figsize)

    if not layers.survey_area.empty:
        layers.survey_area.boundary.plot(ax=ax, color="black", linewidth=0.6, zorder=1)

    # region Classified Raster
    data = np.ma.masked_less(classified.codes, 0)
    ax.imshow(
        data,
        cmap=ListedColormap(colors[:n]),
        vmin=-0.5,
        vmax=n - 0.5,
        extent=classified.extent,
        origin="upper",
        interpolation="nearest",
        zorder=2,
    )
    # endregion

    # region Vector Overlays
    if not layers.survey_area.empty:
        layers.survey_area.boundary.plot(ax=ax, color="black", linewidth=0.6, zorder=3)
    if not layers.akland.empty:
        layers.akland.plot(ax=ax, color=LAND_COLOR, edgecolor="black", linewidth=0.3, zorder=4)
    if not layers.bathymetry.empty:
        layers.bathymetry.plot(ax=ax, color="black", linewidth=0.4, zorder=5)
    if not layers.graticule.empty:
        layers.graticule.plot(ax=ax, color=GRATICULE_COLOR, alpha=GRATICULE_ALPHA, linewidth=0.8, zorder=6)
    # endregion

    # region Frame / Ticks
    ax.set_xlim(*layers.plot_boundary["x"])
    ax.set_ylim(*layers.plot_boundary["y"])
    ax.set_aspect("equal")
    xt, yt = graticule_ticks(layers)
    ax.set_xticks([t for t, _ in xt], [s for _, s in xt])
    ax.set_yticks([t for t, _ in yt], [s for _, s in yt])
    ax.tick_params(labelsize=10)
    ax.set_xlabel(""); ax.set_ylabel("")
    for spine in ax.spines.values():
        spine.set_visible(True)
        spine.set_color("black")
    # endregion

    # region Legend
    handles = [
        Patch(facecolor=colors[i], edgecolor="#B3B3B3", label=label)
        for i, label in enumerate(classified.labels)
    ]
    legend_title = f"{key_title}\n{CPUE_UNITS}" if key_title else CPUE_UNITS
    ax.legend(
        handles=handles,
        title=legend_title,
        loc="lower left",
        fontsize=10,
        title_fontsize=10,
        framealpha=0.85,
    )
    if title:
        ax.set_title(title)
    fig.tight_layout()
    # endregion
    return fig
# endregion
