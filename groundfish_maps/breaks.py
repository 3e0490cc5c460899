# breaks.py
# ---------
# Legend break selection and labelling for discrete CPUE maps.
#
# Break vectors are right-closed bins (a, b]. The first bin is always the
# "No catch" bin (-1, 0] and the last break reaches the largest prediction.

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import mapclassify

from groundfish_maps.config import NO_CATCH_LABEL

log = logging.getLogger(__name__)

START_DIGITS = 7

_CLASSIFIERS = {
    "jenks": mapclassify.FisherJenks,
    "fisher": mapclassify.FisherJenks,
    "fisherjenks": mapclassify.FisherJenks,
    "quantile": mapclassify.Quantiles,
    "equal": mapclassify.EqualInterval,
    "sd": mapclassify.StdMean,
}


@dataclass
class LegendBreaks:
    breaks: np.ndarray
    digits: int
    intervals: List[str]   # "(a,b]"
    labels: List[str]      # legend text
    alt_round: int = 0

    @property
    def n_levels(self) -> int:
        return len(self.labels)


# region Automatic Breaks
def alt_rounding(break_vals: Sequence[float]) -> int:
    """Decimal places used for rounding: floor(2 - log10(smallest positive break))."""
    b = np.asarray(break_vals, dtype=np.float64)
    pos = b[b > 0]
    if pos.size == 0:
        return 0
    return int(math.floor(-(np.log10(pos).min() - 2.0)))


def break_style(style: str) -> str:
    style = str(style).lower()
    if style not in _CLASSIFIERS:
        raise ValueError(f"Unknown break style '{style}'. Options: {', '.join(sorted(_CLASSIFIERS))}")
    return style


def classifier_breaks(values: Sequence[float], style: str = "jenks", n: int = 5) -> np.ndarray:
    """n+1 class limits (minimum first) from a mapclassify classifier."""
    style = break_style(style)
    y = np.asarray(values, dtype=np.float64)
    y = y[np.isfinite(y)]
    if y.size == 0:
        raise ValueError("No finite values to classify")

    n_unique = np.unique(y).size
    if n_unique < 2:
        return np.array([y.min(), y.max()])

    k = min(int(n), n_unique)
    if style == "sd":
        bins = _CLASSIFIERS[style](y).bins
    else:
        bins = _CLASSIFIERS[style](y, k=k).bins
    return np.concatenate([[y.min()], np.asarray(bins, dtype=np.float64)])


def auto_breaks(values: Sequence[float], style: str = "jenks", n: int = 5) -> Tuple[np.ndarray, int]:
    """
    Classifier breaks rounded to a magnitude-dependent precision. Limits at or
    below zero are dropped so the vector always opens with the single
    "No catch" bin (-1, 0].
    """
    brks = classifier_breaks(values, style=style, n=n)
    alt_round = alt_rounding(brks)
    rounded = np.round(brks, alt_round)
    log.debug(f"{style} breaks {brks.tolist()} rounded to {alt_round} places")
    return np.unique(np.concatenate([[-1.0, 0.0], rounded[rounded > 0]])), alt_round
# endregion

# region Break Vector Checks
def validate_breaks(breaks: Sequence[float]) -> np.ndarray:
    b = np.asarray(breaks, dtype=np.float64).ravel()
    if b.size == 0:
        raise ValueError("Break vector is empty")
    if not np.all(np.isfinite(b)):
        raise ValueError("Break vector contains non-finite values")
    if b.size > 1 and np.any(np.diff(b) <= 0):
        raise ValueError(f"Break vector must be strictly increasing: {b.tolist()}")
    return b


def finalize_breaks(breaks: Sequence[float], max_value: float, min_value: Optional[float] = None) -> np.ndarray:
    """
    Add the zero / "No catch" breaks, stretch the top break to max_value and
    make sure the bottom break sits below min_value.
    """
    b = validate_breaks(breaks)

    if b.min() > 0:
        b = np.concatenate([[0.0], b])
    if b.min() == 0:
        b = np.concatenate([[-1.0], b])

    if np.isfinite(max_value) and b.max() < max_value:
        if b[-1] <= 0:
            b = np.concatenate([b, [max_value + 1.0]])
        else:
            log.warning(f"Top break {b[-1]} below max prediction {max_value:.4g}; raised to {max_value + 1:.4g}")
            b[-1] = max_value + 1.0

    if min_value is not None and np.isfinite(min_value) and min_value <= b[0]:
        b[0] = math.floor(min_value) - 1.0

    return validate_breaks(b)
# endregion

# region Classification
def classify(values, breaks: Sequence[float]) -> np.ndarray:
    """Bin codes for right-closed intervals (b[i], b[i+1]]; -1 when outside or NaN."""
    b = np.asarray(breaks, dtype=np.float64)
    v = np.asarray(values, dtype=np.float64)
    codes = np.searchsorted(b, v, side="left") - 1
    n_bins = b.size - 1
    out = (codes < 0) | (codes >= n_bins) | ~np.isfinite(v)
    return np.where(out, -1, codes).astype(np.int64)
# endregion

# region Labels
def format_number(value: float, digits: int) -> str:
    return "%.*g" % (max(1, int(digits)), float(value))


def interval_labels(breaks: Sequence[float], digits: int) -> List[str]:
    """'(a,b]' labels; digits widen until every break prints distinctly."""
    b = np.asarray(breaks, dtype=np.float64)
    for dig in range(max(1, digits), max(12, digits) + 1):
        nb = [format_number(x, dig) for x in b]
        if len(set(nb)) == len(nb):
            break
    return [f"({nb[i]},{nb[i + 1]}]" for i in range(len(nb) - 1)]


def _integer_digits(x: float) -> int:
    return len(str(int(abs(round(x)))))


def choose_digits(values, breaks: Sequence[float], alt_round: int = 0) -> int:
    """
    Significant digits for interval labels. Small CPUE keeps alt_round digits;
    otherwise digits drop until the labels in use have no decimal point, but
    never below the integer width of the largest break.
    """
    b = np.asarray(breaks, dtype=np.float64)
    digits = START_DIGITS
    floor_digits = max(1, _integer_digits(np.abs(b).max()))
    if alt_round > 0:
        return max(min(digits, alt_round), floor_digits)

    codes = classify(values, b)
    used = sorted(set(codes[codes >= 0].tolist()))
    while digits > floor_digits:
        labels = interval_labels(b, digits)
        if not any("." in labels[i] for i in used):
            break
        digits -= 1
    return digits


def legend_labels(breaks: Sequence[float], digits: int) -> List[str]:
    """
    Legend text: the bin below zero reads "No catch", '(a,b]' becomes 'a–b'
    prefixed with '>', and integers get thousands separators when more than
    three breaks are four digits or wider.
    """
    b = np.asarray(breaks, dtype=np.float64)
    wide = [x for x in b if len(str(int(round(x)))) >= 4]
    use_commas = len(wide) > 3

    for dig in range(max(1, digits), max(12, digits) + 1):
        nb = [format_number(x, dig) for x in b]
        if len(set(nb)) == len(nb):
            break

    def pretty(s: str) -> str:
        if not use_commas:
            return s
        v = float(s)
        if v.is_integer() and abs(v) >= 1000 and "e" not in s:
            return f"{int(v):,}"
        return s

    labels = []
    for i in range(len(nb) - 1):
        if b[i] < 0:
            labels.append(NO_CATCH_LABEL)
        else:
            labels.append(f">{pretty(nb[i])}–{pretty(nb[i + 1])}")
    return labels
# endregion

# region Pipeline Entry
def build_legend(
    observed,
    station_pred,
    grid_pred=None,
    set_breaks="jenks",
    n_classes: int = 5,
) -> LegendBreaks:
    """
    Break vector + labels from either a style name (classified on the
    observed CPUE) or a user break vector.
    """
    preds = [np.asarray(station_pred, dtype=np.float64).ravel()]
    if grid_pred is not None:
        preds.append(np.asarray(grid_pred, dtype=np.float64).ravel())
    allp = np.concatenate(preds)
    allp = allp[np.isfinite(allp)]
    max_pred = float(allp.max()) if allp.size else -np.inf
    min_pred = float(allp.min()) if allp.size else None

    alt_round = 0
    if isinstance(set_breaks, str):
        raw, alt_round = auto_breaks(observed, style=set_breaks, n=n_classes)
    else:
        raw = validate_breaks(set_breaks)

    b = finalize_breaks(raw, max_pred, min_pred)
    digits = choose_digits(station_pred, b, alt_round)
    legend = LegendBreaks(
        breaks=b,
        digits=digits,
        intervals=interval_labels(b, digits),
        labels=legend_labels(b, digits),
        alt_round=alt_round,
    )
    log.info(f"Legend breaks: {b.tolist()} ({legend.n_levels} levels)")
    return legend
# endregion
