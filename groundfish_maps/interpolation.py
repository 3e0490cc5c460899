# interpolation.py
# ----------------
# Point interpolators fitted on projected station coordinates.
#
# Exposes:
#   - IDWModel        (inverse distance weighting over the nmax nearest stations)
#   - KrigingModel    (ordinary kriging, pykrige)
#   - make_model(method, **params)
#
# Both follow fit(x, y, z) -> self, predict(x, y) -> ndarray.

from __future__ import annotations
import logging
from typing import Optional
import numpy as np
from scipy.spatial import cKDTree

log = logging.getLogger(__name__)

_EXACT_TOL = 1e-9


# -----------------------------
# Shared plumbing
# -----------------------------

class _Interpolator:
    name = "base"

    def __init__(self, log_transform: bool = False):
        self.log_transform = bool(log_transform)
        self._fitted = False

    def fit(self, x, y, z) -> "_Interpolator":
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)
        if not (x.shape == y.shape == z.shape) or x.ndim != 1:
            raise ValueError("x, y, z must be 1-D arrays of equal length")
        if x.size == 0:
            raise ValueError("Cannot fit an interpolator on zero stations")
        if self.log_transform:
            if np.any(z < 0):
                raise ValueError("log_transform requires non-negative values")
            z = np.log1p(z)
        self._fit(x, y, z)
        self._fitted = True
        log.debug(f"{self.name} fitted on {x.size} stations")
        return self

    def predict(self, x, y) -> np.ndarray:
        if not self._fitted:
            raise RuntimeError(f"{self.name} model used before fit()")
        x = np.asarray(x, dtype=np.float64).ravel()
        y = np.asarray(y, dtype=np.float64).ravel()
        out = self._predict(x, y)
        if self.log_transform:
            out = np.expm1(out)
        return out

    def _fit(self, x, y, z):
        raise NotImplementedError

    def _predict(self, x, y):
        raise NotImplementedError


# -----------------------------
# Inverse distance weighting
# -----------------------------

class IDWModel(_Interpolator):
    """
    Inverse distance weighting with a local neighbourhood:
        z(p) = sum(w_i z_i) / sum(w_i),  w_i = 1 / d_i^idp
    over the nmax nearest stations (all stations when nmax is None).
    A point that coincides with a station takes that station's value.
    """
    name = "idw"

    def __init__(self, nmax: Optional[int] = 4, idp: float = 2.0, log_transform: bool = False):
        super().__init__(log_transform=log_transform)
        if nmax is not None and int(nmax) < 1:
            raise ValueError("nmax must be >= 1")
        if idp < 0:
            raise ValueError("idp must be non-negative")
        self.nmax = None if nmax is None else int(nmax)
        self.idp = float(idp)

    def _fit(self, x, y, z):
        self._tree = cKDTree(np.column_stack([x, y]))
        self._z = z

    def _predict(self, x, y):
        n = self._z.size
        k = n if self.nmax is None else min(self.nmax, n)
        d, idx = self._tree.query(np.column_stack([x, y]), k=k)
        if k == 1:
            d, idx = d[:, None], idx[:, None]

        zn = self._z[idx]
        exact = d <= _EXACT_TOL
        w = 1.0 / np.where(exact, 1.0, d) ** self.idp
        pred = (w * zn).sum(axis=1) / w.sum(axis=1)

        hit = exact.any(axis=1)
        if hit.any():
            first = np.argmax(exact[hit], axis=1)
            pred[hit] = zn[hit][np.arange(first.size), first]
        return pred


# -----------------------------
# Ordinary kriging
# -----------------------------

class KrigingModel(_Interpolator):
    """
    Ordinary kriging via pykrige with a fitted variogram. Predictions are
    clipped at zero.
    """
    name = "kriging"

    def __init__(
        self,
        variogram_model: str = "spherical",
        nlags: int = 6,
        log_transform: bool = False,
        chunk_size: int = 20_000,
    ):
        super().__init__(log_transform=log_transform)
        self.variogram_model = variogram_model
        self.nlags = int(nlags)
        self.chunk_size = int(chunk_size)

    def _fit(self, x, y, z):
        from pykrige.ok import OrdinaryKriging

        if x.size < 3:
            raise ValueError("Kriging needs at least 3 stations")
        self._ok = OrdinaryKriging(
            x, y, z,
            variogram_model=self.variogram_model,
            nlags=self.nlags,
            enable_plotting=False,
            verbose=False,
        )
        log.debug(f"Variogram ({self.variogram_model}): {self._ok.variogram_model_parameters}")

    def _predict(self, x, y):
        out = np.empty(x.size, dtype=np.float64)
        for s in range(0, x.size, self.chunk_size):
            e = s + self.chunk_size
            z, _ss = self._ok.execute("points", x[s:e], y[s:e])
            out[s:e] = np.ma.getdata(z)
        return out

    def predict(self, x, y) -> np.ndarray:
        return np.clip(super().predict(x, y), 0.0, None)


# -----------------------------
# Factory
# -----------------------------

def make_model(method: str = "idw", **params) -> _Interpolator:
    method = (method or "idw").lower()
    if method == "idw":
        return IDWModel(**params)
    if method in ("kriging", "krige", "ok"):
        return KrigingModel(**params)
    raise ValueError(f"Unknown interpolation method '{method}' (use 'idw' or 'kriging')")
