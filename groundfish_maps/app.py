# app.py — Slim Flask API that renders CPUE maps as PNG
# deps: pip install flask matplotlib geopandas rasterio pyproj scipy pykrige mapclassify

from __future__ import annotations
from typing import Any, Dict
import io
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from flask import Flask, request, jsonify, make_response

from groundfish_maps.config import LOG_LEVEL, REGIONS, REGION_ALIASES
from groundfish_maps.layers import region_info, region_key
from groundfish_maps.maps import make_idw_map, make_kriged_map
from groundfish_maps.synthetic import make_synthetic_layers

logging.basicConfig(
    level=getattr(logging, str(LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s │ %(name)-26s │ %(levelname)-8s │ %(message)s",
    datefmt="%H:%M:%S",
    handlers=[logging.StreamHandler()],
)
log = logging.getLogger(__name__)

app = Flask(__name__)

# Request fields passed through to the map functions
_COMMON_OPTS = ("region", "extrap_box", "set_breaks", "grid_cell", "in_crs", "out_crs",
                "key_title", "log_transform", "use_survey_bathymetry", "n_classes")
_METHOD_OPTS = {"idw": ("idw_nmax", "idp"), "kriging": ("variogram_model", "nlags")}
_MAKERS = {"idw": make_idw_map, "kriging": make_kriged_map}

# ======= CORS =======
@app.after_request
def _cors(resp):
    resp.headers["Access-Control-Allow-Origin"] = "*"
    resp.headers["Access-Control-Allow-Headers"] = "*"
    resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    return resp

# ======= metadata endpoints =======
@app.route("/", methods=["GET"])
def root():
    return {
        "ok": True,
        "regions": sorted(REGIONS),
        "aliases": REGION_ALIASES,
        "maps": {"idw": "/maps/idw (POST JSON)", "kriging": "/maps/kriging (POST JSON)"},
    }

@app.route("/regions/<region>", methods=["GET"])
def region_meta(region):
    try:
        key = region_key(region)
    except ValueError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"region": key, **region_info(key)})

# ======= map rendering =======
@app.route("/maps/<method>", methods=["POST"])
def render(method):
    """
    JSON body:
    {
      "observations": [{"LATITUDE":..,"LONGITUDE":..,"CPUE_KGHA":..,"COMMON_NAME":..}, ...],
      "region": "bs.south",
      "set_breaks": "jenks" | [0, 10, 50, ...],
      "grid_cell": [0.05, 0.05],
      "idw_nmax": 4, "idp": 2.0,                       // idw
      "variogram_model": "spherical", "nlags": 6,      // kriging
      "synthetic_layers": false,
      "dpi": 150
    }
    """
    method = method.lower()
    if method not in _MAKERS:
        return jsonify({"error": f"Unknown method '{method}'", "methods": sorted(_MAKERS)}), 404

    data: Dict[str, Any] = request.get_json(force=True, silent=True) or {}
    rows = data.get("observations") or []
    if not rows:
        return jsonify({"error": "observations must be a non-empty list"}), 400

    opts = {k: data[k] for k in _COMMON_OPTS + _METHOD_OPTS[method] if k in data}
    try:
        dpi = int(data.get("dpi", 150))
    except (TypeError, ValueError):
        return jsonify({"error": "dpi must be an integer"}), 400

    try:
        if data.get("synthetic_layers"):
            opts["map_layers"] = make_synthetic_layers(opts.get("region", "bs.south"), opts.get("out_crs", "auto"))
        result = _MAKERS[method](pd.DataFrame(rows), **opts)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except FileNotFoundError as e:
        log.error(f"Map layers unavailable: {e}")
        return jsonify({"error": str(e)}), 503

    buf = io.BytesIO()
    result.plot.savefig(buf, format="png", dpi=dpi)
    plt.close(result.plot)
    buf.seek(0)
    resp = make_response(buf.read())
    resp.headers["Content-Type"] = "image/png"
    resp.headers["X-Map-Breaks"] = ",".join(f"{b:g}" for b in result.extrapolation_grid.breaks)
    resp.headers["X-Map-Levels"] = str(result.n_breaks)
    return resp


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8081, threaded=True)
