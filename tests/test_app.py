import pytest

from groundfish_maps.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def rows(survey):
    return [
        {
            "LATITUDE": float(r.LATITUDE),
            "LONGITUDE": float(r.LONGITUDE),
            "CPUE_KGHA": float(r.CPUE_KGHA),
            "COMMON_NAME": r.COMMON_NAME,
        }
        for r in survey.itertuples()
    ]


def test_root_lists_regions(client):
    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.get_json()
    assert "bs.south" in body["regions"]
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_region_metadata(client):
    resp = client.get("/regions/sebs")
    assert resp.status_code == 200
    assert resp.get_json()["region"] == "bs.south"
    assert client.get("/regions/atlantis").status_code == 404


def test_idw_png(client, rows):
    resp = client.post("/maps/idw", json={
        "observations": rows, "synthetic_layers": True, "grid_cell": [0.5, 0.5], "dpi": 50,
    })
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/png"
    assert resp.data[:8] == b"\x89PNG\r\n\x1a\n"
    assert int(resp.headers["X-Map-Levels"]) >= 2


def test_kriging_png(client, rows):
    resp = client.post("/maps/kriging", json={
        "observations": rows, "synthetic_layers": True, "grid_cell": [1.0, 1.0],
        "variogram_model": "exponential", "dpi": 50,
    })
    assert resp.status_code == 200
    assert resp.data[:4] == b"\x89PNG"


def test_bad_requests(client, rows):
    assert client.post("/maps/idw", json={}).status_code == 400
    assert client.post("/maps/spline", json={"observations": rows}).status_code == 404

    resp = client.post("/maps/idw", json={"observations": rows, "synthetic_layers": True, "region": "atlantis"})
    assert resp.status_code == 400
    assert "Unknown region" in resp.get_json()["error"]

    resp = client.post("/maps/idw", json={"observations": [{"LATITUDE": 57.0}], "synthetic_layers": True})
    assert resp.status_code == 400


def test_missing_layers_is_503(client, rows, tmp_path, monkeypatch):
    monkeypatch.setattr("groundfish_maps.layers.DATA_DIR", str(tmp_path / "nowhere"))
    resp = client.post("/maps/idw", json={"observations": rows, "grid_cell": [1.0, 1.0]})
    assert resp.status_code == 503


def test_bad_dpi_is_400(client, rows):
    resp = client.post("/maps/idw", json={"observations": rows, "synthetic_layers": True, "dpi": "high"})
    assert resp.status_code == 400
    assert "dpi" in resp.get_json()["error"]
