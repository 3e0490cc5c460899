import pytest

from groundfish_maps.layers import (
    get_base_layers,
    get_survey_bathymetry,
    region_key,
)


def test_region_aliases():
    assert region_key("sebs") == "bs.south"
    assert region_key("EBS") == "bs.all"
    assert region_key("bs.north") == "bs.north"


def test_unknown_region():
    with pytest.raises(ValueError, match="Valid regions"):
        region_key("goa")


def test_get_base_layers_projects_everything(layer_dir):
    layers = get_base_layers("sebs", set_crs="auto", data_dir=layer_dir)

    assert layers.crs.to_epsg() == 3338
    for gdf in (layers.akland, layers.survey_area, layers.bathymetry, layers.graticule):
        assert gdf.crs.to_epsg() == 3338
    assert len(layers.bathymetry) == 3
    assert len(layers.graticule) == len(layers.lon_breaks) + len(layers.lat_breaks)
    assert layers.plot_boundary["x"][0] < layers.plot_boundary["x"][1]


def test_get_base_layers_custom_crs(layer_dir):
    layers = get_base_layers("bs.south", set_crs="EPSG:32603", data_dir=layer_dir)
    assert layers.survey_area.crs.to_epsg() == 32603


def test_survey_bathymetry(layer_dir):
    bathy = get_survey_bathymetry("bs.south", "auto", data_dir=layer_dir)
    assert len(bathy) == 2
    assert bathy.crs.to_epsg() == 3338


def test_missing_layer_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_base_layers("bs.south", data_dir=str(tmp_path))


def test_synthetic_layers(layers):
    assert layers.crs.to_epsg() == 3338
    assert not layers.survey_area.empty
    assert set(layers.graticule["kind"]) == {"meridian", "parallel"}
