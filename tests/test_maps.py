import matplotlib.figure
import numpy as np
import pandas as pd
import pytest
from pyproj import CRS

from groundfish_maps.maps import make_idw_map, make_kriged_map, prepare_observations

COARSE = (0.25, 0.25)


def idw(survey, layers, **kw):
    kw.setdefault("grid_cell", COARSE)
    return make_idw_map(survey, map_layers=layers, **kw)


def test_idw_map_result_bundle(survey, layers):
    result = idw(survey, layers)

    assert isinstance(result.plot, matplotlib.figure.Figure)
    assert result.region == "bs.south"
    assert result.key_title == "walleye pollock"
    assert CRS.from_wkt(result.crs).to_epsg() == 3338
    assert result.n_breaks == len(result.extrapolation_grid.labels)
    assert result.n_breaks == len(result.extrapolation_grid.breaks) - 1
    assert result.extrapolation_grid.labels[0] == "No catch"
    assert result.continuous_grid is not None
    assert result.continuous_grid.shape == result.extrapolation_grid.codes.shape
    assert result.extras["method"] == "idw"


def test_station_predictions_match_observations(survey, layers):
    result = idw(survey, layers)
    st = result.station_predictions
    assert len(st) == len(survey)
    np.testing.assert_allclose(st["VAR1_PRED"], survey["CPUE_KGHA"])
    assert st["LEVEL"].notna().all()
    assert {"X", "Y", "STATIONID", "HAUL"} <= set(st.columns)


def test_every_predicted_cell_in_one_bin(survey, layers):
    result = idw(survey, layers)
    grid = result.continuous_grid
    codes = result.extrapolation_grid.codes
    assert grid.mask.any()
    assert (codes[grid.mask] >= 0).all()
    assert (codes[grid.mask] < result.n_breaks).all()
    assert (codes[~grid.mask] == -1).all()


def test_breaks_span_predictions(survey, layers):
    result = idw(survey, layers)
    b = result.extrapolation_grid.breaks
    values = result.continuous_grid.values
    assert np.all(np.diff(b) > 0)
    assert b[0] < np.nanmin(values)
    assert b[-1] >= np.nanmax(values)
    assert b[-1] >= result.station_predictions["VAR1_PRED"].max()


def test_deterministic_with_fixed_breaks(survey, layers):
    a = idw(survey, layers, set_breaks=[0, 25, 100, 250, 500])
    b = idw(survey, layers, set_breaks=[0, 25, 100, 250, 500])
    np.testing.assert_array_equal(a.extrapolation_grid.codes, b.extrapolation_grid.codes)
    assert a.extrapolation_grid.labels == b.extrapolation_grid.labels


def test_no_continuous_grid(survey, layers):
    result = idw(survey, layers, return_continuous_grid=False)
    assert result.continuous_grid is None


def test_region_returned_as_given(survey, layers):
    result = idw(survey, layers, region="sebs")
    assert result.region == "sebs"


def test_explicit_key_title_and_quantile_breaks(survey, layers):
    result = idw(survey, layers, key_title="Pacific cod", set_breaks="quantile")
    assert result.key_title == "Pacific cod"
    assert result.plot.axes[0].get_legend().get_title().get_text() == "Pacific cod\nCPUE (kg/ha)"


def test_legend_lists_every_level(survey, layers):
    result = idw(survey, layers)
    legend = result.plot.axes[0].get_legend()
    assert [t.get_text() for t in legend.get_texts()] == result.extrapolation_grid.labels


def test_vector_inputs(survey, layers):
    result = make_idw_map(
        COMMON_NAME="Pacific cod",
        LATITUDE=survey["LATITUDE"].tolist(),
        LONGITUDE=survey["LONGITUDE"].tolist(),
        CPUE_KGHA=survey["CPUE_KGHA"].tolist(),
        map_layers=layers,
        grid_cell=COARSE,
    )
    assert result.key_title == "Pacific cod"
    assert len(result.station_predictions) == len(survey)


def test_log_transform_idw(survey, layers):
    result = idw(survey, layers, log_transform=True, idw_nmax=8)
    assert (result.extrapolation_grid.codes[result.continuous_grid.mask] >= 0).all()


def test_export_station_predictions(survey, layers, tmp_path):
    out = tmp_path / "stations.csv"
    idw(survey, layers, export_path=str(out))
    df = pd.read_csv(out)
    assert len(df) == len(survey)
    assert "VAR1_PRED" in df.columns


def test_kriged_map(survey, layers):
    result = make_kriged_map(survey, map_layers=layers, grid_cell=(0.5, 0.5), variogram_model="exponential")
    codes = result.extrapolation_grid.codes
    mask = result.continuous_grid.mask
    assert result.extras["method"] == "kriging"
    assert (codes[mask] >= 0).all()
    assert np.nanmin(result.continuous_grid.values) >= 0.0


def test_loads_layers_and_survey_bathymetry(survey, layer_dir):
    result = make_idw_map(survey, region="sebs", data_dir=layer_dir, grid_cell=(0.5, 0.5))
    assert len(result.map_layers.bathymetry) == 2

    regional = make_idw_map(survey, region="sebs", data_dir=layer_dir, grid_cell=(0.5, 0.5),
                            use_survey_bathymetry=False)
    assert len(regional.map_layers.bathymetry) == 3


# region Validation

def test_missing_columns():
    with pytest.raises(ValueError, match="missing required columns"):
        prepare_observations(pd.DataFrame({"LATITUDE": [57.0], "LONGITUDE": [-165.0]}))


def test_lowercase_columns_accepted():
    obs = prepare_observations(pd.DataFrame({"latitude": [57.0], "longitude": [-165.0], "cpue_kgha": [1.0]}))
    assert list(obs.columns) == ["LATITUDE", "LONGITUDE", "CPUE_KGHA"]


def test_non_finite_coordinates():
    with pytest.raises(ValueError, match="LATITUDE"):
        prepare_observations(pd.DataFrame({"LATITUDE": [57.0, np.nan], "LONGITUDE": [-165.0, -166.0],
                                           "CPUE_KGHA": [1.0, 2.0]}))


def test_empty_observations():
    with pytest.raises(ValueError, match="empty"):
        prepare_observations(pd.DataFrame(columns=["LATITUDE", "LONGITUDE", "CPUE_KGHA"]))


def test_no_inputs():
    with pytest.raises(ValueError):
        prepare_observations()


def test_invalid_region(survey, layers):
    with pytest.raises(ValueError, match="Unknown region"):
        make_idw_map(survey, region="atlantis", map_layers=layers)


def test_degenerate_breaks(survey, layers):
    with pytest.raises(ValueError, match="strictly increasing"):
        idw(survey, layers, set_breaks=[0, 50, 10])


def test_unknown_break_style(survey, layers):
    with pytest.raises(ValueError, match="break style"):
        idw(survey, layers, set_breaks="headtails")

# endregion
