import numpy as np
import pandas as pd
import pytest

from vsem import (
    VSEMParameters, load_default_params, default_parameters, default_error_scale,
    MODEL_PARAMETERS, ERROR_PARAMETER, InvalidParameterError,
)


def test_default_table():
    params = load_default_params()
    assert list(params.columns) == ['best', 'lower', 'upper']
    assert list(params.index) == list(MODEL_PARAMETERS) + [ERROR_PARAMETER]
    assert np.all(params['lower'] < params['upper'])


def test_default_parameters_match_dataclass_defaults():
    assert default_parameters() == VSEMParameters()
    assert np.isclose(default_error_scale(), 0.1)


def test_series_round_trip():
    p = VSEMParameters(LUE=0.003, Cs=20.0)
    assert VSEMParameters.from_series(p.to_series()) == p


def test_replace_returns_new_instance():
    p = VSEMParameters()
    q = p.replace(GAMMA=0.3)
    assert q.GAMMA == 0.3
    assert p.GAMMA == 0.4


def test_parameters_are_frozen():
    p = VSEMParameters()
    with pytest.raises(AttributeError):
        p.LUE = 1.0


def test_unknown_names():
    with pytest.raises(InvalidParameterError):
        VSEMParameters().replace(foo=1.0)
    with pytest.raises(InvalidParameterError):
        VSEMParameters.from_dict({'KEXT': 0.5, 'bar': 2.0})


def test_values_are_coerced_to_float():
    p = VSEMParameters(tauV=1000)
    assert isinstance(p.tauV, float)


def test_non_numeric_value():
    with pytest.raises(InvalidParameterError):
        VSEMParameters(LAR='wide')


def test_custom_table(tmp_path):
    table = load_default_params().reset_index()
    table.loc[table['name'] == 'LUE', ['best', 'lower', 'upper']] = [0.001, 0.0001, 0.01]
    path = tmp_path / 'params.csv'
    table.to_csv(path, index=False)

    params = load_default_params(path)
    assert np.isclose(params.loc['LUE', 'upper'], 0.01)
    assert default_parameters(params).LUE == 0.001


def test_inverted_bounds(tmp_path):
    path = tmp_path / 'params.csv'
    pd.DataFrame({'name': ['LUE'], 'best': [0.002], 'lower': [0.004], 'upper': [0.001]}).to_csv(path, index=False)
    with pytest.raises(InvalidParameterError):
        load_default_params(path)


def test_missing_columns(tmp_path):
    path = tmp_path / 'params.csv'
    pd.DataFrame({'name': ['LUE'], 'best': [0.002]}).to_csv(path, index=False)
    with pytest.raises(InvalidParameterError):
        load_default_params(path)
