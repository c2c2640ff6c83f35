import logging

import numpy as np
import pytest

from vsem import (
    CarbonDynamics, VSEMParameters, simulate, create_par, default_parameters,
    InvalidParameterError, ShapeMismatchError, OUTPUT_COLUMNS,
)


def test_output_table_shape(parameters, forcing):
    out = simulate(parameters, forcing)
    assert list(out.columns) == OUTPUT_COLUMNS
    assert len(out) == len(forcing)
    assert out.index.name == 'day'
    assert np.all(np.isfinite(out.values))


def test_zero_forcing_has_no_production():
    out = simulate(VSEMParameters(), np.zeros(200))
    assert np.all(out['GPP'] == 0.0)
    assert np.all(out['NPP'] == 0.0)


def test_zero_forcing_pools_decay():
    out = simulate(VSEMParameters(), np.zeros(200))
    assert np.all(np.diff(out['Cv']) < 0)
    assert np.all(np.diff(out['Cr']) < 0)
    total = out['Cv'] + out['Cr'] + out['Cs']
    assert np.all(np.diff(total) < 0)
    # Soil keeps receiving litter from the decaying pools faster than it respires.
    assert np.all(np.diff(out['Cs']) > 0)
    assert total.iloc[0] < 3.0 + 3.0 + 15.0


def test_zero_forcing_matches_turnover_by_hand(zero_forcing):
    p = default_parameters()
    out = simulate(p, zero_forcing)

    cv, cr, cs = 3.0, 3.0, 15.0
    expected = []
    for _ in range(4):
        t_veg, t_root, t_soil = cv / 1440.0, cr / 1440.0, cs / 27370.0
        nee = t_soil
        cv, cr, cs = cv - t_veg, cr - t_root, cs + t_veg + t_root - t_soil
        expected.append((nee, cv, cs, cr))
    expected = np.array(expected)

    np.testing.assert_allclose(out[['NEE', 'Cv', 'Cs', 'Cr']].values, expected, rtol=1e-12)


def test_full_aboveground_allocation_leaves_empty_roots_empty(forcing):
    out = simulate(VSEMParameters(Av=1.0, Cr=0.0), forcing)
    assert np.all(out['Cr'] == 0.0)
    assert out['Cv'].iloc[-1] > 0


def test_full_aboveground_allocation_roots_only_turn_over(forcing):
    out = simulate(VSEMParameters(Av=1.0, Cr=3.0), forcing)
    days = np.arange(1, len(forcing) + 1)
    np.testing.assert_allclose(out['Cr'].values, 3.0 * (1 - 1 / 1440.0) ** days)


def test_update_matches_first_row(parameters, forcing):
    model = CarbonDynamics(parameters)
    day = model.update(forcing[0])
    first = simulate(parameters, forcing).iloc[0]
    for k in OUTPUT_COLUMNS:
        assert np.isclose(day[k], first[k])


def test_simulation_does_not_mutate_parameters(parameters, forcing):
    simulate(parameters, forcing)
    assert parameters == VSEMParameters()


def test_negative_pools_are_clamped(caplog):
    params = VSEMParameters(tauV=0.5)
    with caplog.at_level(logging.WARNING, logger='vsem'):
        out = simulate(params, np.zeros(3))
    assert np.all(out['Cv'] == 0.0)
    assert 'Clamped' in caplog.text


def test_negative_pools_without_clamping():
    out = simulate(VSEMParameters(tauV=0.5), np.zeros(1), clamp=False)
    assert np.isclose(out['Cv'].iloc[0], -3.0)


@pytest.mark.parametrize('changes', [
    {'tauV': -1.0},
    {'tauS': 0.0},
    {'GAMMA': 1.5},
    {'Av': -0.1},
    {'Cv': -1.0},
    {'KEXT': float('nan')},
    {'LUE': float('inf')},
])
def test_invalid_parameters(changes):
    with pytest.raises(InvalidParameterError):
        VSEMParameters(**changes)


def test_invalid_parameters_are_value_errors():
    with pytest.raises(ValueError):
        VSEMParameters(tauR=-5)


def test_mapping_parameters_are_accepted(forcing):
    out = simulate(VSEMParameters().to_dict(), forcing)
    assert len(out) == len(forcing)


def test_forcing_must_be_one_dimensional(parameters):
    with pytest.raises(ShapeMismatchError):
        simulate(parameters, np.ones((10, 2)))


def test_forcing_must_be_non_negative(parameters):
    with pytest.raises(InvalidParameterError):
        simulate(parameters, -create_par(10))
