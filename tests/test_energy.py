import math

import numpy as np
import pytest

from setpointopt.energy import (
    joules_to_kwh,
    kwh_to_joules,
    calculate_peak_power,
    calculate_basic_electricity_rate,
    calculate_electricity_rate,
    calculate_average_cop,
)
from setpointopt.utils import (
    quantize_setpoint,
    round_half_up,
)


def test_joule_kwh_conversion():
    assert joules_to_kwh(3.6e6) == pytest.approx(1.0)
    assert kwh_to_joules(2.5) == pytest.approx(9.0e6)
    assert joules_to_kwh(kwh_to_joules(0.123)) == pytest.approx(0.123)


def test_peak_power_picks_maximum_step():
    """
    Verify per-step energy is converted to average power over the step.
    3.6e6 J in a 30-minute step is 1 kWh / 0.5 h = 2 kW.
    """
    energy = np.array([1.8e6, 3.6e6, 0.0])
    assert calculate_peak_power(energy, 0.5) == pytest.approx(2.0)


def test_peak_power_rejects_bad_input():
    with pytest.raises(ValueError):
        calculate_peak_power([1.0, 2.0], 0.0)
    with pytest.raises(ValueError):
        calculate_peak_power([], 1.0)


def test_basic_rate_power_factor_discount():
    # At 85% power factor there is no discount
    assert calculate_basic_electricity_rate(100.0, 1684.8, 0.85) == pytest.approx(168480.0)
    # At 90% the charge drops by 5%
    assert calculate_basic_electricity_rate(100.0, 1684.8, 0.9) == pytest.approx(168480.0 * 0.95)


def test_energy_rate():
    assert calculate_electricity_rate(12.5, 17.22) == pytest.approx(215.25)


def test_average_cop_skips_idle_steps():
    cooling = [3000.0, 0.0, 4000.0]
    electric = [1000.0, 0.0, 1000.0]
    assert calculate_average_cop(cooling, electric) == pytest.approx(3.5)


def test_average_cop_without_consumption_is_nan():
    assert math.isnan(calculate_average_cop([0.0, 0.0], [0.0, 0.0]))


def test_quantize_setpoint_half_up():
    assert quantize_setpoint(24.04) == pytest.approx(24.0)
    assert quantize_setpoint(24.06) == pytest.approx(24.1)
    assert quantize_setpoint(19.476) == pytest.approx(19.5)
    assert quantize_setpoint(23.3, resolution=0.5) == pytest.approx(23.5)


def test_round_half_up_differs_from_bankers_rounding():
    np.testing.assert_allclose(round_half_up([0.5, 1.5, 2.5, 0.49]), [1.0, 2.0, 3.0, 0.0])
