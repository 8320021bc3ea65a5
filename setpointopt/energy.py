import numpy as np
import logging

from .constants import JOULES_PER_KWH, POWER_FACTOR_BASE

_LOGGER = logging.getLogger(__name__)


def joules_to_kwh(joules):
    """J = W*s, so kWh = J / 3600 / 1000."""
    return joules / JOULES_PER_KWH


def kwh_to_joules(kwh):
    return kwh * JOULES_PER_KWH


def calculate_peak_power(energy_per_step, sampling_period_hours):
    """
    Peak instantaneous power (kW) from per-step energy.

    Args:
        energy_per_step: Energy consumed in each step (J).
        sampling_period_hours: Step length in hours (e.g. 1/6 for 10 min).
    """
    if sampling_period_hours <= 0:
        raise ValueError(f"Sampling period must be positive, got {sampling_period_hours}")
    energy_per_step = np.asarray(energy_per_step, dtype=float)
    if energy_per_step.size == 0:
        raise ValueError("Cannot take peak power of an empty series")

    power_kw = joules_to_kwh(energy_per_step) / sampling_period_hours
    return float(np.max(power_kw))


def calculate_basic_electricity_rate(peak_power_kw, rate_unit, power_factor):
    """
    Monthly basic charge for a contract power equal to the peak.
    Every point of power factor above 85% discounts 1% of the charge.
    """
    return peak_power_kw * rate_unit * (POWER_FACTOR_BASE - power_factor * 100.0) / 100.0


def calculate_electricity_rate(energy_kwh, unit_price):
    """Energy charge for the consumed kWh."""
    return energy_kwh * unit_price


def calculate_average_cop(cooling_energy, electric_energy):
    """
    Mean coefficient of performance over a period.
    Both series must share units. Steps with no electric input are skipped.
    """
    cooling = np.asarray(cooling_energy, dtype=float)
    electric = np.asarray(electric_energy, dtype=float)
    assert cooling.shape == electric.shape, \
        f"Input shape mismatch in COP calc: cooling={cooling.shape}, electric={electric.shape}"

    running = electric > 0
    if not np.any(running):
        _LOGGER.debug("No electric consumption in period; COP undefined")
        return float('nan')
    if not np.all(running):
        _LOGGER.debug("Skipping %d idle steps in COP average", int((~running).sum()))

    return float(np.mean(cooling[running] / electric[running]))
