import logging
from dataclasses import dataclass, asdict

import numpy as np

from .config import ExtractorConfig
from .energy import (
    joules_to_kwh,
    calculate_peak_power,
    calculate_basic_electricity_rate,
    calculate_electricity_rate,
    calculate_average_cop,
)
from .simulation_output import SimulationOutput
from .utils import round_half_up

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Objectives:
    total_energy: float        # Electric energy over the energy window (J)
    peak_power: float          # Peak power over the energy window (kW)
    average_pmv: float         # Mean PMV over the comfort window
    pmv_violation: float       # Steps outside the +/-0.5 comfort band
    setpoint_violation: float  # Sum of setpoint steps beyond the rate limit (C)
    basic_rate: float          # Monthly basic charge for the peak
    energy_rate: float         # Charge for the consumed energy

    def as_dict(self):
        return asdict(self)

    def has_nan(self):
        return any(np.isnan(v) for v in asdict(self).values())


class ObjectiveExtractor:
    """
    Slices one simulator output table into evaluation windows and computes
    the scalar objectives. The table is validated once on construction;
    every method afterwards is a pure read.
    """

    def __init__(self, table, config: ExtractorConfig = None):
        if config is None:
            config = ExtractorConfig()
        if isinstance(table, SimulationOutput):
            table = table.data

        data = np.asarray(table, dtype=float)
        if data.ndim != 2:
            raise ValueError(f"Simulator output must be a 2-D table, got shape {data.shape}")

        n_rows, n_cols = data.shape
        if config.max_column() >= n_cols:
            raise ValueError(
                f"Configured column {config.max_column()} out of range for table with {n_cols} columns")
        if config.max_row() >= n_rows:
            raise ValueError(
                f"Evaluation window ends at row {config.max_row()} but table has {n_rows} rows")

        self.data = data
        self.config = config

    def _window(self, window, columns):
        return self.data[window.rows(), list(columns)]

    # --- Raw slices ---

    def electric_energy_data(self):
        return self._window(self.config.energy_window, self.config.electric_columns)

    def cooling_energy_data(self):
        return self._window(self.config.energy_window, self.config.cooling_columns)

    def pmv_data(self):
        return self._window(self.config.comfort_window, self.config.pmv_columns)

    def setpoint_data(self):
        return self._window(self.config.setpoint_window, self.config.setpoint_columns)

    # --- Energy ---

    def total_electric_energy(self):
        """Total electric energy over the energy window (J)."""
        return float(np.sum(self.electric_energy_data()))

    def peak_electric_power(self):
        """Peak power (kW) of the summed energy channels over the energy window."""
        per_step = np.sum(self._window(self.config.energy_window, self.config.peak_power_columns), axis=1)
        return calculate_peak_power(per_step, self.config.sampling_period_hours)

    def basic_electricity_rate(self):
        rates = self.config.rates
        return calculate_basic_electricity_rate(self.peak_electric_power(), rates.basic_rate_unit, rates.power_factor)

    def electricity_rate(self):
        total_kwh = joules_to_kwh(self.total_electric_energy())
        return calculate_electricity_rate(total_kwh, self.config.rates.energy_rate_unit)

    def average_cop(self):
        cooling = np.sum(self.cooling_energy_data(), axis=1)
        electric = np.sum(self.electric_energy_data(), axis=1)
        return calculate_average_cop(cooling, electric)

    # --- Comfort ---

    def average_pmv(self, absolute=False):
        pmv = self.pmv_data()
        if absolute:
            pmv = np.abs(pmv)
        return float(np.mean(pmv))

    def peak_pmv(self):
        """(min, max) PMV over the comfort window."""
        pmv = self.pmv_data()
        return float(np.min(pmv)), float(np.max(pmv))

    def pmv_violation_count(self):
        """
        Number of steps whose |PMV| rounds to 1 or more, i.e. leaves the
        +/-0.5 band. Larger excursions count proportionally (|PMV| 1.6 -> 2).
        """
        return float(np.sum(round_half_up(np.abs(self.pmv_data()))))

    # --- Schedule ---

    def setpoint_violation(self):
        """
        Total amount (C) by which the applied setpoint trace moves more than
        the rate limit between consecutive steps, summed over columns.
        """
        steps = np.abs(np.diff(self.setpoint_data(), axis=0))
        excess = np.maximum(0.0, steps - self.config.max_setpoint_step)
        return float(np.sum(excess))

    def extract(self) -> Objectives:
        objectives = Objectives(
            total_energy=self.total_electric_energy(),
            peak_power=self.peak_electric_power(),
            average_pmv=self.average_pmv(),
            pmv_violation=self.pmv_violation_count(),
            setpoint_violation=self.setpoint_violation(),
            basic_rate=self.basic_electricity_rate(),
            energy_rate=self.electricity_rate(),
        )
        if objectives.has_nan():
            _LOGGER.warning("NaN objective(s) in extraction: %s", objectives)
        return objectives
