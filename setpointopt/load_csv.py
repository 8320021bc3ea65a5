import logging

import numpy as np
import pandas as pd

from .simulation_output import SimulationOutput

_LOGGER = logging.getLogger(__name__)


def load_output_csv(filepath: str, timesteps_per_hour: int = 6) -> SimulationOutput:
    """
    Loads a simulator output CSV (one header row, one row per timestep).
    Non-numeric columns such as the Date/Time stamp are replaced by the row
    number so that column indices keep the simulator's layout.
    """
    print(f"Loading simulator output from {filepath}...")
    df = pd.read_csv(filepath)
    df.columns = [str(c).strip() for c in df.columns]

    for col in df.columns:
        if not pd.api.types.is_numeric_dtype(df[col]):
            converted = pd.to_numeric(df[col], errors='coerce')
            if converted.isna().all():
                _LOGGER.debug("Column '%s' is not numeric; using row index", col)
                df[col] = np.arange(len(df), dtype=float)
            else:
                df[col] = converted

    if df.isna().any().any():
        bad = [c for c in df.columns if df[c].isna().any()]
        raise ValueError(f"Simulator output has missing values in columns: {bad}")

    print(f"Successfully loaded {len(df)} rows x {len(df.columns)} columns.")

    return SimulationOutput(
        data=df.to_numpy(dtype=float),
        columns=list(df.columns),
        timesteps_per_hour=timesteps_per_hour
    )


def load_variables(filepath: str, row: int = 0) -> np.ndarray:
    """Reads one optimizer variable vector (a headerless CSV row)."""
    df = pd.read_csv(filepath, header=None)
    if row >= len(df):
        raise ValueError(f"Variable file {filepath} has {len(df)} row(s), requested row {row}")

    variable = pd.to_numeric(df.iloc[row], errors='coerce').dropna().to_numpy(dtype=float)
    if variable.size == 0:
        raise ValueError(f"No numeric values in row {row} of {filepath}")
    return variable


def save_schedule(filepath: str, schedule) -> None:
    """Writes a setpoint schedule as CSV with hour and setpoint columns."""
    df = pd.DataFrame({
        'hour': np.arange(len(schedule)),
        'setpoint': np.asarray(schedule, dtype=float)
    })
    df.to_csv(filepath, index=False, float_format='%.1f')
    print(f"Schedule saved to: {filepath}")
