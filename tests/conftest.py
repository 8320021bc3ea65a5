"""Pytest configuration."""
import pytest
import sys
import os

import numpy as np

# Add the repo root to sys.path so `setpointopt` and `main` import without installing.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from setpointopt.config import ExtractorConfig, Window

STEPS_PER_DAY = 144  # 24h at 10-minute steps


@pytest.fixture
def day_table():
    """
    A 144 x 15 simulator output table laid out like the default config:
    col 3 setpoint, col 11 PMV, col 13 electric energy, col 14 cooling energy.
    """
    table = np.zeros((STEPS_PER_DAY, 15))
    table[:, 0] = np.arange(STEPS_PER_DAY)
    table[:, 3] = 26.0
    table[:, 11] = 0.2
    table[:, 13] = 1000.0
    return table


@pytest.fixture
def full_day_config():
    """Extractor config whose windows all cover the whole day."""
    day = Window(0, STEPS_PER_DAY - 1)
    return ExtractorConfig(comfort_window=day, energy_window=day, setpoint_window=day)
