import math

import numpy as np


def quantize_setpoint(raw: float, resolution: float = 0.1) -> float:
    """
    Canonical quantization: Half-up rounding to the setpoint resolution.
    All code paths MUST use this for consistent simulator commands.
    """
    steps = round(1.0 / resolution)
    return math.floor(raw * steps + 0.5) / steps


def clamp(value, low, high):
    return max(low, min(high, value))


def round_half_up(arr):
    """Elementwise half-up rounding (np.round rounds half to even)."""
    return np.floor(np.asarray(arr, dtype=float) + 0.5)
