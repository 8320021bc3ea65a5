import logging

import numpy as np

from .config import ScheduleConfig, ENCODING_DIFFERENCE
from .utils import quantize_setpoint, clamp

_LOGGER = logging.getLogger(__name__)

DEFAULT_SCHEDULE_CONFIG = ScheduleConfig()

# Float slack when checking schedule invariants
SCHEDULE_TOLERANCE = 1e-9


def _check_layout(n_variables, offset, length):
    if offset < 0 or n_variables < 1:
        raise ValueError(f"Invalid schedule layout: offset={offset}, variables={n_variables}")
    if offset + n_variables > length:
        raise ValueError(
            f"Variables do not fit in schedule: offset ({offset}) + variables ({n_variables}) > length ({length})")


def _to_setpoint(x, config):
    """Maps a [0, 1] variable onto the setpoint range, quantized and clamped."""
    raw = quantize_setpoint(x * config.span + config.setpoint_min, config.resolution)
    return clamp(raw, config.setpoint_min, config.setpoint_max)


def _hold_last(schedule, start):
    # Flat extrapolation after the last decoded slot
    if start < len(schedule):
        schedule[start:] = schedule[start - 1]
    return schedule


def repair_rate_limit(schedule, max_step=DEFAULT_SCHEDULE_CONFIG.max_step):
    """
    Clips every adjacent difference to +/- max_step by moving the later value.
    Returns a new array; the input is left untouched.
    """
    repaired = np.array(schedule, dtype=float)
    for i in range(1, len(repaired)):
        diff = clamp(repaired[i] - repaired[i - 1], -max_step, max_step)
        repaired[i] = repaired[i - 1] + diff
    return repaired


def decode_difference(variable, initial_value, offset, length, config=DEFAULT_SCHEDULE_CONFIG):
    """
    Variable -> schedule, where the first variable is the absolute setpoint at
    `offset` and each following variable is the change from the previous slot
    (0 -> -max_step, 0.5 -> no change, 1 -> +max_step).

    The jump from `initial_value` into slot `offset` is not repaired, so the
    rate limit holds from `offset` onward only.
    """
    variable = np.asarray(variable, dtype=float)
    _check_layout(len(variable), offset, length)

    schedule = np.full(length, float(initial_value))
    schedule[offset] = _to_setpoint(variable[0], config)
    for v in range(1, len(variable)):
        step = variable[v] * 2.0 * config.max_step - config.max_step
        temp = quantize_setpoint(schedule[offset + v - 1] + step, config.resolution)
        schedule[offset + v] = clamp(temp, config.setpoint_min, config.setpoint_max)

    return _hold_last(schedule, offset + len(variable))


def decode_direct(variable, initial_value, offset, length, config=DEFAULT_SCHEDULE_CONFIG):
    """
    Variable -> schedule, each variable mapped independently to its slot,
    then repaired so adjacent slots respect the rate limit.
    """
    variable = np.asarray(variable, dtype=float)
    _check_layout(len(variable), offset, length)

    schedule = np.full(length, float(initial_value))
    for v, x in enumerate(variable):
        schedule[offset + v] = _to_setpoint(x, config)

    schedule = _hold_last(schedule, offset + len(variable))
    return repair_rate_limit(schedule, config.max_step)


def encode_difference(schedule, offset, n_variables, config=DEFAULT_SCHEDULE_CONFIG):
    """Schedule -> variable (inverse of decode_difference, clamped to [0, 1])."""
    schedule = np.asarray(schedule, dtype=float)
    _check_layout(n_variables, offset, len(schedule))

    variable = np.zeros(n_variables)
    variable[0] = clamp((schedule[offset] - config.setpoint_min) / config.span, 0.0, 1.0)
    for v in range(1, n_variables):
        diff = schedule[offset + v] - schedule[offset + v - 1]
        variable[v] = clamp((diff + config.max_step) / (2.0 * config.max_step), 0.0, 1.0)
    return variable


def encode_direct(schedule, offset, n_variables, config=DEFAULT_SCHEDULE_CONFIG):
    """Schedule -> variable (inverse of decode_direct, clamped to [0, 1])."""
    schedule = np.asarray(schedule, dtype=float)
    _check_layout(n_variables, offset, len(schedule))

    window = schedule[offset:offset + n_variables]
    return np.clip((window - config.setpoint_min) / config.span, 0.0, 1.0)


def check_schedule(schedule, config=DEFAULT_SCHEDULE_CONFIG):
    """
    Returns a list of human-readable constraint violations (empty if valid).
    """
    schedule = np.asarray(schedule, dtype=float)
    problems = []

    for i, t in enumerate(schedule):
        if t < config.setpoint_min - SCHEDULE_TOLERANCE or t > config.setpoint_max + SCHEDULE_TOLERANCE:
            problems.append(f"slot {i}: {t:.1f} C outside [{config.setpoint_min}, {config.setpoint_max}]")

    diffs = np.diff(schedule)
    for i, d in enumerate(diffs):
        if abs(d) > config.max_step + SCHEDULE_TOLERANCE:
            problems.append(f"slot {i}->{i + 1}: step {d:+.1f} C exceeds {config.max_step}")

    return problems


class ScheduleCodec:
    """
    Converts between optimizer variables and full-day setpoint schedules
    for one schedule configuration.
    """

    def __init__(self, config: ScheduleConfig = DEFAULT_SCHEDULE_CONFIG):
        self.config = config

    @property
    def use_difference(self):
        return self.config.encoding == ENCODING_DIFFERENCE

    def _check_variable(self, variable):
        if len(variable) != self.config.num_variables:
            raise ValueError(
                f"Illegal variable length: expected {self.config.num_variables}, got {len(variable)}")

    def decode(self, variable):
        variable = np.asarray(variable, dtype=float)
        self._check_variable(variable)

        cfg = self.config
        if self.use_difference:
            schedule = decode_difference(variable, cfg.initial_value, cfg.offset, cfg.length, cfg)
        else:
            schedule = decode_direct(variable, cfg.initial_value, cfg.offset, cfg.length, cfg)

        _LOGGER.debug("Decoded %s schedule: %s", cfg.encoding, schedule)
        return schedule

    def encode(self, schedule):
        schedule = np.asarray(schedule, dtype=float)
        if len(schedule) != self.config.length:
            raise ValueError(f"Illegal schedule length: expected {self.config.length}, got {len(schedule)}")

        cfg = self.config
        if self.use_difference:
            return encode_difference(schedule, cfg.offset, cfg.num_variables, cfg)
        return encode_direct(schedule, cfg.offset, cfg.num_variables, cfg)
