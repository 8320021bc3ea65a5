import json
import re
import logging
from dataclasses import dataclass, field, fields

from .constants import (
    SETPOINT_MIN,
    SETPOINT_MAX,
    SETPOINT_MAX_STEP,
    SETPOINT_RESOLUTION,
    DEFAULT_INITIAL_SETPOINT,
    SCHEDULE_LENGTH,
    DEFAULT_NUM_VARIABLES,
    DEFAULT_TIMESTEPS_PER_HOUR,
    DEFAULT_PMV_COLUMNS,
    DEFAULT_COOLING_COLUMNS,
    DEFAULT_ELECTRIC_COLUMNS,
    DEFAULT_SETPOINT_COLUMNS,
    COMFORT_WINDOW_HOURS,
    ENERGY_WINDOW_HOURS,
    SETPOINT_WINDOW_HOURS,
    DEFAULT_BASIC_RATE_UNIT,
    DEFAULT_ENERGY_RATE_UNIT,
    DEFAULT_POWER_FACTOR,
)

_LOGGER = logging.getLogger(__name__)

ENCODING_DIFFERENCE = "difference"
ENCODING_DIRECT = "direct"

# Keys accepted in the "extractor" section of a config file
EXTRACTOR_KEYS = ('timesteps_per_hour', 'columns', 'windows', 'rates',
                  'peak_includes_cooling', 'max_setpoint_step')


@dataclass(frozen=True)
class ScheduleConfig:
    """
    Layout and limits of the setpoint schedule handed to the simulator.
    The first `length - num_variables` slots keep `initial_value`.
    """
    setpoint_min: float = SETPOINT_MIN
    setpoint_max: float = SETPOINT_MAX
    max_step: float = SETPOINT_MAX_STEP
    resolution: float = SETPOINT_RESOLUTION
    num_variables: int = DEFAULT_NUM_VARIABLES
    length: int = SCHEDULE_LENGTH
    initial_value: float = DEFAULT_INITIAL_SETPOINT
    encoding: str = ENCODING_DIFFERENCE

    def __post_init__(self):
        if self.setpoint_min >= self.setpoint_max:
            raise ValueError(f"setpoint_min ({self.setpoint_min}) must be below setpoint_max ({self.setpoint_max})")
        if self.max_step <= 0 or self.resolution <= 0:
            raise ValueError("max_step and resolution must be positive")
        if not 0 < self.num_variables <= self.length:
            raise ValueError(f"num_variables ({self.num_variables}) must be in 1..length ({self.length})")
        if self.encoding not in (ENCODING_DIFFERENCE, ENCODING_DIRECT):
            raise ValueError(f"Unknown encoding '{self.encoding}'")

    @property
    def offset(self):
        return self.length - self.num_variables

    @property
    def span(self):
        return self.setpoint_max - self.setpoint_min


@dataclass(frozen=True)
class Window:
    """Inclusive row range [start, end] of simulator output."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid window [{self.start}, {self.end}]")

    @classmethod
    def from_hours(cls, start_hour, end_hour, timesteps_per_hour):
        """
        Converts clock hours to rows. A row holds the step ending at its
        timestamp, so hour h ends on row h*tph - 1 (midnight starts at row 0).
        """
        start = 0 if start_hour == 0 else start_hour * timesteps_per_hour - 1
        return cls(start, end_hour * timesteps_per_hour - 1)

    def rows(self):
        return slice(self.start, self.end + 1)

    def __len__(self):
        return self.end - self.start + 1


@dataclass(frozen=True)
class ElectricityRates:
    basic_rate_unit: float = DEFAULT_BASIC_RATE_UNIT
    energy_rate_unit: float = DEFAULT_ENERGY_RATE_UNIT
    power_factor: float = DEFAULT_POWER_FACTOR

    def __post_init__(self):
        if not 0.0 <= self.power_factor <= 1.0:
            raise ValueError(f"power_factor must be in [0, 1], got {self.power_factor}")


def _default_window(hours, start_row=None):
    start_hour, end_hour = hours
    window = Window.from_hours(start_hour, end_hour, DEFAULT_TIMESTEPS_PER_HOUR)
    if start_row is not None:
        window = Window(start_row, window.end)
    return window


@dataclass(frozen=True)
class ExtractorConfig:
    """Column indices, evaluation windows and tariff for objective extraction."""
    timesteps_per_hour: int = DEFAULT_TIMESTEPS_PER_HOUR
    pmv_columns: tuple = DEFAULT_PMV_COLUMNS
    cooling_columns: tuple = DEFAULT_COOLING_COLUMNS
    electric_columns: tuple = DEFAULT_ELECTRIC_COLUMNS
    setpoint_columns: tuple = DEFAULT_SETPOINT_COLUMNS
    comfort_window: Window = field(default_factory=lambda: _default_window(COMFORT_WINDOW_HOURS))
    energy_window: Window = field(default_factory=lambda: _default_window(ENERGY_WINDOW_HOURS))
    # The setpoint window starts on the hour row itself (6:00 -> row 36)
    setpoint_window: Window = field(default_factory=lambda: _default_window(
        SETPOINT_WINDOW_HOURS, start_row=SETPOINT_WINDOW_HOURS[0] * DEFAULT_TIMESTEPS_PER_HOUR))
    rates: ElectricityRates = field(default_factory=ElectricityRates)
    peak_includes_cooling: bool = True
    max_setpoint_step: float = SETPOINT_MAX_STEP

    def __post_init__(self):
        if self.timesteps_per_hour <= 0:
            raise ValueError(f"timesteps_per_hour must be positive, got {self.timesteps_per_hour}")
        for name in ('pmv_columns', 'cooling_columns', 'electric_columns', 'setpoint_columns'):
            cols = tuple(int(c) for c in getattr(self, name))
            if not cols:
                raise ValueError(f"{name} must name at least one column")
            if min(cols) < 0:
                raise ValueError(f"{name} contains a negative index: {cols}")
            object.__setattr__(self, name, cols)

    @property
    def sampling_period_hours(self):
        return 1.0 / self.timesteps_per_hour

    @property
    def peak_power_columns(self):
        if self.peak_includes_cooling:
            return self.electric_columns + self.cooling_columns
        return self.electric_columns

    def max_column(self):
        return max(self.pmv_columns + self.cooling_columns + self.electric_columns + self.setpoint_columns)

    def max_row(self):
        return max(self.comfort_window.end, self.energy_window.end, self.setpoint_window.end)


@dataclass(frozen=True)
class EvaluationConfig:
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)


def _check_keys(section, allowed, name):
    unknown = sorted(set(section) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}': {unknown}")


def _parse_window(entry, timesteps_per_hour, name):
    if 'start_hour' in entry and 'end_hour' in entry:
        return Window.from_hours(entry['start_hour'], entry['end_hour'], timesteps_per_hour)
    if 'start' in entry and 'end' in entry:
        return Window(int(entry['start']), int(entry['end']))
    raise ValueError(f"Window '{name}' needs start_hour/end_hour or start/end, got {sorted(entry)}")


def load_config(json_path) -> EvaluationConfig:
    """
    Loads an evaluation config JSON. C-style // comments are allowed.
    Every key is optional and falls back to the module defaults.
    """
    with open(json_path, 'r') as f:
        content = f.read()
    content = re.sub(r'//.*', '', content)
    data = json.loads(content)

    schedule_data = data.get('schedule', {})
    _check_keys(schedule_data, [fld.name for fld in fields(ScheduleConfig)], 'schedule')
    schedule = ScheduleConfig(**schedule_data)

    ext = dict(data.get('extractor', {}))
    _check_keys(ext, EXTRACTOR_KEYS, 'extractor')
    tph = int(ext.get('timesteps_per_hour', DEFAULT_TIMESTEPS_PER_HOUR))
    kwargs = {'timesteps_per_hour': tph}

    columns = ext.get('columns', {})
    for key in ('pmv', 'cooling', 'electric', 'setpoint'):
        if key in columns:
            kwargs[f'{key}_columns'] = tuple(columns[key])

    windows = ext.get('windows', {})
    for key in ('comfort', 'energy', 'setpoint'):
        if key in windows:
            kwargs[f'{key}_window'] = _parse_window(windows[key], tph, key)
        elif tph != DEFAULT_TIMESTEPS_PER_HOUR:
            _LOGGER.warning("Window '%s' not configured; default rows assume %d steps/hour",
                            key, DEFAULT_TIMESTEPS_PER_HOUR)

    if 'rates' in ext:
        _check_keys(ext['rates'], [fld.name for fld in fields(ElectricityRates)], 'rates')
        kwargs['rates'] = ElectricityRates(**ext['rates'])
    for key in ('peak_includes_cooling', 'max_setpoint_step'):
        if key in ext:
            kwargs[key] = ext[key]

    _LOGGER.info("Loaded evaluation config from %s", json_path)
    return EvaluationConfig(schedule=schedule, extractor=ExtractorConfig(**kwargs))
