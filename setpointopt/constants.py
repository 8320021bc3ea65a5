"""
Core Physics, Schedule and Tariff Constants.
These are the defaults used when no evaluation config file is supplied.
"""

# Setpoint Schedule Defaults (deg C)
SETPOINT_MIN = 18.0
SETPOINT_MAX = 30.0
SETPOINT_MAX_STEP = 2.0       # Max change between adjacent slots
SETPOINT_RESOLUTION = 0.1     # Quantization step for commanded setpoints
DEFAULT_INITIAL_SETPOINT = 25.0

# Schedule Layout
HOURS_IN_ONE_DAY = 24
SCHEDULE_LENGTH = HOURS_IN_ONE_DAY + 1   # 0:00 .. 24:00 hourly
DEFAULT_NUM_VARIABLES = 19               # 6:00 .. 24:00 hourly

# Simulator Output Layout
DEFAULT_TIMESTEPS_PER_HOUR = 6   # 10-minute reporting steps
DEFAULT_PMV_COLUMNS = (11,)
DEFAULT_COOLING_COLUMNS = (14,)
DEFAULT_ELECTRIC_COLUMNS = (13,)
DEFAULT_SETPOINT_COLUMNS = (3,)

# Evaluation Windows (hours of day)
COMFORT_WINDOW_HOURS = (7, 21)
ENERGY_WINDOW_HOURS = (0, 24)
SETPOINT_WINDOW_HOURS = (6, 24)

# Electricity Tariff (high-voltage commercial plan)
DEFAULT_BASIC_RATE_UNIT = 1684.8   # per kW of contract (peak) power
DEFAULT_ENERGY_RATE_UNIT = 17.22   # per kWh
DEFAULT_POWER_FACTOR = 0.9
POWER_FACTOR_BASE = 185.0

# Comfort Model Defaults
MET_TO_WATTS_PER_M2 = 58.2
DEFAULT_EXTERNAL_WORK = 0.0
DEFAULT_ATMOSPHERIC_PRESSURE = 101.325  # kPa
DEFAULT_AIR_VELOCITY = 0.1   # m/s
DEFAULT_CLOTHING = 0.5       # clo (summer office)
DEFAULT_METABOLIC_RATE = 1.2 # met (seated, light activity)

# Optimizer Interface
PENALTY_INFEASIBLE = 1e6

# Unit Conversions
SECONDS_PER_HOUR = 3600.0
KW_TO_WATTS = 1000.0
JOULES_PER_KWH = SECONDS_PER_HOUR * KW_TO_WATTS
