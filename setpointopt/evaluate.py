import logging
import math

from .config import EvaluationConfig
from .constants import PENALTY_INFEASIBLE
from .objectives import ObjectiveExtractor
from .schedule import ScheduleCodec

_LOGGER = logging.getLogger(__name__)

# Objectives handed to the optimizer by default (all minimized)
DEFAULT_OBJECTIVE_NAMES = ('total_energy', 'pmv_violation', 'setpoint_violation')


def evaluate_variables(variable, simulate, config: EvaluationConfig = None):
    """
    One candidate evaluation:
    variable -> schedule -> simulate(schedule) -> objectives.

    Args:
        variable: Optimizer variables in [0, 1].
        simulate: Callable taking the setpoint schedule and returning the
            simulator output table (array-like or SimulationOutput).
        config: Evaluation settings (defaults if omitted).

    Raises:
        ValueError: Wrong variable length or malformed simulator output.
    """
    if config is None:
        config = EvaluationConfig()

    codec = ScheduleCodec(config.schedule)
    schedule = codec.decode(variable)

    table = simulate(schedule)
    return ObjectiveExtractor(table, config.extractor).extract()


def objective_vector(objectives, names=DEFAULT_OBJECTIVE_NAMES):
    """
    Flattens objectives for a numeric optimizer. Missing objectives (None)
    and NaN values become PENALTY_INFEASIBLE.
    """
    if objectives is None:
        return [PENALTY_INFEASIBLE] * len(names)

    values = []
    for name in names:
        value = float(getattr(objectives, name))
        if math.isnan(value):
            _LOGGER.warning("Objective '%s' is NaN; substituting penalty %g", name, PENALTY_INFEASIBLE)
            value = PENALTY_INFEASIBLE
        values.append(value)
    return values


def evaluate_population(variables, simulate, config: EvaluationConfig = None):
    """
    Evaluates candidates one after another. A candidate whose evaluation
    fails with ValueError is logged and returned as None (infeasible).
    """
    results = []
    for i, variable in enumerate(variables):
        try:
            results.append(evaluate_variables(variable, simulate, config))
        except ValueError as e:
            _LOGGER.warning("Candidate %d is infeasible: %s", i, e)
            results.append(None)
    return results
