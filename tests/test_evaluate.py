import numpy as np
import pytest

from setpointopt.config import EvaluationConfig, ScheduleConfig
from setpointopt.constants import PENALTY_INFEASIBLE
from setpointopt.evaluate import (
    evaluate_variables,
    evaluate_population,
    objective_vector,
    DEFAULT_OBJECTIVE_NAMES,
)
from setpointopt.objectives import Objectives


class FakeSimulator:
    """Replays a fixed output table and records the schedules it was given."""

    def __init__(self, table):
        self.table = table
        self.schedules = []

    def __call__(self, schedule):
        self.schedules.append(np.array(schedule))
        return self.table.copy()


def test_evaluate_variables_decodes_then_extracts(day_table):
    simulate = FakeSimulator(day_table)
    objectives = evaluate_variables(np.full(19, 0.5), simulate)

    assert isinstance(objectives, Objectives)
    assert objectives.total_energy == pytest.approx(144000.0)

    assert len(simulate.schedules) == 1
    schedule = simulate.schedules[0]
    assert len(schedule) == 25
    np.testing.assert_allclose(schedule[:6], 25.0)
    np.testing.assert_allclose(schedule[6:], 24.0)


def test_evaluate_variables_uses_schedule_config(day_table):
    config = EvaluationConfig(schedule=ScheduleConfig(num_variables=25, initial_value=20.0))
    simulate = FakeSimulator(day_table)
    evaluate_variables(np.full(25, 0.5), simulate, config)

    np.testing.assert_allclose(simulate.schedules[0], 24.0)


def test_evaluate_variables_rejects_wrong_length(day_table):
    simulate = FakeSimulator(day_table)
    with pytest.raises(ValueError):
        evaluate_variables(np.full(18, 0.5), simulate)
    assert simulate.schedules == []


def test_objective_vector_default_names(day_table):
    objectives = evaluate_variables(np.full(19, 0.5), FakeSimulator(day_table))
    vector = objective_vector(objectives)

    assert len(vector) == len(DEFAULT_OBJECTIVE_NAMES)
    assert vector == pytest.approx([144000.0, 0.0, 0.0])


def test_objective_vector_penalizes_nan(day_table):
    day_table[60, 11] = np.nan
    objectives = evaluate_variables(np.full(19, 0.5), FakeSimulator(day_table))

    vector = objective_vector(objectives, names=('total_energy', 'average_pmv'))
    assert vector[0] == pytest.approx(144000.0)
    assert vector[1] == PENALTY_INFEASIBLE


def test_objective_vector_for_missing_result():
    assert objective_vector(None) == [PENALTY_INFEASIBLE] * 3


def test_population_marks_failed_candidates(day_table):
    simulate = FakeSimulator(day_table)
    candidates = [np.full(19, 0.5), np.full(10, 0.5), np.full(19, 0.6)]

    results = evaluate_population(candidates, simulate)

    assert len(results) == 3
    assert isinstance(results[0], Objectives)
    assert results[1] is None
    assert isinstance(results[2], Objectives)
    # The bad candidate never reached the simulator
    assert len(simulate.schedules) == 2


def test_population_catches_malformed_output():
    simulate = FakeSimulator(np.zeros((10, 15)))
    assert evaluate_population([np.full(19, 0.5)], simulate) == [None]
