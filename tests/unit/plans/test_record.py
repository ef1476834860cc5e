"""
Unit tests for record actions and the record state decorator.
"""

import io

import pytest
import numpy as np
from conftest import CountingState

from manifoldopt import Euclidean, Sphere, ConfigurationError, particle_swarm
from manifoldopt.plans import (
    ManifoldCostObjective,
    Problem,
    RecordCost,
    RecordEntryChange,
    RecordEvery,
    RecordGroup,
    RecordIteration,
    RecordSolverState,
    StopAfterIteration,
    get_record,
    has_record,
    record_factory,
)
from manifoldopt.solvers.solver import solve, decorate_state


def f(M, p):
    return float(p[0])


class WalkState(CountingState):
    """Moves one unit along the first axis per iteration."""

    def step_solver(self, problem, k):
        super().step_solver(problem, k)
        self.p[0] += 1.0


@pytest.fixture
def setup():
    M = Euclidean(2)
    problem = Problem(M, ManifoldCostObjective(f))
    state = WalkState(M, np.zeros(2), calls_per_step=0,
                      stopping_criterion=StopAfterIteration(4))
    return problem, state


class TestRecording:
    def test_single_entry_records_plain_values(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Cost"])
        solve(problem, decorated)
        assert get_record(decorated) == [1.0, 2.0, 3.0, 4.0]

    def test_group_records_tuples(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Iteration", "Cost", "Change"])
        solve(problem, decorated)
        assert get_record(decorated) == [(1, 1.0, 1.0), (2, 2.0, 1.0),
                                         (3, 3.0, 1.0), (4, 4.0, 1.0)]
        assert get_record(decorated, "Iteration", "Cost") == [1.0, 2.0, 3.0, 4.0]

    def test_iterates_are_copies(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record="Iterate")
        solve(problem, decorated)
        iterates = get_record(decorated)
        assert [p[0] for p in iterates] == [1.0, 2.0, 3.0, 4.0]

    def test_state_field(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["steps"])
        solve(problem, decorated)
        assert get_record(decorated)[-1] == [1, 2, 3, 4]
        assert get_record(decorated)[0] == [1]

    def test_cadence(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Iteration", 2])
        solve(problem, decorated)
        assert get_record(decorated) == [2, 4]

    def test_stop_reason(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Iteration", "Stop"])
        solve(problem, decorated)
        assert get_record(decorated, "Stop") == [
            "The algorithm reached its maximal number of iterations (4).\n"]

    def test_second_run_starts_fresh(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Iteration"])
        solve(problem, decorated)
        solve(problem, decorated)
        assert get_record(decorated) == [1, 2, 3, 4]

    def test_record_under_debug(self, setup):
        problem, state = setup
        decorated = decorate_state(state, debug=["Iteration"], record=["Iteration"],
                                   io=io.StringIO())
        solve(problem, decorated)
        assert has_record(decorated)
        assert get_record(decorated) == [1, 2, 3, 4]

    def test_entry_change(self, setup):
        problem, state = setup
        action = RecordEntryChange("p", lambda problem, state, a, b: float(np.linalg.norm(a - b)),
                                   copy=np.copy)
        decorated = RecordSolverState(state, {"Iteration": action})
        solve(problem, decorated)
        assert action.get_record() == [1.0, 1.0, 1.0, 1.0]

    def test_dictionary_of_names(self, setup):
        problem, state = setup
        decorated = RecordSolverState(state, {"Iteration": ["Iteration", "Cost"],
                                              "Stop": "Stop"})
        solve(problem, decorated)
        assert get_record(decorated) == [(1, 1.0), (2, 2.0), (3, 3.0), (4, 4.0)]
        assert get_record(decorated, "Iteration", "Cost") == [1.0, 2.0, 3.0, 4.0]
        assert len(get_record(decorated, "Stop")) == 1

    def test_dictionary_single_name_list(self, setup):
        problem, state = setup
        decorated = RecordSolverState(state, {"Iteration": ["Cost"]})
        solve(problem, decorated)
        assert get_record(decorated) == [1.0, 2.0, 3.0, 4.0]

    def test_dictionary_spec_through_solver(self):
        state = particle_swarm(Sphere(3), lambda M, p: float(p[0]), swarm_size=3, rng=0,
                               record={"Iteration": ["Cost"]},
                               stopping_criterion=StopAfterIteration(2), return_state=True)
        assert len(get_record(state)) == 2

    def test_kept_after_failure(self, setup):
        problem, state = setup

        def failing(M, p):
            if p[0] >= 3.0:
                raise RuntimeError("boom")
            return float(p[0])

        problem = Problem(problem.manifold, ManifoldCostObjective(failing))
        decorated = decorate_state(state, record=["Cost"])
        with pytest.raises(RuntimeError):
            solve(problem, decorated)
        assert get_record(decorated) == [1.0, 2.0]


class TestErrors:
    def test_no_record(self, setup):
        problem, state = setup
        assert not has_record(state)
        with pytest.raises(ConfigurationError):
            get_record(state)

    def test_unknown_hook(self, setup):
        problem, state = setup
        decorated = decorate_state(state, record=["Iteration"])
        with pytest.raises(ConfigurationError):
            get_record(decorated, "Stop")

    def test_unknown_group_member(self):
        group = RecordGroup([RecordIteration(), RecordCost()], ["Iteration", "Cost"])
        with pytest.raises(ConfigurationError):
            group.get_record("Change")

    def test_group_name_count(self):
        with pytest.raises(ConfigurationError):
            RecordGroup([RecordIteration()], ["a", "b"])

    def test_invalid_items(self):
        with pytest.raises(ConfigurationError):
            record_factory([False])
        with pytest.raises(ConfigurationError):
            record_factory([1.5])
        with pytest.raises(ConfigurationError):
            RecordEvery(RecordIteration(), every=0)
        with pytest.raises(ConfigurationError):
            record_factory({"Iteration": []})
