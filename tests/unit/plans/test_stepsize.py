"""
Unit tests for step size rules.
"""

import pytest
import numpy as np

from manifoldopt import Euclidean, ConfigurationError
from manifoldopt.plans import (
    ArmijoLinesearch,
    ConstantStepsize,
    ManifoldGradientObjective,
    Problem,
    get_last_stepsize,
)
from manifoldopt.solvers.gradient_descent import GradientDescentState


def f(M, p):
    return float(np.sum(p ** 2))


def grad_f(M, p):
    return 2 * p


@pytest.fixture
def setup():
    M = Euclidean(2)
    problem = Problem(M, ManifoldGradientObjective(f, grad_f))
    state = GradientDescentState(M, np.array([1.0, 0.0]))
    state.initialize_solver(problem)
    return problem, state


class TestConstant:
    def test_value(self, setup):
        problem, state = setup
        step = ConstantStepsize(0.25)
        assert step(problem, state, 1) == 0.25
        assert step.last_stepsize == 0.25

    def test_positive(self):
        with pytest.raises(ConfigurationError):
            ConstantStepsize(0.0)


class TestArmijo:
    def test_backtracks_to_first_sufficient_step(self, setup):
        # f(p - 2sp) <= f(p) - 0.4 s  holds for s <= 0.9
        problem, state = setup
        step = ArmijoLinesearch()
        assert step(problem, state, 1) == pytest.approx(0.95 ** 3)
        assert step.last_stepsize == pytest.approx(0.95 ** 3)

    def test_accepts_initial_step(self, setup):
        problem, state = setup
        assert ArmijoLinesearch(initial_stepsize=0.5)(problem, state, 1) == 0.5

    def test_restarts_every_iteration(self, setup):
        problem, state = setup
        step = ArmijoLinesearch(initial_stepsize=2.0, contraction_factor=0.5)
        first = step(problem, state, 1)
        second = step(problem, state, 2)
        assert first == second == 0.5

    def test_lower_bound(self, setup):
        problem, state = setup
        step = ArmijoLinesearch(initial_stepsize=4.0, contraction_factor=0.5,
                                stop_when_stepsize_less=2.0)
        assert step(problem, state, 1) == 2.0

    @pytest.mark.parametrize("kwargs", [
        {"contraction_factor": 1.0},
        {"contraction_factor": 0.0},
        {"sufficient_decrease": 1.5},
        {"initial_stepsize": -1.0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ConfigurationError):
            ArmijoLinesearch(**kwargs)

    def test_last_stepsize_through_state(self, setup):
        problem, state = setup
        state.step_solver(problem, 1)
        assert get_last_stepsize(state) == pytest.approx(0.95 ** 3)
        assert np.allclose(state.p, [1 - 2 * 0.95 ** 3, 0.0])
