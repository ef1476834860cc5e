"""Riemannian gradient descent."""

from numbers import Real
from typing import Optional

import numpy as np

from ..core.config import get_rng
from ..decorators import validate_points
from ..exceptions import ConfigurationError
from ..manifolds.base import method_capabilities, require_capabilities
from ..plans.objective import Evaluation, ManifoldGradientObjective
from ..plans.problem import Problem, get_gradient
from ..plans.state import SolverState
from ..plans.stepsize import ArmijoLinesearch
from ..plans.stopping import StopAfterIteration, StopWhenGradientNormLess
from .solver import decorate_objective, decorate_state, get_solver_return, solve


def default_stopping_criterion(max_iterations: int = 200, tolerance: float = 1e-8):
    return StopAfterIteration(max_iterations) | StopWhenGradientNormLess(tolerance)


class GradientDescentState(SolverState):
    """State of gradient descent: the iterate ``p`` and its gradient ``X``.

    Args:
        M: Manifold
        p: Initial point (copied)
        stopping_criterion: Defaults to 200 iterations or a gradient norm below 1e-8
        stepsize: Step size rule, defaults to :class:`ArmijoLinesearch`
        retraction_method: Defaults to the manifold's
        X: Initial gradient buffer
    """

    required_capabilities = ("retract", "inner", "copy", "copyto", "zero_vector")

    parameters = {
        "Iterate": "p",
        "Gradient": "X",
        "Stepsize": "stepsize",
    }

    def __init__(self, M, p, stopping_criterion=None, stepsize=None,
                 retraction_method=None, X=None):
        self.required_capabilities = (type(self).required_capabilities
                                      + method_capabilities(retraction_method))
        require_capabilities(M, self.required_capabilities, type(self).__name__)
        super().__init__(stopping_criterion or default_stopping_criterion())
        self.manifold = M
        self.p = M.copy(p)
        self.X = M.zero_vector(self.p) if X is None else M.copy(X)
        self.retraction_method = retraction_method or M.default_retraction_method
        self.stepsize = stepsize or ArmijoLinesearch(retraction_method=self.retraction_method)

    def initialize_solver(self, problem) -> None:
        get_gradient(problem, self.p, out=self.X)

    def step_solver(self, problem, k: int) -> None:
        M = problem.manifold
        s = self.stepsize(problem, self, k)
        M.retract(self.p, -s * self.X, method=self.retraction_method, out=self.p)
        get_gradient(problem, self.p, out=self.X)

    def get_iterate(self):
        return self.p

    def set_iterate(self, p) -> None:
        self.manifold.copyto(self.p, p)

    def get_gradient(self):
        return self.X

    def __repr__(self):
        return f"GradientDescentState(stepsize={self.stepsize!r})"


@validate_points("M", point_args=("p",))
def gradient_descent(M, f, grad_f, p=None, *, evaluation: Evaluation = Evaluation.ALLOCATING,
                     stepsize=None, stopping_criterion=None, retraction_method=None,
                     rng=None, debug=None, record=None, count=None,
                     return_state: bool = False, return_objective: bool = False,
                     io=None):
    """Minimize ``f`` on ``M`` by following the negative Riemannian gradient.

    Args:
        M: Manifold to optimize on
        f: Cost ``f(M, p)``
        grad_f: Gradient ``grad_f(M, p)``, or ``grad_f(M, X, p)`` with
            ``evaluation=Evaluation.INPLACE``
        p: Initial point, random by default; a plain number is treated as a
            scalar point and the result is returned as a float
        evaluation: Calling convention of ``grad_f``
        stepsize: Step size rule, Armijo backtracking by default
        stopping_criterion: Defaults to 200 iterations or gradient norm below 1e-8
        retraction_method: Defaults to the manifold's
        rng: Generator or seed used when ``p`` is not given
        debug: Debug specification
        record: Record specification
        count: Names to count on the objective
        return_state: Return the solver state instead of the final point
        return_objective: Return ``(objective, result)``
        io: Text sink for debug output
    """
    evaluation = Evaluation(evaluation)
    if p is None:
        p = M.rand(rng=get_rng(rng))
    scalar = isinstance(p, Real) and not isinstance(p, bool)
    cost, gradient = f, grad_f
    if scalar:
        if evaluation is Evaluation.INPLACE:
            raise ConfigurationError(
                "In-place gradients are not available for scalar points",
                parameter="evaluation", value=evaluation)

        def cost(M_, q):
            return f(M_, np.asarray(q)[()])

        def gradient(M_, q):
            return grad_f(M_, np.asarray(q)[()])

    objective = decorate_objective(ManifoldGradientObjective(cost, gradient, evaluation), count)
    problem = Problem(M, objective)

    state = GradientDescentState(M, np.asarray(p, dtype=float) if scalar else p,
                                 stopping_criterion=stopping_criterion, stepsize=stepsize,
                                 retraction_method=retraction_method)
    decorated = decorate_state(state, debug=debug, record=record, io=io)
    solve(problem, decorated)

    result: Optional[float] = None
    if scalar:
        result = float(np.asarray(state.get_iterate())[()])
    return get_solver_return(objective, decorated, return_state, return_objective, result)
