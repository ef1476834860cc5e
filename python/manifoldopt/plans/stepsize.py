"""Step size rules for gradient-based solvers."""

from abc import ABC, abstractmethod

from ..exceptions import ConfigurationError
from .problem import get_cost


class Stepsize(ABC):
    """A rule ``stepsize(problem, state, k) -> float``."""

    def __init__(self):
        self.last_stepsize = float("nan")

    @abstractmethod
    def __call__(self, problem, state, k: int) -> float:
        ...


class ConstantStepsize(Stepsize):
    def __init__(self, length: float = 1.0):
        super().__init__()
        if length <= 0:
            raise ConfigurationError(f"Step size must be positive, got {length}",
                                     parameter="length", value=length, valid_range="> 0")
        self.length = length
        self.last_stepsize = length

    def __call__(self, problem, state, k: int) -> float:
        return self.length

    def __repr__(self):
        return f"ConstantStepsize({self.length})"


class ArmijoLinesearch(Stepsize):
    """Backtracking line search along the retraction of the negative gradient.

    Starting from ``initial_stepsize`` the step is multiplied by
    ``contraction_factor`` until

        f(R_p(-s X)) <= f(p) - sufficient_decrease * s * |X|^2

    or the step falls below ``stop_when_stepsize_less``.

    Args:
        initial_stepsize: First step tried in every iteration
        contraction_factor: Factor in (0, 1) applied on each rejection
        sufficient_decrease: Armijo constant in (0, 1)
        stop_when_stepsize_less: Smallest step tried
        retraction_method: Retraction used, defaults to the manifold's
        max_decrease_steps: Bound on the number of contractions
    """

    def __init__(self, initial_stepsize: float = 1.0, contraction_factor: float = 0.95,
                 sufficient_decrease: float = 0.1, stop_when_stepsize_less: float = 0.0,
                 retraction_method=None, max_decrease_steps: int = 1000):
        super().__init__()
        if not 0 < contraction_factor < 1:
            raise ConfigurationError(
                f"Contraction factor must lie in (0, 1), got {contraction_factor}",
                parameter="contraction_factor", value=contraction_factor,
                valid_range=(0, 1))
        if not 0 < sufficient_decrease < 1:
            raise ConfigurationError(
                f"Sufficient decrease must lie in (0, 1), got {sufficient_decrease}",
                parameter="sufficient_decrease", value=sufficient_decrease,
                valid_range=(0, 1))
        if initial_stepsize <= 0:
            raise ConfigurationError(
                f"Initial step size must be positive, got {initial_stepsize}",
                parameter="initial_stepsize", value=initial_stepsize, valid_range="> 0")
        self.initial_stepsize = initial_stepsize
        self.contraction_factor = contraction_factor
        self.sufficient_decrease = sufficient_decrease
        self.stop_when_stepsize_less = stop_when_stepsize_less
        self.retraction_method = retraction_method
        self.max_decrease_steps = max_decrease_steps

    def __call__(self, problem, state, k: int) -> float:
        M = problem.manifold
        p = state.get_iterate()
        X = state.get_gradient()
        f0 = get_cost(problem, p)
        decrease = self.sufficient_decrease * M.inner(p, X, X)

        s = self.initial_stepsize
        q = M.retract(p, -s * X, method=self.retraction_method)
        steps = 0
        while get_cost(problem, q) > f0 - s * decrease:
            if steps >= self.max_decrease_steps or \
                    s * self.contraction_factor < self.stop_when_stepsize_less:
                break
            s *= self.contraction_factor
            steps += 1
            q = M.retract(p, -s * X, method=self.retraction_method)

        self.last_stepsize = s
        return s

    def __repr__(self):
        return (f"ArmijoLinesearch(initial_stepsize={self.initial_stepsize}, "
                f"contraction_factor={self.contraction_factor}, "
                f"sufficient_decrease={self.sufficient_decrease})")


def get_last_stepsize(state) -> float:
    return state.get_state().stepsize.last_stepsize
