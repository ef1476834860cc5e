"""Problems pair a manifold with an objective."""

from dataclasses import dataclass
from typing import Any

from ..exceptions import CapabilityError
from .objective import as_objective


@dataclass(frozen=True)
class Problem:
    """Immutable pairing of a manifold and an objective.

    A bare callable passed as ``objective`` is wrapped into a
    :class:`~manifoldopt.plans.objective.ManifoldCostObjective`.
    """

    manifold: Any
    objective: Any

    def __post_init__(self):
        object.__setattr__(self, "objective", as_objective(self.objective))


def _require(problem: Problem, operation: str):
    objective = problem.objective
    if not objective.provides(operation):
        raise CapabilityError(
            f"{type(objective).__name__} does not provide {operation[len('get_'):]}",
            operation=operation,
            owner=type(objective).__name__
        )


def get_cost(problem: Problem, p) -> float:
    return problem.objective.get_cost(problem.manifold, p)


def get_gradient(problem: Problem, p, out=None):
    """Riemannian gradient at ``p``, written into ``out`` when given.

    Raises:
        CapabilityError: If the objective has no gradient.
    """
    _require(problem, "get_gradient")
    return problem.objective.get_gradient(problem.manifold, p, out=out)


def get_cost_and_gradient(problem: Problem, p, out=None):
    if problem.objective.provides("get_cost_and_gradient"):
        return problem.objective.get_cost_and_gradient(problem.manifold, p, out=out)
    return get_cost(problem, p), get_gradient(problem, p, out=out)


def get_hessian(problem: Problem, p, X, out=None):
    _require(problem, "get_hessian")
    return problem.objective.get_hessian(problem.manifold, p, X, out=out)


def get_subgradient(problem: Problem, p, out=None):
    _require(problem, "get_subgradient")
    return problem.objective.get_subgradient(problem.manifold, p, out=out)


def get_proximal_map(problem: Problem, lam: float, p, i: int = 0, out=None):
    _require(problem, "get_proximal_map")
    return problem.objective.get_proximal_map(problem.manifold, lam, p, i, out=out)
