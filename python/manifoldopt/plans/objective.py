"""Objectives: the functions a solver queries.

Every callable receives the manifold as its first argument. Objectives come
in two evaluation modes:

* ``Evaluation.ALLOCATING``: ``grad_f(M, p)`` returns a new tangent vector.
* ``Evaluation.INPLACE``: ``grad_f(M, X, p)`` writes the gradient into ``X``.

The same convention holds for Hessians (``hess_f(M, p, X)`` /
``hess_f(M, Y, p, X)``), subgradients and proximal maps (``prox(M, lam, p)`` /
``prox(M, q, lam, p)``). Whatever the mode, the ``get_*`` methods accept an
optional ``out`` buffer: solvers pass one on every mutating step, and the
in-place callable then writes straight into it.
"""

from enum import Enum
from typing import Optional, Sequence

from ..exceptions import ConfigurationError
from ..types import CostFunc, CostGradFunc, GradientFunc, HessianFunc, ProximalMapFunc


class Evaluation(Enum):
    """How the user-supplied functions return their results."""
    ALLOCATING = "allocating"
    INPLACE = "inplace"


def _evaluate(M, func, evaluation, out, allocate, *args):
    if evaluation is Evaluation.INPLACE:
        target = allocate() if out is None else out
        func(M, target, *args)
        return target
    value = func(M, *args)
    if out is None:
        return value
    return M.copyto(out, value)


class ManifoldObjective:
    """Base class of all objectives: a cost and an evaluation mode.

    Args:
        cost: ``f(M, p) -> float``
        evaluation: How the optional callables of subclasses are evaluated
    """

    def __init__(self, cost: CostFunc, evaluation: Evaluation = Evaluation.ALLOCATING):
        if not callable(cost):
            raise ConfigurationError("The cost must be callable", parameter="cost",
                                     value=cost)
        self.cost = cost
        self.evaluation = Evaluation(evaluation)

    def provides(self, operation: str) -> bool:
        """Whether ``operation`` (e.g. ``"get_gradient"``) is available."""
        return callable(getattr(self, operation, None))

    def get_cost(self, M, p) -> float:
        return self.cost(M, p)

    def __repr__(self):
        return f"{type(self).__name__}({self.evaluation.value})"


class ManifoldCostObjective(ManifoldObjective):
    """Objective with a cost only, as used by derivative-free solvers."""


class ManifoldGradientObjective(ManifoldObjective):
    """Cost and Riemannian gradient given as two functions."""

    def __init__(self, cost: CostFunc, gradient: GradientFunc,
                 evaluation: Evaluation = Evaluation.ALLOCATING):
        super().__init__(cost, evaluation)
        self.gradient = gradient

    def get_gradient(self, M, p, out=None):
        return _evaluate(M, self.gradient, self.evaluation, out,
                         lambda: M.zero_vector(p), p)


class ManifoldCostGradientObjective(ManifoldObjective):
    """Cost and gradient computed together by one function.

    ``cost_grad(M, p) -> (c, X)`` when allocating, ``cost_grad(M, X, p) -> c``
    when in place.
    """

    def __init__(self, cost_grad: CostGradFunc,
                 evaluation: Evaluation = Evaluation.ALLOCATING):
        super().__init__(cost_grad, evaluation)
        self.cost_grad = cost_grad

    def get_cost_and_gradient(self, M, p, out=None):
        if self.evaluation is Evaluation.INPLACE:
            X = M.zero_vector(p) if out is None else out
            c = self.cost_grad(M, X, p)
            return c, X
        c, X = self.cost_grad(M, p)
        if out is not None:
            X = M.copyto(out, X)
        return c, X

    def get_cost(self, M, p) -> float:
        return self.get_cost_and_gradient(M, p)[0]

    def get_gradient(self, M, p, out=None):
        return self.get_cost_and_gradient(M, p, out=out)[1]


class ManifoldHessianObjective(ManifoldGradientObjective):
    """Cost, gradient and Hessian-vector product."""

    def __init__(self, cost: CostFunc, gradient: GradientFunc, hessian: HessianFunc,
                 evaluation: Evaluation = Evaluation.ALLOCATING):
        super().__init__(cost, gradient, evaluation)
        self.hessian = hessian

    def get_hessian(self, M, p, X, out=None):
        return _evaluate(M, self.hessian, self.evaluation, out,
                         lambda: M.zero_vector(p), p, X)


class ManifoldSubgradientObjective(ManifoldObjective):
    """Cost and one element of the subdifferential."""

    def __init__(self, cost: CostFunc, subgradient: GradientFunc,
                 evaluation: Evaluation = Evaluation.ALLOCATING):
        super().__init__(cost, evaluation)
        self.subgradient = subgradient

    def get_subgradient(self, M, p, out=None):
        return _evaluate(M, self.subgradient, self.evaluation, out,
                         lambda: M.zero_vector(p), p)


class ManifoldProximalMapObjective(ManifoldObjective):
    """Cost written as a sum whose summands each have a proximal map."""

    def __init__(self, cost: CostFunc, proximal_maps: Sequence[ProximalMapFunc],
                 evaluation: Evaluation = Evaluation.ALLOCATING):
        super().__init__(cost, evaluation)
        self.proximal_maps = list(proximal_maps)
        if not self.proximal_maps:
            raise ConfigurationError("At least one proximal map is required",
                                     parameter="proximal_maps", value=proximal_maps)

    def get_proximal_map(self, M, lam: float, p, i: int = 0, out=None):
        if not 0 <= i < len(self.proximal_maps):
            raise ConfigurationError(
                f"Proximal map index {i} out of range",
                parameter="i",
                value=i,
                valid_range=(0, len(self.proximal_maps) - 1)
            )
        return _evaluate(M, self.proximal_maps[i], self.evaluation, out,
                         lambda: M.copy(p), lam, p)


def as_objective(f, evaluation: Optional[Evaluation] = None) -> ManifoldObjective:
    """Wrap a bare cost callable; objectives pass through unchanged."""
    if hasattr(f, "get_cost"):
        return f
    return ManifoldCostObjective(f, evaluation or Evaluation.ALLOCATING)
