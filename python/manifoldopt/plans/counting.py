"""Counting decorator for objectives."""

import warnings
from typing import Iterable

from ..exceptions import CapabilityError, ConfigurationError

COUNTABLE = ("Cost", "Gradient", "Hessian", "SubGradient", "ProximalMap")


class ManifoldCountObjective:
    """Wrap an objective and count how often each of its functions is called.

    Every attribute not intercepted here is forwarded to the wrapped
    objective, so the decorated object can be used wherever the plain one is.

    Args:
        objective: The objective to wrap
        count: Names to count, a subset of ``COUNTABLE``
        initial: Starting value of each counter

    Example:
        >>> obj = ManifoldCountObjective(ManifoldCostObjective(f), count=["Cost"])
        >>> get_count(obj, "Cost")
        0
    """

    def __init__(self, objective, count: Iterable[str] = ("Cost",), initial: int = 0):
        count = list(count)
        unknown = [name for name in count if name not in COUNTABLE]
        if unknown:
            raise ConfigurationError(
                f"Cannot count {', '.join(unknown)}",
                parameter="count",
                value=unknown,
                valid_range=COUNTABLE
            )
        self.objective = objective
        self.counts = {name: initial for name in count}

    def __getattr__(self, name):
        if name == "objective":
            raise AttributeError(name)
        return getattr(self.objective, name)

    def _increment(self, name: str) -> None:
        if name in self.counts:
            self.counts[name] += 1

    def _forward(self, operation: str):
        if not self.objective.provides(operation):
            raise CapabilityError(
                f"{type(self.objective).__name__} does not provide {operation}",
                operation=operation,
                owner=type(self.objective).__name__
            )
        return getattr(self.objective, operation)

    def provides(self, operation: str) -> bool:
        return self.objective.provides(operation)

    def get_cost(self, M, p):
        self._increment("Cost")
        return self.objective.get_cost(M, p)

    def get_gradient(self, M, p, out=None):
        get_gradient = self._forward("get_gradient")
        self._increment("Gradient")
        return get_gradient(M, p, out=out)

    def get_cost_and_gradient(self, M, p, out=None):
        get_cost_and_gradient = self._forward("get_cost_and_gradient")
        self._increment("Cost")
        self._increment("Gradient")
        return get_cost_and_gradient(M, p, out=out)

    def get_hessian(self, M, p, X, out=None):
        get_hessian = self._forward("get_hessian")
        self._increment("Hessian")
        return get_hessian(M, p, X, out=out)

    def get_subgradient(self, M, p, out=None):
        get_subgradient = self._forward("get_subgradient")
        self._increment("SubGradient")
        return get_subgradient(M, p, out=out)

    def get_proximal_map(self, M, lam, p, i=0, out=None):
        get_proximal_map = self._forward("get_proximal_map")
        self._increment("ProximalMap")
        return get_proximal_map(M, lam, p, i, out=out)

    def __repr__(self):
        counts = ", ".join(f"{k}={v}" for k, v in self.counts.items())
        return f"ManifoldCountObjective({self.objective!r}, {counts})"


def _find_counter(source):
    # problem -> objective -> (possibly nested) decorators
    objective = source
    if not hasattr(objective, "get_cost"):
        objective = getattr(source, "objective", None)
    while objective is not None:
        if isinstance(objective, ManifoldCountObjective):
            return objective
        objective = vars(objective).get("objective") if hasattr(objective, "__dict__") else None
    return None


def get_count(source, name: str) -> int:
    """Read a counter.

    Args:
        source: A problem, an objective, or a solver state
        name: Counter name; ``"Iterations"`` reads the state's iteration count

    Returns:
        The count, or -1 (with a warning) when ``name`` is not being counted.
    """
    if hasattr(source, "get_state"):
        state = source.get_state()
        if name == "Iterations":
            return state.iteration
        source = state.problem
    counter = _find_counter(source)
    if counter is None:
        warnings.warn(f"No counting decorator found, cannot report '{name}'",
                      stacklevel=2)
        return -1
    if name not in counter.counts:
        warnings.warn(f"'{name}' is not being counted (counting {sorted(counter.counts)})",
                      stacklevel=2)
        return -1
    return counter.counts[name]


def reset_counters(source, value: int = 0) -> None:
    """Set every counter of the counting decorator in ``source`` to ``value``."""
    counter = _find_counter(source)
    if counter is not None:
        for name in counter.counts:
            counter.counts[name] = value
