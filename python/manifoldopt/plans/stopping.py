"""Stopping criteria.

A stopping criterion is a stateful callable ``criterion(problem, state, k)``
returning ``True`` once the solver should stop. Calling it with ``k == 0``
resets its reason and internal storage; the solve loop does so before the
first iteration, so a criterion can be reused for several runs.

Criteria combine with ``&`` (:class:`StopWhenAll`) and ``|``
(:class:`StopWhenAny`). Both combinators evaluate every child on every call
since children keep their own storage.

Example:
    >>> stop = StopAfterIteration(500) | StopWhenChangeLess(1e-6)
"""

import copy
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..exceptions import ConfigurationError
from ..types import EntryDistance
from .problem import get_cost, get_gradient


class StoppingCriterion(ABC):
    """Base class of all stopping criteria."""

    def __init__(self):
        self._reason = ""
        self.at_iteration = -1

    @abstractmethod
    def __call__(self, problem, state, k: int) -> bool:
        ...

    @property
    def reason(self) -> str:
        return self._reason

    def get_reason(self) -> str:
        """Why the criterion fired; empty until it does."""
        return self._reason

    def reset(self) -> None:
        self._reason = ""
        self.at_iteration = -1

    def indicates_convergence(self) -> bool:
        """Whether firing means the solver converged rather than ran out of budget."""
        return False

    def status_summary(self) -> str:
        return f"{type(self).__name__}: {'reached' if self._reason else 'not reached'}"

    def _fire(self, k: int, reason: str) -> bool:
        self.at_iteration = k
        self._reason = reason
        return True

    def __and__(self, other: 'StoppingCriterion') -> 'StopWhenAll':
        return StopWhenAll(self, other)

    def __or__(self, other: 'StoppingCriterion') -> 'StopWhenAny':
        return StopWhenAny(self, other)

    def __repr__(self):
        return f"{type(self).__name__}()"


class StopAfterIteration(StoppingCriterion):
    """Stop once ``k >= max_iterations``."""

    def __init__(self, max_iterations: int):
        super().__init__()
        if max_iterations < 0:
            raise ConfigurationError(
                f"The iteration bound must be non-negative, got {max_iterations}",
                parameter="max_iterations",
                value=max_iterations,
                valid_range=">= 0"
            )
        self.max_iterations = int(max_iterations)

    def __call__(self, problem, state, k: int) -> bool:
        if k == 0:
            self.reset()
        if k >= self.max_iterations:
            return self._fire(
                k, f"The algorithm reached its maximal number of iterations "
                   f"({self.max_iterations}).\n")
        return False

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        return f"Max Iteration {self.max_iterations}: {mark}"

    def __repr__(self):
        return f"StopAfterIteration({self.max_iterations})"


class StopAfter(StoppingCriterion):
    """Stop once ``seconds`` of wall-clock time have passed since ``k == 0``."""

    def __init__(self, seconds: float):
        super().__init__()
        if seconds <= 0:
            raise ConfigurationError(
                f"The time limit must be positive, got {seconds}",
                parameter="seconds",
                value=seconds,
                valid_range="> 0"
            )
        self.seconds = float(seconds)
        self.start = None
        self.elapsed = 0.0

    def reset(self) -> None:
        super().reset()
        self.start = None
        self.elapsed = 0.0

    def __call__(self, problem, state, k: int) -> bool:
        if k == 0 or self.start is None:
            self.reset()
            self.start = time.perf_counter()
            return False
        self.elapsed = time.perf_counter() - self.start
        if self.elapsed >= self.seconds:
            return self._fire(
                k, f"The algorithm ran for {self.elapsed:.3f} seconds, which exceeds "
                   f"the limit of {self.seconds} seconds.\n")
        return False

    def __repr__(self):
        return f"StopAfter({self.seconds})"


class StopWhenChangeLess(StoppingCriterion):
    """Stop when consecutive iterates are closer than ``tolerance``.

    The previous iterate is stored as a copy, so the manifold needs ``copy``
    and ``distance``.
    """

    def __init__(self, tolerance: float):
        super().__init__()
        self.tolerance = tolerance
        self.last_change = float("inf")
        self._storage = None

    def reset(self) -> None:
        super().reset()
        self.last_change = float("inf")
        self._storage = None

    def __call__(self, problem, state, k: int) -> bool:
        M = problem.manifold
        p = state.get_iterate()
        if k == 0 or self._storage is None:
            self.reset()
            self._storage = M.copy(p)
            return False
        self.last_change = M.distance(self._storage, p)
        self._storage = M.copy(p)
        if self.last_change < self.tolerance:
            return self._fire(
                k, f"The algorithm performed a step with a change ({self.last_change}) "
                   f"less than {self.tolerance}.\n")
        return False

    def indicates_convergence(self) -> bool:
        return True

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        return f"|Delta p| < {self.tolerance}: {mark}"

    def __repr__(self):
        return f"StopWhenChangeLess({self.tolerance})"


class StopWhenEntryChangeLess(StoppingCriterion):
    """Stop when a state field changes less than ``threshold`` between checks.

    Args:
        field: Attribute name on the (undecorated) state
        distance: ``distance(problem, state, old_value, new_value) -> float``
        threshold: Change below which the criterion fires
        copy: Copies a field value for storage; defaults to a deep copy
    """

    def __init__(self, field: str, distance: EntryDistance, threshold: float,
                 copy: Optional[Callable] = None):
        super().__init__()
        self.field = field
        self.distance = distance
        self.threshold = threshold
        self.copy = copy
        self.last_change = float("inf")
        self._storage = None

    def _copy(self, value):
        if self.copy is not None:
            return self.copy(value)
        return copy.deepcopy(value)

    def reset(self) -> None:
        super().reset()
        self.last_change = float("inf")
        self._storage = None

    def __call__(self, problem, state, k: int) -> bool:
        value = getattr(state, self.field)
        if k == 0 or self._storage is None:
            self.reset()
            self._storage = self._copy(value)
            return False
        self.last_change = self.distance(problem, state, self._storage, value)
        self._storage = self._copy(value)
        if self.last_change < self.threshold:
            return self._fire(
                k, f"The algorithm performed a step with a change ({self.last_change}) "
                   f"in {self.field} less than {self.threshold}.\n")
        return False

    def indicates_convergence(self) -> bool:
        return True

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        return f"|Delta {self.field}| < {self.threshold}: {mark}"

    def __repr__(self):
        return f"StopWhenEntryChangeLess({self.field!r}, {self.threshold})"


class StopWhenGradientNormLess(StoppingCriterion):
    """Stop when the Riemannian gradient norm drops below ``tolerance``.

    Uses the state's stored gradient (``state.get_gradient()``) when there is
    one and evaluates the problem's gradient otherwise.
    """

    def __init__(self, tolerance: float):
        super().__init__()
        self.tolerance = tolerance
        self.last_norm = float("inf")

    def __call__(self, problem, state, k: int) -> bool:
        if k == 0:
            self.reset()
            self.last_norm = float("inf")
        M = problem.manifold
        p = state.get_iterate()
        if hasattr(state, "get_gradient"):
            X = state.get_gradient()
        else:
            X = get_gradient(problem, p)
        self.last_norm = M.norm(p, X)
        if k > 0 and self.last_norm < self.tolerance:
            return self._fire(
                k, f"The algorithm reached approximately critical point after {k} "
                   f"iterations; the gradient norm ({self.last_norm}) is less than "
                   f"{self.tolerance}.\n")
        return False

    def indicates_convergence(self) -> bool:
        return True

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        return f"|grad f| < {self.tolerance}: {mark}"

    def __repr__(self):
        return f"StopWhenGradientNormLess({self.tolerance})"


class StopWhenCostLess(StoppingCriterion):
    """Stop when the cost at the current iterate drops below ``threshold``."""

    def __init__(self, threshold: float):
        super().__init__()
        self.threshold = threshold
        self.last_cost = float("inf")

    def __call__(self, problem, state, k: int) -> bool:
        if k == 0:
            self.reset()
        self.last_cost = get_cost(problem, state.get_iterate())
        if k > 0 and self.last_cost < self.threshold:
            return self._fire(
                k, f"The algorithm reached a cost function value ({self.last_cost}) "
                   f"less than the threshold ({self.threshold}).\n")
        return False

    def indicates_convergence(self) -> bool:
        return True

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        return f"f(p) < {self.threshold}: {mark}"

    def __repr__(self):
        return f"StopWhenCostLess({self.threshold})"


class _StoppingCriterionSet(StoppingCriterion):
    """Shared machinery of the AND/OR combinators."""

    symbol = ""

    def __init__(self, *criteria: StoppingCriterion):
        super().__init__()
        flat: List[StoppingCriterion] = []
        for criterion in criteria:
            if type(criterion) is type(self):
                flat.extend(criterion.criteria)
            else:
                flat.append(criterion)
        if not flat:
            raise ConfigurationError(f"{type(self).__name__} needs at least one criterion",
                                     parameter="criteria")
        self.criteria = tuple(flat)

    def reset(self) -> None:
        super().reset()
        for criterion in self.criteria:
            criterion.reset()

    def _evaluate(self, problem, state, k: int) -> List[bool]:
        if k == 0:
            super().reset()
        # every child runs: children update storage even when another has fired
        return [criterion(problem, state, k) for criterion in self.criteria]

    def status_summary(self) -> str:
        mark = "reached" if self._reason else "not reached"
        lines = [f"Stop When {self.symbol}: {mark}"]
        for criterion in self.criteria:
            lines.extend("    " + line for line in criterion.status_summary().splitlines())
        return "\n".join(lines)

    def __repr__(self):
        inner = f" {self.symbol} ".join(repr(c) for c in self.criteria)
        return f"({inner})"


class StopWhenAll(_StoppingCriterionSet):
    """Fires when every child criterion fires."""

    symbol = "&"

    def __call__(self, problem, state, k: int) -> bool:
        results = self._evaluate(problem, state, k)
        if all(results):
            return self._fire(k, "".join(c.get_reason() for c in self.criteria))
        return False

    def indicates_convergence(self) -> bool:
        return any(c.indicates_convergence() for c in self.criteria)


class StopWhenAny(_StoppingCriterionSet):
    """Fires when at least one child criterion fires."""

    symbol = "|"

    def __call__(self, problem, state, k: int) -> bool:
        results = self._evaluate(problem, state, k)
        if any(results):
            return self._fire(k, "".join(
                c.get_reason() for c, fired in zip(self.criteria, results) if fired))
        return False

    def indicates_convergence(self) -> bool:
        return any(c.indicates_convergence() for c in get_active_stopping_criteria(self))


def get_active_stopping_criteria(criterion: StoppingCriterion) -> List[StoppingCriterion]:
    """Leaf criteria that have fired."""
    if isinstance(criterion, _StoppingCriterionSet):
        active = []
        for child in criterion.criteria:
            active.extend(get_active_stopping_criteria(child))
        return active
    return [criterion] if criterion.get_reason() else []
