"""Debug output for solver runs.

:class:`DebugSolverState` wraps a solver state and runs debug actions at four
hooks:

* ``"Start"``: after ``initialize_solver``, with ``k == 0``
* ``"BeforeIteration"``: before each ``step_solver``
* ``"Iteration"``: after each ``step_solver``
* ``"Stop"``: when ``stop_solver`` returns ``True``

Actions write text to a sink (``sys.stdout`` unless ``io`` is given). A
negative iteration number asks an action to update its internal storage
without printing; :class:`DebugEvery` uses it between printed iterations.

Example:
    >>> particle_swarm(M, f, debug=["Iteration", " | ", "Cost", "\\n", "Stop", 25])
"""

import copy
import sys
import time
import warnings
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from .._compat import import_optional_dependency
from ..exceptions import ConfigurationError
from ..types import EntryDistance
from .problem import get_cost, get_gradient
from .state import StateDecorator


class DebugAction(ABC):
    """Base class of all debug actions.

    Args:
        io: Text sink; ``None`` means the current ``sys.stdout``
    """

    def __init__(self, io=None):
        self.io = io

    def _print(self, text: str) -> None:
        (self.io if self.io is not None else sys.stdout).write(text)

    def close(self) -> None:
        """Release resources held by the action, such as a progress bar."""

    @abstractmethod
    def __call__(self, problem, state, k: int) -> None:
        ...


class DebugGroup(DebugAction):
    """Run several actions in order."""

    def __init__(self, actions, io=None):
        super().__init__(io)
        self.actions = list(actions)

    def __call__(self, problem, state, k: int) -> None:
        for action in self.actions:
            action(problem, state, k)

    def close(self) -> None:
        for action in self.actions:
            action.close()


class DebugEvery(DebugAction):
    """Run ``action`` only every ``every`` iterations.

    With ``always_update`` the skipped iterations still reach the action with
    a negative iteration number so it can keep its storage current.
    """

    def __init__(self, action: DebugAction, every: int = 1, always_update: bool = True):
        super().__init__()
        if every < 1:
            raise ConfigurationError(f"Cadence must be positive, got {every}",
                                     parameter="every", value=every, valid_range=">= 1")
        self.action = action
        self.every = every
        self.always_update = always_update

    def __call__(self, problem, state, k: int) -> None:
        if k >= 0 and k % self.every == 0:
            self.action(problem, state, k)
        elif self.always_update:
            self.action(problem, state, -1)

    def close(self) -> None:
        self.action.close()


class DebugDivider(DebugAction):
    """Print a fixed string."""

    def __init__(self, divider: str = " | ", io=None):
        super().__init__(io)
        self.divider = divider

    def __call__(self, problem, state, k: int) -> None:
        if k >= 0 and self.divider:
            self._print(self.divider)


class DebugIteration(DebugAction):
    """Print the iteration number, or ``Initial`` before the first step."""

    def __init__(self, format: str = "# {:<6d}", io=None):
        super().__init__(io)
        self.format = format

    def __call__(self, problem, state, k: int) -> None:
        if k == 0:
            self._print("Initial ")
        elif k > 0:
            self._print(self.format.format(k))


class DebugCost(DebugAction):
    def __init__(self, format: str = "f(x): {:f}", long: bool = False, io=None):
        super().__init__(io)
        self.format = "F(x): {:.16f}" if long else format

    def __call__(self, problem, state, k: int) -> None:
        if k >= 0:
            self._print(self.format.format(get_cost(problem, state.get_iterate())))


class DebugIterate(DebugAction):
    def __init__(self, format: str = "p: {}", io=None):
        super().__init__(io)
        self.format = format

    def __call__(self, problem, state, k: int) -> None:
        if k >= 0:
            self._print(self.format.format(state.get_iterate()))


class DebugChange(DebugAction):
    """Print the distance between the current and the previous iterate."""

    def __init__(self, format: str = "Last Change: {:f}", io=None):
        super().__init__(io)
        self.format = format
        self._storage = None

    def __call__(self, problem, state, k: int) -> None:
        M = problem.manifold
        p = state.get_iterate()
        if k > 0 and self._storage is not None:
            self._print(self.format.format(M.distance(self._storage, p)))
        self._storage = M.copy(p)


class DebugGradientNorm(DebugAction):
    def __init__(self, format: str = "|grad f(p)|: {:f}", io=None):
        super().__init__(io)
        self.format = format

    def __call__(self, problem, state, k: int) -> None:
        if k < 0:
            return
        p = state.get_iterate()
        X = state.get_gradient() if hasattr(state, "get_gradient") else get_gradient(problem, p)
        self._print(self.format.format(problem.manifold.norm(p, X)))


class DebugEntry(DebugAction):
    """Print a field of the solver state."""

    def __init__(self, field: str, format: Optional[str] = None, io=None):
        super().__init__(io)
        self.field = field
        self.format = format or f"{field}: {{}}"

    def __call__(self, problem, state, k: int) -> None:
        if k >= 0:
            self._print(self.format.format(getattr(state, self.field)))


class DebugEntryChange(DebugAction):
    """Print how much a state field changed, measured by ``distance``.

    Args:
        field: Attribute name on the state
        distance: ``distance(problem, state, old_value, new_value) -> float``
        copy: Copies a field value for storage; defaults to a deep copy
    """

    def __init__(self, field: str, distance: EntryDistance, format: Optional[str] = None,
                 copy: Optional[Callable] = None, io=None):
        super().__init__(io)
        self.field = field
        self.distance = distance
        self.format = format or f"Last Change in {field}: {{:f}}"
        self.copy = copy
        self._storage = None

    def __call__(self, problem, state, k: int) -> None:
        value = getattr(state, self.field)
        if k > 0 and self._storage is not None:
            self._print(self.format.format(
                self.distance(problem, state, self._storage, value)))
        self._storage = self.copy(value) if self.copy else copy.deepcopy(value)


class DebugTime(DebugAction):
    """Print elapsed wall-clock time.

    Args:
        mode: ``"cumulative"`` (since ``k == 0``) or ``"iterative"`` (since
            the previous print)
    """

    def __init__(self, format: str = "time spent: {:.6f}s", mode: str = "cumulative",
                 io=None):
        super().__init__(io)
        if mode not in ("cumulative", "iterative"):
            raise ConfigurationError(f"Unknown time mode {mode}", parameter="mode",
                                     value=mode, valid_range=("cumulative", "iterative"))
        self.format = format
        self.mode = mode
        self.start = None

    def __call__(self, problem, state, k: int) -> None:
        now = time.perf_counter()
        if k == 0 or self.start is None:
            self.start = now
            return
        if k > 0:
            self._print(self.format.format(now - self.start))
            if self.mode == "iterative":
                self.start = now


class DebugStoppingCriterion(DebugAction):
    """Print the stopping reason once there is one."""

    def __init__(self, prefix: str = "", io=None):
        super().__init__(io)
        self.prefix = prefix

    def __call__(self, problem, state, k: int) -> None:
        reason = state.stop.get_reason()
        if k >= 0 and reason:
            self._print(self.prefix + reason)


class DebugWarnIfCostIncreases(DebugAction):
    """Warn when the cost increases between iterations.

    Args:
        mode: ``"once"`` to warn a single time, ``"always"`` to warn every time
        tolerance: Increase below which no warning is issued
    """

    def __init__(self, mode: str = "once", tolerance: float = 1e-13, io=None):
        super().__init__(io)
        self.mode = mode
        self.tolerance = tolerance
        self.last_cost = float("inf")

    def __call__(self, problem, state, k: int) -> None:
        if self.mode == "off":
            return
        cost = get_cost(problem, state.get_iterate())
        if k > 0 and cost > self.last_cost + self.tolerance:
            warnings.warn(
                f"The cost increased by {cost - self.last_cost} in iteration {k}. "
                "Consider a smaller step size or a different solver.",
                UserWarning,
                stacklevel=2
            )
            if self.mode == "once":
                self.mode = "off"
        self.last_cost = cost


class DebugProgressBar(DebugAction):
    """tqdm progress bar over the iterations.

    The total defaults to the iteration bound of the state's stopping
    criterion when it contains a :class:`StopAfterIteration`.
    """

    def __init__(self, total: Optional[int] = None, io=None):
        super().__init__(io)
        self.total = total
        self.bar = None
        self.last_k = 0

    def __call__(self, problem, state, k: int) -> None:
        if k == 0:
            tqdm = import_optional_dependency("tqdm", extra="progress")
            self.close()
            self.bar = tqdm.tqdm(total=self.total or _iteration_bound(state.stop),
                                 file=self.io, leave=False)
            self.last_k = 0
            return
        if self.bar is None:
            return
        if k > self.last_k:
            self.bar.update(k - self.last_k)
            self.last_k = k
        if state.stop.get_reason():
            self.close()

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None


def _iteration_bound(criterion) -> Optional[int]:
    from .stopping import StopAfterIteration

    if isinstance(criterion, StopAfterIteration):
        return criterion.max_iterations
    bounds = [_iteration_bound(c) for c in getattr(criterion, "criteria", ())]
    bounds = [b for b in bounds if b is not None]
    return min(bounds) if bounds else None


DEBUG_ACTIONS = {
    "Iteration": DebugIteration,
    "Cost": DebugCost,
    "Change": DebugChange,
    "Iterate": DebugIterate,
    "GradientNorm": DebugGradientNorm,
    "Time": DebugTime,
    "WarnCost": DebugWarnIfCostIncreases,
    "ProgressBar": DebugProgressBar,
}

# actions that print nothing on their own line
_SILENT = (DebugWarnIfCostIncreases, DebugProgressBar)


def _debug_action(item, io=None) -> DebugAction:
    if isinstance(item, DebugAction):
        return item
    if isinstance(item, tuple) and len(item) == 2 and item[0] in DEBUG_ACTIONS:
        name, fmt = item
        return DEBUG_ACTIONS[name](fmt, io=io)
    if isinstance(item, str):
        if item in DEBUG_ACTIONS:
            return DEBUG_ACTIONS[item](io=io)
        return DebugDivider(item, io=io)
    raise ConfigurationError(f"Cannot build a debug action from {item!r}",
                             parameter="debug", value=item,
                             valid_range=sorted(DEBUG_ACTIONS))


def debug_factory(spec, io=None) -> Dict[str, DebugAction]:
    """Turn a debug specification into the hook dictionary.

    ``spec`` may be a dictionary (hook name to action or list), a single
    action, or a list mixing:

    * known names (``"Iteration"``, ``"Cost"``, ``"Change"``, ...)
    * other strings, printed verbatim as dividers
    * ``(name, format)`` tuples
    * ready-made :class:`DebugAction` instances
    * ``"Stop"``, which prints the stopping reason at the end
    * an int, the printing cadence

    The iteration group ends with a newline unless it already does, and also
    runs at ``"Start"`` so the initial values are shown.
    """
    if isinstance(spec, dict):
        return {
            key: DebugGroup([_debug_action(a, io) for a in value], io=io)
            if isinstance(value, (list, tuple)) else _debug_action(value, io)
            for key, value in spec.items()
        }
    if isinstance(spec, DebugAction):
        return {"Iteration": spec}
    if isinstance(spec, str):
        spec = [spec]

    every = None
    group = []
    stop_actions = []
    for item in spec:
        if isinstance(item, bool):
            raise ConfigurationError("Booleans are not debug actions",
                                     parameter="debug", value=item)
        if isinstance(item, int):
            every = item
        elif item == "Stop":
            stop_actions.append(DebugStoppingCriterion(io=io))
        else:
            action = _debug_action(item, io)
            group.append(action)
            if isinstance(action, DebugProgressBar):
                stop_actions.append(action)

    hooks: Dict[str, DebugAction] = {}
    if group:
        prints = any(not isinstance(a, _SILENT) for a in group)
        last = group[-1]
        if prints and not (isinstance(last, DebugDivider) and last.divider.endswith("\n")):
            group.append(DebugDivider("\n", io=io))
        iteration = DebugGroup(group, io=io)
        if every is not None:
            iteration = DebugEvery(iteration, every)
        hooks["Start"] = iteration
        hooks["Iteration"] = iteration
    if stop_actions:
        hooks["Stop"] = DebugGroup(stop_actions, io=io)
    return hooks


class DebugSolverState(StateDecorator):
    """Wrap a state and run debug actions around its iterations.

    Args:
        state: The state to decorate
        debug: Anything :func:`debug_factory` accepts
        io: Default text sink for actions built from names
    """

    _own_attributes = ("state", "debug_dictionary")

    def __init__(self, state, debug, io=None):
        super().__init__(state)
        self.debug_dictionary = debug_factory(debug, io)

    def _run(self, hook: str, problem, k: int) -> None:
        action = self.debug_dictionary.get(hook)
        if action is not None:
            action(problem, self.get_state(), k)

    def initialize_solver(self, problem) -> None:
        self.state.initialize_solver(problem)
        self._run("Start", problem, 0)

    def step_solver(self, problem, k: int) -> None:
        try:
            self._run("BeforeIteration", problem, k)
            self.state.step_solver(problem, k)
            self._run("Iteration", problem, k)
        except BaseException:
            self.close()
            raise

    def stop_solver(self, problem, k: int) -> bool:
        try:
            stop = self.state.stop_solver(problem, k)
        except BaseException:
            self.close()
            raise
        if stop:
            self._run("Stop", problem, k)
        return stop

    def close(self) -> None:
        """Close every action, e.g. after the run failed."""
        for action in self.debug_dictionary.values():
            action.close()
