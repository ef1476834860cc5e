"""Recording values during solver runs.

:class:`RecordSolverState` wraps a solver state and runs record actions after
each iteration (``"Iteration"``) and once when the solver stops (``"Stop"``).
Every action keeps an in-memory list: it appends for ``k > 0``, clears itself
for ``k == 0`` and ignores ``k < 0``. The lists stay available after the run,
including after a run aborted with an exception.

Example:
    >>> state = particle_swarm(M, f, record=["Iteration", "Cost"], return_state=True)
    >>> get_record(state)
    [(1, 0.25), (2, 0.11), ...]
"""

import copy
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence

from ..exceptions import ConfigurationError
from ..types import EntryDistance
from .problem import get_cost, get_gradient
from .state import StateDecorator


class RecordAction(ABC):
    """Base class of all record actions."""

    def __init__(self):
        self.recorded_values: List = []

    def record_or_reset(self, value, k: int) -> None:
        if k > 0:
            self.recorded_values.append(value)
        elif k == 0:
            self.recorded_values.clear()

    def get_record(self) -> List:
        return list(self.recorded_values)

    @abstractmethod
    def __call__(self, problem, state, k: int) -> None:
        ...


class RecordIteration(RecordAction):
    def __call__(self, problem, state, k: int) -> None:
        self.record_or_reset(k, k)


class RecordCost(RecordAction):
    def __call__(self, problem, state, k: int) -> None:
        if k > 0:
            self.record_or_reset(get_cost(problem, state.get_iterate()), k)
        else:
            self.record_or_reset(None, k)


class RecordIterate(RecordAction):
    """Record a copy of the iterate."""

    def __call__(self, problem, state, k: int) -> None:
        if k > 0:
            self.record_or_reset(problem.manifold.copy(state.get_iterate()), k)
        else:
            self.record_or_reset(None, k)


class RecordChange(RecordAction):
    """Record the distance between consecutive iterates."""

    def __init__(self):
        super().__init__()
        self._storage = None

    def __call__(self, problem, state, k: int) -> None:
        M = problem.manifold
        p = state.get_iterate()
        if k > 0 and self._storage is not None:
            self.record_or_reset(M.distance(self._storage, p), k)
        elif k == 0:
            self.record_or_reset(None, 0)
        self._storage = M.copy(p)


class RecordGradientNorm(RecordAction):
    def __call__(self, problem, state, k: int) -> None:
        if k <= 0:
            self.record_or_reset(None, k)
            return
        p = state.get_iterate()
        X = state.get_gradient() if hasattr(state, "get_gradient") else get_gradient(problem, p)
        self.record_or_reset(problem.manifold.norm(p, X), k)


class RecordEntry(RecordAction):
    """Record (a copy of) a field of the solver state."""

    def __init__(self, field: str, copy: Optional[Callable] = None):
        super().__init__()
        self.field = field
        self.copy = copy

    def __call__(self, problem, state, k: int) -> None:
        if k > 0:
            value = getattr(state, self.field)
            self.record_or_reset(self.copy(value) if self.copy else copy.deepcopy(value), k)
        else:
            self.record_or_reset(None, k)


class RecordEntryChange(RecordAction):
    """Record how much a state field changed, measured by ``distance``.

    Args:
        field: Attribute name on the state
        distance: ``distance(problem, state, old_value, new_value) -> float``
    """

    def __init__(self, field: str, distance: EntryDistance, copy: Optional[Callable] = None):
        super().__init__()
        self.field = field
        self.distance = distance
        self.copy = copy
        self._storage = None

    def __call__(self, problem, state, k: int) -> None:
        value = getattr(state, self.field)
        if k > 0 and self._storage is not None:
            self.record_or_reset(self.distance(problem, state, self._storage, value), k)
        elif k == 0:
            self.record_or_reset(None, 0)
        self._storage = self.copy(value) if self.copy else copy.deepcopy(value)


class RecordTime(RecordAction):
    """Record wall-clock time in seconds.

    Args:
        mode: ``"cumulative"`` (since ``k == 0``) or ``"iterative"`` (per
            recorded iteration)
    """

    def __init__(self, mode: str = "cumulative"):
        super().__init__()
        if mode not in ("cumulative", "iterative"):
            raise ConfigurationError(f"Unknown time mode {mode}", parameter="mode",
                                     value=mode, valid_range=("cumulative", "iterative"))
        self.mode = mode
        self.start = None

    def __call__(self, problem, state, k: int) -> None:
        now = time.perf_counter()
        if k == 0 or self.start is None:
            self.start = now
            self.record_or_reset(None, 0)
            return
        if k > 0:
            self.record_or_reset(now - self.start, k)
            if self.mode == "iterative":
                self.start = now


class RecordStoppingReason(RecordAction):
    """Record the stopping reason; meant for the ``"Stop"`` hook."""

    def __call__(self, problem, state, k: int) -> None:
        reason = state.stop.get_reason()
        if k > 0 and reason:
            self.record_or_reset(reason, k)
        elif k == 0:
            self.record_or_reset(None, 0)


class RecordGroup(RecordAction):
    """Record several values per iteration.

    ``get_record()`` returns one tuple per iteration; ``get_record(name)`` the
    list of a single member.
    """

    def __init__(self, actions: Sequence[RecordAction], names: Optional[Sequence[str]] = None):
        super().__init__()
        self.actions = list(actions)
        names = list(names) if names is not None else [type(a).__name__ for a in self.actions]
        if len(names) != len(self.actions):
            raise ConfigurationError(
                f"Got {len(names)} names for {len(self.actions)} record actions",
                parameter="names", value=names)
        self.indices = {name: i for i, name in enumerate(names)}

    def __call__(self, problem, state, k: int) -> None:
        for action in self.actions:
            action(problem, state, k)

    def get_record(self, name: Optional[str] = None) -> List:
        if name is not None:
            if name not in self.indices:
                raise ConfigurationError(f"No record named {name}", parameter="name",
                                         value=name, valid_range=sorted(self.indices))
            return self.actions[self.indices[name]].get_record()
        return list(zip(*(action.get_record() for action in self.actions)))


class RecordEvery(RecordAction):
    """Record only every ``every`` iterations."""

    def __init__(self, action: RecordAction, every: int = 1, always_update: bool = True):
        super().__init__()
        if every < 1:
            raise ConfigurationError(f"Cadence must be positive, got {every}",
                                     parameter="every", value=every, valid_range=">= 1")
        self.action = action
        self.every = every
        self.always_update = always_update

    def __call__(self, problem, state, k: int) -> None:
        if k <= 0 or k % self.every == 0:
            self.action(problem, state, k)
        elif self.always_update:
            self.action(problem, state, -1)

    def get_record(self, *args) -> List:
        return self.action.get_record(*args)


RECORD_ACTIONS = {
    "Iteration": RecordIteration,
    "Cost": RecordCost,
    "Iterate": RecordIterate,
    "Change": RecordChange,
    "GradientNorm": RecordGradientNorm,
    "Time": RecordTime,
}


def _record_action(item):
    """Return ``(name, action)`` for one entry of a record specification."""
    if isinstance(item, RecordAction):
        return type(item).__name__.replace("Record", "", 1), item
    if isinstance(item, tuple) and len(item) == 2 and isinstance(item[1], RecordAction):
        return item
    if isinstance(item, str):
        if item in RECORD_ACTIONS:
            return item, RECORD_ACTIONS[item]()
        # any other name is a field of the state
        return item, RecordEntry(item)
    raise ConfigurationError(f"Cannot build a record action from {item!r}",
                             parameter="record", value=item,
                             valid_range=sorted(RECORD_ACTIONS))


def _hook_action(value) -> RecordAction:
    """Build the action of one hook in a dictionary specification."""
    if value == "Stop":
        return RecordStoppingReason()
    if isinstance(value, (list, tuple)) and not (
            isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], RecordAction)):
        if not value:
            raise ConfigurationError("Empty record group", parameter="record", value=value)
        names, actions = zip(*(_record_action(item) for item in value))
        return actions[0] if len(actions) == 1 else RecordGroup(actions, names)
    return _record_action(value)[1]


def record_factory(spec) -> Dict[str, RecordAction]:
    """Turn a record specification into the hook dictionary.

    ``spec`` may be a dictionary (hook name to an action, a name or a list of
    them), a single action, or a
    list mixing known names, state field names, ``(name, action)`` tuples,
    actions, ``"Stop"`` (record the stopping reason) and an int cadence. A
    single entry records plain values; several record one tuple per iteration.
    """
    if isinstance(spec, dict):
        return {key: _hook_action(value) for key, value in spec.items()}
    if isinstance(spec, RecordAction):
        return {"Iteration": spec}
    if isinstance(spec, str):
        spec = [spec]

    every = None
    names, actions = [], []
    hooks: Dict[str, RecordAction] = {}
    for item in spec:
        if isinstance(item, bool):
            raise ConfigurationError("Booleans are not record actions",
                                     parameter="record", value=item)
        if isinstance(item, int):
            every = item
        elif item == "Stop":
            hooks["Stop"] = RecordStoppingReason()
        else:
            name, action = _record_action(item)
            names.append(name)
            actions.append(action)

    if actions:
        iteration = actions[0] if len(actions) == 1 else RecordGroup(actions, names)
        if every is not None:
            iteration = RecordEvery(iteration, every)
        hooks["Iteration"] = iteration
    return hooks


class RecordSolverState(StateDecorator):
    """Wrap a state and record values after its iterations.

    Args:
        state: The state to decorate
        record: Anything :func:`record_factory` accepts
    """

    _own_attributes = ("state", "record_dictionary")

    def __init__(self, state, record):
        super().__init__(state)
        self.record_dictionary = record_factory(record)

    def _run(self, hook: str, problem, k: int) -> None:
        action = self.record_dictionary.get(hook)
        if action is not None:
            action(problem, self.get_state(), k)

    def initialize_solver(self, problem) -> None:
        self.state.initialize_solver(problem)
        for hook in self.record_dictionary:
            self._run(hook, problem, 0)

    def step_solver(self, problem, k: int) -> None:
        self.state.step_solver(problem, k)
        self._run("Iteration", problem, k)

    def stop_solver(self, problem, k: int) -> bool:
        stop = self.state.stop_solver(problem, k)
        if stop:
            self._run("Stop", problem, k)
        return stop

    def get_record(self, hook: str = "Iteration", name: Optional[str] = None) -> List:
        if hook not in self.record_dictionary:
            raise ConfigurationError(f"Nothing is recorded at {hook}", parameter="hook",
                                     value=hook, valid_range=sorted(self.record_dictionary))
        action = self.record_dictionary[hook]
        return action.get_record(name) if name is not None else action.get_record()


def _find_record_state(state) -> Optional[RecordSolverState]:
    while isinstance(state, StateDecorator):
        if isinstance(state, RecordSolverState):
            return state
        state = state.state
    return None


def has_record(state) -> bool:
    return _find_record_state(state) is not None


def get_record(state, hook: str = "Iteration", name: Optional[str] = None) -> List:
    """Recorded values of ``state``, looking through any other decorators.

    Args:
        state: A (decorated) solver state
        hook: ``"Iteration"`` or ``"Stop"``
        name: Member of a record group, e.g. ``"Cost"``

    Raises:
        ConfigurationError: If the state records nothing.
    """
    record_state = _find_record_state(state)
    if record_state is None:
        raise ConfigurationError("The solver state does not record anything",
                                 parameter="record")
    return record_state.get_record(hook, name)
