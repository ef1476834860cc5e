"""Solver states and the state decorator base.

A solver is a :class:`SolverState` subclass implementing three methods:

* ``initialize_solver(problem)``: one-time setup before the first iteration.
* ``step_solver(problem, k)``: perform iteration ``k`` (``k >= 1``).
* ``stop_solver(problem, k)``: evaluate the stopping criterion after
  iteration ``k``; the default implementation calls ``self.stop``.

Decorators (debug output, recording) wrap a state by composition and forward
everything they do not intercept.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Tuple

from ..exceptions import ConfigurationError


class SolverStatus(Enum):
    """Lifecycle of a solver state."""
    CREATED = "created"
    INITIALIZED = "initialized"
    RUNNING = "running"
    STOPPED = "stopped"


class SolverState(ABC):
    """Base class of all solver states.

    Attributes:
        stop: The stopping criterion
        status: Current :class:`SolverStatus`
        iteration: Number of completed iterations
        problem: The problem this state was last solved against
    """

    #: manifold operations the solver uses; checked by ``solve``
    required_capabilities: Tuple[str, ...] = ()

    #: public parameter names mapped to attribute names
    parameters: Dict[str, str] = {}

    def __init__(self, stopping_criterion):
        self.stop = stopping_criterion
        self.status = SolverStatus.CREATED
        self.iteration = 0
        self.problem = None

    @abstractmethod
    def initialize_solver(self, problem) -> None:
        """Prepare the state for iterating on ``problem``."""

    @abstractmethod
    def step_solver(self, problem, k: int) -> None:
        """Perform iteration ``k``."""

    def stop_solver(self, problem, k: int) -> bool:
        return self.stop(problem, self, k)

    @abstractmethod
    def get_iterate(self):
        """The current iterate (the best point found so far for population solvers)."""

    @abstractmethod
    def set_iterate(self, p) -> None:
        """Overwrite the current iterate."""

    def get_state(self) -> 'SolverState':
        """The undecorated state; decorators override this to unwrap."""
        return self

    def get_reason(self) -> str:
        return self.stop.get_reason()

    def _parameter_attribute(self, name: str) -> str:
        attribute = self.parameters.get(name, name)
        if not hasattr(self, attribute):
            raise ConfigurationError(
                f"{type(self).__name__} has no parameter {name}",
                parameter=name,
                valid_range=sorted(self.parameters)
            )
        return attribute

    def get_parameter(self, name: str):
        return getattr(self, self._parameter_attribute(name))

    def set_parameter(self, name: str, value) -> None:
        setattr(self, self._parameter_attribute(name), value)

    def status_summary(self) -> str:
        lines = [
            f"# Solver state for {type(self).__name__}",
            f"Status: {self.status.value} after {self.iteration} iterations",
            "",
            "## Stopping criterion",
            self.stop.status_summary(),
        ]
        reason = self.stop.get_reason()
        if reason:
            lines.extend(["", reason.rstrip()])
        return "\n".join(lines)


class StateDecorator:
    """Base of all state decorators.

    Holds the inner state; attribute reads and writes not declared in
    ``_own_attributes`` go to the inner state.
    """

    _own_attributes: Tuple[str, ...] = ("state",)

    def __init__(self, state):
        object.__setattr__(self, "state", state)

    def __getattr__(self, name):
        if name in type(self)._own_attributes:
            raise AttributeError(name)
        return getattr(self.state, name)

    def __setattr__(self, name, value):
        if name in type(self)._own_attributes:
            object.__setattr__(self, name, value)
        else:
            setattr(self.state, name, value)

    def get_state(self):
        return self.state.get_state()

    def initialize_solver(self, problem) -> None:
        self.state.initialize_solver(problem)

    def step_solver(self, problem, k: int) -> None:
        self.state.step_solver(problem, k)

    def stop_solver(self, problem, k: int) -> bool:
        return self.state.stop_solver(problem, k)

    def __repr__(self):
        return f"{type(self).__name__}({self.state!r})"


def get_state(state):
    """Unwrap all decorators around ``state``."""
    return state.get_state()


def is_state_decorator(state) -> bool:
    return isinstance(state, StateDecorator)
