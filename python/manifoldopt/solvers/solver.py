"""The generic solve loop and the helpers shared by all solver front ends."""

from typing import Optional

from ..core.logging import get_logger, SolverRunLogger
from ..manifolds.base import require_capabilities
from ..plans.counting import ManifoldCountObjective
from ..plans.debug import DebugSolverState
from ..plans.record import RecordSolverState
from ..plans.state import SolverStatus

logger = get_logger(__name__)


def solve(problem, state):
    """Run a (possibly decorated) solver state on ``problem``.

    The loop initializes the state, then alternates ``stop_solver`` and
    ``step_solver`` until the stopping criterion fires::

        initialize_solver(problem)
        k = 0
        while not stop_solver(problem, k):
            k += 1
            step_solver(problem, k)

    Errors raised by the manifold, the objective or the solver propagate
    unchanged; whatever debug output and records were produced stay
    available on the state.

    Returns:
        The state that was passed in, now stopped.

    Raises:
        CapabilityError: If the manifold lacks an operation the solver needs.
    """
    inner = state.get_state()
    name = type(inner).__name__
    require_capabilities(problem.manifold, inner.required_capabilities, name)

    with SolverRunLogger(name) as run_logger:
        run_logger.add_metric("Manifold", repr(problem.manifold))
        inner.problem = problem
        inner.iteration = 0
        state.initialize_solver(problem)
        inner.status = SolverStatus.INITIALIZED
        logger.debug(f"{name} initialized on {problem.manifold!r}")

        k = 0
        while not state.stop_solver(problem, k):
            inner.status = SolverStatus.RUNNING
            k += 1
            state.step_solver(problem, k)
            inner.iteration = k

        inner.status = SolverStatus.STOPPED
        run_logger.log_state(state)
    return state


def decorate_state(state, debug=None, record=None, io=None):
    """Wrap ``state`` for recording (inner) and debug output (outer)."""
    if record:
        state = RecordSolverState(state, record)
    if debug:
        state = DebugSolverState(state, debug, io=io)
    return state


def decorate_objective(objective, count=None):
    """Wrap ``objective`` in a counter when ``count`` lists names to count."""
    if count:
        objective = ManifoldCountObjective(objective, count)
    return objective


def get_solver_result(state):
    """The final iterate of a solved state."""
    return state.get_state().get_iterate()


def get_solver_return(objective, state, return_state: bool = False,
                      return_objective: bool = False, result: Optional[object] = None):
    """Shape what a solver front end returns.

    Args:
        objective: The (decorated) objective
        state: The (decorated) state after :func:`solve`
        return_state: Return the state instead of the result
        return_objective: Also return the objective, as ``(objective, value)``
        result: Overrides the result taken from the state
    """
    value = state if return_state else (
        get_solver_result(state) if result is None else result)
    if return_objective:
        return objective, value
    return value
