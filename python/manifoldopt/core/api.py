"""High-level entry point dispatching to the solvers by name."""

from typing import Callable, Optional, Dict, Any, Union

from ..exceptions import ConfigurationError
from ..solvers.particle_swarm import particle_swarm
from ..solvers.particle_swarm import default_stopping_criterion as swarm_stopping_criterion
from ..solvers.gradient_descent import gradient_descent
from ..solvers.gradient_descent import default_stopping_criterion as descent_stopping_criterion
from ..validation import approximate_gradient
from .config import get_config
from .logging import get_logger
from .._compat import HAS_TQDM

logger = get_logger(__name__)


def _run_particle_swarm(manifold, cost, gradient, initial_point, max_iterations, **kwargs):
    if gradient is not None:
        logger.info("particle_swarm is derivative free, ignoring the gradient")
    if initial_point is not None:
        kwargs["swarm"] = initial_point
    if max_iterations is not None:
        kwargs["stopping_criterion"] = swarm_stopping_criterion(max_iterations)
    return particle_swarm(manifold, cost, **kwargs)


def _run_gradient_descent(manifold, cost, gradient, initial_point, max_iterations, **kwargs):
    if gradient is None:
        logger.info("No gradient given, using finite differences")

        def gradient(M, p):
            return approximate_gradient(M, cost, p)
    if max_iterations is not None:
        kwargs["stopping_criterion"] = descent_stopping_criterion(max_iterations)
    return gradient_descent(manifold, cost, gradient, initial_point, **kwargs)


SOLVERS: Dict[str, Callable] = {
    "particle_swarm": _run_particle_swarm,
    "pso": _run_particle_swarm,
    "gradient_descent": _run_gradient_descent,
    "gd": _run_gradient_descent,
}


def _verbose_debug():
    config = get_config()
    if config.show_progress and HAS_TQDM:
        return ["ProgressBar"]
    return ["Iteration", "Cost", config.debug_every, "Stop"]


def optimize(
    manifold,
    cost: Callable,
    solver: str = "particle_swarm",
    gradient: Optional[Callable] = None,
    initial_point: Optional[Any] = None,
    max_iterations: Optional[int] = None,
    verbose: bool = False,
    **kwargs
) -> Union[Any, tuple]:
    """Minimize ``cost`` on ``manifold`` with the solver registered as ``solver``.

    Args:
        manifold: The manifold to optimize on
        cost: Cost function ``cost(M, p) -> float``
        solver: ``'particle_swarm'`` (``'pso'``) or ``'gradient_descent'``
            (``'gd'``), case-insensitive
        gradient: Riemannian gradient ``gradient(M, p)``. Gradient descent
            falls back to finite differences without it.
        initial_point: Initial swarm for particle swarm, initial point for
            gradient descent
        max_iterations: Iteration cap, replacing the solver's default
            stopping criterion
        verbose: Print iteration and cost every ``debug_every`` iterations,
            or show a tqdm progress bar when ``show_progress`` is configured
            and tqdm is installed
        **kwargs: Passed on to the solver

    Returns:
        Whatever the solver returns, by default the best point found.

    Raises:
        ConfigurationError: If ``solver`` is not a registered name, or if both
            ``max_iterations`` and ``stopping_criterion`` are given.

    Example:
        >>> from manifoldopt import optimize
        >>> from manifoldopt.manifolds import Sphere
        >>> import numpy as np
        >>> M = Sphere(3)
        >>> target = np.array([0.0, 0.0, 1.0])
        >>> p = optimize(M, lambda M, p: M.distance(p, target) ** 2, rng=1)
    """
    key = solver.lower() if isinstance(solver, str) else solver
    if key not in SOLVERS:
        raise ConfigurationError(
            f"Unknown solver '{solver}'",
            parameter="solver",
            value=solver,
            valid_range=sorted(SOLVERS)
        )
    if max_iterations is not None and "stopping_criterion" in kwargs:
        raise ConfigurationError(
            "Give either max_iterations or stopping_criterion, not both",
            parameter="max_iterations",
            value=max_iterations
        )
    if verbose and "debug" not in kwargs:
        kwargs["debug"] = _verbose_debug()

    logger.debug(f"Running {key} on {manifold!r}")
    return SOLVERS[key](manifold, cost, gradient, initial_point, max_iterations, **kwargs)


__all__ = ['optimize', 'SOLVERS']
