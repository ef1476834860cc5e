"""manifoldopt: optimization on Riemannian manifolds in Python.

The package is organized around three kinds of objects:

- **Manifolds** expose geometric operations (``exp``, ``log``, ``retract``,
  ``inner``, ``distance``, ...) on numpy arrays. Each solver declares the
  operations it needs and is refused up front on a manifold lacking them.
- **Problems** pair a manifold with an objective (cost, gradient, ...).
- **Solver states** hold everything an algorithm needs between iterations.
  They are wrapped for debug output and recording, and driven by
  :func:`~manifoldopt.solvers.solve` until a stopping criterion fires.

Quick Start
===========
>>> import numpy as np
>>> import manifoldopt as mo
>>> M = mo.manifolds.Circle()
>>> p = mo.particle_swarm(M, lambda M, p: M.distance(p, 1.0) ** 2, rng=42)

>>> S = mo.manifolds.Sphere(3)
>>> target = np.array([1.0, 0.0, 0.0])
>>> def f(M, p):
...     return M.distance(p, target) ** 2
>>> p = mo.particle_swarm(S, f, swarm_size=50, debug=["Iteration", "Cost", 25, "Stop"])

Recording and counting
======================
>>> state = mo.particle_swarm(M, lambda M, p: M.distance(p, 1.0) ** 2,
...                           record=["Iteration", "Cost"], count=["Cost"],
...                           return_state=True)
>>> history = mo.get_record(state)
>>> evaluations = mo.get_count(state, "Cost")

Available Manifolds
===================
- **Circle()**: angles in [-pi, pi)
- **Euclidean(*shape)**: flat space of arrays
- **Sphere(n)**: unit sphere S^(n-1) in R^n
- **PowerManifold(M, n)**: n copies of M, also ``M ** n``
- **ProductManifold(M1, M2, ...)**: Cartesian product

Available Solvers
=================
- **particle_swarm**: derivative-free particle swarm optimization
- **gradient_descent**: Riemannian gradient descent with Armijo line search

References
==========
- Absil, P.-A., Mahony, R., & Sepulchre, R. (2008). Optimization algorithms on matrix manifolds.
- Boumal, N. (2023). An introduction to optimization on smooth manifolds.
- Borckmans, P. B., Ishteva, M., & Absil, P.-A. (2010). A modified particle swarm optimization
  algorithm for the best low multilinear rank approximation of higher-order tensors.
"""

from . import manifolds
from . import plans
from . import solvers

from .manifolds import Circle, Euclidean, Sphere, PowerManifold, ProductManifold

from .plans import (
    Evaluation,
    Problem,
    ManifoldCostObjective,
    ManifoldGradientObjective,
    ManifoldCountObjective,
    get_count,
    get_record,
    StopAfterIteration,
    StopAfter,
    StopWhenChangeLess,
    StopWhenEntryChangeLess,
    StopWhenGradientNormLess,
    StopWhenCostLess,
    StopWhenAll,
    StopWhenAny,
    ConstantStepsize,
    ArmijoLinesearch,
)

from .solvers import solve, particle_swarm, gradient_descent, get_solver_result

from .core.api import optimize
from .core.config import get_config, set_config, reset_config, config_context
from .core.logging import get_logger

from .validation import check_manifold, check_gradient, approximate_gradient

from .exceptions import (
    ManifoldOptError,
    ManifoldValidationError,
    BaseMismatchError,
    CapabilityError,
    DimensionMismatchError,
    ConfigurationError,
)

__version__ = "0.3.0"

__all__ = [
    # Subpackages
    "manifolds",
    "plans",
    "solvers",

    # Manifolds
    "Circle",
    "Euclidean",
    "Sphere",
    "PowerManifold",
    "ProductManifold",

    # Problems and plans
    "Evaluation",
    "Problem",
    "ManifoldCostObjective",
    "ManifoldGradientObjective",
    "ManifoldCountObjective",
    "get_count",
    "get_record",
    "StopAfterIteration",
    "StopAfter",
    "StopWhenChangeLess",
    "StopWhenEntryChangeLess",
    "StopWhenGradientNormLess",
    "StopWhenCostLess",
    "StopWhenAll",
    "StopWhenAny",
    "ConstantStepsize",
    "ArmijoLinesearch",

    # Solvers
    "solve",
    "particle_swarm",
    "gradient_descent",
    "get_solver_result",
    "optimize",

    # Configuration and logging
    "get_config",
    "set_config",
    "reset_config",
    "config_context",
    "get_logger",

    # Diagnostics
    "check_manifold",
    "check_gradient",
    "approximate_gradient",

    # Exceptions
    "ManifoldOptError",
    "ManifoldValidationError",
    "BaseMismatchError",
    "CapabilityError",
    "DimensionMismatchError",
    "ConfigurationError",
]
