"""Particle swarm optimization on Riemannian manifolds.

Each particle ``s_i`` carries a velocity ``v_i`` (a tangent vector at
``s_i``) and remembers the best position ``p_i`` it has visited. The swarm
shares the best position ``g`` found by any particle. One iteration updates
every particle in turn:

1. ``cognitive = inverse_retract(s_i, p_i)``, ``social = inverse_retract(s_i, g)``
2. ``v_i <- inertia v_i + cognitive_weight r1 cognitive + social_weight r2 social``
   with ``r1, r2`` uniform on [0, 1], one draw each per particle
3. ``s_i <- retract(s_i, v_i)``
4. ``v_i`` is transported from the old to the new ``s_i``
5. personal and global bests are updated

Reference: P. B. Borckmans, M. Ishteva, P.-A. Absil, "A Modified Particle
Swarm Optimization Algorithm for the Best Low Multilinear Rank Approximation
of Higher-Order Tensors", ANTS 2010.
"""

from numbers import Real
from typing import List, Optional

import numpy as np

from ..core.config import get_config, get_rng
from ..decorators import renamed_kwargs, validate_points
from ..exceptions import ConfigurationError, DimensionMismatchError
from ..manifolds.base import method_capabilities, require_capabilities
from ..manifolds.power import PowerManifold
from ..plans.objective import Evaluation, ManifoldCostObjective
from ..plans.problem import Problem, get_cost
from ..plans.state import SolverState
from ..plans.stopping import StopAfterIteration, StopWhenEntryChangeLess
from .solver import decorate_objective, decorate_state, get_solver_return, solve


def swarm_distance(problem, state, old_swarm, new_swarm) -> float:
    """Distance between two swarms on the power manifold of the swarm size."""
    power = PowerManifold(problem.manifold, len(new_swarm))
    return power.distance(np.stack([np.asarray(s) for s in old_swarm]),
                          np.stack([np.asarray(s) for s in new_swarm]))


def default_stopping_criterion(max_iterations: int = 500, tolerance: float = 1e-4):
    """Iteration cap OR swarm change below ``tolerance``."""
    return StopAfterIteration(max_iterations) | StopWhenEntryChangeLess(
        "swarm", swarm_distance, tolerance,
        copy=lambda swarm: [np.array(s, dtype=float, copy=True) for s in swarm])


class ParticleSwarmState(SolverState):
    """State of the particle swarm solver.

    All buffers are allocated here: the personal bests start as copies of the
    swarm, and the global best and work vectors are allocated up front.

    Args:
        M: Manifold the particles live on
        swarm: Initial particle positions
        velocity: Initial velocities, one tangent vector per particle
        inertia: Weight of the previous velocity
        social_weight: Weight of the pull towards the global best
        cognitive_weight: Weight of the pull towards the personal best
        stopping_criterion: Defaults to :func:`default_stopping_criterion`
        retraction_method: Defaults to the manifold's
        inverse_retraction_method: Defaults to the manifold's
        vector_transport_method: Defaults to the manifold's
        rng: Generator, seed or ``None`` for the shared generator

    Attributes:
        swarm: Current particle positions
        velocity: Current velocities
        positional_best: Best position each particle has visited
        p: Best position visited by the swarm
    """

    required_capabilities = ("retract", "inverse_retract", "vector_transport_to",
                             "copy", "copyto", "zero_vector")

    parameters = {
        "Population": "swarm",
        "Velocity": "velocity",
        "Inertia": "inertia",
        "SocialWeight": "social_weight",
        "CognitiveWeight": "cognitive_weight",
    }

    def __init__(self, M, swarm, velocity, inertia: float = 0.65,
                 social_weight: float = 1.4, cognitive_weight: float = 1.4,
                 stopping_criterion=None, retraction_method=None,
                 inverse_retraction_method=None, vector_transport_method=None,
                 rng=None):
        swarm = list(swarm)
        velocity = list(velocity)
        if not swarm:
            raise ConfigurationError("The swarm needs at least one particle",
                                     parameter="swarm", value=swarm)
        if len(velocity) != len(swarm):
            raise DimensionMismatchError(
                f"Got {len(velocity)} velocities for {len(swarm)} particles",
                expected=(len(swarm),),
                got=(len(velocity),),
                operation="ParticleSwarmState"
            )
        capabilities = self.required_capabilities
        if stopping_criterion is None:
            capabilities = capabilities + ("distance",)
        capabilities = capabilities + method_capabilities(
            retraction_method, inverse_retraction_method, vector_transport_method)
        require_capabilities(M, capabilities, type(self).__name__)

        super().__init__(stopping_criterion or default_stopping_criterion())
        self.manifold = M
        self.swarm: List = [M.copy(s) for s in swarm]
        self.velocity: List = [M.copy(v) for v in velocity]
        self.positional_best: List = [M.copy(s) for s in self.swarm]
        self.p = M.copy(self.swarm[0])
        self.q = M.copy(self.swarm[0])
        self.social_vector = M.zero_vector(self.swarm[0])
        self.cognitive_vector = M.zero_vector(self.swarm[0])
        self.inertia = inertia
        self.social_weight = social_weight
        self.cognitive_weight = cognitive_weight
        self.retraction_method = retraction_method or M.default_retraction_method
        self.inverse_retraction_method = (inverse_retraction_method
                                          or M.default_inverse_retraction_method)
        self.vector_transport_method = (vector_transport_method
                                        or M.default_vector_transport_method)
        self.rng = get_rng(rng)

    def initialize_solver(self, problem) -> None:
        M = problem.manifold
        costs = [get_cost(problem, s) for s in self.swarm]
        M.copyto(self.p, self.swarm[int(np.argmin(costs))])

    def step_solver(self, problem, k: int) -> None:
        M = problem.manifold
        for i, s in enumerate(self.swarm):
            v = self.velocity[i]
            M.inverse_retract(s, self.positional_best[i],
                              method=self.inverse_retraction_method,
                              out=self.cognitive_vector)
            M.inverse_retract(s, self.p, method=self.inverse_retraction_method,
                              out=self.social_vector)
            r1 = self.rng.random()
            r2 = self.rng.random()
            M.copyto(v, self.inertia * v
                     + self.cognitive_weight * r1 * self.cognitive_vector
                     + self.social_weight * r2 * self.social_vector)
            M.copyto(self.q, s)
            M.retract(s, v, method=self.retraction_method, out=s)
            M.vector_transport_to(self.q, v, s, method=self.vector_transport_method, out=v)
            if get_cost(problem, s) < get_cost(problem, self.positional_best[i]):
                M.copyto(self.positional_best[i], s)
                if get_cost(problem, self.positional_best[i]) < get_cost(problem, self.p):
                    M.copyto(self.p, self.positional_best[i])

    def get_iterate(self):
        return self.p

    def set_iterate(self, p) -> None:
        self.manifold.copyto(self.p, p)

    def set_parameter(self, name: str, value) -> None:
        if name == "Population":
            swarm = [self.manifold.copy(s) for s in value]
            if len(swarm) != len(self.velocity):
                raise DimensionMismatchError(
                    f"Got {len(swarm)} particles for {len(self.velocity)} velocities",
                    expected=(len(self.velocity),),
                    got=(len(swarm),),
                    operation="set_parameter"
                )
            self.swarm = swarm
            return
        super().set_parameter(name, value)

    def __repr__(self):
        return (f"ParticleSwarmState(particles={len(self.swarm)}, inertia={self.inertia}, "
                f"social_weight={self.social_weight}, "
                f"cognitive_weight={self.cognitive_weight})")


def _is_scalar_swarm(M, swarm) -> bool:
    """Whether ``swarm`` holds plain numbers, i.e. scalar points of ``M``.

    Raises:
        DimensionMismatchError: If the numbers cannot be points of ``M``,
            typically a single point passed where a swarm was expected.
    """
    if swarm is None or len(swarm) == 0 or not all(
            isinstance(s, Real) and not isinstance(s, bool) for s in swarm):
        return False
    shape = tuple(getattr(M, "representation_shape", ()))
    if shape != ():
        raise DimensionMismatchError(
            f"A swarm is a sequence of points of {M}, got {len(swarm)} numbers; "
            f"points of this manifold have shape {shape}",
            expected=shape,
            got=(),
            operation="particle_swarm"
        )
    return True


@renamed_kwargs(n="swarm_size", x0="swarm")
@validate_points("M", point_args=("swarm",), collections=("swarm",))
def particle_swarm(M, f, swarm=None, *, swarm_size: Optional[int] = None,
                   velocity=None, rng=None, debug=None, record=None, count=None,
                   return_state: bool = False, return_objective: bool = False,
                   io=None, **kwargs):
    """Minimize ``f`` on ``M`` with particle swarm optimization.

    Args:
        M: Manifold to optimize on
        f: Cost ``f(M, p)`` or a cost objective
        swarm: Initial positions; ``swarm_size`` random points by default.
            Plain numbers (such as points of the circle) are treated as
            scalar points and the result is returned as a float.
        swarm_size: Number of particles when ``swarm`` is not given
            (default from the configuration, 100)
        velocity: Initial velocities; random tangent vectors by default
        rng: Generator or seed for sampling and the velocity update
        debug: Debug specification, see :func:`~manifoldopt.plans.debug.debug_factory`
        record: Record specification, see :func:`~manifoldopt.plans.record.record_factory`
        count: Names to count on the objective, e.g. ``["Cost"]``
        return_state: Return the solver state instead of the best point
        return_objective: Return ``(objective, result)``
        io: Text sink for debug output
        **kwargs: Passed to :class:`ParticleSwarmState` (inertia, weights,
            stopping_criterion, retraction and transport methods)

    Returns:
        The best point found, unless ``return_state``/``return_objective``
        ask for more.

    Example:
        >>> M = Circle()
        >>> m = 1.0
        >>> p = particle_swarm(M, lambda M, p: M.distance(p, m) ** 2, rng=42)
    """
    rng = get_rng(rng)
    if swarm is None:
        size = swarm_size if swarm_size is not None else get_config().default_swarm_size
        if size < 1:
            raise ConfigurationError(f"The swarm needs at least one particle, got {size}",
                                     parameter="swarm_size", value=size, valid_range=">= 1")
        swarm = [M.rand(rng=rng) for _ in range(size)]
    scalar = _is_scalar_swarm(M, swarm)
    swarm = [np.asarray(s, dtype=float) for s in swarm] if scalar else list(swarm)
    if velocity is None:
        velocity = [M.rand(rng=rng, vector_at=s) for s in swarm]

    cost = f
    if scalar and not hasattr(f, "get_cost"):
        # scalar points travel as 0-d arrays; the user's cost sees plain numbers
        def cost(M_, p):
            return f(M_, np.asarray(p)[()])
    objective = cost if hasattr(cost, "get_cost") else ManifoldCostObjective(
        cost, Evaluation.ALLOCATING)
    objective = decorate_objective(objective, count)
    problem = Problem(M, objective)

    state = ParticleSwarmState(M, swarm, velocity, rng=rng, **kwargs)
    decorated = decorate_state(state, debug=debug, record=record, io=io)
    solve(problem, decorated)

    result = None
    if scalar:
        result = float(np.asarray(state.get_iterate())[()])
    return get_solver_return(objective, decorated, return_state, return_objective, result)
