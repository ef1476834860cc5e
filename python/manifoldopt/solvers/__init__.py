"""Solvers and the generic solve loop."""

from .solver import (
    solve,
    decorate_state,
    decorate_objective,
    get_solver_result,
    get_solver_return,
)
from .particle_swarm import ParticleSwarmState, particle_swarm, swarm_distance
from .gradient_descent import GradientDescentState, gradient_descent

__all__ = [
    'solve',
    'decorate_state',
    'decorate_objective',
    'get_solver_result',
    'get_solver_return',
    'ParticleSwarmState',
    'particle_swarm',
    'swarm_distance',
    'GradientDescentState',
    'gradient_descent',
]
