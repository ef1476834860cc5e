"""
pytest configuration and shared fixtures for manifoldopt tests.

This module provides common fixtures, utilities, and configuration
for all test modules in the manifoldopt test suite.
"""

import pytest
import numpy as np
from typing import Callable, List

import manifoldopt
from manifoldopt.core.config import reset_config
from manifoldopt.plans.state import SolverState
from manifoldopt.plans.stopping import StopAfterIteration, StoppingCriterion


# ============================================================================
# Test Configuration
# ============================================================================

# Tolerances for different types of tests
TOLERANCES = {
    'strict': 1e-12,
    'default': 1e-10,
    'relaxed': 1e-8,
    'numerical': 1e-6,
    'optimization': 1e-2,
}

# Dimension configurations for parametrized tests
DIMENSION_CONFIGS = {
    'tiny': [2, 3, 5],
    'small': [10, 20, 50],
}


# ============================================================================
# Fixtures for Manifolds
# ============================================================================

@pytest.fixture
def circle():
    return manifoldopt.Circle()


@pytest.fixture
def sphere_factory():
    """Factory fixture for creating Sphere manifolds."""
    def _create_sphere(dim: int):
        return manifoldopt.Sphere(dim)
    return _create_sphere


@pytest.fixture
def euclidean_factory():
    """Factory fixture for creating Euclidean spaces."""
    def _create_euclidean(*shape: int):
        return manifoldopt.Euclidean(*shape)
    return _create_euclidean


@pytest.fixture
def rng():
    """Seeded generator so every test sees the same draws."""
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts from the default configuration."""
    reset_config()
    yield
    reset_config()


# ============================================================================
# Test Doubles
# ============================================================================

class CountingState(SolverState):
    """Minimal solver calling ``get_cost`` a fixed number of times per step."""

    required_capabilities = ("copy",)

    def __init__(self, M, p, calls_per_step: int = 3, stopping_criterion=None):
        super().__init__(stopping_criterion or StopAfterIteration(10))
        self.p = M.copy(p)
        self.calls_per_step = calls_per_step
        self.steps = []

    def initialize_solver(self, problem):
        pass

    def step_solver(self, problem, k):
        for _ in range(self.calls_per_step):
            problem.objective.get_cost(problem.manifold, self.p)
        self.steps.append(k)

    def get_iterate(self):
        return self.p

    def set_iterate(self, p):
        self.p = p


@pytest.fixture
def counting_state_factory():
    """Factory for :class:`CountingState`."""
    return CountingState


class SpyCriterion(StoppingCriterion):
    """Stopping criterion that records every call and answers from a script."""

    def __init__(self, answers: Callable[[int], bool], name: str = "spy"):
        super().__init__()
        self.answers = answers
        self.name = name
        self.calls: List[int] = []

    def __call__(self, problem, state, k):
        self.calls.append(k)
        if k == 0:
            self.reset()
        if self.answers(k):
            return self._fire(k, f"{self.name} fired at {k}.\n")
        return False


@pytest.fixture
def cost_functions():
    """Common cost functions for optimization tests."""
    class CostFunctions:
        @staticmethod
        def squared_distance(target):
            """f(p) = d(p, target)^2 with its Riemannian gradient -2 log_p(target)."""
            def cost_fn(M, p):
                return M.distance(p, target) ** 2

            def gradient_fn(M, p):
                return -2 * M.log(p, target)

            return cost_fn, gradient_fn

        @staticmethod
        def rayleigh_quotient(A: np.ndarray):
            """f(x) = x^T A x on the sphere, gradient projected onto T_x S."""
            def cost_fn(M, x):
                return float(x @ A @ x)

            def gradient_fn(M, x):
                return M.project_tangent(x, 2 * A @ x)

            return cost_fn, gradient_fn

    return CostFunctions()


@pytest.fixture
def assert_helpers():
    """Helper functions for common assertions."""
    class AssertHelpers:
        @staticmethod
        def assert_is_on_sphere(x: np.ndarray, tol: float = TOLERANCES['default']):
            """Assert that x is on the unit sphere."""
            norm = np.linalg.norm(x)
            assert abs(norm - 1.0) < tol, f"Point not on unit sphere: ||x|| = {norm}"

        @staticmethod
        def assert_in_tangent_space_sphere(x: np.ndarray, v: np.ndarray,
                                           tol: float = TOLERANCES['default']):
            """Assert that v is in tangent space of sphere at x."""
            inner = np.dot(x, v)
            assert abs(inner) < tol, f"Vector not in tangent space: <x,v> = {inner}"

        @staticmethod
        def assert_points_close(M, p, q, tol: float = TOLERANCES['default']):
            """Assert that p and q are within geodesic distance tol."""
            d = M.distance(p, q)
            assert d < tol, f"Points differ: d(p, q) = {d}"

    return AssertHelpers()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "numerical: marks numerical accuracy tests")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "manifold: marks manifold-specific tests")
    config.addinivalue_line("markers", "solver: marks solver-specific tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        if "numerical" in item.nodeid:
            item.add_marker(pytest.mark.numerical)
