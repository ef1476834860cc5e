"""Numerical diagnostics for manifolds and gradients."""

import numpy as np
from typing import Callable, Optional, Dict, Any, List, Tuple
from scipy.optimize import approx_fprime
from scipy.stats import linregress

from .core.config import get_rng
from .core.logging import get_logger
from .manifolds.base import has_capability

logger = get_logger(__name__)


def check_manifold(manifold,
                   n_points: int = 10,
                   tolerance: float = 1e-8,
                   rng=None,
                   verbose: bool = False) -> Dict[str, Any]:
    """Check the geometric identities a manifold's operations must satisfy.

    Each test runs on ``n_points`` random points with small random tangent
    vectors and is skipped when the manifold lacks the operations it needs.

    Args:
        manifold: Manifold to check
        n_points: Number of random base points
        tolerance: Numerical tolerance for every identity
        rng: Generator or seed
        verbose: Print a summary

    Returns:
        Dictionary with keys ``passed``, ``tests`` (one entry per identity,
        each with ``passed``, ``skipped`` and ``failures``) and ``errors``
    """
    rng = get_rng(rng)
    results = {
        'passed': True,
        'tests': {},
        'errors': []
    }

    samples = []
    for _ in range(n_points):
        try:
            p = manifold.rand(rng=rng)
            X = manifold.rand(rng=rng, vector_at=p, sigma=0.1)
            Y = manifold.rand(rng=rng, vector_at=p, sigma=0.1)
            samples.append((p, X, Y))
        except Exception as e:
            results['errors'].append(f"Failed to generate random samples: {e}")
            results['passed'] = False

    if not samples:
        results['errors'].append("No test points available")
        results['passed'] = False
        return results

    checks = [
        ('exp_at_zero', ("exp", "zero_vector"), _test_exp_at_zero),
        ('exp_log_roundtrip', ("exp", "log"), _test_exp_log_roundtrip),
        ('distance', ("distance", "exp"), _test_distance),
        ('retraction_roundtrip', ("retract", "inverse_retract"), _test_retraction_roundtrip),
        ('metric', ("inner",), _test_metric),
        ('parallel_transport', ("parallel_transport_to", "exp", "norm"),
         _test_parallel_transport),
    ]
    for name, needs, test in checks:
        if not all(has_capability(manifold, op) for op in needs):
            results['tests'][name] = {'passed': True, 'skipped': True, 'failures': []}
            logger.debug(f"Skipping {name} on {manifold!r}")
            continue
        test_result = test(manifold, samples, tolerance)
        test_result['skipped'] = False
        results['tests'][name] = test_result
        if not test_result['passed']:
            results['passed'] = False

    if verbose:
        print(f"\nManifold check for {manifold!r}: {'PASSED' if results['passed'] else 'FAILED'}")
        for name, test_result in results['tests'].items():
            status = "skipped" if test_result['skipped'] else (
                "ok" if test_result['passed'] else f"{len(test_result['failures'])} failures")
            print(f"  {name}: {status}")
        for error in results['errors']:
            print(f"  - {error}")

    return results


def _point_error(manifold, p, q) -> float:
    if has_capability(manifold, "distance"):
        return float(manifold.distance(p, q))
    return float(np.linalg.norm(np.asarray(p) - np.asarray(q)))


def _run(samples, check) -> Dict[str, Any]:
    test_result = {'passed': True, 'failures': []}
    for i, sample in enumerate(samples):
        try:
            failure = check(*sample)
        except Exception as e:
            failure = f"raised {type(e).__name__}: {e}"
        if failure:
            test_result['passed'] = False
            test_result['failures'].append(f"Point {i}: {failure}")
    return test_result


def _test_exp_at_zero(manifold, samples, tolerance):
    """exp(p, 0) = p."""
    def check(p, X, Y):
        error = _point_error(manifold, manifold.exp(p, manifold.zero_vector(p)), p)
        if error > tolerance:
            return f"exp(p, 0) differs from p by {error:.2e}"
    return _run(samples, check)


def _test_exp_log_roundtrip(manifold, samples, tolerance):
    """exp(p, log(p, q)) = q."""
    def check(p, X, Y):
        q = manifold.exp(p, X)
        error = _point_error(manifold, manifold.exp(p, manifold.log(p, q)), q)
        if error > tolerance:
            return f"exp(p, log(p, q)) differs from q by {error:.2e}"
    return _run(samples, check)


def _test_distance(manifold, samples, tolerance):
    """d(p, p) = 0 and d(p, q) = d(q, p)."""
    def check(p, X, Y):
        q = manifold.exp(p, X)
        self_distance = manifold.distance(p, p)
        if abs(self_distance) > tolerance:
            return f"d(p, p) = {self_distance:.2e}"
        asymmetry = abs(manifold.distance(p, q) - manifold.distance(q, p))
        if asymmetry > tolerance:
            return f"distance not symmetric, error = {asymmetry:.2e}"
    return _run(samples, check)


def _test_retraction_roundtrip(manifold, samples, tolerance):
    """inverse_retract(p, retract(p, X)) = X."""
    def check(p, X, Y):
        q = manifold.retract(p, X)
        Z = manifold.inverse_retract(p, q)
        error = float(np.linalg.norm(np.asarray(Z) - np.asarray(X)))
        if error > tolerance:
            return f"inverse retraction does not recover X, error = {error:.2e}"
    return _run(samples, check)


def _test_metric(manifold, samples, tolerance):
    """Symmetric and positive semi-definite inner product."""
    def check(p, X, Y):
        asymmetry = abs(manifold.inner(p, X, Y) - manifold.inner(p, Y, X))
        if asymmetry > tolerance:
            return f"metric not symmetric, error = {asymmetry:.2e}"
        inner_self = manifold.inner(p, X, X)
        if inner_self < -tolerance:
            return f"metric not positive definite, <X,X> = {inner_self:.2e}"
    return _run(samples, check)


def _test_parallel_transport(manifold, samples, tolerance):
    """Parallel transport is an isometry."""
    def check(p, X, Y):
        q = manifold.exp(p, Y)
        transported = manifold.parallel_transport_to(p, X, q)
        error = abs(manifold.norm(q, transported) - manifold.norm(p, X))
        if error > tolerance:
            return f"parallel transport changed the norm by {error:.2e}"
    return _run(samples, check)


def approximate_gradient(manifold, cost: Callable, p, epsilon: float = 1e-8):
    """Riemannian gradient of ``cost`` at ``p`` by forward differences.

    The Euclidean gradient of ``cost`` in the embedding is estimated with
    :func:`scipy.optimize.approx_fprime` and projected onto the tangent space
    at ``p``. This is only the Riemannian gradient for manifolds carrying the
    metric induced by the embedding.

    Args:
        manifold: Manifold containing ``p``
        cost: ``cost(M, p) -> float``
        p: Base point
        epsilon: Finite difference step
    """
    point = np.asarray(p, dtype=float)
    shape = point.shape

    def flat_cost(x):
        return float(cost(manifold, x.reshape(shape)))

    euclidean_grad = approx_fprime(point.ravel(), flat_cost, epsilon).reshape(shape)
    if has_capability(manifold, "project_tangent"):
        euclidean_grad = manifold.project_tangent(point, euclidean_grad)
    if shape == ():
        return float(euclidean_grad)
    return euclidean_grad


def check_gradient(manifold,
                   cost: Callable,
                   gradient: Callable,
                   p=None,
                   X=None,
                   log_range: Tuple[float, float] = (-8.0, 0.0),
                   n_points: int = 101,
                   slope_tolerance: float = 0.1,
                   error_threshold: float = 1e-14,
                   window: Optional[int] = None,
                   rng=None,
                   verbose: bool = False) -> Tuple[bool, float]:
    """Check a Riemannian gradient against the first order Taylor expansion.

    For step sizes ``t`` spaced logarithmically over ``log_range`` the error

        e(t) = |f(R_p(t X)) - f(p) - t <grad f(p), X>|

    behaves like ``t^2`` for a correct gradient. A line is fitted to
    ``log e`` against ``log t`` over every window of consecutive steps with
    :func:`scipy.stats.linregress` and the slope closest to 2 is kept.

    Args:
        manifold: Manifold to check on
        cost: ``cost(M, p) -> float``
        gradient: ``gradient(M, p) -> tangent vector``
        p: Base point, random by default
        X: Direction, a random unit tangent vector by default
        log_range: Exponents of the smallest and largest step size
        n_points: Number of step sizes
        slope_tolerance: Accepted deviation of the slope from 2
        error_threshold: Errors below this count as exact
        window: Number of consecutive steps per fit, defaults to a third of
            ``n_points``
        rng: Generator or seed
        verbose: Print the result

    Returns:
        ``(is_accurate, slope)``. A gradient whose Taylor error stays below
        ``error_threshold`` everywhere is exact and reported with slope ``nan``.
    """
    rng = get_rng(rng)
    if p is None:
        p = manifold.rand(rng=rng)
    if X is None:
        X = manifold.rand(rng=rng, vector_at=p)
    X = X / manifold.norm(p, X)

    f0 = cost(manifold, p)
    slope0 = manifold.inner(p, gradient(manifold, p), X)
    steps = np.logspace(log_range[0], log_range[1], n_points)
    errors = np.array([
        abs(cost(manifold, manifold.retract(p, t * X)) - f0 - t * slope0) for t in steps
    ])

    if np.max(errors) < error_threshold:
        if verbose:
            print("Gradient check: Taylor error below threshold, gradient is exact")
        return True, float('nan')

    window = window or max(n_points // 3, 2)
    usable = errors > error_threshold
    log_t, log_e = np.log10(steps), np.log10(np.where(usable, errors, 1.0))
    best = float('nan')
    for start in range(0, n_points - window + 1):
        span = slice(start, start + window)
        if not np.all(usable[span]):
            continue
        fit = linregress(log_t[span], log_e[span])
        if np.isnan(best) or abs(fit.slope - 2.0) < abs(best - 2.0):
            best = float(fit.slope)

    is_accurate = not np.isnan(best) and abs(best - 2.0) <= slope_tolerance
    logger.debug(f"Gradient check on {manifold!r}: slope {best:.4f}")
    if verbose:
        print(f"Gradient check: {'PASSED' if is_accurate else 'FAILED'} (slope {best:.4f})")
    return is_accurate, best


__all__: List[str] = ['check_manifold', 'check_gradient', 'approximate_gradient']
