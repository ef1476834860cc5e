"""The circle S^1 represented by angles in [-pi, pi)."""

import numpy as np

from ..core.config import get_rng
from .base import Manifold, _write


def sym_rem(x, T: float = np.pi):
    """Symmetric remainder of ``x`` with respect to ``[-T, T)``.

    Example:
        >>> round(float(sym_rem(4.0)), 4)
        -2.2832
    """
    return np.mod(np.asarray(x, dtype=float) + T, 2 * T) - T


class Circle(Manifold):
    """The unit circle, with points stored as angles.

    Points and tangent vectors are real scalars (Python floats, numpy
    scalars or 0-d arrays). Use :meth:`copy` to obtain a 0-d array that
    in-place operations can write into.
    """

    name = "Circle"
    representation_shape = ()

    def manifold_dimension(self) -> int:
        return 1

    def exp(self, p, X, t: float = 1.0, out=None):
        return _write(out, sym_rem(np.asarray(p) + t * np.asarray(X)))

    def log(self, p, q, out=None):
        return _write(out, sym_rem(np.asarray(q) - np.asarray(p)))

    def inner(self, p, X, Y) -> float:
        return float(np.multiply(X, Y))

    def norm(self, p, X) -> float:
        return abs(float(X))

    def distance(self, p, q) -> float:
        return abs(float(sym_rem(np.asarray(p) - np.asarray(q))))

    def parallel_transport_to(self, p, X, q, out=None):
        return _write(out, np.array(X, dtype=float))

    def project(self, p):
        return sym_rem(p)

    def project_tangent(self, p, X):
        return np.array(X, dtype=float)

    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        rng = get_rng(rng)
        if vector_at is None:
            return np.float64(rng.uniform(-np.pi, np.pi))
        return np.float64(sigma * rng.standard_normal())

    def check_point(self, p, atol: float):
        problem = super().check_point(p, atol)
        if problem is not None:
            return problem
        value = float(p)
        if not (-np.pi - atol <= value < np.pi + atol):
            return f"The point {value} does not lie in [-pi, pi)"
        return None

    def __repr__(self):
        return "Circle()"
