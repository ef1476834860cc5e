"""Flat Euclidean space of arbitrary array shape."""

import numpy as np

from ..core.config import get_rng
from ..exceptions import ConfigurationError
from .base import Manifold, _write


class Euclidean(Manifold):
    """Euclidean space R^{n1 x n2 x ...} with the Frobenius metric.

    Args:
        *shape: Array shape of a point, e.g. ``Euclidean(3)`` or ``Euclidean(2, 4)``
    """

    name = "Euclidean"

    def __init__(self, *shape: int):
        if not shape or any(int(n) < 1 for n in shape):
            raise ConfigurationError(
                f"Euclidean space needs positive dimensions, got {shape}",
                parameter="shape",
                value=shape,
                valid_range=">= 1"
            )
        self.representation_shape = tuple(int(n) for n in shape)

    def manifold_dimension(self) -> int:
        return int(np.prod(self.representation_shape))

    def exp(self, p, X, t: float = 1.0, out=None):
        return _write(out, np.asarray(p) + t * np.asarray(X))

    def log(self, p, q, out=None):
        return _write(out, np.asarray(q) - np.asarray(p))

    def inner(self, p, X, Y) -> float:
        return float(np.sum(np.multiply(X, Y)))

    def distance(self, p, q) -> float:
        return float(np.linalg.norm(np.asarray(q) - np.asarray(p)))

    def parallel_transport_to(self, p, X, q, out=None):
        return _write(out, np.array(X, dtype=float))

    def project(self, p):
        return np.array(p, dtype=float)

    def project_tangent(self, p, X):
        return np.array(X, dtype=float)

    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        rng = get_rng(rng)
        return sigma * rng.standard_normal(self.representation_shape)

    def __repr__(self):
        return f"Euclidean({', '.join(str(n) for n in self.representation_shape)})"
