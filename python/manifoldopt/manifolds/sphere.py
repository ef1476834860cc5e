"""The unit sphere S^{n-1} embedded in R^n."""

import numpy as np

from ..core.config import get_rng
from ..exceptions import ConfigurationError
from .base import Manifold, RetractionMethod, _write

# below this norm a tangent vector is treated as zero
_EPS = 1e-14


class Sphere(Manifold):
    """Unit sphere ``{x in R^n : |x| = 1}`` with the round metric.

    Args:
        n: Ambient dimension (at least 2)

    ``log`` at antipodal points has no unique answer; it returns the zero
    vector there.
    """

    name = "Sphere"
    default_retraction_method = RetractionMethod.EXPONENTIAL

    def __init__(self, n: int):
        if int(n) < 2:
            raise ConfigurationError(
                f"Sphere needs an ambient dimension of at least 2, got {n}",
                parameter="n",
                value=n,
                valid_range=">= 2"
            )
        self.ambient_dim = int(n)
        self.representation_shape = (self.ambient_dim,)

    def manifold_dimension(self) -> int:
        return self.ambient_dim - 1

    def exp(self, p, X, t: float = 1.0, out=None):
        p = np.asarray(p, dtype=float)
        X = t * np.asarray(X, dtype=float)
        nX = np.linalg.norm(X)
        if nX < _EPS:
            value = p.copy()
        else:
            value = np.cos(nX) * p + (np.sin(nX) / nX) * X
            value = value / np.linalg.norm(value)
        return _write(out, value)

    def log(self, p, q, out=None):
        p = np.asarray(p, dtype=float)
        q = np.asarray(q, dtype=float)
        v = q - np.dot(p, q) * p
        nv = np.linalg.norm(v)
        if nv < _EPS:
            value = np.zeros_like(p)
        else:
            value = (self.distance(p, q) / nv) * v
        return _write(out, value)

    def inner(self, p, X, Y) -> float:
        return float(np.dot(X, Y))

    def distance(self, p, q) -> float:
        # arcsin of the chord is accurate near both 0 and pi
        p = np.asarray(p, dtype=float)
        q = np.asarray(q, dtype=float)
        if np.dot(p, q) >= 0:
            return float(2 * np.arcsin(min(1.0, np.linalg.norm(p - q) / 2)))
        return float(np.pi - 2 * np.arcsin(min(1.0, np.linalg.norm(p + q) / 2)))

    def parallel_transport_to(self, p, X, q, out=None):
        X = np.asarray(X, dtype=float)
        v = self.log(p, q)
        d = np.linalg.norm(v)
        if d < _EPS:
            value = X.copy()
        else:
            u = v / d
            a = np.dot(u, X)
            value = X + (np.cos(d) - 1) * a * u - np.sin(d) * a * np.asarray(p)
        return _write(out, value)

    def project(self, p):
        p = np.asarray(p, dtype=float)
        return p / np.linalg.norm(p)

    def project_tangent(self, p, X):
        p = np.asarray(p, dtype=float)
        X = np.asarray(X, dtype=float)
        return X - np.dot(p, X) * p

    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        rng = get_rng(rng)
        x = rng.standard_normal(self.ambient_dim)
        if vector_at is None:
            return x / np.linalg.norm(x)
        return sigma * self.project_tangent(vector_at, x)

    def check_point(self, p, atol: float):
        problem = super().check_point(p, atol)
        if problem is not None:
            return problem
        norm = np.linalg.norm(p)
        if abs(norm - 1.0) > atol:
            return f"The point does not lie on the sphere since its norm is {norm}"
        return None

    def check_vector(self, p, X, atol: float):
        problem = super().check_vector(p, X, atol)
        if problem is not None:
            return problem
        inner = float(np.dot(p, X))
        if abs(inner) > atol:
            return f"The vector is not tangent since its inner product with the base is {inner}"
        return None

    def __repr__(self):
        return f"Sphere(dimension={self.ambient_dim})"
