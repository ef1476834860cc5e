"""Product manifolds M1 x M2 x ... with a flat representation.

Points and tangent vectors of a product manifold are 1-D arrays holding the
flattened components back to back, so a product point can be fed to any
solver or vector-space operation like a single array. :meth:`ProductManifold.split`
returns reshaped views of the components and :meth:`ProductManifold.join`
builds a flat array from component values.
"""

from typing import List

import numpy as np

from ..core.config import get_rng
from ..exceptions import ConfigurationError, DimensionMismatchError
from .base import Manifold, _write, has_capability


class ProductManifold(Manifold):
    """Cartesian product of manifolds.

    Args:
        *manifolds: Component manifolds, each with a ``representation_shape``

    Example:
        >>> M = ProductManifold(Sphere(3), Euclidean(2))
        >>> p = M.rand()
        >>> x_sphere, x_euclid = M.split(p)
    """

    name = "ProductManifold"

    def __init__(self, *manifolds):
        if not manifolds:
            raise ConfigurationError(
                "A product manifold needs at least one component",
                parameter="manifolds",
                value=manifolds
            )
        self.manifolds = tuple(manifolds)
        self.shapes = [tuple(getattr(M, "representation_shape", ())) for M in self.manifolds]
        self.sizes = [int(np.prod(shape)) for shape in self.shapes]
        self.offsets = np.concatenate([[0], np.cumsum(self.sizes)]).astype(int)
        self.representation_shape = (int(self.offsets[-1]),)

    def supports(self, operation: str) -> bool:
        return all(has_capability(M, operation) for M in self.manifolds)

    def manifold_dimension(self) -> int:
        return sum(M.manifold_dimension() for M in self.manifolds)

    def split(self, x) -> List[np.ndarray]:
        """Component views of a flat point or vector."""
        x = np.asarray(x)
        if x.shape != self.representation_shape:
            raise DimensionMismatchError(
                f"Expected a flat array of shape {self.representation_shape}, got {x.shape}",
                expected=self.representation_shape,
                got=x.shape,
                operation="split"
            )
        return [
            x[start:stop].reshape(shape)
            for start, stop, shape in zip(self.offsets[:-1], self.offsets[1:], self.shapes)
        ]

    def join(self, components) -> np.ndarray:
        """Flat array from component values."""
        components = list(components)
        if len(components) != len(self.manifolds):
            raise DimensionMismatchError(
                f"Expected {len(self.manifolds)} components, got {len(components)}",
                expected=(len(self.manifolds),),
                got=(len(components),),
                operation="join"
            )
        return np.concatenate([np.ravel(np.asarray(c, dtype=float)) for c in components])

    def _map(self, operation, *arrays, **kwargs):
        parts = [self.split(a) for a in arrays]
        return self.join(
            getattr(M, operation)(*(part[i] for part in parts), **kwargs)
            for i, M in enumerate(self.manifolds)
        )

    def exp(self, p, X, t: float = 1.0, out=None):
        return _write(out, self._map("exp", p, X, t=t))

    def log(self, p, q, out=None):
        return _write(out, self._map("log", p, q))

    def retract(self, p, X, method=None, t: float = 1.0, out=None):
        return _write(out, self._map("retract", p, X, method=method, t=t))

    def inverse_retract(self, p, q, method=None, out=None):
        return _write(out, self._map("inverse_retract", p, q, method=method))

    def vector_transport_to(self, p, X, q, method=None, out=None):
        return _write(out, self._map("vector_transport_to", p, X, q, method=method))

    def parallel_transport_to(self, p, X, q, out=None):
        return _write(out, self._map("parallel_transport_to", p, X, q))

    def project(self, p):
        return self._map("project", p)

    def project_tangent(self, p, X):
        return self._map("project_tangent", p, X)

    def inner(self, p, X, Y) -> float:
        ps, Xs, Ys = self.split(p), self.split(X), self.split(Y)
        return float(sum(M.inner(ps[i], Xs[i], Ys[i]) for i, M in enumerate(self.manifolds)))

    def distance(self, p, q) -> float:
        ps, qs = self.split(p), self.split(q)
        return float(np.sqrt(sum(
            M.distance(ps[i], qs[i]) ** 2 for i, M in enumerate(self.manifolds))))

    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        rng = get_rng(rng)
        if vector_at is None:
            return self.join(M.rand(rng=rng, sigma=sigma) for M in self.manifolds)
        base = self.split(vector_at)
        return self.join(
            M.rand(rng=rng, vector_at=base[i], sigma=sigma)
            for i, M in enumerate(self.manifolds))

    def check_point(self, p, atol: float):
        problem = super().check_point(p, atol)
        if problem is not None:
            return problem
        for i, (M, component) in enumerate(zip(self.manifolds, self.split(p))):
            issue = M.check_point(component, atol)
            if issue is not None:
                return f"Component {i} ({M!r}): {issue}"
        return None

    def check_vector(self, p, X, atol: float):
        problem = super().check_vector(p, X, atol)
        if problem is not None:
            return problem
        for i, (M, base, component) in enumerate(zip(self.manifolds, self.split(p),
                                                     self.split(X))):
            issue = M.check_vector(base, component, atol)
            if issue is not None:
                return f"Component {i} ({M!r}): {issue}"
        return None

    def __repr__(self):
        return f"ProductManifold({', '.join(repr(M) for M in self.manifolds)})"
