"""Power manifolds M^n with an array representation."""

import numpy as np

from ..core.config import get_rng
from ..exceptions import ConfigurationError
from .base import Manifold, _write, has_capability


class PowerManifold(Manifold):
    """The n-fold product of one manifold with itself.

    A point is an array of shape ``(n, *M.representation_shape)``; slice ``i``
    is the i-th component. The metric is the sum of the component metrics,
    so ``distance`` is the 2-norm of the component distances.

    Args:
        manifold: Base manifold
        n: Number of copies
    """

    name = "PowerManifold"

    def __init__(self, manifold, n: int):
        if int(n) < 1:
            raise ConfigurationError(
                f"A power manifold needs at least one component, got {n}",
                parameter="n",
                value=n,
                valid_range=">= 1"
            )
        self.manifold = manifold
        self.n = int(n)
        self.representation_shape = (self.n,) + tuple(
            getattr(manifold, "representation_shape", ()))

    @property
    def default_retraction_method(self):
        return self.manifold.default_retraction_method

    @property
    def default_inverse_retraction_method(self):
        return self.manifold.default_inverse_retraction_method

    @property
    def default_vector_transport_method(self):
        return self.manifold.default_vector_transport_method

    def supports(self, operation: str) -> bool:
        return has_capability(self.manifold, operation)

    def manifold_dimension(self) -> int:
        return self.n * self.manifold.manifold_dimension()

    def _stack(self, values):
        return np.stack([np.asarray(v, dtype=float) for v in values])

    def exp(self, p, X, t: float = 1.0, out=None):
        M = self.manifold
        return _write(out, self._stack(M.exp(p[i], X[i], t=t) for i in range(self.n)))

    def log(self, p, q, out=None):
        M = self.manifold
        return _write(out, self._stack(M.log(p[i], q[i]) for i in range(self.n)))

    def retract(self, p, X, method=None, t: float = 1.0, out=None):
        M = self.manifold
        return _write(out, self._stack(
            M.retract(p[i], X[i], method=method, t=t) for i in range(self.n)))

    def inverse_retract(self, p, q, method=None, out=None):
        M = self.manifold
        return _write(out, self._stack(
            M.inverse_retract(p[i], q[i], method=method) for i in range(self.n)))

    def vector_transport_to(self, p, X, q, method=None, out=None):
        M = self.manifold
        return _write(out, self._stack(
            M.vector_transport_to(p[i], X[i], q[i], method=method) for i in range(self.n)))

    def parallel_transport_to(self, p, X, q, out=None):
        M = self.manifold
        return _write(out, self._stack(
            M.parallel_transport_to(p[i], X[i], q[i]) for i in range(self.n)))

    def project(self, p):
        return self._stack(self.manifold.project(p[i]) for i in range(self.n))

    def project_tangent(self, p, X):
        M = self.manifold
        return self._stack(M.project_tangent(p[i], X[i]) for i in range(self.n))

    def inner(self, p, X, Y) -> float:
        M = self.manifold
        return float(sum(M.inner(p[i], X[i], Y[i]) for i in range(self.n)))

    def distance(self, p, q) -> float:
        M = self.manifold
        return float(np.sqrt(sum(M.distance(p[i], q[i]) ** 2 for i in range(self.n))))

    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        rng = get_rng(rng)
        M = self.manifold
        if vector_at is None:
            return self._stack(M.rand(rng=rng, sigma=sigma) for _ in range(self.n))
        return self._stack(
            M.rand(rng=rng, vector_at=vector_at[i], sigma=sigma) for i in range(self.n))

    def check_point(self, p, atol: float):
        problem = super().check_point(p, atol)
        if problem is not None:
            return problem
        for i in range(self.n):
            component = self.manifold.check_point(p[i], atol)
            if component is not None:
                return f"Component {i}: {component}"
        return None

    def check_vector(self, p, X, atol: float):
        problem = super().check_vector(p, X, atol)
        if problem is not None:
            return problem
        for i in range(self.n):
            component = self.manifold.check_vector(p[i], X[i], atol)
            if component is not None:
                return f"Component {i}: {component}"
        return None

    def __repr__(self):
        return f"PowerManifold({self.manifold!r}, {self.n})"
