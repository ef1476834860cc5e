"""Manifold capability interface.

A manifold implements a subset of the operations below. Three primitives are
mandatory (``inner``, ``rand``, ``manifold_dimension``); the geometric
primitives ``exp``, ``log``, ``parallel_transport_to``, ``project`` and
``project_tangent`` are optional and simply absent when a geometry does not
have them. Retractions, inverse retractions, vector transports, ``norm`` and
``distance`` are derived here from whichever primitives exist.

Solvers list the operations they need and check them once with
:func:`require_capabilities` when their state is built.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from ..core.config import get_config
from ..exceptions import CapabilityError, ManifoldValidationError
from ..types import ManifoldLike


class RetractionMethod(Enum):
    """Available retractions."""
    EXPONENTIAL = "exponential"
    PROJECTION = "projection"


class InverseRetractionMethod(Enum):
    """Available inverse retractions."""
    LOGARITHMIC = "logarithmic"
    PROJECTION = "projection"


class VectorTransportMethod(Enum):
    """Available vector transports."""
    PARALLEL = "parallel"
    PROJECTION = "projection"


# primitive each method is built from
_RETRACTION_PRIMITIVES = {
    RetractionMethod.EXPONENTIAL: "exp",
    RetractionMethod.PROJECTION: "project",
}
_INVERSE_RETRACTION_PRIMITIVES = {
    InverseRetractionMethod.LOGARITHMIC: "log",
    InverseRetractionMethod.PROJECTION: "project_tangent",
}
_VECTOR_TRANSPORT_PRIMITIVES = {
    VectorTransportMethod.PARALLEL: "parallel_transport_to",
    VectorTransportMethod.PROJECTION: "project_tangent",
}

_METHOD_PRIMITIVES = {
    **_RETRACTION_PRIMITIVES,
    **_INVERSE_RETRACTION_PRIMITIVES,
    **_VECTOR_TRANSPORT_PRIMITIVES,
}

_DERIVED = {
    "retract": lambda M: (_RETRACTION_PRIMITIVES[M.default_retraction_method],),
    "inverse_retract": lambda M: (
        _INVERSE_RETRACTION_PRIMITIVES[M.default_inverse_retraction_method],),
    "vector_transport_to": lambda M: (
        _VECTOR_TRANSPORT_PRIMITIVES[M.default_vector_transport_method],),
    "distance": lambda M: ("log", "inner"),
    "norm": lambda M: ("inner",),
}


def _write(out, value):
    """Return ``value``, or copy it into ``out`` when a buffer is given."""
    if out is None:
        return value
    np.copyto(out, value)
    return out


def _describe(value) -> str:
    text = np.array2string(np.asarray(value), precision=6, threshold=10)
    return text if len(text) < 200 else text[:197] + "..."


class Manifold(ABC):
    """Base class of all manifolds shipped with manifoldopt.

    Subclasses implement ``inner``, ``rand`` and ``manifold_dimension`` and
    whichever geometric primitives they have. Everything else has a derived
    default.

    Attributes:
        name: Human readable name used in error messages
        representation_shape: Shape of the numpy array representing a point
    """

    name = "Manifold"
    representation_shape = ()
    default_retraction_method = RetractionMethod.EXPONENTIAL
    default_inverse_retraction_method = InverseRetractionMethod.LOGARITHMIC
    default_vector_transport_method = VectorTransportMethod.PARALLEL

    @abstractmethod
    def manifold_dimension(self) -> int:
        """Intrinsic dimension of the manifold."""

    @abstractmethod
    def inner(self, p, X, Y) -> float:
        """Riemannian inner product of ``X`` and ``Y`` at ``p``."""

    @abstractmethod
    def rand(self, rng=None, vector_at=None, sigma: float = 1.0):
        """Random point, or random tangent vector at ``vector_at``."""

    # ------------------------------------------------------------------
    # capability queries
    # ------------------------------------------------------------------

    def supports(self, operation: str) -> bool:
        """Whether ``operation`` can be evaluated on this manifold."""
        if operation in _DERIVED and not self._overrides(operation):
            return all(self.supports(req) for req in _DERIVED[operation](self))
        return callable(getattr(self, operation, None))

    def _overrides(self, operation: str) -> bool:
        return getattr(type(self), operation) is not getattr(Manifold, operation)

    def _primitive(self, operation: str, method=None):
        func = getattr(self, operation, None)
        if func is None:
            needed = f" (needed for {method.value})" if method is not None else ""
            raise CapabilityError(
                f"{self!r} does not implement {operation}{needed}",
                operation=operation,
                owner=repr(self)
            )
        return func

    # ------------------------------------------------------------------
    # derived operations
    # ------------------------------------------------------------------

    def retract(self, p, X, method: Optional[RetractionMethod] = None,
                t: float = 1.0, out=None):
        """Retract ``t * X`` from ``p`` back onto the manifold."""
        method = method or self.default_retraction_method
        if method is RetractionMethod.EXPONENTIAL:
            return self._primitive("exp", method)(p, X, t=t, out=out)
        if method is RetractionMethod.PROJECTION:
            project = self._primitive("project", method)
            return _write(out, project(np.asarray(p) + t * np.asarray(X)))
        raise CapabilityError(f"Unknown retraction {method!r}", operation=method,
                              owner=repr(self))

    def inverse_retract(self, p, q, method: Optional[InverseRetractionMethod] = None,
                        out=None):
        """Tangent vector at ``p`` pointing towards ``q``."""
        method = method or self.default_inverse_retraction_method
        if method is InverseRetractionMethod.LOGARITHMIC:
            return self._primitive("log", method)(p, q, out=out)
        if method is InverseRetractionMethod.PROJECTION:
            project_tangent = self._primitive("project_tangent", method)
            return _write(out, project_tangent(p, np.asarray(q) - np.asarray(p)))
        raise CapabilityError(f"Unknown inverse retraction {method!r}",
                              operation=method, owner=repr(self))

    def vector_transport_to(self, p, X, q, method: Optional[VectorTransportMethod] = None,
                            out=None):
        """Move ``X`` from the tangent space at ``p`` to the one at ``q``."""
        method = method or self.default_vector_transport_method
        if method is VectorTransportMethod.PARALLEL:
            return self._primitive("parallel_transport_to", method)(p, X, q, out=out)
        if method is VectorTransportMethod.PROJECTION:
            project_tangent = self._primitive("project_tangent", method)
            return _write(out, project_tangent(q, X))
        raise CapabilityError(f"Unknown vector transport {method!r}",
                              operation=method, owner=repr(self))

    def norm(self, p, X) -> float:
        return float(np.sqrt(max(self.inner(p, X, X), 0.0)))

    def distance(self, p, q) -> float:
        """Geodesic distance, computed as the norm of ``log(p, q)``."""
        log = self._primitive("log")
        return self.norm(p, log(p, q))

    def zero_vector(self, p):
        return np.zeros_like(np.asarray(p, dtype=float))

    def copy(self, p):
        return np.array(p, dtype=float, copy=True)

    def copyto(self, dst, src):
        np.copyto(dst, src)
        return dst

    # ------------------------------------------------------------------
    # opt-in validation
    # ------------------------------------------------------------------

    def check_point(self, p, atol: float) -> Optional[str]:
        """Return a description of why ``p`` is not a point, or ``None``."""
        shape = np.shape(p)
        if shape != tuple(self.representation_shape):
            return (f"The point has shape {shape} but {self!r} expects "
                    f"{tuple(self.representation_shape)}")
        if not np.all(np.isfinite(p)):
            return "The point has non-finite entries"
        return None

    def check_vector(self, p, X, atol: float) -> Optional[str]:
        """Return a description of why ``X`` is not tangent at ``p``, or ``None``."""
        shape = np.shape(X)
        if shape != tuple(self.representation_shape):
            return (f"The vector has shape {shape} but {self!r} expects "
                    f"{tuple(self.representation_shape)}")
        if not np.all(np.isfinite(X)):
            return "The vector has non-finite entries"
        return None

    def is_point(self, p, raise_error: bool = False, atol: Optional[float] = None) -> bool:
        """Check whether ``p`` is a point on this manifold.

        Args:
            p: Candidate point
            raise_error: Raise :class:`ManifoldValidationError` instead of
                returning ``False``
            atol: Tolerance, defaults to ``validation_tolerance`` from the config
        """
        atol = get_config().validation_tolerance if atol is None else atol
        problem = self.check_point(p, atol)
        if problem is None:
            return True
        if raise_error:
            raise ManifoldValidationError(
                f"{problem} ({self!r})",
                point_info=_describe(p),
                manifold_name=self.name,
                validation_type='point'
            )
        return False

    def is_vector(self, p, X, raise_error: bool = False,
                  atol: Optional[float] = None) -> bool:
        """Check whether ``X`` is a tangent vector at ``p``."""
        atol = get_config().validation_tolerance if atol is None else atol
        problem = self.check_vector(p, X, atol)
        if problem is None:
            return True
        if raise_error:
            raise ManifoldValidationError(
                f"{problem} ({self!r})",
                point_info=_describe(X),
                manifold_name=self.name,
                validation_type='vector'
            )
        return False

    # ------------------------------------------------------------------

    def __pow__(self, n: int):
        from .power import PowerManifold
        return PowerManifold(self, n)

    def __eq__(self, other):
        return type(self) is type(other) and repr(self) == repr(other)

    def __hash__(self):
        return hash(repr(self))

    def __str__(self):
        return repr(self)


def has_capability(M: ManifoldLike, operation: str) -> bool:
    """Whether manifold ``M`` provides ``operation``."""
    if isinstance(M, Manifold):
        return M.supports(operation)
    return callable(getattr(M, operation, None))


def require_capabilities(M: ManifoldLike, operations: Iterable[str],
                         requester: Optional[str] = None) -> None:
    """Raise :class:`CapabilityError` listing every operation ``M`` lacks.

    Args:
        M: Manifold to check
        operations: Operation names, e.g. ``("retract", "inverse_retract")``
        requester: Name used in the error message (usually a solver)
    """
    missing = [op for op in operations if not has_capability(M, op)]
    if missing:
        who = requester or "This solver"
        raise CapabilityError(
            f"{who} requires {', '.join(missing)}, which {M!r} does not provide",
            operation=tuple(missing),
            owner=repr(M)
        )


def method_capabilities(*methods) -> tuple:
    """Primitives the given retraction, inverse retraction or transport methods are built from.

    ``None`` entries (the manifold's defaults) are skipped; those are covered
    by the derived operations themselves.
    """
    return tuple(_METHOD_PRIMITIVES[method] for method in methods
                 if method is not None and method in _METHOD_PRIMITIVES)
