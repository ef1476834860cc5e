"""
Unit tests for the capability interface: which operations a manifold
provides, how derived operations fall back on primitives, and how solvers
refuse manifolds lacking what they need.
"""

import pytest
import numpy as np

from manifoldopt import Circle, Sphere, Euclidean, CapabilityError, particle_swarm
from manifoldopt.manifolds import (
    Manifold,
    RetractionMethod,
    InverseRetractionMethod,
    VectorTransportMethod,
    has_capability,
    method_capabilities,
    require_capabilities,
)
from manifoldopt.types import ManifoldLike


class ExpOnlyLine(Manifold):
    """The real line knowing only its exponential map."""

    name = "ExpOnlyLine"
    representation_shape = (1,)

    def manifold_dimension(self):
        return 1

    def inner(self, p, X, Y):
        return float(np.dot(X, Y))

    def rand(self, rng=None, vector_at=None, sigma=1.0):
        return np.zeros(1)

    def exp(self, p, X, t=1.0, out=None):
        value = np.asarray(p) + t * np.asarray(X)
        if out is None:
            return value
        np.copyto(out, value)
        return out

    def __repr__(self):
        return "ExpOnlyLine()"


class ProjectionLine(ExpOnlyLine):
    """A line whose default retraction is the projection."""

    default_retraction_method = RetractionMethod.PROJECTION


class TestSupports:
    def test_primitives(self):
        M = ExpOnlyLine()
        assert M.supports("exp")
        assert not M.supports("log")
        assert not M.supports("parallel_transport_to")

    def test_derived_operations_follow_primitives(self):
        M = ExpOnlyLine()
        assert M.supports("retract")
        assert not M.supports("inverse_retract")
        assert not M.supports("distance")
        assert not M.supports("vector_transport_to")
        assert M.supports("norm")

    def test_default_method_decides(self):
        # projection retraction needs project, which the line lacks
        assert not ProjectionLine().supports("retract")

    def test_full_manifolds(self):
        for M in (Circle(), Sphere(3), Euclidean(2), Sphere(3) ** 2):
            for op in ("retract", "inverse_retract", "vector_transport_to", "distance",
                       "copy", "copyto", "zero_vector"):
                assert has_capability(M, op), (M, op)

    def test_duck_typed_manifold(self):
        class Minimal:
            def inner(self, p, X, Y):
                return 0.0

        assert has_capability(Minimal(), "inner")
        assert not has_capability(Minimal(), "exp")

    def test_protocol(self):
        assert isinstance(Sphere(3), ManifoldLike)
        assert isinstance(Circle(), ManifoldLike)


class TestRequireCapabilities:
    def test_lists_every_missing_operation(self):
        with pytest.raises(CapabilityError) as excinfo:
            require_capabilities(ExpOnlyLine(), ("retract", "inverse_retract", "distance"),
                                 "MySolver")
        error = excinfo.value
        assert error.operation == ("inverse_retract", "distance")
        assert error.owner == "ExpOnlyLine()"
        assert "MySolver" in str(error)

    def test_passes_when_complete(self):
        require_capabilities(Sphere(3), ("retract", "inverse_retract"))

    def test_plugin_manifold_satisfies_protocol(self):
        class Line:
            def inner(self, p, X, Y):
                return float(X @ Y)

            def rand(self, rng=None, vector_at=None):
                return np.zeros(1)

            def copy(self, p):
                return np.array(p, copy=True)

            def copyto(self, dst, src):
                dst[...] = src
                return dst

            def zero_vector(self, p):
                return np.zeros_like(p)

            def manifold_dimension(self):
                return 1

            def retract(self, p, X, method=None, out=None):
                return p + X

        M = Line()
        assert isinstance(M, ManifoldLike)
        require_capabilities(M, ("retract", "copy", "zero_vector"))
        with pytest.raises(CapabilityError):
            require_capabilities(M, ("retract", "log"))

    def test_method_primitives(self):
        assert method_capabilities(None, None) == ()
        assert method_capabilities(RetractionMethod.PROJECTION,
                                   InverseRetractionMethod.LOGARITHMIC,
                                   VectorTransportMethod.PROJECTION) == (
            "project", "log", "project_tangent")

    def test_capability_error_is_not_implemented(self):
        with pytest.raises(NotImplementedError):
            require_capabilities(ExpOnlyLine(), ("log",))

    def test_missing_primitive_raises_on_call(self):
        M = ExpOnlyLine()
        with pytest.raises(CapabilityError):
            M.inverse_retract(np.zeros(1), np.ones(1))
        with pytest.raises(CapabilityError):
            M.inverse_retract(np.zeros(1), np.ones(1),
                              method=InverseRetractionMethod.PROJECTION)

    def test_solver_refuses_before_evaluating(self):
        calls = []

        def f(M, p):
            calls.append(p)
            return 0.0

        with pytest.raises(CapabilityError):
            particle_swarm(ExpOnlyLine(), f, swarm=[np.zeros(1), np.ones(1)])
        assert calls == []
