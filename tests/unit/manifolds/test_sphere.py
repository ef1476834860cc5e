"""
Unit tests for the Sphere manifold.

This module tests the geometric primitives of the unit sphere S^{n-1}:
exponential and logarithmic maps, distance, parallel transport, projections
and the opt-in validation.
"""

import pytest
import numpy as np
from conftest import TOLERANCES, DIMENSION_CONFIGS

from manifoldopt import Sphere, ConfigurationError, ManifoldValidationError


class TestSphereCreation:
    """Test sphere manifold creation and basic properties."""

    def test_create_valid_sphere(self, sphere_factory):
        for dim in [2, 3, 10, 100]:
            sphere = sphere_factory(dim)
            assert sphere.ambient_dim == dim
            assert sphere.manifold_dimension() == dim - 1
            assert sphere.representation_shape == (dim,)

    def test_create_invalid_sphere(self):
        with pytest.raises(ConfigurationError):
            Sphere(0)
        with pytest.raises(ValueError):
            Sphere(1)

    def test_sphere_representation(self, sphere_factory):
        sphere = sphere_factory(10)
        assert str(sphere) == "Sphere(dimension=10)"
        assert repr(sphere) == "Sphere(dimension=10)"

    def test_equality(self):
        assert Sphere(3) == Sphere(3)
        assert Sphere(3) != Sphere(4)
        assert len({Sphere(3), Sphere(3)}) == 1


class TestSphereExpLog:
    """Exponential map, logarithm and distance."""

    @pytest.mark.parametrize("dim", DIMENSION_CONFIGS['tiny'])
    def test_exp_of_zero_is_identity(self, sphere_factory, rng, dim):
        M = sphere_factory(dim)
        p = M.rand(rng=rng)
        assert np.allclose(M.exp(p, M.zero_vector(p)), p, atol=TOLERANCES['strict'])

    @pytest.mark.parametrize("dim", DIMENSION_CONFIGS['tiny'])
    def test_exp_stays_on_sphere(self, sphere_factory, assert_helpers, rng, dim):
        M = sphere_factory(dim)
        p = M.rand(rng=rng)
        X = M.rand(rng=rng, vector_at=p, sigma=3.0)
        assert_helpers.assert_is_on_sphere(M.exp(p, X))

    @pytest.mark.parametrize("dim", DIMENSION_CONFIGS['small'])
    def test_exp_log_roundtrip(self, sphere_factory, rng, dim):
        M = sphere_factory(dim)
        p = M.rand(rng=rng)
        q = M.rand(rng=rng)
        assert np.allclose(M.exp(p, M.log(p, q)), q, atol=TOLERANCES['relaxed'])

    def test_log_is_tangent(self, sphere_factory, assert_helpers, rng):
        M = sphere_factory(5)
        p, q = M.rand(rng=rng), M.rand(rng=rng)
        assert_helpers.assert_in_tangent_space_sphere(p, M.log(p, q))

    def test_log_at_antipode_is_zero(self):
        M = Sphere(3)
        p = np.array([1.0, 0.0, 0.0])
        assert np.allclose(M.log(p, -p), 0.0)

    def test_distance_known_values(self):
        M = Sphere(3)
        e1, e2 = np.eye(3)[0], np.eye(3)[1]
        assert M.distance(e1, e1) == pytest.approx(0.0, abs=TOLERANCES['strict'])
        assert M.distance(e1, e2) == pytest.approx(np.pi / 2)
        assert M.distance(e1, -e1) == pytest.approx(np.pi)

    def test_distance_small_angles_are_accurate(self):
        M = Sphere(3)
        angle = 1e-9
        p = np.array([1.0, 0.0, 0.0])
        q = np.array([np.cos(angle), np.sin(angle), 0.0])
        assert M.distance(p, q) == pytest.approx(angle, rel=1e-6)

    def test_exp_writes_into_buffer(self, rng):
        M = Sphere(4)
        p = M.rand(rng=rng)
        X = M.rand(rng=rng, vector_at=p)
        expected = M.exp(p, X)
        out = M.copy(p)
        result = M.exp(p, X, out=out)
        assert result is out
        assert np.allclose(out, expected)


class TestSphereTransport:
    """Parallel transport along geodesics."""

    def test_parallel_transport_preserves_norm(self, rng):
        M = Sphere(6)
        p = M.rand(rng=rng)
        q = M.exp(p, M.rand(rng=rng, vector_at=p, sigma=0.5))
        X = M.rand(rng=rng, vector_at=p)
        Y = M.parallel_transport_to(p, X, q)
        assert M.norm(q, Y) == pytest.approx(M.norm(p, X))
        assert abs(np.dot(q, Y)) < TOLERANCES['default']

    def test_parallel_transport_of_direction(self, rng):
        M = Sphere(3)
        p = M.rand(rng=rng)
        q = M.rand(rng=rng)
        # the direction of the geodesic is transported to minus the log back
        Y = M.parallel_transport_to(p, M.log(p, q), q)
        assert np.allclose(Y, -M.log(q, p), atol=TOLERANCES['relaxed'])

    def test_projection_transport(self, rng):
        M = Sphere(3)
        p, q = M.rand(rng=rng), M.rand(rng=rng)
        X = M.rand(rng=rng, vector_at=p)
        from manifoldopt.manifolds import VectorTransportMethod
        Y = M.vector_transport_to(p, X, q, method=VectorTransportMethod.PROJECTION)
        assert np.allclose(Y, X - np.dot(q, X) * q)


class TestSphereProjection:
    """Projection onto the sphere and its tangent spaces."""

    def test_projection_normalizes(self, assert_helpers, rng):
        M = Sphere(10)
        for v in [np.ones(10), rng.standard_normal(10) * 1e6, rng.standard_normal(10) * 1e-6]:
            assert_helpers.assert_is_on_sphere(M.project(v))

    def test_tangent_projection_idempotent(self, rng):
        M = Sphere(20)
        p = M.rand(rng=rng)
        v = rng.standard_normal(20)
        once = M.project_tangent(p, v)
        assert np.allclose(M.project_tangent(p, once), once, atol=TOLERANCES['strict'])


class TestSphereValidation:
    """Opt-in point and vector checks."""

    def test_is_point(self):
        M = Sphere(3)
        assert M.is_point(np.array([0.0, 1.0, 0.0]))
        assert not M.is_point(np.array([0.0, 2.0, 0.0]))
        assert not M.is_point(np.array([1.0, 0.0]))

    def test_is_point_raises_on_request(self):
        M = Sphere(3)
        with pytest.raises(ManifoldValidationError) as excinfo:
            M.is_point(np.array([0.0, 2.0, 0.0]), raise_error=True)
        assert excinfo.value.validation_type == 'point'
        assert excinfo.value.manifold_name == "Sphere"

    def test_is_vector(self):
        M = Sphere(3)
        p = np.array([1.0, 0.0, 0.0])
        assert M.is_vector(p, np.array([0.0, 1.0, 0.0]))
        assert not M.is_vector(p, np.array([1.0, 1.0, 0.0]))
        with pytest.raises(ManifoldValidationError):
            M.is_vector(p, np.array([1.0, 1.0, 0.0]), raise_error=True)
