"""
Unit tests for power and product manifolds.
"""

import pytest
import numpy as np
from conftest import TOLERANCES

from manifoldopt import (
    Circle,
    Euclidean,
    Sphere,
    PowerManifold,
    ProductManifold,
    ConfigurationError,
    DimensionMismatchError,
)


class TestPowerManifold:
    def test_shape_and_dimension(self):
        M = PowerManifold(Sphere(3), 4)
        assert M.representation_shape == (4, 3)
        assert M.manifold_dimension() == 8
        assert repr(M) == "PowerManifold(Sphere(dimension=3), 4)"

    def test_pow_operator(self):
        assert Circle() ** 5 == PowerManifold(Circle(), 5)

    def test_invalid_count(self):
        with pytest.raises(ConfigurationError):
            PowerManifold(Circle(), 0)

    def test_distance_is_two_norm_of_components(self):
        M = PowerManifold(Circle(), 3)
        p = np.array([0.0, 1.0, -1.0])
        q = np.array([0.5, 1.0, 2.5])
        expected = np.sqrt(0.5 ** 2 + 0.0 + (2 * np.pi - 3.5) ** 2)
        assert M.distance(p, q) == pytest.approx(expected)

    def test_componentwise_exp(self, rng):
        S = Sphere(3)
        M = S ** 2
        p = M.rand(rng=rng)
        X = M.rand(rng=rng, vector_at=p)
        q = M.exp(p, X)
        for i in range(2):
            assert np.allclose(q[i], S.exp(p[i], X[i]))

    def test_inner_is_sum(self, rng):
        S = Sphere(3)
        M = S ** 3
        p = M.rand(rng=rng)
        X, Y = M.rand(rng=rng, vector_at=p), M.rand(rng=rng, vector_at=p)
        assert M.inner(p, X, Y) == pytest.approx(sum(S.inner(p[i], X[i], Y[i]) for i in range(3)))

    def test_default_methods_follow_base(self):
        M = Sphere(3) ** 2
        assert M.default_retraction_method is Sphere(3).default_retraction_method

    def test_check_point_reports_component(self):
        M = Sphere(2) ** 2
        assert M.is_point(np.array([[1.0, 0.0], [0.0, 1.0]]))
        assert not M.is_point(np.array([[1.0, 0.0], [0.0, 2.0]]))

    def test_retract_into_buffer(self, rng):
        M = Circle() ** 4
        p = M.rand(rng=rng)
        X = M.rand(rng=rng, vector_at=p)
        expected = M.retract(p, X)
        M.retract(p, X, out=p)
        assert np.allclose(p, expected)


class TestProductManifold:
    def test_split_join(self, rng):
        M = ProductManifold(Sphere(3), Euclidean(2, 2))
        assert M.representation_shape == (7,)
        p = M.rand(rng=rng)
        x_sphere, x_euclid = M.split(p)
        assert x_sphere.shape == (3,)
        assert x_euclid.shape == (2, 2)
        assert np.allclose(M.join([x_sphere, x_euclid]), p)

    def test_split_wrong_shape(self):
        M = ProductManifold(Sphere(3), Euclidean(2))
        with pytest.raises(DimensionMismatchError):
            M.split(np.zeros(4))

    def test_join_wrong_count(self):
        M = ProductManifold(Sphere(3), Euclidean(2))
        with pytest.raises(DimensionMismatchError):
            M.join([np.zeros(3)])

    def test_empty_product(self):
        with pytest.raises(ConfigurationError):
            ProductManifold()

    def test_distance_combines_components(self, rng):
        S, E = Sphere(3), Euclidean(2)
        M = ProductManifold(S, E)
        p, q = M.rand(rng=rng), M.rand(rng=rng)
        (ps, pe), (qs, qe) = M.split(p), M.split(q)
        expected = np.sqrt(S.distance(ps, qs) ** 2 + E.distance(pe, qe) ** 2)
        assert M.distance(p, q) == pytest.approx(expected)

    def test_exp_log_roundtrip(self, rng):
        M = ProductManifold(Sphere(4), Circle(), Euclidean(3))
        p, q = M.rand(rng=rng), M.rand(rng=rng)
        assert M.distance(M.exp(p, M.log(p, q)), q) < TOLERANCES['relaxed']

    def test_circle_component(self, rng):
        M = ProductManifold(Circle(), Euclidean(1))
        p = M.rand(rng=rng)
        assert p.shape == (2,)
        assert M.is_point(p)
