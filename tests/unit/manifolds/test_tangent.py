"""
Unit tests for base-tracking tangent vectors.
"""

import pytest
import numpy as np

from manifoldopt import Sphere, BaseMismatchError
from manifoldopt.manifolds import (
    TangentVectorE,
    checked_exp,
    checked_inner,
    checked_vector_transport_to,
    tangent_log,
    tangent_zero,
)


@pytest.fixture
def sphere_points():
    M = Sphere(3)
    p = np.array([1.0, 0.0, 0.0])
    q = np.array([0.0, 1.0, 0.0])
    return M, p, q


class TestArithmetic:
    def test_add_same_base(self, sphere_points):
        M, p, q = sphere_points
        X = TangentVectorE(np.array([0.0, 1.0, 0.0]), p)
        Y = TangentVectorE(np.array([0.0, 0.0, 2.0]), p.copy())
        Z = X + Y
        assert isinstance(Z, TangentVectorE)
        assert np.allclose(Z.value, [0.0, 1.0, 2.0])
        assert Z.base is p

    def test_add_different_base(self, sphere_points):
        M, p, q = sphere_points
        X = TangentVectorE(np.array([0.0, 1.0, 0.0]), p)
        Y = TangentVectorE(np.array([1.0, 0.0, 0.0]), q)
        with pytest.raises(BaseMismatchError) as excinfo:
            X + Y
        assert excinfo.value.operation == "add"
        with pytest.raises(BaseMismatchError):
            X - Y

    def test_mixing_with_plain_arrays_is_unchecked(self, sphere_points):
        M, p, q = sphere_points
        X = TangentVectorE(np.array([0.0, 1.0, 0.0]), p)
        plain = np.array([0.0, 0.0, 1.0])
        assert np.allclose((X + plain).value, [0.0, 1.0, 1.0])
        assert np.allclose((plain - X).value, [0.0, -1.0, 1.0])

    def test_scaling(self, sphere_points):
        M, p, q = sphere_points
        X = TangentVectorE(np.array([0.0, 2.0, 0.0]), p)
        assert np.allclose((3 * X).value, [0.0, 6.0, 0.0])
        assert np.allclose((X * 0.5).value, [0.0, 1.0, 0.0])
        assert np.allclose((X / 2).value, [0.0, 1.0, 0.0])
        assert np.allclose((-X).value, [0.0, -2.0, 0.0])


class TestCheckedOperations:
    def test_log_and_exp(self, sphere_points):
        M, p, q = sphere_points
        X = tangent_log(M, p, q)
        assert np.allclose(checked_exp(M, p, X), q)
        with pytest.raises(BaseMismatchError):
            checked_exp(M, q, X)

    def test_inner(self, sphere_points):
        M, p, q = sphere_points
        X = tangent_log(M, p, q)
        assert checked_inner(M, p, X, X) == pytest.approx((np.pi / 2) ** 2)
        Y = tangent_zero(M, q)
        with pytest.raises(BaseMismatchError):
            checked_inner(M, p, X, Y)

    def test_transport_rebases(self, sphere_points):
        M, p, q = sphere_points
        X = tangent_log(M, p, q)
        Y = checked_vector_transport_to(M, p, X, q)
        assert np.allclose(Y.base, q)
        assert M.norm(q, Y.value) == pytest.approx(np.pi / 2)
        with pytest.raises(BaseMismatchError):
            checked_vector_transport_to(M, q, X, p)
