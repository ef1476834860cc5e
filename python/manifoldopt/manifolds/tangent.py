"""Base-tracking tangent vectors.

Plain numpy arrays are the unchecked tangent vectors used throughout the
solvers. :class:`TangentVectorE` is an explicitly chosen alternative that
remembers the point it is attached to: adding two of them, or taking their
inner product, first compares the base points and raises
:class:`~manifoldopt.exceptions.BaseMismatchError` when they differ. Mixing a
checked vector with a plain array is allowed and unchecked.
"""

from numbers import Number

import numpy as np

from ..exceptions import BaseMismatchError


def _same_point(a, b) -> bool:
    if a is b:
        return True
    return np.shape(a) == np.shape(b) and bool(np.array_equal(a, b))


def check_base(X, Y, operation: str = "combine") -> None:
    """Raise if ``X`` and ``Y`` are both base-tracking and live at different points."""
    if isinstance(X, TangentVectorE) and isinstance(Y, TangentVectorE):
        if not _same_point(X.base, Y.base):
            raise BaseMismatchError(
                f"Cannot {operation} tangent vectors with different base points",
                operation=operation,
                first_base=X.base,
                second_base=Y.base
            )


def check_base_point(X, p, operation: str = "use") -> None:
    """Raise if the base-tracking vector ``X`` is not attached to ``p``."""
    if isinstance(X, TangentVectorE) and not _same_point(X.base, p):
        raise BaseMismatchError(
            f"Cannot {operation} a tangent vector at a point other than its base",
            operation=operation,
            first_base=X.base,
            second_base=p
        )


def value_of(X):
    """Underlying array of a checked or plain tangent vector."""
    return X.value if isinstance(X, TangentVectorE) else X


class TangentVectorE:
    """A tangent vector together with its base point.

    Args:
        value: The tangent vector's array
        base: The point it is attached to
    """

    __slots__ = ("value", "base")

    # make numpy arrays defer to the reflected operators below
    __array_ufunc__ = None

    def __init__(self, value, base):
        self.value = value
        self.base = base

    def _combine(self, other, op, operation):
        check_base(self, other, operation)
        return TangentVectorE(op(np.asarray(self.value), np.asarray(value_of(other))),
                              self.base)

    def __add__(self, other):
        return self._combine(other, np.add, "add")

    def __radd__(self, other):
        return self._combine(other, lambda a, b: b + a, "add")

    def __sub__(self, other):
        return self._combine(other, np.subtract, "subtract")

    def __rsub__(self, other):
        return self._combine(other, lambda a, b: b - a, "subtract")

    def __mul__(self, scalar):
        if not isinstance(scalar, Number):
            return NotImplemented
        return TangentVectorE(scalar * np.asarray(self.value), self.base)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        if not isinstance(scalar, Number):
            return NotImplemented
        return TangentVectorE(np.asarray(self.value) / scalar, self.base)

    def __neg__(self):
        return TangentVectorE(-np.asarray(self.value), self.base)

    def __repr__(self):
        return f"TangentVectorE({self.value!r}, base={self.base!r})"


def tangent_log(M, p, q) -> TangentVectorE:
    """``log(p, q)`` as a base-tracking vector at ``p``."""
    return TangentVectorE(M.log(p, q), M.copy(p))


def tangent_zero(M, p) -> TangentVectorE:
    return TangentVectorE(M.zero_vector(p), M.copy(p))


def checked_exp(M, p, X, t: float = 1.0):
    check_base_point(X, p, "exponentiate")
    return M.exp(p, value_of(X), t=t)


def checked_inner(M, p, X, Y) -> float:
    """Inner product that verifies both vectors are attached to ``p``."""
    check_base(X, Y, "take the inner product of")
    check_base_point(X, p, "take the inner product of")
    check_base_point(Y, p, "take the inner product of")
    return M.inner(p, value_of(X), value_of(Y))


def checked_vector_transport_to(M, p, X, q, method=None) -> TangentVectorE:
    check_base_point(X, p, "transport")
    return TangentVectorE(M.vector_transport_to(p, value_of(X), q, method=method), M.copy(q))
