"""Type definitions for manifoldopt."""

from typing import Union, Protocol, Callable, Optional, Any, Tuple, runtime_checkable
import numpy as np
from numpy.typing import NDArray

# Basic types
Scalar = Union[float, np.floating]
Array = NDArray[np.floating]
Point = Array
TangentVector = Array

# Function types; every callable receives the manifold first
CostFunc = Callable[[Any, Point], Scalar]
GradientFunc = Callable[..., Optional[TangentVector]]
CostGradFunc = Callable[..., Union[Scalar, Tuple[Scalar, TangentVector]]]
HessianFunc = Callable[..., Optional[TangentVector]]
ProximalMapFunc = Callable[..., Optional[Point]]
EntryDistance = Callable[[Any, Any, Any, Any], float]


@runtime_checkable
class ManifoldLike(Protocol):
    """Protocol for the minimal manifold plugin contract.

    Manifolds that do not derive from :class:`manifoldopt.manifolds.Manifold`
    are accepted by the solvers as long as they provide the operations the
    solver lists in ``required_capabilities``; this protocol names the ones
    every solver needs.
    """

    def inner(self, p: Point, X: TangentVector, Y: TangentVector) -> Scalar:
        """Riemannian inner product."""
        ...

    def rand(self, rng: Optional[np.random.Generator] = None,
             vector_at: Optional[Point] = None) -> Union[Point, TangentVector]:
        """Random point, or random tangent vector at ``vector_at``."""
        ...

    def copy(self, p: Point) -> Point:
        """Duplicate a point or vector."""
        ...

    def copyto(self, dst: Point, src: Point) -> Point:
        """Overwrite ``dst`` with ``src``."""
        ...

    def zero_vector(self, p: Point) -> TangentVector:
        """Zero tangent vector at ``p``."""
        ...

    def manifold_dimension(self) -> int:
        """Intrinsic dimension."""
        ...
