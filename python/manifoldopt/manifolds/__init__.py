"""Manifolds: the capability interface and a reference set of geometries."""

from .base import (
    Manifold,
    RetractionMethod,
    InverseRetractionMethod,
    VectorTransportMethod,
    has_capability,
    method_capabilities,
    require_capabilities,
)
from .circle import Circle, sym_rem
from .euclidean import Euclidean
from .sphere import Sphere
from .power import PowerManifold
from .product import ProductManifold
from .tangent import (
    TangentVectorE,
    check_base,
    check_base_point,
    checked_exp,
    checked_inner,
    checked_vector_transport_to,
    tangent_log,
    tangent_zero,
)

__all__ = [
    'Manifold',
    'RetractionMethod',
    'InverseRetractionMethod',
    'VectorTransportMethod',
    'has_capability',
    'method_capabilities',
    'require_capabilities',
    'Circle',
    'sym_rem',
    'Euclidean',
    'Sphere',
    'PowerManifold',
    'ProductManifold',
    'TangentVectorE',
    'check_base',
    'check_base_point',
    'checked_exp',
    'checked_inner',
    'checked_vector_transport_to',
    'tangent_log',
    'tangent_zero',
]
