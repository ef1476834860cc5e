"""Custom exceptions for manifoldopt.

This module defines the exception hierarchy raised by manifolds, objectives
and solvers. Every exception carries a ``details`` dictionary so callers can
inspect the offending values programmatically.
"""

from typing import Optional, Dict, Any


class ManifoldOptError(Exception):
    """Base exception for all manifoldopt errors.

    This is the root of the exception hierarchy. All other manifoldopt
    exceptions inherit from this class.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ManifoldValidationError(ManifoldOptError):
    """Raised when a point or vector fails manifold validation.

    Validation is opt-in: this error is only raised by ``is_point`` /
    ``is_vector`` with ``raise_error=True`` or when ``validate_inputs`` is
    enabled in the configuration.

    Attributes:
        point_info: Information about the invalid point
        manifold_name: Name of the manifold
        validation_type: Type of validation that failed ('point' or 'vector')
    """

    def __init__(self, message: str, point_info: Optional[str] = None,
                 manifold_name: Optional[str] = None,
                 validation_type: str = 'point'):
        details = {
            'point_info': point_info,
            'manifold_name': manifold_name,
            'validation_type': validation_type
        }
        super().__init__(message, details)
        self.point_info = point_info
        self.manifold_name = manifold_name
        self.validation_type = validation_type


class BaseMismatchError(ManifoldOptError):
    """Raised when two base-tracking tangent vectors live at different points.

    Attributes:
        operation: Operation that combined the vectors
        first_base: Base point of the left operand
        second_base: Base point of the right operand
    """

    def __init__(self, message: str, operation: Optional[str] = None,
                 first_base: Any = None, second_base: Any = None):
        details = {
            'operation': operation,
            'first_base': first_base,
            'second_base': second_base
        }
        super().__init__(message, details)
        self.operation = operation
        self.first_base = first_base
        self.second_base = second_base


class CapabilityError(ManifoldOptError, NotImplementedError):
    """Raised when a manifold or objective lacks a requested operation.

    Attributes:
        operation: Name (or names) of the missing operation
        owner: Name of the manifold or objective that was asked
    """

    def __init__(self, message: str, operation: Any = None,
                 owner: Optional[str] = None):
        details = {
            'operation': operation,
            'owner': owner
        }
        super().__init__(message, details)
        self.operation = operation
        self.owner = owner


class DimensionMismatchError(ManifoldOptError):
    """Raised when array dimensions or component counts don't match.

    Attributes:
        expected: Expected dimensions
        got: Actual dimensions received
        operation: Operation being performed
    """

    def __init__(self, message: str, expected: Optional[tuple] = None,
                 got: Optional[tuple] = None, operation: Optional[str] = None):
        details = {
            'expected': expected,
            'got': got,
            'operation': operation
        }
        super().__init__(message, details)
        self.expected = expected
        self.got = got
        self.operation = operation


class ConfigurationError(ManifoldOptError, ValueError):
    """Raised when there's an error in configuration or solver parameters.

    Attributes:
        parameter: Configuration parameter that caused the error
        value: Invalid value provided
        valid_range: Valid range or options for the parameter
    """

    def __init__(self, message: str, parameter: Optional[str] = None,
                 value: Any = None, valid_range: Any = None):
        details = {
            'parameter': parameter,
            'value': value,
            'valid_range': valid_range
        }
        super().__init__(message, details)
        self.parameter = parameter
        self.value = value
        self.valid_range = valid_range


__all__ = [
    'ManifoldOptError',
    'ManifoldValidationError',
    'BaseMismatchError',
    'CapabilityError',
    'DimensionMismatchError',
    'ConfigurationError',
]
