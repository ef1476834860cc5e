"""Decorators for the solver front ends."""

import functools
import inspect
import warnings
from typing import Iterable

from .core.config import get_config
from .exceptions import ConfigurationError


def renamed_kwargs(**renames):
    """Accept deprecated keyword names and forward them under their new name.

    Args:
        **renames: Mapping ``old_name=new_name``

    Example:
        >>> @renamed_kwargs(n="swarm_size")
        ... def solver(M, f, swarm_size=None):
        ...     return swarm_size
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for old, new in renames.items():
                if old not in kwargs:
                    continue
                if new in kwargs:
                    raise ConfigurationError(
                        f"{func.__name__} got both '{old}' and its replacement '{new}'",
                        parameter=old,
                        value=kwargs[old]
                    )
                warnings.warn(
                    f"'{old}' is deprecated in {func.__name__}, use '{new}' instead",
                    DeprecationWarning,
                    stacklevel=2
                )
                kwargs[new] = kwargs.pop(old)
            return func(*args, **kwargs)
        return wrapper
    return decorator


def validate_points(manifold_arg: str = "M", point_args: Iterable[str] = ("p",),
                    collections: Iterable[str] = ()):
    """Check point arguments against the manifold when validation is enabled.

    Nothing is checked unless ``validate_inputs`` is set in the
    configuration. Arguments that are ``None`` are skipped.

    Args:
        manifold_arg: Name of the manifold argument
        point_args: Names of arguments holding points
        collections: Subset of ``point_args`` that hold sequences of points

    Raises:
        ManifoldValidationError: If a point is not on the manifold.
    """
    point_args = tuple(point_args)
    collections = set(collections)

    def decorator(func):
        sig = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not get_config().validate_inputs:
                return func(*args, **kwargs)

            bound_args = sig.bind(*args, **kwargs)
            manifold = bound_args.arguments.get(manifold_arg)
            if manifold is None:
                return func(*args, **kwargs)

            for name in point_args:
                value = bound_args.arguments.get(name)
                if value is None:
                    continue
                points = value if name in collections else (value,)
                for point in points:
                    manifold.is_point(point, raise_error=True)
            return func(*args, **kwargs)
        return wrapper
    return decorator


__all__ = ['renamed_kwargs', 'validate_points']
