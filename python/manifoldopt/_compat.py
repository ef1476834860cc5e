"""Compatibility layer for optional dependencies."""

import importlib
from typing import Optional, Any


def import_optional_dependency(
    name: str,
    package: Optional[str] = None,
    extra: Optional[str] = None
) -> Any:
    """Import an optional dependency with informative error.

    Args:
        name: Module name to import
        package: Package name for error message (defaults to name)
        extra: Name of the manifoldopt extra that installs it

    Returns:
        Imported module

    Raises:
        ImportError: If module cannot be imported with helpful message
    """
    package = package or name
    extra = extra or package.lower()

    try:
        module = importlib.import_module(name)
    except ImportError as e:
        raise ImportError(
            f"{package} is required for this functionality. "
            f"Install it with: pip install 'manifoldopt[{extra}]'"
        ) from e

    return module


# Check for optional dependencies at import time
HAS_TQDM = False

try:
    import tqdm  # noqa: F401
    HAS_TQDM = True
except ImportError:
    pass
