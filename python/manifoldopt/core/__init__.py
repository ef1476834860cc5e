"""Core functionality for manifoldopt."""

from .config import (
    get_config,
    set_config,
    reset_config,
    ManifoldOptConfig,
    config_context,
    get_rng,
)
from .logging import get_logger, SolverRunLogger

__all__ = [
    'get_config',
    'set_config',
    'reset_config',
    'ManifoldOptConfig',
    'config_context',
    'get_rng',
    'get_logger',
    'SolverRunLogger',
]
