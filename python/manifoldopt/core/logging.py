"""Logging configuration for manifoldopt."""

import logging
import sys
import time
from typing import Any
from .config import get_config

# Cache for loggers
_loggers = {}


def get_logger(name: str) -> logging.Logger:
    """Get a logger for manifoldopt.

    Args:
        name: Logger name (will be prefixed with 'manifoldopt.')

    Returns:
        Configured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting solver")
    """
    full_name = f"manifoldopt.{name}" if not name.startswith("manifoldopt") else name

    # Return cached logger if available
    if full_name in _loggers:
        return _loggers[full_name]

    logger = logging.getLogger(full_name)

    # Configure only if not already configured
    if not logger.handlers:
        config = get_config()

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(config.log_format))

        logger.addHandler(handler)
        logger.setLevel(config.log_level)
        logger.propagate = False

    _loggers[full_name] = logger
    return logger


class SolverRunLogger:
    """Context manager for solver run logging.

    Provides structured logging for one solve call with an automatic
    summary at the end. Failures are logged at ERROR level and re-raised.

    Example:
        >>> with SolverRunLogger("ParticleSwarmState") as run_logger:
        ...     state = run(problem, state)
        ...     run_logger.log_state(state)
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = get_logger("solvers.run")
        self.name = name
        self.level = level
        self.start_time = None
        self.metrics = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug("=" * 60)
        self.logger.debug(f"Starting solver: {self.name}")
        self.logger.debug("=" * 60)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.log(self.level, f"{self.name} stopped after {elapsed:.3f}s")
            for key, value in self.metrics.items():
                self.logger.log(self.level, f"  {key}: {value}")
        else:
            self.logger.error("-" * 60)
            self.logger.error(f"{self.name} failed after {elapsed:.3f}s")
            self.logger.error(f"Error: {exc_type.__name__}: {exc_val}")
        return False

    def log_state(self, state):
        """Collect the summary of a finished solver state."""
        inner = state.get_state()
        criterion = inner.stop
        self.metrics.update({
            'Iterations': inner.iteration,
            'Converged': criterion.indicates_convergence(),
            'Stop reason': criterion.get_reason().strip() or 'n/a',
        })

    def add_metric(self, name: str, value: Any):
        """Add a custom metric to the summary."""
        self.metrics[name] = value
