"""Configuration management for manifoldopt."""

from dataclasses import dataclass
from typing import Optional, Dict, Any
import os
import threading

import numpy as np


@dataclass
class ManifoldOptConfig:
    """Global configuration for manifoldopt.

    This class manages all configuration options for the library.
    Settings can be modified at runtime and affect global behavior.

    Attributes:
        validate_inputs: Whether solvers check initial points with ``is_point``
        validation_tolerance: Tolerance used by ``is_point``/``is_vector``
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_format: Format string for log messages
        show_progress: Whether ``optimize(verbose=True)`` shows a progress bar
        debug_every: Default print cadence for verbose runs
        default_swarm_size: Swarm size used when none is given
        random_seed: Random seed for reproducibility (None for no seed)
    """

    # Validation settings
    validate_inputs: bool = False
    validation_tolerance: float = 1e-10

    # Logging settings
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    show_progress: bool = False
    debug_every: int = 1

    # Solver defaults
    default_swarm_size: int = 100

    # Random settings
    random_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> 'ManifoldOptConfig':
        """Create configuration from environment variables.

        Environment variables:
            MANIFOLDOPT_VALIDATE: Enable input validation
            MANIFOLDOPT_LOG_LEVEL: Logging level
            MANIFOLDOPT_SHOW_PROGRESS: Show progress bars
            MANIFOLDOPT_RANDOM_SEED: Random seed
        """
        def parse_bool(value: str) -> bool:
            return value.lower() in ('true', '1', 'yes', 'on')

        def parse_int(value: str) -> Optional[int]:
            return int(value) if value else None

        return cls(
            validate_inputs=parse_bool(os.getenv('MANIFOLDOPT_VALIDATE', '')),
            log_level=os.getenv('MANIFOLDOPT_LOG_LEVEL', 'WARNING'),
            show_progress=parse_bool(os.getenv('MANIFOLDOPT_SHOW_PROGRESS', '')),
            random_seed=parse_int(os.getenv('MANIFOLDOPT_RANDOM_SEED', '')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            k: v for k, v in self.__dict__.items()
            if not k.startswith('_')
        }

    def update(self, **kwargs) -> None:
        """Update configuration with keyword arguments."""
        from ..exceptions import ConfigurationError

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ConfigurationError(
                    f"Unknown configuration option: {key}",
                    parameter=key,
                    value=value,
                    valid_range=sorted(self.to_dict())
                )


# Thread-local storage for context managers
_config_stack = threading.local()

# Global configuration instance
_global_config = ManifoldOptConfig.from_env()

# Shared generator, rebuilt whenever the configured seed changes
_rng_state = {'seed': None, 'rng': None}


def get_config() -> ManifoldOptConfig:
    """Get the current configuration.

    Returns the context-local configuration if in a context manager,
    otherwise returns the global configuration.
    """
    stack = getattr(_config_stack, 'stack', None)
    if stack:
        return stack[-1]
    return _global_config


def set_config(**kwargs) -> None:
    """Update global configuration.

    Args:
        **kwargs: Configuration options to update

    Example:
        >>> set_config(validate_inputs=True, log_level='DEBUG')
    """
    _global_config.update(**kwargs)


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _global_config
    _global_config = ManifoldOptConfig()
    _rng_state['rng'] = None


def get_rng(seed=None) -> np.random.Generator:
    """Return a random generator.

    Args:
        seed: ``None`` for the shared generator, an int for a fresh seeded
            generator, or an existing ``numpy.random.Generator`` which is
            returned unchanged.

    The shared generator is seeded from ``random_seed`` of the current
    configuration and reseeded whenever that value changes.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if seed is not None:
        return np.random.default_rng(seed)

    configured = get_config().random_seed
    if _rng_state['rng'] is None or _rng_state['seed'] != configured:
        _rng_state['seed'] = configured
        _rng_state['rng'] = np.random.default_rng(configured)
    return _rng_state['rng']


class config_context:
    """Context manager for temporary configuration changes.

    Example:
        >>> with config_context(validate_inputs=True):
        ...     # Initial points are checked here
        ...     particle_swarm(M, f)
        >>> # Original configuration restored
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def __enter__(self):
        if not hasattr(_config_stack, 'stack'):
            _config_stack.stack = []

        # Get current config and create a copy
        current = get_config()
        new_config = ManifoldOptConfig(**current.to_dict())
        new_config.update(**self.kwargs)

        _config_stack.stack.append(new_config)
        return new_config

    def __exit__(self, exc_type, exc_val, exc_tb):
        _config_stack.stack.pop()
