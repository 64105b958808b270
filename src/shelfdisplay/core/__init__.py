"""Core infrastructure module.

Provides foundational components:
- Configuration management with validation
- Custom exception hierarchy
- Structured logging
- Cooperative yield scheduler
"""

from .config import Config, ConfigManager, load_config
from .errors import (
    ShelfDisplayError,
    ConfigurationError,
    ProviderError,
    ProviderUnavailableError,
    ProviderQueryError,
    ViewError,
    ValidationError,
)
from .logging import apply_logging_config, setup_logging
from .scheduler import YieldScheduler, DEFAULT_YIELD_INTERVAL

__all__ = [
    # Config
    "Config",
    "ConfigManager",
    "load_config",
    # Errors
    "ShelfDisplayError",
    "ConfigurationError",
    "ProviderError",
    "ProviderUnavailableError",
    "ProviderQueryError",
    "ViewError",
    "ValidationError",
    # Logging
    "setup_logging",
    "apply_logging_config",
    # Scheduling
    "YieldScheduler",
    "DEFAULT_YIELD_INTERVAL",
]
