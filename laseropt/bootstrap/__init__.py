"""
bootstrap/ - Configuration and logging setup.
"""

from .config import (
    ConfigurationError,
    EngineSettings,
    LoggingConfig,
    LaserOptConfig,
    load_config,
    get_config,
    reset_config,
)
from .logs import setup_logging

__all__ = [
    "ConfigurationError",
    "EngineSettings",
    "LoggingConfig",
    "LaserOptConfig",
    "load_config",
    "get_config",
    "reset_config",
    "setup_logging",
]
