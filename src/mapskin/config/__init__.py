# src/mapskin/config/__init__.py
"""
Unified application configuration using Pydantic
"""

from mapskin.exceptions import (
    ConfigurationError,
    ConfigurationNotFoundError,
    ConfigurationValidationError,
)
from mapskin.config.loader import get_config, load_config
from mapskin.config.models import (
    AppConfig,
    ConsoleLoggingConfig,
    FileLoggingConfig,
    GlobalConfig,
    LoggingConfig,
    StudioSettings,
)

DEFAULT_ENVIRONMENT = "development"

ENVIRONMENT_ALIASES = {
    "dev": "development",
    "development": "development",
    "test": "test",
    "testing": "test",
    "prod": "production",
    "production": "production",
}

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "ConfigurationNotFoundError",
    "ConfigurationValidationError",
    "ConsoleLoggingConfig",
    "DEFAULT_ENVIRONMENT",
    "ENVIRONMENT_ALIASES",
    "FileLoggingConfig",
    "GlobalConfig",
    "LoggingConfig",
    "StudioSettings",
    "get_config",
    "load_config",
]
