"""Settings package exports."""

from .loader import (
    AppConfig,
    ConfigError,
    ContentfulSettings,
    HttpSettings,
    LoggingSettings,
    MAX_SETUP_COUNT,
    ProcessingSettings,
    SetupSettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "ContentfulSettings",
    "HttpSettings",
    "LoggingSettings",
    "MAX_SETUP_COUNT",
    "ProcessingSettings",
    "SetupSettings",
    "load_config",
]
