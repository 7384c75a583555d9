"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration, parse_bool
from .runtime_settings import (
    SUPPORTED_BROWSERS,
    SUPPORTED_PROVIDERS,
    BackendSettings,
    Configuration,
    ExecutionSettings,
)

__all__ = [
    "BackendSettings",
    "Configuration",
    "ExecutionSettings",
    "SUPPORTED_BROWSERS",
    "SUPPORTED_PROVIDERS",
    "ConfigurationError",
    "load_configuration",
    "parse_bool",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
