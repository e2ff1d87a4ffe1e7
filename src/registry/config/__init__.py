"""Configuration module."""

from registry.config.loader import load_config
from registry.config.models import (
    DEFAULT_REGIONS,
    ConfigError,
    DatabaseConfig,
    LoggingConfig,
    PagingConfig,
    RegistryConfig,
    ServerConfig,
)
from registry.config.paths import (
    get_config_path,
    get_database_path,
    get_logs_path,
    get_registry_home,
)

__all__ = [
    "DEFAULT_REGIONS",
    "ConfigError",
    "DatabaseConfig",
    "LoggingConfig",
    "PagingConfig",
    "RegistryConfig",
    "ServerConfig",
    "get_config_path",
    "get_database_path",
    "get_logs_path",
    "get_registry_home",
    "load_config",
]
