"""Centralized path management for the registry.

All local state (config, SQLite database, logs) lives under a single base
directory. The base directory can be overridden with the REGISTRY_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.registry
- Windows: %USERPROFILE%\\.registry
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "REGISTRY_HOME"


@lru_cache(maxsize=1)
def get_registry_home() -> Path:
    """Get the base directory for all registry data.

    Resolution order:
    1. REGISTRY_HOME environment variable (if set)
    2. Platform default (~/.registry)

    Returns:
        Path to the registry home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".registry"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_registry_home() / "config.toml"


def get_database_path() -> Path:
    """Get the default SQLite database path."""
    return get_registry_home() / "registry.db"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_registry_home() / "logs"
