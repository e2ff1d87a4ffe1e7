"""HTTP server for the registry."""

from registry.server.app import RegistryServer, create_app
from registry.server.runner import ServerRunner

__all__ = [
    "RegistryServer",
    "ServerRunner",
    "create_app",
]
