"""CLI command modules."""

from registry.cli.commands import (
    config,
    database,
    people,
    regions,
    serve,
)

__all__ = [
    "config",
    "database",
    "people",
    "regions",
    "serve",
]
