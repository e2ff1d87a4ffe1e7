"""Config and database bootstrap shared by CLI commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from registry.cli.console import console, error

if TYPE_CHECKING:
    from registry.config import RegistryConfig
    from registry.db import Database


def get_config(config_path: Path | None = None) -> RegistryConfig:
    """Load configuration or exit with a readable message."""
    from registry.config import ConfigError, load_config

    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None


@asynccontextmanager
async def open_database(config: RegistryConfig) -> AsyncIterator[Database]:
    """Connect to the configured database for the duration of a command."""
    from registry.db import Database

    database = Database(
        database_url=config.database.url,
        database_path=config.database.path,
        echo=config.database.echo,
    )
    await database.connect()
    try:
        yield database
    finally:
        await database.disconnect()
