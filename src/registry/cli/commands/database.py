"""Database management commands.

Provides commands for:
- migrate / rollback / status: manage schema migrations through Alembic
- init: create tables directly and seed regions (development databases)
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from pathlib import Path
from typing import Annotated

import typer

from registry.cli.console import console, dim, error, success


def register(app: typer.Typer) -> None:
    """Register the db command group."""
    db_app = typer.Typer(help="Database management commands")

    @db_app.command("migrate")
    def db_migrate(
        revision: Annotated[
            str,
            typer.Option(
                "--revision",
                "-r",
                help="Target revision",
            ),
        ] = "head",
    ) -> None:
        """Run database migrations."""
        console.print(f"[bold]Running migrations to {revision}...[/bold]")
        result = subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", revision],
            capture_output=False,
        )
        if result.returncode == 0:
            success("Migrations completed successfully")
        else:
            error("Migration failed")
            raise typer.Exit(1)

    @db_app.command("rollback")
    def db_rollback(
        revision: Annotated[
            str,
            typer.Option(
                "--revision",
                "-r",
                help="Target revision",
            ),
        ] = "-1",
    ) -> None:
        """Rollback database migrations."""
        console.print(f"[bold]Rolling back to {revision}...[/bold]")
        result = subprocess.run(
            [sys.executable, "-m", "alembic", "downgrade", revision],
            capture_output=False,
        )
        if result.returncode == 0:
            success("Rollback completed successfully")
        else:
            error("Rollback failed")
            raise typer.Exit(1)

    @db_app.command("status")
    def db_status() -> None:
        """Show migration status."""
        console.print("[bold]Migration status:[/bold]")
        subprocess.run(
            [sys.executable, "-m", "alembic", "current"],
            capture_output=False,
        )
        console.print("\n[bold]Pending migrations:[/bold]")
        subprocess.run(
            [sys.executable, "-m", "alembic", "history", "--indicate-current"],
            capture_output=False,
        )

    @db_app.command("init")
    def db_init(
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Create all tables and seed the configured regions.

        Skips Alembic entirely; use 'registry db migrate' for managed databases.
        """
        asyncio.run(_db_init(config_path))

    app.add_typer(db_app, name="db")


async def _db_init(config_path: Path | None) -> None:
    from registry.cli.context import get_config, open_database
    from registry.db.seed import seed_regions

    config = get_config(config_path)
    async with open_database(config) as database:
        await database.create_all()
        async with database.session() as session:
            added = await seed_regions(session, config.database.regions)

    success("Database initialized")
    dim(f"{len(added)} region(s) added, {len(config.database.regions)} configured")
