"""Region listing command."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from registry.cli.console import console, create_table, dim


def register(app: typer.Typer) -> None:
    """Register the regions command."""

    @app.command()
    def regions(
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """List the seeded regions."""
        asyncio.run(_list_regions(config_path))


async def _list_regions(config_path: Path | None) -> None:
    from registry.cli.context import get_config, open_database
    from registry.people import PersonService

    config = get_config(config_path)
    async with open_database(config) as database:
        found = await PersonService(database).list_regions()

    if not found:
        dim("No regions. Run 'registry db migrate' or 'registry db init'.")
        return

    table = create_table("Regions", [("ID", "dim"), ("Name", "bold")])
    for region in found:
        table.add_row(str(region.id), region.name)
    console.print(table)
