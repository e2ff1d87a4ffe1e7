"""Console output for registry commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from registry.people import RegistryError

console = Console()


def error(msg: str) -> None:
    console.print(f"[red]{msg}[/red]")


def rejected(exc: RegistryError) -> None:
    """Print a registry error, naming the offending field when known."""
    suffix = f" [dim]({exc.field})[/dim]" if exc.field else ""
    console.print(f"[red]{exc.message}[/red]{suffix}")


def success(msg: str) -> None:
    console.print(f"[green]{msg}[/green]")


def dim(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")


def flag(value: bool) -> str:
    """Table cell for a boolean marker such as primary or registration."""
    return "[green]yes[/green]" if value else ""


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Titled table with one (header, style) pair per column."""
    table = Table(title=title)
    for name, style in columns:
        table.add_column(name, style=style)
    return table
