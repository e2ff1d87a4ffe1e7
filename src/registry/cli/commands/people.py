"""People inspection commands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from registry.cli.console import console, create_table, dim, flag, rejected

if TYPE_CHECKING:
    from registry.db.models import Person

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d-%m-%Y"

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
    ),
]


def register(app: typer.Typer) -> None:
    """Register the people command group."""
    people_app = typer.Typer(help="Inspect stored people")

    @people_app.command("show")
    def people_show(
        person_id: Annotated[int, typer.Argument(help="Person id")],
        config_path: ConfigOption = None,
    ) -> None:
        """Show one person with addresses, contacts and documents."""
        asyncio.run(_people_show(person_id, config_path))

    @people_app.command("list")
    def people_list(
        page_number: Annotated[
            int,
            typer.Option("--page", min=0, help="Zero-based page number"),
        ] = 0,
        page_size: Annotated[
            int,
            typer.Option("--size", min=1, help="People per page"),
        ] = 20,
        region: Annotated[
            str | None,
            typer.Option("--region", "-r", help="Registration address region"),
        ] = None,
        config_path: ConfigOption = None,
    ) -> None:
        """List people ordered by id.

        Examples:
            registry people list
            registry people list --page 1 --size 50
            registry people list --region Kazan
        """
        asyncio.run(_people_list(page_number, page_size, region, config_path))

    app.add_typer(people_app, name="people")


async def _people_show(person_id: int, config_path: Path | None) -> None:
    from registry.cli.context import get_config, open_database
    from registry.people import NotFoundError, PersonService

    config = get_config(config_path)
    async with open_database(config) as database:
        try:
            person = await PersonService(database).get_person(person_id)
        except NotFoundError as e:
            rejected(e)
            raise typer.Exit(1) from None

    _print_person(person)


def _print_person(person: Person) -> None:
    hidden = " [dim](hidden)[/dim]" if person.hidden else ""
    console.print(f"[bold]{person.name}[/bold] #{person.id}{hidden}")
    console.print(f"Born {person.date_of_birth.strftime(DATE_FORMAT)}\n")

    addresses = create_table(
        "Addresses",
        [("ID", "dim"), ("Region", "cyan"), ("Address", ""), ("Registration", "")],
    )
    for link in person.address_links:
        addresses.add_row(
            str(link.address.id),
            link.address.region.name,
            link.address.line,
            flag(link.registration),
        )
    console.print(addresses)

    contacts = create_table("Contacts", [("ID", "dim"), ("Phone", "")])
    for contact in person.contacts:
        contacts.add_row(str(contact.id), contact.phone_number)
    console.print(contacts)

    documents = create_table(
        "Identity documents",
        [("ID", "dim"), ("Type", "cyan"), ("Number", ""), ("Issued", ""), ("Primary", "")],
    )
    for doc in person.identity_documents:
        documents.add_row(
            str(doc.id),
            doc.type.value,
            doc.full_number,
            doc.issue_date.strftime(DATE_FORMAT),
            flag(doc.primary),
        )
    console.print(documents)


async def _people_list(
    page_number: int,
    page_size: int,
    region: str | None,
    config_path: Path | None,
) -> None:
    from registry.cli.context import get_config, open_database
    from registry.people import PersonService

    config = get_config(config_path)
    async with open_database(config) as database:
        people = await PersonService(database).list_people(page_number, page_size, region)

    if not people:
        dim("No people found.")
        return

    table = create_table(
        f"People (page {page_number})",
        [
            ("ID", "dim"),
            ("Name", "bold"),
            ("Born", ""),
            ("Registration", "cyan"),
            ("Phone", ""),
        ],
    )
    for person in people:
        registration = next(
            (link for link in person.address_links if link.registration), None
        )
        table.add_row(
            str(person.id),
            person.name,
            person.date_of_birth.strftime(DATE_FORMAT),
            (
                f"{registration.address.region.name}, {registration.address.line}"
                if registration
                else "-"
            ),
            person.contacts[0].phone_number if person.contacts else "-",
        )
    console.print(table)
