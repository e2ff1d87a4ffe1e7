"""Main CLI application."""

import typer

from registry.cli.commands import config, database, people, regions, serve

app = typer.Typer(
    name="registry",
    help="Identity Registry - people, addresses, contacts and identity documents",
    no_args_is_help=True,
)

serve.register(app)
database.register(app)
people.register(app)
regions.register(app)
config.register(app)


if __name__ == "__main__":
    app()
