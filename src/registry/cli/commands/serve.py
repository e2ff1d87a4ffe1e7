"""Server command for running the registry API."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default: server.host from config)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default: server.port from config)",
            ),
        ] = None,
        create_schema: Annotated[
            bool,
            typer.Option(
                "--create-schema",
                help="Create tables and seed regions on startup instead of migrating",
            ),
        ] = False,
    ) -> None:
        """Start the registry HTTP server."""
        try:
            asyncio.run(_run_server(config, host, port, create_schema))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    config_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
    create_schema: bool = False,
) -> None:
    """Run the server asynchronously."""
    from registry.cli.context import get_config
    from registry.config.paths import get_logs_path
    from registry.db import Database
    from registry.logging import configure_logging, configure_redaction
    from registry.server.app import create_app
    from registry.server.runner import ServerRunner

    config = get_config(config_path)

    configure_redaction(enabled=config.logging.redact_pii)
    configure_logging(
        level=config.logging.level,
        use_rich=True,
        log_to_file=config.logging.log_to_file,
        logs_dir=get_logs_path(),
        retention_days=config.logging.retention_days,
    )

    database = Database(
        database_url=config.database.url,
        database_path=config.database.path,
        echo=config.database.echo,
    )
    app = create_app(database, config=config, create_schema=create_schema)

    bind_host = host or config.server.host
    bind_port = port or config.server.port
    logger.info("server_configured", extra={"host": bind_host, "port": bind_port})

    await ServerRunner(app, host=bind_host, port=bind_port).run()
