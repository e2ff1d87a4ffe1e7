"""FastAPI application for the registry server."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from registry.db.seed import seed_regions
from registry.people import NotFoundError, PersonService, RegistryError
from registry.server.routes import health, people

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from registry.config import RegistryConfig
    from registry.db import Database

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


class RegistryServer:
    """Main server application.

    Owns the FastAPI app and the database lifecycle.
    """

    def __init__(
        self,
        database: "Database",
        config: "RegistryConfig | None" = None,
        create_schema: bool = False,
    ):
        """Initialize server.

        Args:
            database: Database to serve from; connected on startup.
            config: Loaded configuration; defaults apply when omitted.
            create_schema: Create tables and seed regions on startup instead
                of relying on migrations (development and tests).
        """
        from registry.config import RegistryConfig

        self._database = database
        self._config = config or RegistryConfig()
        self._create_schema = create_schema
        self._service = PersonService(database)
        self._app = self._create_app()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self._app

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI app."""

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
            logger.info("server_starting")
            await self._database.connect()
            if self._create_schema:
                await self._database.create_all()
                async with self._database.session() as session:
                    await seed_regions(session, self._config.database.regions)

            yield

            logger.info("server_stopping")
            await self._database.disconnect()

        app = FastAPI(
            title="Identity Registry",
            description="Person registry API",
            version="0.1.0",
            lifespan=lifespan,
        )

        app.state.server = self
        app.state.database = self._database
        app.state.service = self._service
        app.state.max_page_size = self._config.paging.max_page_size

        self._install_error_handlers(app)

        app.include_router(health.router, tags=["health"])
        app.include_router(people.router, tags=["people"])

        return app

    @staticmethod
    def _install_error_handlers(app: FastAPI) -> None:
        @app.exception_handler(NotFoundError)
        async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
            return _error(status.HTTP_404_NOT_FOUND, exc.message)

        @app.exception_handler(RegistryError)
        async def rejected(request: Request, exc: RegistryError) -> JSONResponse:
            logger.info(
                "request_rejected",
                extra={"kind": type(exc).__name__, "field": exc.field},
            )
            return _error(status.HTTP_400_BAD_REQUEST, exc.message)

        @app.exception_handler(RequestValidationError)
        async def invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
            return _error(status.HTTP_400_BAD_REQUEST, _format_validation_error(exc))

        @app.exception_handler(StarletteHTTPException)
        async def http_error(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            return _error(exc.status_code, str(exc.detail))

        @app.exception_handler(Exception)
        async def unexpected(request: Request, exc: Exception) -> JSONResponse:
            logger.exception("request_failed", extra={"path": request.url.path})
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(
    database: "Database",
    config: "RegistryConfig | None" = None,
    create_schema: bool = False,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        database: Database instance.
        config: Loaded configuration.
        create_schema: Create tables and seed regions on startup.

    Returns:
        Configured FastAPI application.
    """
    server = RegistryServer(database, config=config, create_schema=create_schema)
    return server.app
