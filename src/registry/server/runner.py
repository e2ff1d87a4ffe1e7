"""Serve the registry API with uvicorn until a shutdown signal arrives."""

from __future__ import annotations

import asyncio
import logging
import os
import signal as signal_module
from typing import TYPE_CHECKING

import uvicorn

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal_module.SIGTERM, signal_module.SIGINT)


class ServerRunner:
    """Runs the registry app on one host/port.

    The first SIGTERM or SIGINT lets in-flight requests finish their
    transactions; a second one exits immediately.
    """

    def __init__(self, app: FastAPI, *, host: str, port: int) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._signals_received = 0

    def _build_server(self) -> uvicorn.Server:
        # Records go through the registry's own handlers and redaction
        config = uvicorn.Config(
            self._app,
            host=self._host,
            port=self._port,
            log_level="info",
            log_config=None,
        )
        return uvicorn.Server(config)

    def _on_signal(self, server: uvicorn.Server) -> None:
        self._signals_received += 1
        if self._signals_received == 1:
            logger.info("registry_draining", extra={"port": self._port})
            server.should_exit = True
            return
        logger.warning("registry_killed", extra={"signals": self._signals_received})
        os._exit(1)

    async def run(self) -> None:
        server = self._build_server()
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, server)

        logger.info(
            "registry_serving", extra={"host": self._host, "port": self._port}
        )
        await server.serve()
        logger.info("registry_stopped")
