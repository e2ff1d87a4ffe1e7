"""Configuration models using Pydantic."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from registry.config.paths import get_database_path

logger = logging.getLogger(__name__)

DEFAULT_REGIONS: tuple[str, ...] = (
    "Moscow",
    "Saint Petersburg",
    "Novosibirsk",
    "Yekaterinburg",
    "Kazan",
    "Nizhny Novgorod",
    "Samara",
    "Omsk",
)


class DatabaseConfig(BaseModel):
    """Configuration for the relational store.

    ``url`` takes precedence over ``path`` when both are set.
    """

    url: str | None = None
    path: Path = Field(default_factory=get_database_path)
    echo: bool = False
    regions: list[str] = Field(default_factory=lambda: list(DEFAULT_REGIONS))

    @property
    def resolved_url(self) -> str:
        if self.url:
            return self.url
        return f"sqlite+aiosqlite:///{self.path}"


class ServerConfig(BaseModel):
    """Configuration for HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080


class PagingConfig(BaseModel):
    """Limits applied by the HTTP adapter to list requests."""

    max_page_size: int = Field(default=100, ge=1)


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False
    retention_days: int = Field(default=7, ge=1)
    redact_pii: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class ConfigError(Exception):
    """Configuration error."""

    pass


class RegistryConfig(BaseModel):
    """Root configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _validate_regions(self) -> "RegistryConfig":
        """Region names are seeded verbatim, so they must be unique and short."""
        seen: set[str] = set()
        for name in self.database.regions:
            if not name or len(name) > 20:
                raise ValueError(f"Invalid region name: {name!r}")
            if name in seen:
                raise ValueError(f"Duplicate region name: {name!r}")
            seen.add(name)
        return self
