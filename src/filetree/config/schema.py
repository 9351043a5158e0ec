"""
Pydantic models for filetree configuration.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "warn", "error"] = "info"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class SourceConfig(BaseModel):
    """Where the index is populated from."""

    entries: Path | None = Field(
        default=None,
        description="JSON-lines entry dump scanned for file nodes",
    )

    model_config = {"extra": "forbid"}


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)

    model_config = {"extra": "forbid"}


class RemoteConfig(BaseModel):
    """Remote filetree server used instead of a local index."""

    url: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    binary: bool = Field(
        default=False,
        description="Request msgpack-encoded responses instead of JSON",
    )

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Root configuration of the application."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)

    model_config = {"extra": "forbid"}
