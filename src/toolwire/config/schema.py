"""Pydantic models for toolwire configuration."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from toolwire.core.cancel import RequestOptions
from toolwire.protocol.types import Implementation


class ClientConfig(BaseModel):
    """How this client identifies itself during the handshake."""

    name: str = "toolwire"
    version: str = "0.1.0"

    def implementation(self) -> Implementation:
        return Implementation(name=self.name, version=self.version)


class ServerConfig(BaseModel):
    """Where the tool server lives and how to reach it."""

    url: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    headers_env: dict[str, str] = Field(
        default_factory=dict,
        description="Header name -> env var holding its value (e.g. Authorization tokens)",
    )
    timeout: float = 30.0

    def resolved_headers(self) -> dict[str, str]:
        """Static headers plus any whose env var is set. Static headers win."""
        headers = dict(self.headers)
        for name, env_var in self.headers_env.items():
            value = os.environ.get(env_var)
            if value and name not in headers:
                headers[name] = value
        return headers


class RequestsConfig(BaseModel):
    """Default deadlines applied to every request, in seconds."""

    timeout: float | None = 60.0
    max_total_timeout: float | None = None

    def options(self) -> RequestOptions:
        return RequestOptions(timeout=self.timeout, max_total_timeout=self.max_total_timeout)


class PaginationConfig(BaseModel):
    """Catalog pagination limits."""

    max_pages: int = Field(default=1000, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    file: str = ""


class ToolwireConfig(BaseModel):
    """Top-level configuration for toolwire."""

    client: ClientConfig = Field(default_factory=ClientConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    requests: RequestsConfig = Field(default_factory=RequestsConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
