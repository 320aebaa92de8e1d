"""Configuration loading and validation."""

from toolwire.config.loader import find_config_file, load_config
from toolwire.config.schema import (
    ClientConfig,
    LoggingConfig,
    PaginationConfig,
    RequestsConfig,
    ServerConfig,
    ToolwireConfig,
)

__all__ = [
    "ClientConfig",
    "LoggingConfig",
    "PaginationConfig",
    "RequestsConfig",
    "ServerConfig",
    "ToolwireConfig",
    "find_config_file",
    "load_config",
]
