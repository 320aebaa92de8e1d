"""Locate and read the toolwire config file.

At most one file is read: the first of

    1. the ``path`` argument (``--config`` on the command line)
    2. the file named by ``$TOOLWIRE_CONFIG``
    3. ``toolwire.toml`` in the working directory

With none of them present the model defaults apply. Settings given on
the command line arrive as dotted-key overrides (``{"server.url": ...}``)
and are applied on top of the file before validation.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from toolwire.core.errors import ConfigError

from .schema import ToolwireConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

CONFIG_ENV_VAR = "TOOLWIRE_CONFIG"
LOCAL_CONFIG_NAME = "toolwire.toml"


def find_config_file(path: str | Path | None = None) -> Path | None:
    """Return the config file to read, or None to run on defaults.

    Raises:
        ConfigError: *path* or ``$TOOLWIRE_CONFIG`` names a missing file.
    """
    if path is not None:
        explicit = Path(path)
        if not explicit.is_file():
            msg = f"Config file not found: {explicit}"
            raise ConfigError(msg)
        return explicit

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        named = Path(from_env)
        if not named.is_file():
            msg = f"{CONFIG_ENV_VAR} names a missing file: {from_env}"
            raise ConfigError(msg)
        return named

    local = Path.cwd() / LOCAL_CONFIG_NAME
    return local if local.is_file() else None


def _parse(source: Path) -> dict[str, Any]:
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read {source}: {e}"
        raise ConfigError(msg) from e
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        msg = f"{source} is not valid TOML: {e}"
        raise ConfigError(msg) from e


def _set_dotted(data: dict[str, Any], key: str, value: Any) -> None:
    *tables, leaf = key.split(".")
    node = data
    for table in tables:
        child = node.setdefault(table, {})
        if not isinstance(child, dict):
            msg = f"Cannot set {key!r}: {table!r} is not a table"
            raise ConfigError(msg)
        node = child
    node[leaf] = value


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ToolwireConfig:
    """Read the config file (if any), apply *overrides*, and validate.

    Args:
        path: Explicit config file; skips the env var and local lookup.
        overrides: Dotted keys to values, e.g. ``{"server.url": url}``.

    Raises:
        ConfigError: Missing or unreadable file, bad TOML, or a value
            the schema rejects.
    """
    source = find_config_file(path)
    data = _parse(source) if source is not None else {}
    for key, value in (overrides or {}).items():
        _set_dotted(data, key, value)

    try:
        return ToolwireConfig.model_validate(data)
    except ValidationError as e:
        origin = source if source is not None else "built-in defaults"
        msg = f"Invalid configuration from {origin}: {e}"
        raise ConfigError(msg) from e
