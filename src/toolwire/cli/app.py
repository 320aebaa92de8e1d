"""Main CLI application.

Click commands for inspecting a tool server: info, tools, call.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any

import click

from toolwire import __version__
from toolwire.config.loader import load_config
from toolwire.core.cancel import RequestOptions
from toolwire.core.errors import ConfigError, ToolwireError

if TYPE_CHECKING:
    from toolwire.cli.display import SessionDisplay
    from toolwire.client.session import ToolSession
    from toolwire.config.schema import LoggingConfig, ToolwireConfig


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None, url: str | None) -> ToolwireConfig:
    """Load config with user-friendly error handling."""
    overrides: dict[str, Any] = {"server.url": url} if url else {}
    try:
        return load_config(path=config_path, overrides=overrides)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


def setup_logging(config: LoggingConfig, *, verbose: bool = False) -> None:
    """Configure the root logger from the logging section."""
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        filename=config.file or None,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _create_session(config: ToolwireConfig) -> ToolSession:
    """Build an uninitialized session over HTTP from config."""
    from toolwire.client.session import ToolSession
    from toolwire.client.transport import HttpTransport

    assert config.server.url is not None

    transport = HttpTransport(
        config.server.url,
        headers=config.server.resolved_headers(),
        timeout=config.server.timeout,
    )
    return ToolSession(
        transport,
        client_info=config.client.implementation(),
        default_options=config.requests.options(),
        max_pages=config.pagination.max_pages,
    )


def _display() -> SessionDisplay:
    from toolwire.cli.display import SessionDisplay

    return SessionDisplay()


# ── CLI group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="toolwire")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.option("--url", default=None, help="Tool server URL (overrides config).")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, url: str | None, verbose: bool) -> None:
    """toolwire - inspect and call tools on a remote tool server."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["url"] = url
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _prepare(ctx: click.Context) -> ToolwireConfig:
    config = _load_config(ctx.obj["config_path"], ctx.obj["url"])
    setup_logging(config.logging, verbose=ctx.obj["verbose"])
    if not config.server.url:
        _error("No server URL configured. Pass --url or set server.url.")
    return config


# ── info ─────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show server identity, protocol version and capabilities."""
    config = _prepare(ctx)
    try:
        asyncio.run(_info_async(config))
    except ToolwireError as e:
        _error(str(e))


async def _info_async(config: ToolwireConfig) -> None:
    async with _create_session(config) as session:
        _display().show_server(
            session.server_info,
            session.protocol_version,
            session.capabilities,
            session.instructions,
        )


# ── tools ────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def tools(ctx: click.Context) -> None:
    """List every tool the server offers."""
    config = _prepare(ctx)
    try:
        asyncio.run(_tools_async(config))
    except ToolwireError as e:
        _error(str(e))


async def _tools_async(config: ToolwireConfig) -> None:
    async with _create_session(config) as session:
        catalog = await session.list_all_tools()
    _display().show_tools(catalog)


# ── call ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--args", "args_json", default="{}", help="Tool input as a JSON object.")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for the result.")
@click.pass_context
def call(ctx: click.Context, name: str, args_json: str, timeout: float | None) -> None:
    """Call tool NAME with validated input and show the result."""
    try:
        arguments = json.loads(args_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args") from e
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")

    config = _prepare(ctx)
    try:
        is_error = asyncio.run(_call_async(config, name, arguments, timeout))
    except ToolwireError as e:
        _error(str(e))
        return
    if is_error:
        sys.exit(1)


async def _call_async(
    config: ToolwireConfig,
    name: str,
    arguments: dict[str, Any],
    timeout: float | None,
) -> bool:
    """Run one tool call. Returns True when the tool reported an error."""
    async with _create_session(config) as session:
        proxies = await session.tools()
        proxy = proxies.get(name)
        if proxy is None:
            msg = f"Unknown tool: {name}"
            raise ToolwireError(msg)
        result = await proxy.execute(arguments, options=RequestOptions(timeout=timeout))
    _display().show_result(name, result)
    return bool(result.is_error)
