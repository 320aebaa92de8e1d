"""Tests for the CLI commands: argument parsing, output formatting, errors."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tests.fixtures.transports import (
    ECHO_TOOL,
    INIT_RESULT,
    SEARCH_TOOL,
    FakeTransport,
    text_result,
)
from toolwire.cli.app import _create_session, cli
from toolwire.client.session import ToolSession
from toolwire.client.transport import HttpTransport
from toolwire.config.schema import ToolwireConfig


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _config(url: str | None = "http://tools.test/rpc") -> ToolwireConfig:
    return ToolwireConfig.model_validate({"server": {"url": url}})


def _fake_session(handlers: dict[str, Any], **kwargs: Any) -> Any:
    """Stand-in for ``_create_session`` backed by a FakeTransport."""

    def _make(config: ToolwireConfig) -> ToolSession:
        return ToolSession(FakeTransport(handlers, **kwargs))

    return _make


# ── CLI group ────────────────────────────────────────────────────


class TestCliGroup:
    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli)
        assert result.exit_code == 0
        assert "inspect and call tools" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "toolwire" in result.output
        assert "0.1.0" in result.output

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("info", "tools", "call"):
            assert command in result.output


# ── Session construction ─────────────────────────────────────────


class TestCreateSession:
    def test_builds_http_session(self) -> None:
        config = ToolwireConfig.model_validate(
            {
                "server": {"url": "http://tools.test/rpc", "headers": {"X-Team": "a"}},
                "pagination": {"max_pages": 7},
            }
        )
        session = _create_session(config)
        assert isinstance(session._transport, HttpTransport)
        assert session._transport.url == "http://tools.test/rpc"
        assert session._max_pages == 7

    def test_headers_resolved_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLWIRE_TOKEN", "Bearer abc")
        config = ToolwireConfig.model_validate(
            {
                "server": {
                    "url": "http://tools.test/rpc",
                    "headers_env": {"Authorization": "TOOLWIRE_TOKEN"},
                },
            }
        )
        session = _create_session(config)
        assert session._transport._client.headers["Authorization"] == "Bearer abc"

    @patch("toolwire.cli.app.load_config")
    def test_missing_url(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config(url=None)
        result = runner.invoke(cli, ["tools"])
        assert result.exit_code == 1
        assert "No server URL configured" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_url_option_becomes_override(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        with patch("toolwire.cli.app._create_session", _fake_session({})):
            runner.invoke(cli, ["--url", "http://other/rpc", "info"])
        assert mock_config.call_args.kwargs["overrides"] == {"server.url": "http://other/rpc"}


# ── info command ─────────────────────────────────────────────────


class TestInfoCommand:
    @patch("toolwire.cli.app.load_config")
    def test_shows_server(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        init = {**INIT_RESULT, "instructions": "Use search first"}
        with patch("toolwire.cli.app._create_session", _fake_session({}, init_result=init)):
            result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "fake-server 1.0.0" in result.output
        assert "2025-06-18" in result.output
        assert "Use search first" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_version_mismatch_is_reported(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        init = {**INIT_RESULT, "protocolVersion": "1999-01-01"}
        with patch("toolwire.cli.app._create_session", _fake_session({}, init_result=init)):
            result = runner.invoke(cli, ["info"])

        assert result.exit_code == 1
        assert "1999-01-01" in result.output


# ── tools command ────────────────────────────────────────────────


class TestToolsCommand:
    @patch("toolwire.cli.app.load_config")
    def test_lists_tools(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        handlers = {"tools/list": {"tools": [SEARCH_TOOL, ECHO_TOOL]}}
        with patch("toolwire.cli.app._create_session", _fake_session(handlers)):
            result = runner.invoke(cli, ["tools"])

        assert result.exit_code == 0
        assert "search" in result.output
        assert "echo" in result.output
        assert "query" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_empty_catalog(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        empty = _fake_session({"tools/list": {"tools": []}})
        with patch("toolwire.cli.app._create_session", empty):
            result = runner.invoke(cli, ["tools"])

        assert result.exit_code == 0
        assert "No tools offered." in result.output


# ── call command ─────────────────────────────────────────────────


class TestCallCommand:
    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["call", "--help"])
        assert result.exit_code == 0
        assert "NAME" in result.output
        assert "--args" in result.output

    def test_invalid_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["call", "search", "--args", "{nope"])
        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_non_object_args(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["call", "search", "--args", "[1, 2]"])
        assert result.exit_code == 2
        assert "JSON object" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_successful_call(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        handlers = {
            "tools/list": {"tools": [SEARCH_TOOL]},
            "tools/call": text_result("3 documents found"),
        }
        with patch("toolwire.cli.app._create_session", _fake_session(handlers)):
            result = runner.invoke(cli, ["call", "search", "--args", '{"query": "x"}'])

        assert result.exit_code == 0
        assert "search (ok)" in result.output
        assert "3 documents found" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_error_result_exits_nonzero(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        handlers = {
            "tools/list": {"tools": [SEARCH_TOOL]},
            "tools/call": text_result("index offline", is_error=True),
        }
        with patch("toolwire.cli.app._create_session", _fake_session(handlers)):
            result = runner.invoke(cli, ["call", "search", "--args", '{"query": "x"}'])

        assert result.exit_code == 1
        assert "search (error)" in result.output
        assert "index offline" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_invalid_input_rejected(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        handlers = {"tools/list": {"tools": [SEARCH_TOOL]}, "tools/call": text_result("x")}
        with patch("toolwire.cli.app._create_session", _fake_session(handlers)):
            result = runner.invoke(cli, ["call", "search", "--args", '{"query": ""}'])

        assert result.exit_code == 1
        assert "[search] Invalid input at query" in result.output

    @patch("toolwire.cli.app.load_config")
    def test_unknown_tool(self, mock_config: Any, runner: CliRunner) -> None:
        mock_config.return_value = _config()
        with patch(
            "toolwire.cli.app._create_session",
            _fake_session({"tools/list": {"tools": [SEARCH_TOOL]}}),
        ):
            result = runner.invoke(cli, ["call", "missing"])

        assert result.exit_code == 1
        assert "Unknown tool: missing" in result.output
