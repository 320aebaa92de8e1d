"""Tests for the core error hierarchy."""

from toolwire.core.errors import (
    Cancelled,
    ConfigError,
    InputValidationError,
    OperationAborted,
    OutputMappingError,
    PaginationLoopError,
    ProtocolError,
    ProtocolVersionMismatch,
    RemoteError,
    SchemaValidationError,
    SessionClosedError,
    TimedOut,
    ToolCallError,
    ToolwireError,
    TransportError,
    UnsupportedCapabilityError,
)


class TestHierarchy:
    """All errors inherit from ToolwireError."""

    def test_protocol_subclasses(self):
        errors = [
            ProtocolVersionMismatch(("2025-06-18",), "1999-01-01"),
            SchemaValidationError("content.0", "bad"),
            PaginationLoopError("c1"),
            UnsupportedCapabilityError("tools", "tools/list"),
            RemoteError(-32601, "Method not found"),
        ]
        for err in errors:
            assert isinstance(err, ProtocolError)
            assert isinstance(err, ToolwireError)

    def test_tool_call_subclasses(self):
        assert isinstance(InputValidationError("search", "query", "too short"), ToolCallError)
        assert isinstance(OutputMappingError("search", "boom"), ToolCallError)

    def test_aborted_subclasses(self):
        assert isinstance(Cancelled("stop"), OperationAborted)
        assert isinstance(TimedOut(1.0), OperationAborted)
        assert isinstance(TimedOut(1.0), ToolwireError)

    def test_lifecycle_errors(self):
        assert isinstance(TransportError("down"), ToolwireError)
        assert isinstance(SessionClosedError("closed"), ToolwireError)
        assert isinstance(ConfigError("bad"), ToolwireError)

    def test_timed_out_is_not_builtin_timeout(self):
        """TimedOut does not shadow Python's built-in TimeoutError."""
        assert not isinstance(TimedOut(1.0), TimeoutError)


class TestAttributes:
    def test_version_mismatch_carries_both_sides(self):
        err = ProtocolVersionMismatch(["2025-06-18", "2024-11-05"], "2023-01-01")
        assert err.supported == ("2025-06-18", "2024-11-05")
        assert err.offered == "2023-01-01"
        assert "2023-01-01" in str(err)
        assert "2024-11-05" in str(err)

    def test_schema_error_names_path(self):
        err = SchemaValidationError("tools.0.name", "Field required")
        assert err.path == "tools.0.name"
        assert "tools.0.name" in str(err)

    def test_input_error_names_tool_and_path(self):
        err = InputValidationError("search", "query", "too short")
        assert err.tool_name == "search"
        assert err.path == "query"
        assert str(err).startswith("[search]")

    def test_pagination_loop_default_message(self):
        err = PaginationLoopError("c1")
        assert err.cursor == "c1"
        assert "c1" in str(err)

    def test_pagination_loop_custom_message(self):
        err = PaginationLoopError("c9", "too many pages")
        assert str(err) == "too many pages"

    def test_remote_error(self):
        err = RemoteError(-32602, "Invalid params", {"field": "name"})
        assert err.code == -32602
        assert err.data == {"field": "name"}
        assert "-32602" in str(err)

    def test_timed_out_message(self):
        assert "2.5s" in str(TimedOut(2.5))
        assert TimedOut().timeout is None

    def test_unsupported_capability(self):
        err = UnsupportedCapabilityError("tools", "tools/call")
        assert err.capability == "tools"
        assert err.method == "tools/call"
