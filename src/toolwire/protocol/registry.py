"""Schema registry: validates messages by method and serializes them back.

Validation is additive. Known fields are checked; unknown fields are
kept and written back out unchanged by :meth:`SchemaRegistry.dump`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from toolwire.core.errors import SchemaValidationError
from toolwire.protocol.types import (
    CallToolParams,
    CallToolResult,
    InitializeParams,
    InitializeResult,
    LegacyToolResult,
    ListToolsResult,
    PaginatedParams,
    Params,
    Request,
    Result,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

M = TypeVar("M", bound=BaseModel)

_PARAMS_SCHEMAS: dict[str, type[Params]] = {
    "initialize": InitializeParams,
    "tools/list": PaginatedParams,
    "tools/call": CallToolParams,
}

_RESULT_SCHEMAS: dict[str, type[Result]] = {
    "initialize": InitializeResult,
    "tools/list": ListToolsResult,
    "ping": Result,
}


def format_path(loc: Sequence[str | int], prefix: str = "") -> str:
    """Render a validation location as a dotted path (``$`` for the root)."""
    parts = [prefix] if prefix else []
    parts.extend(str(p) for p in loc)
    return ".".join(parts) if parts else "$"


class SchemaRegistry:
    """Per-method request params and result schemas.

    ``tools/call`` results are a two-dialect union handled by
    :meth:`validate_tool_result`. Unknown methods validate against the
    base :class:`Result`.
    """

    def __init__(self) -> None:
        self._params: dict[str, type[Params]] = dict(_PARAMS_SCHEMAS)
        self._results: dict[str, type[Result]] = dict(_RESULT_SCHEMAS)

    def register(
        self,
        method: str,
        *,
        params: type[Params] | None = None,
        result: type[Result] | None = None,
    ) -> None:
        """Add or replace the schemas for *method*."""
        if params is not None:
            self._params[method] = params
        if result is not None:
            self._results[method] = result

    def result_schema(self, method: str) -> type[Result]:
        return self._results.get(method, Result)

    # ── Validation ───────────────────────────────────────────────

    def validate(self, model: type[M], payload: Any, *, path: str = "") -> M:
        """Validate *payload* against *model*.

        Raises:
            SchemaValidationError: Naming the first failing path.
        """
        if isinstance(payload, model):
            return payload
        try:
            return model.model_validate(payload, by_alias=True, by_name=False)
        except ValidationError as e:
            first = e.errors()[0]
            raise SchemaValidationError(format_path(first["loc"], path), first["msg"]) from e

    def validate_request(self, request: Request | Mapping[str, Any]) -> Request:
        """Validate an outbound request (or notification) before sending."""
        if not isinstance(request, Request):
            request = self.validate(Request, request)
        params_model = self._params.get(request.method)
        if params_model is None:
            return request
        if request.params is None:
            self.validate(params_model, {}, path="params")
            return request
        params = self.validate(params_model, self.dump(request.params), path="params")
        return request.model_copy(update={"params": params})

    def validate_result(self, method: str, payload: Any) -> Result:
        """Validate an inbound result for the request *method*."""
        if method == "tools/call":
            return self.validate_tool_result(payload)
        return self.validate(self.result_schema(method), payload)

    def validate_tool_result(self, payload: Any) -> CallToolResult | LegacyToolResult:
        """Trial-match the two ``tools/call`` result dialects.

        The ``content[]`` dialect is tried first and wins whenever it
        validates. The legacy dialect needs a ``toolResult`` key.
        """
        try:
            return self.validate(CallToolResult, payload)
        except SchemaValidationError:
            if isinstance(payload, Mapping) and "toolResult" in payload:
                return self.validate(LegacyToolResult, payload)
            raise

    # ── Serialization ────────────────────────────────────────────

    @staticmethod
    def dump(message: BaseModel) -> dict[str, Any]:
        """Serialize with wire names, keeping extras, omitting unset fields."""
        return message.model_dump(mode="json", by_alias=True, exclude_unset=True)


default_registry = SchemaRegistry()
