"""Tool proxies: validated local callables for remote tools.

Each proxy is a closure over ``{name, input schema, session}`` kept in a
dict keyed by tool name. Input schemas are interpreted, never compiled:
JSON Schema dicts go through :mod:`jsonschema`, pydantic model classes
through ``model_validate``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

from jsonschema import Draft202012Validator, validators
from jsonschema.exceptions import SchemaError, best_match
from pydantic import BaseModel, ValidationError

from toolwire.core.errors import (
    InputValidationError,
    OutputMappingError,
    SchemaValidationError,
)
from toolwire.protocol.registry import SchemaRegistry, format_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from toolwire.client.session import ToolSession
    from toolwire.core.cancel import RequestOptions
    from toolwire.protocol.content import ToolResult
    from toolwire.protocol.types import ToolDescriptor

logger = logging.getLogger(__name__)

InputSchema: TypeAlias = "dict[str, Any] | type[BaseModel]"
ToolSchemas: TypeAlias = "Mapping[str, Mapping[str, Any]] | Literal['automatic']"
OutputMapper: TypeAlias = "Callable[[ToolResult], Any]"


def _is_model_class(schema: object) -> bool:
    return isinstance(schema, type) and issubclass(schema, BaseModel)


class ToolProxy:
    """A locally callable handle on one remote tool.

    Calling the proxy validates the input, sends ``tools/call`` and
    decodes the reply. Server-reported tool failures come back as a
    :class:`~toolwire.protocol.content.ToolResult` with ``is_error``
    set; only protocol, transport and validation faults raise.
    """

    __slots__ = ("_description", "_mapper", "_model", "_name", "_schema", "_session", "_validator")

    def __init__(
        self,
        name: str,
        input_schema: InputSchema,
        session: ToolSession,
        *,
        description: str | None = None,
        output_mapper: OutputMapper | None = None,
    ) -> None:
        self._name = name
        self._description = description
        self._session = session
        self._mapper = output_mapper
        self._model: type[BaseModel] | None = None
        self._validator: Any = None

        if _is_model_class(input_schema):
            self._model = input_schema  # type: ignore[assignment]
            self._schema: dict[str, Any] = input_schema.model_json_schema()  # type: ignore[union-attr]
        else:
            self._schema = dict(input_schema)  # type: ignore[arg-type]
            cls = validators.validator_for(self._schema, default=Draft202012Validator)
            try:
                cls.check_schema(self._schema)
            except SchemaError as e:
                path = format_path(list(e.absolute_path), f"{name}.inputSchema")
                raise SchemaValidationError(path, e.message) from e
            self._validator = cls(self._schema)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        """The JSON Schema the input is validated against."""
        return self._schema

    def validate_input(self, arguments: Mapping[str, Any] | BaseModel | None) -> dict[str, Any]:
        """Check *arguments* against the input schema.

        Returns:
            The arguments as a JSON-ready dict.

        Raises:
            InputValidationError: Naming the tool and the failing path.
        """
        if arguments is None:
            arguments = {}
        if self._model is not None:
            try:
                model = (
                    arguments
                    if isinstance(arguments, self._model)
                    else self._model.model_validate(arguments)
                )
            except ValidationError as e:
                first = e.errors()[0]
                path = format_path(first["loc"])
                raise InputValidationError(self._name, path, first["msg"]) from e
            return model.model_dump(mode="json", by_alias=True)

        if isinstance(arguments, BaseModel):
            arguments = arguments.model_dump(mode="json", by_alias=True)
        payload = dict(arguments)
        error = best_match(self._validator.iter_errors(payload))
        if error is not None:
            path = format_path(list(error.absolute_path))
            raise InputValidationError(self._name, path, error.message)
        return payload

    async def execute(
        self,
        arguments: Mapping[str, Any] | BaseModel | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> Any:
        """Validate, call the tool, and decode (and map) the result.

        Returns:
            The normalized :class:`ToolResult`, or the output mapper's
            return value for successful results when a mapper is set.

        Raises:
            InputValidationError: Input rejected; nothing was sent.
            OutputMappingError: The output mapper raised.
            Cancelled, TimedOut: Stopped waiting for the reply.
        """
        payload = self.validate_input(arguments)
        logger.debug("Calling tool %s", self._name)
        result = await self._session.call_tool(self._name, payload, options=options)
        if result.is_error:
            logger.debug("Tool %s reported an error", self._name)
            return result
        if self._mapper is None:
            return result
        try:
            return self._mapper(result)
        except Exception as e:
            msg = f"Output mapping failed: {e}"
            raise OutputMappingError(self._name, msg) from e

    async def __call__(
        self,
        arguments: Mapping[str, Any] | BaseModel | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> Any:
        return await self.execute(arguments, options=options)

    def __repr__(self) -> str:
        return f"ToolProxy(name={self._name!r})"


def _explicit_schema(name: str, entry: Mapping[str, Any]) -> InputSchema:
    try:
        return entry["inputSchema"]  # type: ignore[no-any-return]
    except KeyError:
        msg = f"Schema entry for tool {name!r} has no 'inputSchema'"
        raise ValueError(msg) from None


def generate_proxies(
    session: ToolSession,
    catalog: Iterable[ToolDescriptor],
    schemas: ToolSchemas = "automatic",
    *,
    output_mappers: Mapping[str, OutputMapper] | None = None,
) -> dict[str, ToolProxy]:
    """Build one :class:`ToolProxy` per catalog entry.

    In ``"automatic"`` mode every catalog tool is exposed with its
    server-declared input schema. With an explicit mapping only the
    named tools are exposed, validated against the local schemas.
    Explicitly named tools absent from the catalog are skipped.
    """
    mappers = output_mappers or {}
    proxies: dict[str, ToolProxy] = {}
    for tool in catalog:
        if schemas == "automatic":
            input_schema: InputSchema = SchemaRegistry.dump(tool.input_schema)
        elif tool.name in schemas:
            input_schema = _explicit_schema(tool.name, schemas[tool.name])
        else:
            continue
        proxies[tool.name] = ToolProxy(
            tool.name,
            input_schema,
            session,
            description=tool.description,
            output_mapper=mappers.get(tool.name),
        )

    if schemas != "automatic":
        for missing in sorted(set(schemas) - set(proxies)):
            logger.debug("Tool %s is not offered by the server; skipped", missing)
    return proxies
