"""McpDispatcher — map inbound JSON-RPC requests onto compiled tools.

The dispatcher is stateless per request. The only shared state is the tool
cache behind the :class:`ToolSource`, and each ``tools/call`` makes one
outbound request through the :class:`RequestExecutor`.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from openapi_mcp.protocols.errors import ToolNotFoundError
from openapi_mcp.protocols.mcp.content import extract_payload, to_content_block
from openapi_mcp.protocols.mcp.models import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    UNHANDLED_ERROR,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
)
from openapi_mcp.utils.telemetry import (
    ATTR_HTTP_STATUS,
    ATTR_RPC_BATCH_SIZE,
    ATTR_RPC_METHOD,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import ToolDescriptor
    from openapi_mcp.protocols.http.executor import RequestExecutor
    from openapi_mcp.sdk.models import Credentials

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

INVALID_PARAMS = -32602
STACK_LINES = 5
NO_DESCRIPTION = "No description provided"
_EMPTY_INPUT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}, "required": []}


class ToolSource(Protocol):
    """Anything that can resolve the currently active tool set."""

    async def active_tools(self) -> list[ToolDescriptor]: ...


class McpDispatcher:
    """Routes ``initialize``, ``tools/list``, ``tools/call`` and ``ping``.

    Usage::

        dispatcher = McpDispatcher(service, RequestExecutor(), credentials)
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1, "method": "ping"})
        responses = await dispatcher.dispatch([req_a, req_b])   # batch, same order
    """

    def __init__(
        self,
        tool_source: ToolSource,
        executor: RequestExecutor,
        credentials: Credentials,
        *,
        server_info: ServerInfo | None = None,
    ) -> None:
        self._tool_source = tool_source
        self._executor = executor
        self._credentials = credentials
        self._server_info = server_info or ServerInfo()

    async def dispatch(self, payload: Any) -> dict[str, Any] | list[dict[str, Any]]:
        """Handle one request object or an ordered batch of them.

        Resolving the tool set is the only step allowed to raise: it fails
        when no tools were ever loaded and the source is unreachable.
        """
        tools = await self._tool_source.active_tools()

        if not isinstance(payload, list):
            try:
                response = await self.handle_raw(payload, tools)
            except Exception as exc:
                response = _unhandled(payload, exc)
            return response.to_wire()

        with _tracer.start_as_current_span("rpc.batch") as span:
            span.set_attribute(ATTR_RPC_BATCH_SIZE, len(payload))
            outcomes = await asyncio.gather(
                *[self.handle_raw(item, tools) for item in payload],
                return_exceptions=True,
            )

        responses: list[dict[str, Any]] = []
        for item, outcome in zip(payload, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                outcome = _unhandled(item, outcome)
            responses.append(outcome.to_wire())
        return responses

    async def handle_raw(self, raw: Any, tools: list[ToolDescriptor]) -> JsonRpcResponse:
        """Validate an untyped request object, then :meth:`handle` it."""
        if not isinstance(raw, dict):
            return JsonRpcResponse.failure(None, INVALID_REQUEST, "Invalid Request")
        try:
            request = JsonRpcRequest.model_validate(raw)
        except ValidationError as exc:
            return JsonRpcResponse.failure(_request_id(raw), INVALID_REQUEST, "Invalid Request", str(exc))
        return await self.handle(request, tools)

    async def handle(self, request: JsonRpcRequest, tools: list[ToolDescriptor]) -> JsonRpcResponse:
        """Produce the response for a single request against *tools*."""
        if request.method == "initialize":
            return JsonRpcResponse.success(
                request.id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": self._server_info.model_dump(),
                },
            )
        if request.method == "tools/list":
            return JsonRpcResponse.success(request.id, {"tools": [_list_entry(t) for t in tools]})
        if request.method == "tools/call":
            return await self._call_tool(request, tools)
        if request.method == "ping":
            return JsonRpcResponse.success(request.id, {})
        return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, f"Method '{request.method}' not found")

    async def _call_tool(self, request: JsonRpcRequest, tools: list[ToolDescriptor]) -> JsonRpcResponse:
        params = request.params or {}
        try:
            tool = _find_tool(tools, params.get("name"))
        except ToolNotFoundError as exc:
            return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, str(exc))

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return JsonRpcResponse.failure(request.id, INVALID_PARAMS, "Invalid params: 'arguments' must be an object")

        with _tracer.start_as_current_span("tools.call") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            try:
                result = await self._executor.execute(
                    tool,
                    arguments,
                    self._credentials.base_url,
                    self._credentials.token,
                )
            except Exception as exc:
                logger.warning("Tool %s failed: %s", tool.name, exc)
                return JsonRpcResponse.failure(
                    request.id,
                    INTERNAL_ERROR,
                    str(exc) or "Internal error",
                    {"message": str(exc), "stack": _short_stack(exc)},
                )
            span.set_attribute(ATTR_HTTP_STATUS, result.status)

        block = to_content_block(extract_payload(result.data))
        content: dict[str, Any] = {"content": [block.model_dump(by_alias=True)]}
        if not result.success:
            content["isError"] = True
        return JsonRpcResponse.success(request.id, content)


def _find_tool(tools: list[ToolDescriptor], name: Any) -> ToolDescriptor:
    for tool in tools:
        if tool.name == name:
            return tool
    raise ToolNotFoundError(str(name))


def _list_entry(tool: ToolDescriptor) -> dict[str, Any]:
    entry = tool.to_mcp()
    entry["description"] = entry.get("description") or NO_DESCRIPTION
    schema = entry.get("inputSchema")
    if not isinstance(schema, dict) or schema.get("type") != "object":
        entry["inputSchema"] = dict(_EMPTY_INPUT_SCHEMA)
    return entry


def _request_id(raw: Any) -> Any:
    return raw.get("id") if isinstance(raw, dict) else None


def _short_stack(exc: BaseException) -> list[str]:
    lines = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).splitlines()
    return lines[:STACK_LINES]


def _unhandled(raw: Any, exc: BaseException) -> JsonRpcResponse:
    logger.error("Unhandled error while dispatching %r: %s", _request_id(raw), exc)
    return JsonRpcResponse.failure(_request_id(raw), UNHANDLED_ERROR, "Unhandled handler error", str(exc))
