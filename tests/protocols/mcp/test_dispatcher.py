"""Tests for McpDispatcher routing, tool calls and batches."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from openapi_mcp.openapi.models import ParameterDescriptor, ToolDescriptor
from openapi_mcp.protocols.errors import ConfigurationError, DocumentFetchError
from openapi_mcp.protocols.http.models import ExecutionResult
from openapi_mcp.protocols.mcp.dispatcher import McpDispatcher
from openapi_mcp.protocols.mcp.models import JsonRpcRequest, JsonRpcResponse
from openapi_mcp.sdk.models import Credentials

GET_PET = ToolDescriptor(
    name="get_pet_by_id",
    description="Fetch a pet",
    method="GET",
    path="/pets/{id}",
    parameters=[ParameterDescriptor(name="id", location="path", required=True)],
)
UNDESCRIBED = ToolDescriptor(name="ping_upstream", method="GET", path="/ping")


class StaticSource:
    def __init__(self, tools: list[ToolDescriptor]) -> None:
        self.tools = tools
        self.calls = 0

    async def active_tools(self) -> list[ToolDescriptor]:
        self.calls += 1
        return self.tools


def _result(data: Any, status: int = 200) -> ExecutionResult:
    return ExecutionResult(
        success=200 <= status < 300,
        status=status,
        method="GET",
        url="https://api.example.com/pets/42",
        path="/pets/42",
        data=data,
    )


@pytest.fixture
def executor() -> AsyncMock:
    mock = AsyncMock()
    mock.execute.return_value = _result({"id": 42, "name": "Rex"})
    return mock


@pytest.fixture
def dispatcher(executor: AsyncMock) -> McpDispatcher:
    return McpDispatcher(
        StaticSource([GET_PET, UNDESCRIBED]),
        executor,
        Credentials(base_url="https://api.example.com", token="secret"),
    )


class ExplodingDispatcher(McpDispatcher):
    async def handle(self, request: JsonRpcRequest, tools: list[ToolDescriptor]) -> JsonRpcResponse:
        if request.method == "boom":
            raise RuntimeError("handler bug")
        return await super().handle(request, tools)


def _call(request_id: Any, name: str, arguments: Any = None) -> dict[str, Any]:
    params: dict[str, Any] = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}


class TestRouting:
    async def test_initialize(self, dispatcher: McpDispatcher) -> None:
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})
        assert response == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "protocolVersion": "2024-11-05",
                "capabilities": {"tools": {}},
                "serverInfo": {"name": "openapi-mcp-server", "version": "0.1.0"},
            },
        }

    async def test_ping(self, dispatcher: McpDispatcher) -> None:
        assert await dispatcher.dispatch({"jsonrpc": "2.0", "id": "p", "method": "ping"}) == {
            "jsonrpc": "2.0",
            "id": "p",
            "result": {},
        }

    async def test_unknown_method(self, dispatcher: McpDispatcher) -> None:
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
        assert response["error"] == {"code": -32601, "message": "Method 'resources/list' not found"}

    async def test_tools_list(self, dispatcher: McpDispatcher) -> None:
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        tools = response["result"]["tools"]  # type: ignore[index,call-overload]
        assert [t["name"] for t in tools] == ["get_pet_by_id", "ping_upstream"]
        assert tools[0]["description"] == "Fetch a pet"
        assert tools[1]["description"] == "No description provided"
        assert tools[0]["inputSchema"]["type"] == "object"
        assert tools[0]["x-props"]["path"] == "/pets/{id}"

    async def test_invalid_request_objects(self, dispatcher: McpDispatcher) -> None:
        assert (await dispatcher.dispatch("nope"))["error"]["code"] == -32600  # type: ignore[call-overload]
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 9, "params": {}})
        assert response["error"]["code"] == -32600  # type: ignore[call-overload]
        assert response["id"] == 9  # type: ignore[call-overload]

    async def test_unhandled_error_in_single_request(self, executor: AsyncMock) -> None:
        dispatcher = ExplodingDispatcher(StaticSource([GET_PET]), executor, Credentials())
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 7, "method": "boom"})
        assert response == {
            "jsonrpc": "2.0",
            "id": 7,
            "error": {"code": -32000, "message": "Unhandled handler error", "data": "handler bug"},
        }


class TestToolsCall:
    async def test_success(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        response = await dispatcher.dispatch(_call(5, "get_pet_by_id", {"id": 42}))

        executor.execute.assert_awaited_once_with(GET_PET, {"id": 42}, "https://api.example.com", "secret")
        content = response["result"]["content"]  # type: ignore[call-overload]
        assert len(content) == 1
        assert content[0]["type"] == "text"
        assert '"name": "Rex"' in content[0]["text"]
        assert "isError" not in response["result"]  # type: ignore[call-overload]

    async def test_missing_arguments_default_to_empty(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        await dispatcher.dispatch(_call(5, "get_pet_by_id"))
        assert executor.execute.await_args.args[1] == {}

    async def test_data_envelope_unwrapped(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        executor.execute.return_value = _result({"data": "just text"})
        response = await dispatcher.dispatch(_call(1, "get_pet_by_id", {"id": 1}))
        assert response["result"]["content"] == [{"type": "text", "text": "just text"}]  # type: ignore[call-overload]

    async def test_image_content(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        executor.execute.return_value = _result({"__mcp_type": "image", "base64": "iVBOR"})
        response = await dispatcher.dispatch(_call(1, "get_pet_by_id", {"id": 1}))
        assert response["result"]["content"] == [  # type: ignore[call-overload]
            {"type": "image", "data": "iVBOR", "mimeType": "image/png"}
        ]

    async def test_upstream_error_flagged(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        executor.execute.return_value = _result({"error": "not found"}, status=404)
        response = await dispatcher.dispatch(_call(1, "get_pet_by_id", {"id": 1}))
        assert response["result"]["isError"] is True  # type: ignore[call-overload]
        assert "not found" in response["result"]["content"][0]["text"]  # type: ignore[call-overload]

    async def test_unknown_tool(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        response = await dispatcher.dispatch(_call("abc", "nope"))
        assert response == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": -32601, "message": "Tool 'nope' not found"},
        }
        executor.execute.assert_not_awaited()

    async def test_non_object_arguments(self, dispatcher: McpDispatcher) -> None:
        response = await dispatcher.dispatch(_call(1, "get_pet_by_id", [1, 2]))
        assert response["error"]["code"] == -32602  # type: ignore[call-overload]

    async def test_executor_failure_is_internal_error(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        executor.execute.side_effect = ConfigurationError("Missing baseUrl in credentials")
        response = await dispatcher.dispatch(_call(4, "get_pet_by_id", {"id": 1}))

        error = response["error"]  # type: ignore[call-overload]
        assert error["code"] == -32603
        assert error["message"] == "Missing baseUrl in credentials"
        assert error["data"]["message"] == "Missing baseUrl in credentials"
        assert 0 < len(error["data"]["stack"]) <= 5
        assert response["id"] == 4  # type: ignore[call-overload]


class TestBatch:
    async def test_three_item_batch_isolated_and_ordered(self, dispatcher: McpDispatcher, executor: AsyncMock) -> None:
        async def execute(tool: ToolDescriptor, args: dict[str, Any], *_: Any) -> ExecutionResult:
            if args.get("id") == 2:
                raise RuntimeError("upstream exploded")
            return _result({"id": args["id"]})

        executor.execute.side_effect = execute
        responses = await dispatcher.dispatch(
            [
                _call(1, "get_pet_by_id", {"id": 1}),
                _call(2, "get_pet_by_id", {"id": 2}),
                _call(3, "get_pet_by_id", {"id": 3}),
            ]
        )

        assert isinstance(responses, list)
        assert [r["id"] for r in responses] == [1, 2, 3]
        assert "result" in responses[0]
        assert responses[1]["error"]["code"] == -32603
        assert "result" in responses[2]

    async def test_unknown_tool_in_middle_of_batch(self, dispatcher: McpDispatcher) -> None:
        responses = await dispatcher.dispatch(
            [
                _call(1, "get_pet_by_id", {"id": 1}),
                _call(2, "missing_tool", {}),
                _call(3, "get_pet_by_id", {"id": 3}),
            ]
        )

        assert len(responses) == 3
        assert "result" in responses[0]
        assert responses[1] == {
            "jsonrpc": "2.0",
            "id": 2,
            "error": {"code": -32601, "message": "Tool 'missing_tool' not found"},
        }
        assert "result" in responses[2]

    async def test_unhandled_item_error_becomes_synthetic_response(self, executor: AsyncMock) -> None:
        dispatcher = ExplodingDispatcher(StaticSource([GET_PET]), executor, Credentials())
        responses = await dispatcher.dispatch(
            [
                {"jsonrpc": "2.0", "id": "a", "method": "ping"},
                {"jsonrpc": "2.0", "id": "b", "method": "boom"},
                "garbage",
            ]
        )

        assert responses[0] == {"jsonrpc": "2.0", "id": "a", "result": {}}
        assert responses[1]["id"] == "b"  # type: ignore[index]
        assert responses[1]["error"]["code"] == -32000  # type: ignore[index]
        assert responses[1]["error"]["message"] == "Unhandled handler error"  # type: ignore[index]
        assert responses[2]["error"]["code"] == -32600  # type: ignore[index]

    async def test_tools_resolved_once_per_dispatch(self, executor: AsyncMock) -> None:
        source = StaticSource([GET_PET])
        dispatcher = McpDispatcher(source, executor, Credentials())
        await dispatcher.dispatch([{"jsonrpc": "2.0", "id": i, "method": "tools/list"} for i in range(3)])
        assert source.calls == 1

    async def test_empty_batch(self, dispatcher: McpDispatcher) -> None:
        assert await dispatcher.dispatch([]) == []


class TestToolResolution:
    async def test_unavailable_tools_propagate(self, executor: AsyncMock) -> None:
        source = AsyncMock()
        source.active_tools.side_effect = DocumentFetchError("https://x", "HTTP 500")
        dispatcher = McpDispatcher(source, executor, Credentials())
        with pytest.raises(DocumentFetchError):
            await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1, "method": "ping"})
