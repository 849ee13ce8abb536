"""MCP protocol — JSON-RPC dispatcher serving compiled OpenAPI tools."""

from openapi_mcp.protocols.mcp.content import extract_payload, to_content_block
from openapi_mcp.protocols.mcp.dispatcher import McpDispatcher, ToolSource
from openapi_mcp.protocols.mcp.models import (
    AudioContent,
    ContentBlock,
    ImageContent,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    TextContent,
)

__all__ = [
    "AudioContent",
    "ContentBlock",
    "ImageContent",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpDispatcher",
    "ServerInfo",
    "TextContent",
    "ToolSource",
    "extract_payload",
    "to_content_block",
]
