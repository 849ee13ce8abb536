"""Protocol layer — outbound HTTP execution and the inbound MCP JSON-RPC surface."""

from openapi_mcp.protocols.errors import (
    ConfigurationError,
    DocumentFetchError,
    ProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)

__all__ = [
    "ConfigurationError",
    "DocumentFetchError",
    "ProtocolError",
    "ToolExecutionError",
    "ToolNotFoundError",
]
