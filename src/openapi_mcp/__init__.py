"""openapi-mcp — serve any OpenAPI-described HTTP API as MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from openapi_mcp.openapi.compiler import compile_tools as compile_tools
    from openapi_mcp.protocols.mcp.dispatcher import McpDispatcher as McpDispatcher
    from openapi_mcp.runtime.service import ToolService as ToolService

_LAZY_EXPORTS = {
    "compile_tools": "openapi_mcp.openapi.compiler",
    "McpDispatcher": "openapi_mcp.protocols.mcp.dispatcher",
    "ToolService": "openapi_mcp.runtime.service",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'openapi_mcp' has no attribute {name!r}")
