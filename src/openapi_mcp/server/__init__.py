"""HTTP transport for the MCP endpoint."""

from openapi_mcp.server.app import create_app

__all__ = ["create_app"]
