"""FastAPI application exposing the MCP JSON-RPC endpoint over HTTP."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from openapi_mcp import __version__
from openapi_mcp.protocols.errors import ProtocolError
from openapi_mcp.protocols.http.executor import RequestExecutor
from openapi_mcp.protocols.mcp.dispatcher import McpDispatcher
from openapi_mcp.protocols.mcp.models import INTERNAL_ERROR, PARSE_ERROR, JsonRpcResponse, ServerInfo
from openapi_mcp.runtime.cache import ToolCache
from openapi_mcp.runtime.service import ToolService
from openapi_mcp.sdk.models import ServerSettings

logger = logging.getLogger(__name__)


def create_app(
    settings: ServerSettings,
    *,
    service: ToolService | None = None,
    executor: RequestExecutor | None = None,
) -> FastAPI:
    """Build the app and its collaborators; the shared HTTP client closes at shutdown.

    Routes (``{path}`` is ``settings.path``):

    - ``POST /{path}`` — one JSON-RPC request or a batch array.
    - ``GET /{path}/tools?refresh=true`` — compiled tool names, optionally live-reloaded.
    - ``GET /{path}/tags`` — tags available in the OpenAPI document.
    - ``GET /healthz``
    """
    client = httpx.AsyncClient(timeout=settings.request_timeout)
    service = service or ToolService(
        settings.openapi_url,
        settings.filter_tags,
        cache=ToolCache(ttl=settings.cache_ttl),
        client=client,
        fetch_timeout=settings.request_timeout,
        strip_verb_prefix=settings.strip_verb_prefix,
    )
    executor = executor or RequestExecutor(client, timeout=settings.request_timeout)
    dispatcher = McpDispatcher(
        service,
        executor,
        settings.credentials,
        server_info=ServerInfo(version=__version__),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Serving MCP endpoint at /%s for %s", settings.path, settings.openapi_url or "(no URL)")
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="OpenAPI MCP Server", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service
    app.state.dispatcher = dispatcher

    @app.post(f"/{settings.path}")
    async def handle_rpc(request: Request) -> JSONResponse:
        try:
            payload: Any = json.loads(await request.body())
        except ValueError:
            return JSONResponse(JsonRpcResponse.failure(None, PARSE_ERROR, "Parse error").to_wire())

        try:
            result = await dispatcher.dispatch(payload)
        except ProtocolError as exc:
            logger.error("Cannot serve request without tools: %s", exc)
            error = JsonRpcResponse.failure(None, INTERNAL_ERROR, str(exc))
            return JSONResponse(error.to_wire(), status_code=503)
        return JSONResponse(result)

    @app.get(f"/{settings.path}/tools")
    async def list_tools(refresh: bool = False) -> JSONResponse:
        try:
            tools = await service.refresh_tools(force_refresh=refresh)
        except ProtocolError as exc:
            return JSONResponse({"detail": str(exc)}, status_code=503)
        return JSONResponse(
            {"tools": [{"name": t.name, "description": t.description} for t in tools]}
        )

    @app.get(f"/{settings.path}/tags")
    async def list_tags() -> dict[str, list[str]]:
        return {"tags": await service.available_tags()}

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        return {"status": "ok", "cached_sources": len(service.cache)}

    return app
