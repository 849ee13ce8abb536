"""RequestExecutor — issue one HTTP request for a compiled tool."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx

from openapi_mcp.protocols.errors import ConfigurationError, ToolExecutionError
from openapi_mcp.protocols.http.binding import (
    BODY_METHODS,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    bind_arguments,
    build_url,
    encode_body,
    stringify,
)
from openapi_mcp.protocols.http.models import (
    ExecutionResult,
    FormBody,
    JsonBody,
    MultipartBody,
    RequestBody,
)
from openapi_mcp.utils.telemetry import ATTR_HTTP_METHOD, ATTR_HTTP_STATUS, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import ToolDescriptor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_TIMEOUT = 30.0


class RequestExecutor:
    """Builds and sends the outbound request for a ``tools/call``.

    A shared :class:`httpx.AsyncClient` may be injected; otherwise a client
    is opened per call. Every request carries *timeout*.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._client = client
        self._timeout = timeout

    async def execute(
        self,
        tool: ToolDescriptor,
        args: dict[str, Any] | None,
        base_url: str | None,
        auth_token: str | None = None,
    ) -> ExecutionResult:
        """Call *tool* against *base_url* with *args*.

        Raises:
            ConfigurationError: If *base_url* is empty (no request is made).
            ToolExecutionError: On transport failures or an undecodable JSON response.
        """
        if not base_url:
            raise ConfigurationError("Missing baseUrl in credentials")

        bound = bind_arguments(tool, args)
        if auth_token:
            bound.headers["Authorization"] = f"Bearer {auth_token}"

        if (
            bound.body_content_type
            and bound.body_content_type.lower().startswith(FORM_CONTENT_TYPE)
            and bound.headers.get("Content-Type") == JSON_CONTENT_TYPE
        ):
            bound.headers["Content-Type"] = FORM_CONTENT_TYPE

        url = build_url(base_url, bound.path, bound.query)
        request_kwargs: dict[str, Any] = {}
        if bound.method in BODY_METHODS and bound.has_body:
            body = encode_body(bound.body, bound.headers.get("Content-Type", ""), bound.body_content_type)
            if isinstance(body, MultipartBody):
                del bound.headers["Content-Type"]
            request_kwargs = _request_content(body)

        logger.info("Calling %s %s", bound.method, url)
        with _tracer.start_as_current_span("tools.http") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            span.set_attribute(ATTR_HTTP_METHOD, bound.method)
            response = await self._send(tool.name, bound.method, url, bound.headers, request_kwargs)
            span.set_attribute(ATTR_HTTP_STATUS, response.status_code)

        return ExecutionResult(
            success=response.is_success,
            status=response.status_code,
            method=bound.method,
            url=url,
            path=bound.path,
            data=_decode(tool.name, response),
            headers=dict(response.headers),
        )

    async def _send(
        self,
        name: str,
        method: str,
        url: str,
        headers: httpx.Headers,
        request_kwargs: dict[str, Any],
    ) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.request(
                    method, url, headers=headers, timeout=self._timeout, **request_kwargs
                )
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, headers=headers, **request_kwargs)
        except httpx.HTTPError as exc:
            raise ToolExecutionError(name, str(exc) or type(exc).__name__) from exc


def _request_content(body: RequestBody) -> dict[str, Any]:
    """Translate a chosen body encoding into ``httpx`` request arguments."""
    if isinstance(body, MultipartBody):
        return {"files": [(key, (None, _form_value(value))) for key, value in body.entries]}
    if isinstance(body, FormBody):
        encoded = body.fields if isinstance(body.fields, str) else urlencode(body.fields)
        return {"content": encoded.encode()}
    if isinstance(body, JsonBody):
        return {"content": json.dumps(body.payload, separators=(",", ":"), ensure_ascii=False).encode()}
    msg = f"Unsupported body encoding: {body!r}"
    raise TypeError(msg)


def _form_value(value: Any) -> str | bytes:
    return value if isinstance(value, (str, bytes)) else stringify(value)


def _decode(name: str, response: httpx.Response) -> Any:
    """JSON for ``application/json`` responses, text otherwise."""
    content_type = response.headers.get("content-type", "").lower()
    if JSON_CONTENT_TYPE not in content_type:
        return response.text
    if not response.content:
        return ""
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise ToolExecutionError(name, f"invalid JSON response: {exc}") from exc
