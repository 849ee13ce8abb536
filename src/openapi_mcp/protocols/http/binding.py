"""Argument binding — place tool-call arguments into an HTTP request.

Parameters are applied in their declared order. Names are not unique across
locations: a ``query`` and a ``header`` parameter called ``id`` are bound
independently.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from openapi_mcp.protocols.http.models import (
    BoundRequest,
    FormBody,
    JsonBody,
    MultipartBody,
    RequestBody,
)

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import ToolDescriptor

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
FORMDATA_MARKER = "__formdata"

BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Characters left unescaped, matching JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "!~*'()"
# Integral floats below this render without a decimal point, as JSON numbers do.
_EXPONENT_THRESHOLD = 1e21


def encode_component(value: Any) -> str:
    return quote(stringify(value), safe=_URI_COMPONENT_SAFE)


def stringify(value: Any) -> str:
    """Render a scalar for a URL, header or cookie; containers become compact JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    if isinstance(value, float) and value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))
    return str(value)


def bind_arguments(tool: ToolDescriptor, args: dict[str, Any] | None) -> BoundRequest:
    """Map *args* onto the request locations declared by *tool*."""
    args = args or {}
    bound = BoundRequest(method=tool.method.upper(), path=tool.path or f"/{tool.name}")
    bound.headers["Content-Type"] = JSON_CONTENT_TYPE

    if not tool.parameters:
        bound.body = args
        bound.has_body = True
        return bound

    for param in tool.parameters:
        if param.name not in args:
            continue
        value = args[param.name]
        try:
            _bind_one(bound, param.name, param.location, value)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping parameter %s due to error: %s", param.name, exc)
            bound.skipped.append(param.name)
            continue
        if param.is_body:
            bound.body_content_type = param.content_type

    if bound.cookies:
        bound.headers["Cookie"] = "; ".join(bound.cookies)

    return bound


def _bind_one(bound: BoundRequest, name: str, location: str, value: Any) -> None:
    if location in ("body", "requestBody"):
        bound.body = value
        bound.has_body = value is not None
        return

    if value is None:
        return

    if location == "path":
        placeholder = f"{{{name}}}"
        if placeholder in bound.path:
            bound.path = bound.path.replace(placeholder, encode_component(value))
        else:
            bound.query[name] = value
    elif location == "query":
        bound.query[name] = value
    elif location == "header":
        bound.headers[name] = stringify(value)
    elif location == "cookie":
        bound.cookies.append(f"{name}={stringify(value)}")
    else:
        if bound.body is None:
            bound.body = {}
        if not isinstance(bound.body, dict):
            msg = f"cannot merge '{location}' parameter into a non-object body"
            raise TypeError(msg)
        bound.body[name] = value
        bound.has_body = True


def build_url(base_url: str, path: str, query: dict[str, Any] | None = None) -> str:
    """Join *base_url* and *path* and append a query string with repeated keys for lists."""
    base = base_url[:-1] if base_url.endswith("/") else base_url
    normalized_path = path if path.startswith("/") else f"/{path}"
    url = f"{base}{normalized_path}"

    parts: list[str] = []
    for key, value in (query or {}).items():
        if value is None:
            continue
        encoded_key = encode_component(key)
        if isinstance(value, (list, tuple)):
            parts.extend(f"{encoded_key}={encode_component(item)}" for item in value if item is not None)
        else:
            parts.append(f"{encoded_key}={encode_component(value)}")

    if parts:
        url += "?" + "&".join(parts)
    return url


def encode_body(payload: Any, content_type: str, declared_type: str | None = None) -> RequestBody:
    """Choose the body encoding once, from the payload and the content types in play.

    *content_type* is the resolved ``Content-Type`` header; *declared_type* is
    the content type the operation's request body was compiled from.
    """
    if isinstance(payload, dict) and payload.get(FORMDATA_MARKER) is True and isinstance(payload.get("entries"), list):
        return MultipartBody(entries=_marker_entries(payload["entries"]))

    declared = (declared_type or "").lower()
    if declared.startswith(MULTIPART_CONTENT_TYPE) and isinstance(payload, dict):
        return MultipartBody(entries=_pairs(payload))

    if FORM_CONTENT_TYPE in content_type.lower():
        if isinstance(payload, dict):
            return FormBody(fields=[(k, stringify(v)) for k, v in _pairs(payload)])
        return FormBody(fields=stringify(payload))

    return JsonBody(payload=payload)


def _pairs(payload: dict[str, Any]) -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = []
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, list):
            pairs.extend((str(key), item) for item in value if item is not None)
        else:
            pairs.append((str(key), value))
    return pairs


def _marker_entries(entries: list[Any]) -> list[tuple[str, Any]]:
    result: list[tuple[str, Any]] = []
    for entry in entries:
        if isinstance(entry, (list, tuple)) and len(entry) == 2:
            result.append((str(entry[0]), entry[1]))
        else:
            logger.warning("Ignoring malformed form-data entry: %r", entry)
    return result
