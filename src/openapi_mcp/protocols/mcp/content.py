"""Content normalization — classify an upstream payload into one content block.

Upstream APIs can ask for rich content by returning an object tagged with
``__mcp_type`` (``image`` or ``audio``) and a ``base64`` field. The tag is
read here, once, and never leaks past this boundary.
"""

from __future__ import annotations

import json
from typing import Any

from openapi_mcp.protocols.mcp.models import AudioContent, ContentBlock, ImageContent, TextContent

MCP_TYPE_MARKER = "__mcp_type"


def to_content_block(payload: Any) -> ContentBlock:
    """Return exactly one content block for *payload*. Never raises."""
    if isinstance(payload, str):
        return TextContent(text=payload)

    if isinstance(payload, dict) and payload.get("base64"):
        marker = payload.get(MCP_TYPE_MARKER)
        mime_type = payload.get("mimeType") if isinstance(payload.get("mimeType"), str) else None
        if marker == "image":
            return ImageContent(data=str(payload["base64"]), mime_type=mime_type or "image/png")
        if marker == "audio":
            return AudioContent(data=str(payload["base64"]), mime_type=mime_type or "audio/mpeg")

    return TextContent(text=_pretty(payload))


def extract_payload(data: Any) -> Any:
    """Unwrap the common ``{"data": ...}`` response envelope."""
    if isinstance(data, dict) and data.get("data") is not None:
        return data["data"]
    return data


def _pretty(payload: Any) -> str:
    try:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(payload)
