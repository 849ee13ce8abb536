"""Fetch OpenAPI documents over HTTP."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import yaml

from openapi_mcp.protocols.errors import DocumentFetchError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0
_YAML_SUFFIXES = (".yaml", ".yml")


async def fetch_openapi_document(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> dict[str, Any]:
    """GET *url* and decode it as an OpenAPI document (JSON, or YAML by suffix/content type).

    No authentication is applied. Raises :class:`DocumentFetchError` when the
    document is unreachable, returns a non-2xx status, or does not decode to
    an object.
    """
    if not url:
        raise DocumentFetchError(url, "no URL configured")

    logger.info("Fetching OpenAPI document: %s", url)
    try:
        if client is not None:
            response = await client.get(url, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
    except httpx.HTTPError as exc:
        raise DocumentFetchError(url, str(exc)) from exc

    if not response.is_success:
        raise DocumentFetchError(url, f"HTTP {response.status_code}")

    document = _decode(url, response)
    if not isinstance(document, dict):
        raise DocumentFetchError(url, "document is not an object")
    return document


def _decode(url: str, response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "").lower()
    is_yaml = "yaml" in content_type or url.lower().split("?", 1)[0].endswith(_YAML_SUFFIXES)
    try:
        if is_yaml:
            return yaml.safe_load(response.text)
        return json.loads(response.text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DocumentFetchError(url, f"invalid document: {exc}") from exc
