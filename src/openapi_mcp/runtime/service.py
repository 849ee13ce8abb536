"""ToolService — resolve the active tool set for a configured OpenAPI source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from openapi_mcp.openapi.compiler import compile_tools, list_available_tags, normalize_filter
from openapi_mcp.openapi.source import DEFAULT_FETCH_TIMEOUT, fetch_openapi_document
from openapi_mcp.protocols.errors import ConfigurationError, DocumentFetchError
from openapi_mcp.runtime.cache import ToolCache, make_cache_key

if TYPE_CHECKING:
    import httpx

    from openapi_mcp.openapi.models import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolService:
    """Fetches, compiles and caches tools for one OpenAPI document URL.

    Usage::

        service = ToolService("https://api.example.com/openapi.json", ["pets"])
        tools = await service.active_tools()                    # cached
        tools = await service.refresh_tools(force_refresh=True)  # live reload
    """

    def __init__(
        self,
        openapi_url: str,
        filter_tags: str | list[str] | None = None,
        *,
        cache: ToolCache | None = None,
        client: httpx.AsyncClient | None = None,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        strip_verb_prefix: bool = False,
    ) -> None:
        self._openapi_url = openapi_url
        self._filter_tags = filter_tags
        self._cache = cache if cache is not None else ToolCache()
        self._client = client
        self._fetch_timeout = fetch_timeout
        self._strip_verb_prefix = strip_verb_prefix

    @property
    def cache(self) -> ToolCache:
        return self._cache

    async def active_tools(self) -> list[ToolDescriptor]:
        """Tools for the configured source, served from cache while fresh."""
        return await self.refresh_tools(force_refresh=False)

    async def refresh_tools(
        self,
        url: str | None = None,
        filter_tags: str | list[str] | None = None,
        force_refresh: bool = False,
    ) -> list[ToolDescriptor]:
        """Return compiled tools for *url*/*filter_tags* (defaults: the configured source)."""
        source_url = url or self._openapi_url
        if not source_url:
            raise ConfigurationError("No OpenAPI URL configured")
        tags = self._filter_tags if filter_tags is None else filter_tags

        async def _load() -> list[ToolDescriptor]:
            document = await fetch_openapi_document(
                source_url, client=self._client, timeout=self._fetch_timeout
            )
            return compile_tools(
                document,
                normalize_filter(tags),
                strip_verb_prefix=self._strip_verb_prefix,
            )

        return await self._cache.get(
            make_cache_key(source_url, tags), _load, force_refresh=force_refresh
        )

    async def available_tags(self, url: str | None = None) -> list[str]:
        """List the tags of the source document; empty when it cannot be fetched."""
        source_url = url or self._openapi_url
        if not source_url:
            return []
        try:
            document = await fetch_openapi_document(
                source_url, client=self._client, timeout=self._fetch_timeout
            )
        except DocumentFetchError as exc:
            logger.warning("Cannot list tags: %s", exc)
            return []
        return list_available_tags(document)
