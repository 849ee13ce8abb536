"""ToolCache — time-bounded memo of compiled tool sets with stale-on-error fallback.

Entries are keyed by ``(source URL, filter key)``. A fresh entry is served
as-is; an expired one triggers a refresh. When a refresh fails and an older
entry exists, the stale value is served instead of the error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from openapi_mcp.openapi.compiler import filter_key
from openapi_mcp.utils.telemetry import (
    ATTR_CACHE_HIT,
    ATTR_CACHE_STALE,
    ATTR_FILTER_KEY,
    ATTR_SOURCE_URL,
    ATTR_TOOL_COUNT,
    get_tracer,
)

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import ToolDescriptor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_TTL = 5 * 60.0

RefreshFn = Callable[[], Awaitable["list[ToolDescriptor]"]]


class CacheKey(NamedTuple):
    source_url: str
    filter_key: str


@dataclass(frozen=True)
class CacheEntry:
    tools: list[ToolDescriptor]
    timestamp: float


def make_cache_key(source_url: str, filter_tags: str | list[str] | None) -> CacheKey:
    """Build a key whose filter part does not depend on tag order."""
    return CacheKey(source_url, filter_key(filter_tags))


class ToolCache:
    """Per-key tool cache owned by a :class:`~openapi_mcp.runtime.service.ToolService`.

    Concurrent refreshes of the same key share one lock; a waiter that
    acquires it after a successful refresh gets the new entry without
    calling *refresh_fn* again.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._locks: dict[CacheKey, asyncio.Lock] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, key: CacheKey) -> CacheEntry | None:
        """Return the stored entry for *key* regardless of age."""
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()

    def is_fresh(self, entry: CacheEntry, ttl: float | None = None) -> bool:
        return (self._clock() - entry.timestamp) < (self._ttl if ttl is None else ttl)

    async def get(
        self,
        key: CacheKey,
        refresh_fn: RefreshFn,
        ttl: float | None = None,
        force_refresh: bool = False,
    ) -> list[ToolDescriptor]:
        """Return tools for *key*, refreshing through *refresh_fn* when needed."""
        entry = self._entries.get(key)
        if not force_refresh and entry is not None and self.is_fresh(entry, ttl):
            return entry.tools

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            current = self._entries.get(key)
            if (
                current is not None
                and current is not entry
                and self.is_fresh(current, ttl)
            ):
                return current.tools
            return await self._refresh(key, refresh_fn)

    async def _refresh(self, key: CacheKey, refresh_fn: RefreshFn) -> list[ToolDescriptor]:
        with _tracer.start_as_current_span("tools.cache.refresh") as span:
            span.set_attribute(ATTR_SOURCE_URL, key.source_url)
            span.set_attribute(ATTR_FILTER_KEY, key.filter_key)
            span.set_attribute(ATTR_CACHE_HIT, False)
            logger.info("Refreshing tools from %s with filter %s", key.source_url, key.filter_key)
            try:
                tools = await refresh_fn()
            except Exception as exc:
                stale = self._entries.get(key)
                if stale is None:
                    logger.error("Failed to load tools from %s: %s", key.source_url, exc)
                    raise
                logger.warning(
                    "Failed to refresh tools from %s (%s); returning stale cached tools for %s",
                    key.source_url,
                    exc,
                    key.filter_key,
                )
                span.set_attribute(ATTR_CACHE_STALE, True)
                return stale.tools

            self._entries[key] = CacheEntry(tools=list(tools), timestamp=self._clock())
            span.set_attribute(ATTR_TOOL_COUNT, len(tools))
            logger.info("Loaded %d tool(s) for %s", len(tools), key.source_url)
            return self._entries[key].tools
