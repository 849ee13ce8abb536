"""Runtime layer — tool cache and the service that keeps it populated."""

from openapi_mcp.runtime.cache import CacheEntry, CacheKey, ToolCache, make_cache_key
from openapi_mcp.runtime.service import ToolService

__all__ = [
    "CacheEntry",
    "CacheKey",
    "ToolCache",
    "ToolService",
    "make_cache_key",
]
