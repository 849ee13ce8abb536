"""Tracing helpers.

Every module asks :func:`get_tracer` for a tracer and opens spans freely.
Until :func:`configure_telemetry` installs an SDK provider those spans are
no-ops, so the server runs the same with or without the ``otel`` extra.

Usage::

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("tools.call") as span:
        span.set_attribute(ATTR_TOOL_NAME, "get_pet_by_id")
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

ATTR_RPC_METHOD = "openapi_mcp.rpc.method"
ATTR_RPC_BATCH_SIZE = "openapi_mcp.rpc.batch_size"
ATTR_TOOL_NAME = "openapi_mcp.tool.name"
ATTR_HTTP_METHOD = "openapi_mcp.http.method"
ATTR_HTTP_STATUS = "openapi_mcp.http.status"
ATTR_SOURCE_URL = "openapi_mcp.source.url"
ATTR_FILTER_KEY = "openapi_mcp.source.filter"
ATTR_CACHE_HIT = "openapi_mcp.cache.hit"
ATTR_CACHE_STALE = "openapi_mcp.cache.stale"
ATTR_TOOL_COUNT = "openapi_mcp.tool.count"

_INSTRUMENTATION_NAME = "openapi_mcp"
_SDK_HINT = "Install it with: pip install openapi-mcp[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name*; a no-op one while no SDK provider is installed."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "openapi-mcp",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> Any:
    """Install an SDK tracer provider and return it.

    Console export writes each finished span to stdout as it ends. OTLP
    export batches spans to *otlp_endpoint* over gRPC. Both can be active.

    Raises :class:`ImportError` when ``opentelemetry-sdk`` (or, for OTLP,
    the gRPC exporter) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(f"opentelemetry-sdk is required for tracing. {_SDK_HINT}") from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return provider


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        raise ImportError(f"opentelemetry-exporter-otlp is required for OTLP export. {_SDK_HINT}") from exc
    return OTLPSpanExporter(endpoint=endpoint)
