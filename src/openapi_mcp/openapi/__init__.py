"""OpenAPI layer — schema sanitizing, tool compilation, and document fetching."""

from openapi_mcp.openapi.compiler import (
    compile_document,
    compile_tools,
    filter_key,
    list_available_tags,
    normalize_filter,
)
from openapi_mcp.openapi.models import (
    CompileReport,
    InputSchema,
    ParameterDescriptor,
    PropertySchema,
    SkippedOperation,
    ToolDescriptor,
)
from openapi_mcp.openapi.naming import clean_name, snake_case
from openapi_mcp.openapi.sanitizer import build_input_schema, sanitize
from openapi_mcp.openapi.source import fetch_openapi_document

__all__ = [
    "CompileReport",
    "InputSchema",
    "ParameterDescriptor",
    "PropertySchema",
    "SkippedOperation",
    "ToolDescriptor",
    "build_input_schema",
    "clean_name",
    "compile_document",
    "compile_tools",
    "fetch_openapi_document",
    "filter_key",
    "list_available_tags",
    "normalize_filter",
    "sanitize",
    "snake_case",
]
