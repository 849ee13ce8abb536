"""Tool compiler — walk an OpenAPI document and emit tool descriptors.

The document is treated as foreign input: every field may be missing or of
the wrong type. A malformed path item or operation is skipped and reported,
never fatal to the rest of the document.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from openapi_mcp.openapi.models import (
    BODY_LOCATION,
    CompileReport,
    ParameterDescriptor,
    SkippedOperation,
    ToolDescriptor,
)
from openapi_mcp.openapi.naming import UNNAMED_TOOL, tool_name
from openapi_mcp.openapi.sanitizer import build_input_schema, sanitize

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"get", "post", "put", "delete", "patch", "head", "options"})
READ_METHODS = frozenset({"get", "delete", "head"})
NO_FILTER = "all"

PREFERRED_CONTENT_TYPES: tuple[str, ...] = (
    "application/json",
    "multipart/form-data",
    "application/x-www-form-urlencoded",
    "text/plain",
)

_SCHEMA_PARAM_LOCATIONS = ("path", "query", "header")


# ---------------------------------------------------------------------------
# Tag filtering
# ---------------------------------------------------------------------------


def normalize_filter(filter_tags: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Return the effective filter tags; an empty list means no filtering."""
    if filter_tags is None:
        return []
    values = [filter_tags] if isinstance(filter_tags, str) else list(filter_tags)
    tags = [v.strip() for v in values if isinstance(v, str) and v.strip()]
    if any(t.lower() == NO_FILTER for t in tags):
        return []
    return tags


def filter_key(filter_tags: str | list[str] | tuple[str, ...] | None) -> str:
    """Stable cache-key form of a filter, independent of tag order."""
    tags = normalize_filter(filter_tags)
    return ":".join(sorted(tags)) if tags else NO_FILTER


def matches_filter(operation_tags: list[Any], filters: list[str]) -> bool:
    """True when any operation tag contains any filter tag, case-insensitively."""
    if not filters:
        return True
    lowered = [t.lower() for t in operation_tags if isinstance(t, str)]
    return any(f.lower() in tag for tag in lowered for f in filters)


def list_available_tags(document: Any) -> list[str]:
    """Collect every distinct operation tag in *document*, sorted."""
    tags: set[str] = set()
    for _path, _method, operation in _iter_operations(document):
        raw_tags = operation.get("tags")
        if not isinstance(raw_tags, list):
            continue
        for tag in raw_tags:
            if isinstance(tag, str) and tag.strip():
                tags.add(tag.strip())
    return sorted(tags)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def compile_tools(
    document: Any,
    filter_tags: str | list[str] | None = None,
    *,
    strip_verb_prefix: bool = False,
) -> list[ToolDescriptor]:
    """Compile *document* into tools, keeping only operations matching *filter_tags*."""
    return compile_document(document, filter_tags, strip_verb_prefix=strip_verb_prefix).tools


def compile_document(
    document: Any,
    filter_tags: str | list[str] | None = None,
    *,
    strip_verb_prefix: bool = False,
) -> CompileReport:
    """Compile *document* and report which operations were skipped and why."""
    report = CompileReport()
    if not isinstance(document, dict):
        logger.warning("Invalid OpenAPI document: expected an object")
        return report

    paths = document.get("paths")
    if not isinstance(paths, dict) or not paths:
        logger.warning("No paths found in OpenAPI document")
        return report

    filters = normalize_filter(filter_tags)
    used_names: dict[str, int] = {}

    for path, methods in paths.items():
        if not isinstance(methods, dict):
            logger.warning("Skipping malformed path item %s", path)
            report.skipped.append(SkippedOperation(method="*", path=str(path), reason="path item is not an object"))
            continue

        for method, operation in methods.items():
            if not isinstance(method, str) or method.lower() not in HTTP_METHODS:
                continue
            if not isinstance(operation, dict):
                logger.warning("Skipping malformed operation %s %s", method.upper(), path)
                report.skipped.append(
                    SkippedOperation(method=method.upper(), path=str(path), reason="operation is not an object")
                )
                continue

            tags = operation.get("tags") if isinstance(operation.get("tags"), list) else []
            if not matches_filter(tags, filters):
                continue

            try:
                tool = build_tool(str(path), method, operation, tags, strip_verb_prefix=strip_verb_prefix)
            except (ValidationError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Error building tool for %s %s: %s", method.upper(), path, exc)
                report.skipped.append(SkippedOperation(method=method.upper(), path=str(path), reason=str(exc)))
                continue

            if tool is None:
                report.skipped.append(
                    SkippedOperation(method=method.upper(), path=str(path), reason="no usable tool name")
                )
                continue

            report.tools.append(_disambiguate(tool, used_names))

    logger.info("Compiled %d tool(s), skipped %d operation(s)", len(report.tools), len(report.skipped))
    return report


def build_tool(
    path: str,
    method: str,
    operation: dict[str, Any],
    tags: list[Any],
    *,
    strip_verb_prefix: bool = False,
) -> ToolDescriptor | None:
    """Build one tool from an operation; ``None`` when it has no usable name."""
    operation_id = operation.get("operationId")
    name = tool_name(operation_id, method, path, strip_verb_prefix=strip_verb_prefix)
    if name == UNNAMED_TOOL:
        logger.warning("Invalid tool name: %s %s", method.upper(), path)
        return None

    description = (
        _text(operation.get("description"))
        or _text(operation.get("summary"))
        or f"Execute {method.upper()} {path}"
    )

    raw_params = operation.get("parameters")
    raw_params = raw_params if isinstance(raw_params, list) else []
    parameters = _extract_parameters(raw_params)

    request_body = operation.get("requestBody")
    body_content = request_body.get("content") if isinstance(request_body, dict) else None
    if isinstance(body_content, dict) and body_content:
        content_type, body_schema = preferred_content(body_content)
        parameters.append(
            ParameterDescriptor(
                name="body",
                location=BODY_LOCATION,
                required=bool(request_body.get("required")),
                description=_text(request_body.get("description")) or "Request body",
                param_schema=sanitize(body_schema).to_json() if isinstance(body_schema, dict) else {"type": "object"},
                content_type=content_type,
            )
        )

    if method.lower() in READ_METHODS:
        source_schema = parameters_schema(raw_params)
    else:
        source_schema = request_body_schema(operation) or parameters_schema(raw_params)

    first_tag = tags[0] if tags and isinstance(tags[0], str) else None

    return ToolDescriptor(
        name=name,
        description=description,
        input_schema=build_input_schema(source_schema),
        method=method.upper(),
        path=path,
        operation_id=operation_id if isinstance(operation_id, str) else None,
        tag=first_tag,
        deprecated=operation.get("deprecated") is True,
        summary=_text(operation.get("summary")),
        parameters=parameters,
    )


def preferred_content(content: dict[str, Any]) -> tuple[str | None, dict[str, Any] | None]:
    """Pick ``(content_type, schema)`` from a ``content`` map by preference order."""
    for content_type in PREFERRED_CONTENT_TYPES:
        media = content.get(content_type)
        if isinstance(media, dict) and isinstance(media.get("schema"), dict):
            return content_type, media["schema"]

    for content_type, media in content.items():
        schema = media.get("schema") if isinstance(media, dict) else None
        return str(content_type), schema if isinstance(schema, dict) else None
    return None, None


def request_body_schema(operation: dict[str, Any]) -> dict[str, Any] | None:
    request_body = operation.get("requestBody")
    if not isinstance(request_body, dict) or not isinstance(request_body.get("content"), dict):
        return None
    return preferred_content(request_body["content"])[1]


def parameters_schema(parameters: list[Any]) -> dict[str, Any] | None:
    """Merge path/query/header parameters into one object schema."""
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param in parameters:
        if not isinstance(param, dict) or param.get("in") not in _SCHEMA_PARAM_LOCATIONS:
            continue
        name = param.get("name")
        if not isinstance(name, str) or not name:
            continue

        schema = param.get("schema") if isinstance(param.get("schema"), dict) else {"type": "string"}
        properties[name] = {
            **schema,
            "type": schema.get("type") or "string",
            "description": _text(param.get("description")) or f"{param['in']} parameter: {name}",
        }
        if param.get("required"):
            required.append(name)

    if not properties:
        return None
    return {"type": "object", "properties": properties, "required": required}


def _extract_parameters(raw_params: list[Any]) -> list[ParameterDescriptor]:
    parameters: list[ParameterDescriptor] = []
    for param in raw_params:
        if not isinstance(param, dict):
            continue
        name = param.get("name")
        location = param.get("in")
        if not isinstance(name, str) or not name or not isinstance(location, str):
            logger.warning("Skipping parameter without name or location: %r", param)
            continue
        schema = param.get("schema")
        parameters.append(
            ParameterDescriptor(
                name=name,
                location=location,
                required=bool(param.get("required")),
                description=_text(param.get("description")),
                param_schema=sanitize(schema).to_json() if isinstance(schema, dict) else {"type": "string"},
            )
        )
    return parameters


def _disambiguate(tool: ToolDescriptor, used_names: dict[str, int]) -> ToolDescriptor:
    """Suffix a repeated tool name with ``_2``, ``_3``, ... so lookups stay unambiguous."""
    count = used_names.get(tool.name, 0) + 1
    used_names[tool.name] = count
    if count == 1:
        return tool

    candidate = f"{tool.name}_{count}"
    while candidate in used_names:
        count += 1
        candidate = f"{tool.name}_{count}"
    used_names[candidate] = 1
    logger.warning("Duplicate tool name %s for %s %s, renamed to %s", tool.name, tool.method, tool.path, candidate)
    return tool.model_copy(update={"name": candidate})


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _iter_operations(document: Any):  # type: ignore[no-untyped-def]
    if not isinstance(document, dict) or not isinstance(document.get("paths"), dict):
        return
    for path, methods in document["paths"].items():
        if not isinstance(methods, dict):
            continue
        for method, operation in methods.items():
            if isinstance(operation, dict):
                yield path, method, operation
