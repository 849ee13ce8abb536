"""Schema sanitizer — reduce arbitrary JSON-Schema fragments to a safe subset.

Source documents are untrusted: anything outside the descriptive allow-list
(``$ref``, vendor extensions, ``additionalProperties`` and so on) is dropped,
and a property that cannot be cleaned is skipped rather than failing the
whole schema. Self-referencing or very deep schemas are cut off with a
plain string leaf.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from openapi_mcp.openapi.models import DESCRIPTIVE_FIELDS, InputSchema, PropertySchema

logger = logging.getLogger(__name__)

OPTIONAL_OVERRIDE = "x-optional"
MAX_SCHEMA_DEPTH = 32
_UNION_KEYWORDS = ("oneOf", "anyOf", "allOf")
_CLEAN_ERRORS = (ValidationError, TypeError, ValueError, RecursionError)


@dataclass
class SanitizeOutcome:
    """A cleaned schema plus the property paths that had to be skipped."""

    schema: PropertySchema
    skipped: list[str] = field(default_factory=list)


@dataclass
class InputSchemaOutcome:
    schema: InputSchema
    skipped: list[str] = field(default_factory=list)


def sanitize(raw: Any) -> PropertySchema:
    """Clean *raw* into a :class:`PropertySchema`. Never raises."""
    return sanitize_with_report(raw).schema


def sanitize_with_report(raw: Any) -> SanitizeOutcome:
    """Clean *raw* and report every nested property that was skipped."""
    skipped: list[str] = []
    try:
        schema = _clean(raw, "", skipped, 0, ())
    except _CLEAN_ERRORS as exc:
        logger.warning("Unusable schema replaced with string default: %s", exc)
        skipped.append("<root>")
        schema = PropertySchema(type="string")
    return SanitizeOutcome(schema=schema, skipped=skipped)


def build_input_schema(schema: Any) -> InputSchema:
    """Build the top-level tool input schema from a source object schema."""
    return build_input_schema_with_report(schema).schema


def build_input_schema_with_report(schema: Any) -> InputSchemaOutcome:
    if not isinstance(schema, dict):
        return InputSchemaOutcome(schema=InputSchema())

    skipped: list[str] = []
    properties: dict[str, PropertySchema] = {}
    optional: set[str] = set()
    ancestors = (id(schema),)

    raw_properties = schema.get("properties")
    if isinstance(raw_properties, dict):
        for name, raw_prop in raw_properties.items():
            cleaned = _clean_member(raw_prop, str(name), skipped, 1, ancestors)
            if cleaned is None:
                continue
            properties[str(name)] = cleaned
            if isinstance(raw_prop, dict) and raw_prop.get(OPTIONAL_OVERRIDE) is True:
                optional.add(str(name))

    # a top-level array body is advertised through a single "items" property
    if schema.get("type") == "array" and schema.get("items") is not None:
        items = _clean_member(schema["items"], "items", skipped, 1, ancestors)
        properties["items"] = items if items is not None else PropertySchema(type="string")

    raw_required = schema.get("required")
    required = [
        name
        for name in (raw_required if isinstance(raw_required, list) else [])
        if isinstance(name, str) and name in properties and name not in optional
    ]

    return InputSchemaOutcome(
        schema=InputSchema(properties=properties, required=required),
        skipped=skipped,
    )


def _clean(raw: Any, path: str, skipped: list[str], depth: int, ancestors: tuple[int, ...]) -> PropertySchema:
    if not isinstance(raw, dict):
        return PropertySchema(type="string")
    if depth > MAX_SCHEMA_DEPTH or id(raw) in ancestors:
        logger.warning("Cutting off recursive or too deep schema at %s", path or "<root>")
        skipped.append(path or "<root>")
        return PropertySchema(type="string")

    ancestors = (*ancestors, id(raw))
    depth += 1

    data: dict[str, Any] = {"type": raw.get("type") or "string"}
    for key in DESCRIPTIVE_FIELDS:
        if key in raw:
            data[key] = raw[key]

    properties = raw.get("properties")
    if isinstance(properties, dict):
        cleaned_props: dict[str, PropertySchema] = {}
        for name, value in properties.items():
            child_path = f"{path}.{name}" if path else str(name)
            child = _clean_member(value, child_path, skipped, depth, ancestors)
            if child is not None:
                cleaned_props[str(name)] = child
        data["properties"] = cleaned_props
        if isinstance(raw.get("required"), list):
            data["required"] = [r for r in raw["required"] if isinstance(r, str) and r in cleaned_props]

    if raw.get("items") is not None:
        items = _clean_member(raw["items"], f"{path}[]", skipped, depth, ancestors)
        data["items"] = items if items is not None else PropertySchema(type="string")

    for keyword in _UNION_KEYWORDS:
        members = raw.get(keyword)
        if isinstance(members, list):
            cleaned_members = [
                _clean_member(member, f"{path}.{keyword}[{i}]", skipped, depth, ancestors)
                for i, member in enumerate(members)
            ]
            data[keyword] = [m for m in cleaned_members if m is not None]

    return PropertySchema.model_validate(data)


def _clean_member(
    raw: Any, path: str, skipped: list[str], depth: int, ancestors: tuple[int, ...]
) -> PropertySchema | None:
    """Clean one nested schema; ``None`` means it was skipped."""
    try:
        return _clean(raw, path, skipped, depth, ancestors)
    except _CLEAN_ERRORS as exc:
        logger.warning("Skipping schema property %s: %s", path or "<root>", exc)
        skipped.append(path)
        return None
