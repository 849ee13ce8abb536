"""Tool naming — turn operation ids and method/path pairs into safe tool names."""

from __future__ import annotations

import re

UNNAMED_TOOL = "unnamed_tool"

# Words: acronym before a capitalised word, capitalised/lower word, acronym, digits.
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")
_VERB_PREFIX_RE = re.compile(r"^(?:(?:get|post|put|delete|patch|api)_)+", re.IGNORECASE)


def snake_case(value: str) -> str:
    """Split *value* into words on case changes and separators, joined by ``_``."""
    return "_".join(word.lower() for word in _WORD_RE.findall(value))


def clean_name(value: str, *, strip_verb_prefix: bool = False) -> str:
    """Reduce *value* to ``[a-z0-9_]`` with no leading, trailing or doubled ``_``.

    Returns :data:`UNNAMED_TOOL` when nothing meaningful survives.
    """
    if not value:
        return UNNAMED_TOOL

    name = re.sub(r"[{}]", "", value)
    name = re.sub(r"[^a-zA-Z0-9_]", "_", name)
    name = re.sub(r"_+", "_", name)
    name = name.strip("_").lower()

    if strip_verb_prefix:
        stripped = _VERB_PREFIX_RE.sub("", name).strip("_")
        if stripped:
            name = stripped

    return name or UNNAMED_TOOL


def tool_name(operation_id: str | None, method: str, path: str, *, strip_verb_prefix: bool = False) -> str:
    """Derive the tool name for an operation, falling back to ``method_path``."""
    source = operation_id if isinstance(operation_id, str) and operation_id else f"{method}_{path}"
    return clean_name(snake_case(source), strip_verb_prefix=strip_verb_prefix)
