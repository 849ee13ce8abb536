"""HTTP request models — bound arguments, body encodings, and call results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request bodies: one encoding is chosen per call
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JsonBody:
    payload: Any
    kind: Literal["json"] = "json"


@dataclass(frozen=True)
class FormBody:
    """``application/x-www-form-urlencoded`` body: field pairs or a pre-encoded string."""

    fields: list[tuple[str, str]] | str
    kind: Literal["form"] = "form"


@dataclass(frozen=True)
class MultipartBody:
    entries: list[tuple[str, Any]]
    kind: Literal["multipart"] = "multipart"


RequestBody = JsonBody | FormBody | MultipartBody


# ---------------------------------------------------------------------------
# Bound request: arguments placed into their request locations
# ---------------------------------------------------------------------------


@dataclass
class BoundRequest:
    """Arguments mapped onto path, query, headers, cookies and body.

    ``skipped`` names the parameters that could not be bound.
    """

    method: str
    path: str
    query: dict[str, Any] = field(default_factory=dict)
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    cookies: list[str] = field(default_factory=list)
    body: Any = None
    has_body: bool = False
    body_content_type: str | None = None
    skipped: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Execution result
# ---------------------------------------------------------------------------


class ExecutionResult(BaseModel):
    """Outcome of one outbound request."""

    success: bool
    status: int
    method: str
    url: str
    path: str
    data: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
