"""OpenAPI tool models — sanitized schemas, parameter and tool descriptors.

A :class:`ToolDescriptor` is the compiled, callable form of one OpenAPI
operation. Its :class:`InputSchema` is built exclusively from
:class:`PropertySchema` nodes, which carry an explicit allow-list of
descriptive JSON-Schema keywords and nothing else.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Sanitized schema tree
# ---------------------------------------------------------------------------

SchemaKind = Literal["object", "array", "union", "scalar"]

# Descriptive keywords copied verbatim from a source schema.
DESCRIPTIVE_FIELDS: tuple[str, ...] = (
    "description",
    "examples",
    "example",
    "default",
    "enum",
    "pattern",
    "minLength",
    "maxLength",
    "minimum",
    "maximum",
    "format",
    "multipleOf",
    "exclusiveMinimum",
    "exclusiveMaximum",
)


class PropertySchema(BaseModel):
    """A single sanitized schema node.

    Only the fields that were present in the source are emitted by
    :meth:`to_json`, so an explicit ``default: null`` survives while an
    absent one stays absent.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str | list[str] = "string"
    description: str | None = None
    examples: Any = None
    example: Any = None
    default: Any = None
    enum: list[Any] | None = None
    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    minimum: int | float | None = None
    maximum: int | float | None = None
    format: str | None = None
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")
    exclusive_minimum: bool | int | float | None = Field(default=None, alias="exclusiveMinimum")
    exclusive_maximum: bool | int | float | None = Field(default=None, alias="exclusiveMaximum")

    properties: dict[str, PropertySchema] | None = None
    required: list[str] | None = None
    items: PropertySchema | None = None
    one_of: list[PropertySchema] | None = Field(default=None, alias="oneOf")
    any_of: list[PropertySchema] | None = Field(default=None, alias="anyOf")
    all_of: list[PropertySchema] | None = Field(default=None, alias="allOf")

    @property
    def kind(self) -> SchemaKind:
        """Classify the node as an object, array, union, or scalar."""
        if self.properties is not None or self.type == "object":
            return "object"
        if self.items is not None or self.type == "array":
            return "array"
        if self.one_of or self.any_of or self.all_of:
            return "union"
        return "scalar"

    def to_json(self) -> dict[str, Any]:
        """Serialise to a plain JSON-Schema mapping."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class InputSchema(BaseModel):
    """The top-level object schema advertised for a tool."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["object"] = "object"
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: Literal[False] = Field(default=False, alias="additionalProperties")

    def to_json(self) -> dict[str, Any]:
        """Serialise to a plain JSON-Schema mapping."""
        return {
            "type": "object",
            "properties": {name: prop.to_json() for name, prop in self.properties.items()},
            "required": list(self.required),
            "additionalProperties": False,
        }


# ---------------------------------------------------------------------------
# Tool descriptors
# ---------------------------------------------------------------------------

BODY_LOCATION = "body"


class ParameterDescriptor(BaseModel):
    """Where one named argument goes in the outgoing request.

    ``location`` is normally one of ``path``, ``query``, ``header``,
    ``cookie`` or ``body``; unknown source locations are kept verbatim.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    location: str = Field(alias="in")
    required: bool = False
    description: str | None = None
    param_schema: dict[str, Any] = Field(default_factory=lambda: {"type": "string"}, alias="schema")
    content_type: str | None = Field(default=None, alias="contentType")

    @property
    def is_body(self) -> bool:
        return self.location in (BODY_LOCATION, "requestBody")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolDescriptor(BaseModel):
    """The compiled, immutable representation of one OpenAPI operation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    input_schema: InputSchema = Field(default_factory=InputSchema, alias="inputSchema")
    method: str = "GET"
    path: str = "/"
    operation_id: str | None = Field(default=None, alias="operationId")
    tag: str | None = None
    deprecated: bool = False
    summary: str | None = None
    parameters: list[ParameterDescriptor] = Field(default_factory=list)

    @property
    def body_parameter(self) -> ParameterDescriptor | None:
        """Return the synthesized request-body descriptor, if any."""
        return next((p for p in self.parameters if p.is_body), None)

    def x_props(self) -> dict[str, Any]:
        """Invocation metadata advertised alongside the tool."""
        return {
            "method": self.method,
            "path": self.path,
            "operationId": self.operation_id,
            "tag": self.tag,
            "deprecated": self.deprecated,
            "summary": self.summary,
            "parameters": [p.to_json() for p in self.parameters],
        }

    def to_mcp(self) -> dict[str, Any]:
        """Shape the tool for a ``tools/list`` result."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_json(),
            "x-props": self.x_props(),
        }


class SkippedOperation(BaseModel):
    """An operation that could not be compiled into a tool."""

    method: str
    path: str
    reason: str


class CompileReport(BaseModel):
    """Aggregated outcome of one compile pass."""

    tools: list[ToolDescriptor] = Field(default_factory=list)
    skipped: list[SkippedOperation] = Field(default_factory=list)
