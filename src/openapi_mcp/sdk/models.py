"""Pydantic models for the server settings YAML consumed by ``openapi-mcp serve``."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    """Target API location and the bearer token sent with every tool call."""

    base_url: str | None = None
    token: str | None = None


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    service_name: str = "openapi-mcp"
    export_to_console: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Top-level server settings parsed from YAML."""

    openapi_url: str = ""
    filter_tags: list[str] = Field(default_factory=lambda: ["all"])
    path: str = "mcp"
    host: str = "127.0.0.1"
    port: int = 8000
    cache_ttl: float = 300.0
    request_timeout: float = 30.0
    strip_verb_prefix: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    credentials: Credentials = Field(default_factory=Credentials)
    telemetry: TelemetrySettings | None = None

    @field_validator("filter_tags", mode="before")
    @classmethod
    def _coerce_filter(cls, value: object) -> object:
        if value is None:
            return ["all"]
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("path")
    @classmethod
    def _strip_path(cls, value: str) -> str:
        stripped = value.strip("/")
        if not stripped:
            msg = "path must not be empty"
            raise ValueError(msg)
        return stripped

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
