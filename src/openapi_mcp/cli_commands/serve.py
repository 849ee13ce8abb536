"""``openapi-mcp serve`` — run the MCP endpoint over HTTP."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from openapi_mcp.cli_commands._output import configure_logging, console


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings YAML file.",
)
@click.option("--openapi-url", default=None, help="URL of the OpenAPI document.")
@click.option("--base-url", default=None, help="Base URL of the target API.")
@click.option("--token", default=None, envvar="OPENAPI_MCP_TOKEN", help="Bearer token for the target API.")
@click.option("--tag", "tags", multiple=True, help="Expose only operations whose tags contain TAG.")
@click.option("--path", "endpoint_path", default=None, help="Endpoint path (default: mcp).")
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="Bind port.")
@click.option("--log-level", default=None, help="Logging level.")
def serve(
    config_path: Path | None,
    openapi_url: str | None,
    base_url: str | None,
    token: str | None,
    tags: tuple[str, ...],
    endpoint_path: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
) -> None:
    """Serve the MCP JSON-RPC endpoint for an OpenAPI-described API."""
    import uvicorn

    from openapi_mcp.sdk.errors import SettingsValidationError
    from openapi_mcp.sdk.loader import SettingsLoader
    from openapi_mcp.sdk.models import ServerSettings
    from openapi_mcp.server.app import create_app

    try:
        settings = SettingsLoader(config_path).load() if config_path else ServerSettings()
        overrides: dict[str, Any] = {
            "openapi_url": openapi_url,
            "path": endpoint_path,
            "host": host,
            "port": port,
            "log_level": log_level,
            "filter_tags": list(tags) or None,
        }
        data = settings.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        if base_url is not None:
            data["credentials"]["base_url"] = base_url
        if token is not None:
            data["credentials"]["token"] = token
        settings = ServerSettings.model_validate(data)
    except (SettingsValidationError, ValueError) as exc:
        console.print(f"[red]Invalid settings:[/red] {exc}")
        raise SystemExit(1) from exc

    if not settings.openapi_url:
        console.print("[red]No OpenAPI URL configured[/red] (use --openapi-url or the settings file)")
        raise SystemExit(1)

    configure_logging(settings.log_level)
    if settings.telemetry and settings.telemetry.enabled:
        from openapi_mcp.utils.telemetry import configure_telemetry

        configure_telemetry(
            service_name=settings.telemetry.service_name,
            export_to_console=settings.telemetry.export_to_console,
            otlp_endpoint=settings.telemetry.otlp_endpoint,
        )

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())
