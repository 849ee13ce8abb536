"""openapi-mcp CLI entrypoint."""

from __future__ import annotations

import click

from openapi_mcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="openapi-mcp")
def main() -> None:
    """openapi-mcp — expose an OpenAPI document as MCP tools."""


# Register subcommands
from openapi_mcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
