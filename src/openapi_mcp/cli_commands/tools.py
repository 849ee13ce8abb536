"""``openapi-mcp tools`` — compile and inspect tools from an OpenAPI document."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from openapi_mcp.cli_commands._output import console, print_skipped, print_tags, print_tools_table

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import CompileReport


@click.group()
def tools() -> None:
    """Compile and inspect tools."""


@tools.command("list")
@click.argument("url")
@click.option("--tag", "tags", multiple=True, help="Only include operations whose tags contain TAG.")
@click.option("--strip-verb-prefix", is_flag=True, help="Drop get_/post_/api_ style name prefixes.")
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
def list_tools(url: str, tags: tuple[str, ...], strip_verb_prefix: bool, as_json: bool) -> None:
    """Compile the OpenAPI document at URL and list the resulting tools."""
    from openapi_mcp.openapi.compiler import compile_document
    from openapi_mcp.openapi.source import fetch_openapi_document

    async def _compile() -> CompileReport:
        document = await fetch_openapi_document(url)
        return compile_document(document, list(tags), strip_verb_prefix=strip_verb_prefix)

    try:
        report = asyncio.run(_compile())
    except Exception as exc:
        console.print(f"[red]Compile error:[/red] {exc}")
        return

    if as_json:
        payload: dict[str, Any] = {"tools": [t.to_mcp() for t in report.tools]}
        console.print_json(data=payload)
        return

    if not report.tools:
        console.print("[yellow]No tools compiled.[/yellow]")
    else:
        print_tools_table(report.tools)
    print_skipped(report.skipped)


@tools.command("tags")
@click.argument("url")
def list_tags(url: str) -> None:
    """List the operation tags available in the OpenAPI document at URL."""
    from openapi_mcp.openapi.compiler import list_available_tags
    from openapi_mcp.openapi.source import fetch_openapi_document

    try:
        document = asyncio.run(fetch_openapi_document(url))
    except Exception as exc:
        console.print(f"[red]Fetch error:[/red] {exc}")
        return

    found = list_available_tags(document)
    if not found:
        console.print("[yellow]No tags found.[/yellow]")
        return
    print_tags(found)
