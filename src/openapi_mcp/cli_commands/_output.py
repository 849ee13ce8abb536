"""Shared CLI output formatters and logging setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from openapi_mcp.openapi.models import SkippedOperation, ToolDescriptor

console = Console()


def configure_logging(level: str = "INFO") -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def print_tools_table(tools: list[ToolDescriptor]) -> None:
    """Pretty-print compiled tools as a table."""
    table = Table(title="Compiled Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Method")
    table.add_column("Path")
    table.add_column("Description")

    for tool in tools:
        name = f"{tool.name} [dim](deprecated)[/dim]" if tool.deprecated else tool.name
        table.add_row(name, tool.method, escape(tool.path), escape(_truncate(tool.description)))

    console.print(table)


def print_skipped(skipped: list[SkippedOperation]) -> None:
    if not skipped:
        return
    console.print(f"\n[yellow]Skipped {len(skipped)} operation(s):[/yellow]")
    for item in skipped:
        console.print(f"  {item.method} {escape(item.path)}: {escape(item.reason)}")


def print_tags(tags: list[str]) -> None:
    for tag in tags:
        console.print(f"  {escape(tag)}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
