"""tools command: list the tools the server exposes."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from gitlog_core.tools.schemas import AI_TOOLS, TOOL_DESCRIPTIONS, ToolName, input_schema

console = Console()


@click.command("tools")
def tools_cmd():
    """Show every tool name, its arguments, and whether it needs the AI backend."""
    table = Table(title="gitlogmcp tools", show_header=True, header_style="bold cyan")
    table.add_column("Tool", style="bold", no_wrap=True)
    table.add_column("Arguments")
    table.add_column("AI", justify="center", width=4)
    table.add_column("Description")

    for tool in ToolName:
        schema = input_schema(tool)
        required = set(schema.get("required", []))
        arguments = ", ".join(
            name if name in required else f"{name}?" for name in schema.get("properties", {})
        )
        table.add_row(
            tool.value,
            arguments or "-",
            "[yellow]yes[/yellow]" if tool in AI_TOOLS else "",
            TOOL_DESCRIPTIONS[tool],
        )

    console.print(table)
