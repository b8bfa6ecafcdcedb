"""CLI entry point for gitlogmcp.

Commands:
  serve  run the MCP server over stdio
  check  verify repository, output directory and OpenRouter access
  tools  list the exposed tools and their arguments
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from gitlog_server.commands.check import check_cmd
from gitlog_server.commands.serve import serve_cmd
from gitlog_server.commands.tools import tools_cmd

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _configure_logging(level: str) -> None:
    """Send log records to stderr; stdout carries the MCP stream under `serve`."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("gitlogmcp"),
    prog_name="gitlogmcp",
)
@click.option(
    "--config",
    "config_path",
    default=".gitlogmcp.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="GITLOGMCP_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity (written to stderr).",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, log_level: str):
    """MCP server for git history introspection and AI commit summaries."""
    _configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(serve_cmd)
main.add_command(check_cmd)
main.add_command(tools_cmd)
