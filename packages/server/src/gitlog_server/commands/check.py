"""check command: verify the repository, output directory and API access."""

from __future__ import annotations

import click
from rich.console import Console

from gitlog_core.config import ai_configured
from gitlog_core.errors import GitLogError
from gitlog_core.utils.fs import ensure_safe_directory
from gitlog_server.commands.options import config_options, resolve_config

console = Console()


@click.command("check")
@config_options
@click.pass_context
def check_cmd(ctx, **overrides):
    """Check that the server's collaborators are reachable before serving.

    Exits with status 1 if the repository, the output directory, or a
    configured OpenRouter API is not usable.
    """
    from gitlog_server.server import build_dispatcher

    config = resolve_config(ctx, **overrides)
    dispatcher = build_dispatcher(config)
    ok = True

    if dispatcher.repository.is_git_repository():
        console.print(f"[green]✓[/green] Repository: {dispatcher.repository.path}")
    else:
        console.print(f"[red]✗[/red] Not a git repository: {dispatcher.repository.path}")
        ok = False

    output_directory = config["output_directory"]
    if ensure_safe_directory(output_directory):
        console.print(f"[green]✓[/green] Output directory: {output_directory}")
    else:
        console.print(f"[red]✗[/red] Output directory is not writable: {output_directory}")
        ok = False

    if not ai_configured(config):
        console.print("[yellow]–[/yellow] AI analysis disabled (no API key or model id)")
    else:
        try:
            connected = dispatcher.summarizer.test_connection()
        except GitLogError as e:
            console.print(f"[red]✗[/red] OpenRouter: {e}")
            connected = False
        else:
            if connected:
                console.print(f"[green]✓[/green] OpenRouter reachable, model {config['model_id']}")
            else:
                console.print("[red]✗[/red] OpenRouter did not answer; check the API key and network access")
        ok = ok and connected

    if not ok:
        ctx.exit(1)
