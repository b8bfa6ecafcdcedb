"""Options shared by every command that needs a loaded configuration."""

from __future__ import annotations

import click

from gitlog_core.config import load_config, validate_config
from gitlog_core.errors import ConfigurationError


_CONFIG_OPTIONS = [
    click.option("--api-key", default=None, help="OpenRouter API key (or set OPENROUTER_API_KEY)."),
    click.option("--model-id", default=None, help="OpenRouter model id, e.g. anthropic/claude-3.5-sonnet."),
    click.option("--repo-path", default=None, help="Path to the git repository. Default: current directory."),
    click.option("--output-dir", default=None, help="Directory for generated summaries. Default: ./summaries."),
    click.option("--max-commits", type=int, default=None, help="Ceiling on commits fetched per call. Default: 100."),
    click.option(
        "--language",
        type=click.Choice(["en", "id"]),
        default=None,
        help="Language of AI analysis and report headings. Default: id.",
    ),
]


def config_options(func):
    """Attach the configuration override options to a command."""
    for option in reversed(_CONFIG_OPTIONS):
        func = option(func)
    return func


def resolve_config(ctx: click.Context, **overrides) -> dict:
    """Load and validate config for a command; malformed settings are fatal."""
    cli_overrides = {
        "api_key": overrides.get("api_key"),
        "model_id": overrides.get("model_id"),
        "repository_path": overrides.get("repo_path"),
        "output_directory": overrides.get("output_dir"),
        "max_commits": overrides.get("max_commits"),
        "language": overrides.get("language"),
    }
    config_path = ctx.obj.get("config_path", ".gitlogmcp.yml") if ctx.obj else ".gitlogmcp.yml"
    try:
        return validate_config(load_config(config_path, cli_overrides=cli_overrides))
    except ConfigurationError as e:
        raise click.UsageError(str(e))
