"""serve command: run the MCP server over stdio."""

from __future__ import annotations

import asyncio
import logging

import click

from gitlog_core.config import ai_configured
from gitlog_server.commands.options import config_options, resolve_config

logger = logging.getLogger(__name__)


@click.command("serve")
@config_options
@click.pass_context
def serve_cmd(ctx, **overrides):
    """Serve the git tools to an MCP client over stdin/stdout.

    \b
    AI-powered tools (analyze-commit, generate-project-summary) need both an
    API key and a model id; without them the git-only tools still work.

    \b
    Environment variables:
      OPENROUTER_API_KEY     OpenRouter API key
      GITLOGMCP_MODEL_ID     OpenRouter model id
      GITLOGMCP_REPO_PATH    Repository path
      GITLOGMCP_OUTPUT_DIR   Output directory for summaries
    """
    from gitlog_server.server import build_dispatcher, serve_stdio

    config = resolve_config(ctx, **overrides)
    dispatcher = build_dispatcher(config)

    if not dispatcher.repository.is_git_repository():
        logger.warning("%s is not a git repository; git tools will report errors.", dispatcher.repository.path)
    if not ai_configured(config):
        logger.warning("AI analysis disabled: set an API key and model id to enable it.")

    asyncio.run(serve_stdio(dispatcher))
