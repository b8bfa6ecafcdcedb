"""MCP stdio transport for the gitlogmcp tools.

The transport only moves a tool name and an argument bag in and one text
block out. Argument validation is left entirely to the dispatcher, so the
SDK's own JSON-schema input validation is switched off.
"""

from __future__ import annotations

import importlib.metadata
import logging

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from gitlog_core.config import ai_configured
from gitlog_core.git.repository import GitRepository
from gitlog_core.providers.openrouter import OpenRouterSummarizer
from gitlog_core.rate_limit import RateLimiter
from gitlog_core.tools.dispatcher import ToolDispatcher
from gitlog_core.tools.schemas import TOOL_DESCRIPTIONS, ToolName, input_schema
from gitlog_reports.markdown import MarkdownReportStore

logger = logging.getLogger(__name__)

SERVER_NAME = "gitlogmcp"


def build_dispatcher(config: dict) -> ToolDispatcher:
    """Wire a dispatcher from a validated config.

    The summarizer and its rate limiter are built once here and shared by
    every request for the process lifetime. Without an API key and model id
    the dispatcher falls back to its unconfigured summarizer.
    """
    summarizer = None
    if ai_configured(config):
        summarizer = OpenRouterSummarizer(
            api_key=config["api_key"],
            model_id=config["model_id"],
            rate_limiter=RateLimiter(config["rate_limit_calls"], config["rate_limit_window_ms"]),
            language=config["language"],
        )
    return ToolDispatcher(
        repository=GitRepository(config["repository_path"]),
        report_store=MarkdownReportStore(config["output_directory"]),
        summarizer=summarizer,
        max_commits=config["max_commits"],
        language=config["language"],
        timeout=config["tool_timeout"],
    )


def tool_definitions() -> list[types.Tool]:
    return [
        types.Tool(name=tool.value, description=TOOL_DESCRIPTIONS[tool], inputSchema=input_schema(tool))
        for tool in ToolName
    ]


async def call_tool(dispatcher: ToolDispatcher, name: str, arguments: dict | None) -> list[types.TextContent]:
    text = await dispatcher.dispatch(name, arguments)
    return [types.TextContent(type="text", text=text)]


def build_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=importlib.metadata.version("gitlogmcp"))

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return tool_definitions()

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
        return await call_tool(dispatcher, name, arguments)

    return server


async def serve_stdio(dispatcher: ToolDispatcher) -> None:
    server = build_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("gitlogmcp server running on stdio for %s", dispatcher.repository.path)
        await server.run(read_stream, write_stream, server.create_initialization_options())
