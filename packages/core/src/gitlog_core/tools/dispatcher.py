"""Tool dispatch: name → argument record → handler → text.

One invocation moves through Received → Validating → (Rejected |
Dispatching) → (Completed | Failed). Validation always finishes before any
git, completion or filesystem call, and nothing is retried. Every failure is
returned to the caller as a single ``Error: ...`` line; callers never see an
exception cross the tool boundary.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from gitlog_core.errors import GitBackendError, GitLogError, ToolTimeoutError
from gitlog_core.git.repository import DEFAULT_LOG_LIMIT
from gitlog_core.providers.unconfigured import UnconfiguredSummarizer
from gitlog_core.tools import formatting
from gitlog_core.tools.schemas import (
    AnalyzeCommitArgs,
    CommitDetailArgs,
    ListCommitsArgs,
    ProjectSummaryArgs,
    ShowDiffArgs,
    ToolName,
    parse_arguments,
)

if TYPE_CHECKING:
    from gitlog_core.git.repository import GitRepository
    from gitlog_core.providers.base import BaseSummarizer
    from gitlog_reports.base import BaseReportStore

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error: "
DEFAULT_TOOL_TIMEOUT = 120.0


def error_text(error: Exception) -> str:
    return f"{ERROR_PREFIX}{error}"


class ToolDispatcher:
    """Routes tool calls to handlers over one repository and one summarizer.

    ``summarizer`` defaults to UnconfiguredSummarizer, which makes the two
    AI tools fail fast with a configuration error while the git-only tools
    keep working.
    """

    def __init__(
        self,
        repository: GitRepository,
        report_store: BaseReportStore,
        summarizer: BaseSummarizer | None = None,
        max_commits: int = 100,
        language: str = "id",
        timeout: float = DEFAULT_TOOL_TIMEOUT,
    ):
        self.repository = repository
        self.report_store = report_store
        self.summarizer = summarizer if summarizer is not None else UnconfiguredSummarizer()
        self.max_commits = max_commits
        self.language = language
        self.timeout = timeout
        self._handlers = {
            ToolName.LIST_COMMITS: self._list_commits,
            ToolName.SHOW_DIFF: self._show_diff,
            ToolName.COMMIT_DETAIL: self._commit_detail,
            ToolName.ANALYZE_COMMIT: self._analyze_commit,
            ToolName.REPOSITORY_STATS: self._repository_stats,
            ToolName.LIST_AUTHORS: self._list_authors,
            ToolName.GENERATE_PROJECT_SUMMARY: self._generate_project_summary,
        }

    async def dispatch(self, name: str, arguments: dict | None = None) -> str:
        """Run one tool invocation and return its text response."""
        try:
            tool, args = parse_arguments(name, arguments, self.repository.path)
        except GitLogError as e:
            logger.info("Rejected %s: %s", name, e)
            return error_text(e)

        logger.debug("Dispatching %s with %r", tool.value, args)
        try:
            return await asyncio.wait_for(self._handlers[tool](args), timeout=self.timeout)
        except TimeoutError:
            error = ToolTimeoutError(tool.value, self.timeout)
            logger.warning("%s", error)
            return error_text(error)
        except GitLogError as e:
            logger.warning("%s failed: %s", tool.value, e)
            return error_text(e)
        except Exception as e:
            logger.exception("Unexpected failure in %s", tool.value)
            return error_text(e)

    # ------------------------------------------------------------------ #
    # Git-only tools                                                       #
    # ------------------------------------------------------------------ #

    async def _list_commits(self, args: ListCommitsArgs) -> str:
        limit = min(args.limit or DEFAULT_LOG_LIMIT, self.max_commits)
        commits = await asyncio.to_thread(
            self.repository.log, limit=limit, since=args.since, until=args.until, author=args.author
        )
        return formatting.format_commit_list(commits)

    async def _show_diff(self, args: ShowDiffArgs) -> str:
        diffs = await asyncio.to_thread(
            self.repository.diff,
            commit_hash=args.commit_hash,
            from_commit=args.from_commit,
            to_commit=args.to_commit,
            file_path=args.file_path,
        )
        return formatting.format_diff(diffs)

    async def _commit_detail(self, args: CommitDetailArgs) -> str:
        detail = await asyncio.to_thread(self.repository.show, args.commit_hash)
        return formatting.format_commit_detail(detail)

    async def _repository_stats(self, args) -> str:
        stats = await asyncio.to_thread(self.repository.stats)
        return formatting.format_stats(stats, self.repository.path)

    async def _list_authors(self, args) -> str:
        authors = await asyncio.to_thread(self.repository.shortlog)
        return formatting.format_authors(authors)

    # ------------------------------------------------------------------ #
    # Completion-backed tools                                              #
    # ------------------------------------------------------------------ #

    async def _analyze_commit(self, args: AnalyzeCommitArgs) -> str:
        self.summarizer.ensure_configured()

        detail = await asyncio.to_thread(self.repository.show, args.commit_hash)
        analysis = await asyncio.to_thread(self.summarizer.analyze_commit, detail)
        content = formatting.format_commit_analysis(detail, analysis, self.language)

        if args.generate_summary:
            body = formatting.commit_analysis_report(detail, analysis, self.language, datetime.now(timezone.utc))
            path = await asyncio.to_thread(
                self.report_store.write,
                kind="commit",
                identifier=detail.commit.short_hash,
                title=f"Commit {detail.commit.short_hash}",
                body=body,
                filename=args.output_file,
            )
            content += f"\n\n**Summary saved to:** {path}"
        return content

    async def _generate_project_summary(self, args: ProjectSummaryArgs) -> str:
        self.summarizer.ensure_configured()

        limit = min(args.commit_count, self.max_commits)
        commits = await asyncio.to_thread(self.repository.log, limit=limit)
        if not commits:
            raise GitBackendError("No commits found in repository")

        # Independent per-commit fetches; gather keeps the log order
        # regardless of which fetch finishes first.
        details = list(await asyncio.gather(*(asyncio.to_thread(self.repository.show, c.hash) for c in commits)))

        summary = await asyncio.to_thread(self.summarizer.summarize_project, details)
        content = formatting.format_project_summary(details, summary, self.language)

        body = formatting.project_summary_report(
            details, summary, self.language, self.repository.path, datetime.now(timezone.utc)
        )
        path = await asyncio.to_thread(
            self.report_store.write,
            kind="project",
            identifier="summary",
            title="Project summary",
            body=body,
            filename=args.output_file,
        )
        return content + f"\n\n**Summary saved to:** {path}"
