"""Base summarizer implementing the Template Method pattern.

All providers share the same flow:
    analyze_commit() / summarize_project()
        → ensure_configured()
        → _build_*_prompt()
        → _complete()  ← admission gate, then _call_api()

Subclasses implement only ``_call_api``: one raw completion request that
returns the text or raises a CompletionBackendError. Prompt construction
and the rate-limit gate live here so every provider behaves the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from gitlog_core.errors import RateLimitExceeded
from gitlog_core.rate_limit import RateLimiter

if TYPE_CHECKING:
    from gitlog_core.git.models import CommitDetail

logger = logging.getLogger(__name__)

LANGUAGES = {"en": "English", "id": "Indonesian"}

_MAX_DIFF_CHARS = 8000


def truncate_diff(diff: str, limit: int = _MAX_DIFF_CHARS) -> str:
    if len(diff) <= limit:
        return diff
    return diff[:limit] + " ...(truncated)"


class BaseSummarizer(ABC):
    TEMPERATURE: float = 0.3
    COMMIT_MAX_TOKENS: int = 2000
    PROJECT_MAX_TOKENS: int = 1500

    def __init__(self, rate_limiter: RateLimiter | None = None, language: str = "en"):
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.language = language

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if this summarizer cannot make calls."""

    def analyze_commit(self, detail: CommitDetail) -> str:
        """Return a markdown analysis of a single commit."""
        self.ensure_configured()
        return self._complete(
            self._build_commit_system_prompt(),
            self._build_commit_user_prompt(detail),
            self.COMMIT_MAX_TOKENS,
        )

    def summarize_project(self, details: list[CommitDetail], project_context: str | None = None) -> str:
        """Return a markdown impact summary across several commits."""
        self.ensure_configured()
        return self._complete(
            self._build_project_system_prompt(),
            self._build_project_user_prompt(details, project_context),
            self.PROJECT_MAX_TOKENS,
        )

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """Make a single completion request and return the text response."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _admit(self) -> None:
        """Pass the admission gate or raise RateLimitExceeded.

        Called before every network request, not once per tool invocation.
        """
        if not self.rate_limiter.can_admit():
            wait_ms = self.rate_limiter.time_until_next_slot()
            logger.warning("%s: rate limit reached, next slot in %.0f ms", self.__class__.__name__, wait_ms)
            raise RateLimitExceeded(wait_ms)

    def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        self._admit()
        return self._call_api(system_prompt, user_prompt, max_tokens)

    @property
    def _language_name(self) -> str:
        return LANGUAGES.get(self.language, "English")

    def _build_commit_system_prompt(self) -> str:
        return f"""You are an experienced code analysis expert specializing in git repository changes.
Analyze the commit you are given and write a comprehensive summary in {self._language_name}.

Cover:
1. Summary of the changes made
2. Files affected and their impact
3. Purpose of the changes
4. Potential impact on the overall project
5. Recommendations or things to note

Format the response as clean, readable markdown."""

    def _build_commit_user_prompt(self, detail: CommitDetail) -> str:
        commit = detail.commit
        files = ", ".join(detail.files_changed) or "(none)"
        return f"""Analyze the following commit:

**Commit Hash:** {commit.hash}
**Commit Message:** {commit.message}
**Author:** {commit.author_name}
**Files Changed:** {files}

**Diff Content:**
```diff
{truncate_diff(detail.diff)}
```

Write the analysis in {self._language_name}."""

    def _build_project_system_prompt(self) -> str:
        return f"""You are a software project analyst.
You receive a list of recent commits, newest first, with their messages and changed files.
Write a concise project impact summary in {self._language_name}:
- what areas of the project changed and why
- how the changed files affect the rest of the project
- risks or follow-up work worth noting

Do not repeat the commit list itself; it is already shown to the reader.
Format the response as clean, readable markdown."""

    def _build_project_user_prompt(self, details: list[CommitDetail], project_context: str | None = None) -> str:
        blocks = []
        for detail in details:
            commit = detail.commit
            blocks.append(
                f"Commit: {commit.hash}\n"
                f"Author: {commit.author_name} <{commit.author_email}>\n"
                f"Date: {commit.date}\n"
                f"Refs: {commit.refs or 'none'}\n"
                f"Message: {commit.message}\n"
                f"Files Changed: {', '.join(detail.files_changed) or '(none)'}"
            )
        context = f"\n\nProject Context: {project_context}" if project_context else ""
        return "Summarize the impact of these commits:\n\n" + "\n\n".join(blocks) + context
