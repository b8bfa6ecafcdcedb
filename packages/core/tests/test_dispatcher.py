"""End-to-end tests for ToolDispatcher.

The git backend is replaced by an in-memory fake with call counters; the
summarizer is a stub that returns placeholder text. Reports are written by a
real MarkdownReportStore under tmp_path.
"""

import asyncio
import re
import threading
import time
from pathlib import Path

import pytest

from gitlog_core.errors import GitBackendError
from gitlog_core.git.models import Author, Commit, CommitDetail, RepositoryStats
from gitlog_core.providers.base import BaseSummarizer
from gitlog_core.rate_limit import RateLimiter
from gitlog_core.tools.dispatcher import ToolDispatcher
from gitlog_reports.markdown import MarkdownReportStore

_SAVED_RE = re.compile(r"\*\*Summary saved to:\*\* (.+)$")
_ENTRY_RE = re.compile(r"^(\d+)\. commit (\w+)", re.MULTILINE)


def _commits(n):
    """n commits, newest first, as git log would list them."""
    return [
        Commit(
            hash=(f"{n - i:x}" * 40)[:40],
            date=f"2024-06-{n - i:02d}T10:00:00+00:00",
            message=f"Change number {n - i}",
            author_name="Alice",
            author_email="alice@example.com",
        )
        for i in range(n)
    ]


class FakeRepository:
    def __init__(self, commits, delays=None, path="/repo"):
        self.path = Path(path)
        self.commits = commits
        self.delays = delays or {}
        self.calls = {"log": 0, "show": 0, "diff": 0, "shortlog": 0, "stats": 0}
        self.log_limits = []
        self.completed = []
        self._lock = threading.Lock()

    def _count(self, name):
        with self._lock:
            self.calls[name] += 1

    def log(self, limit=50, since=None, until=None, author=None):
        self._count("log")
        self.log_limits.append(limit)
        return self.commits[:limit]

    def show(self, ref):
        self._count("show")
        time.sleep(self.delays.get(ref, 0))
        for commit in self.commits:
            if commit.hash == ref or (ref == "HEAD" and commit is self.commits[0]):
                with self._lock:
                    self.completed.append(commit.hash)
                return CommitDetail(commit=commit, files_changed=["src/app.py"], diff="+change")
        raise GitBackendError(f"Commit not found: {ref}")

    def diff(self, commit_hash=None, from_commit=None, to_commit=None, file_path=None):
        self._count("diff")
        return []

    def shortlog(self):
        self._count("shortlog")
        return [Author("Alice", "alice@example.com", len(self.commits))]

    def stats(self):
        self._count("stats")
        return RepositoryStats(
            total_commits=len(self.commits),
            total_authors=1,
            first_commit=self.commits[-1].hash,
            last_commit=self.commits[0].hash,
            branches=["main"],
        )


class StubSummarizer(BaseSummarizer):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = 0

    def _call_api(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        self.calls += 1
        return "placeholder summary"


def _dispatcher(tmp_path, repository, summarizer=None, **kwargs):
    kwargs.setdefault("language", "en")
    return ToolDispatcher(
        repository=repository,
        report_store=MarkdownReportStore(tmp_path / "summaries"),
        summarizer=summarizer,
        **kwargs,
    )


def _run(dispatcher, name, arguments=None):
    return asyncio.run(dispatcher.dispatch(name, arguments))


def _saved_path(text):
    match = _SAVED_RE.search(text)
    assert match, text
    return Path(match.group(1))


# ---------------------------------------------------------------------------
# End-to-end scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_list_commits_returns_what_exists_newest_first(self, tmp_path):
        repository = FakeRepository(_commits(3))
        text = _run(_dispatcher(tmp_path, repository), "list-commits", {"limit": 5})

        assert text.startswith("# Git Log (3 commits)")
        positions = [text.index(c.short_hash) for c in repository.commits]
        assert positions == sorted(positions)

    def test_invalid_hash_is_rejected_before_any_backend_call(self, tmp_path):
        repository = FakeRepository(_commits(3))
        summarizer = StubSummarizer()
        text = _run(_dispatcher(tmp_path, repository, summarizer), "analyze-commit", {"commitHash": "not-a-hash!"})

        assert text == "Error: Invalid commitHash: Invalid commit hash format"
        assert sum(repository.calls.values()) == 0
        assert summarizer.calls == 0

    def test_second_summary_in_window_is_rate_limited(self, tmp_path):
        summarizer = StubSummarizer(rate_limiter=RateLimiter(max_calls=1, window_ms=60_000))
        dispatcher = _dispatcher(tmp_path, FakeRepository(_commits(2)), summarizer)

        first = _run(dispatcher, "generate-project-summary", {})
        second = _run(dispatcher, "generate-project-summary", {})

        assert "placeholder summary" in first
        match = re.fullmatch(r"Error: Rate limit exceeded\. Please wait (\d+) seconds\.", second)
        assert match
        assert int(match.group(1)) > 0
        assert summarizer.calls == 1

    def test_project_summary_numbers_commits_in_listing_order(self, tmp_path):
        commits = _commits(4)
        # The newest commit is the slowest to fetch, so fetches complete oldest first.
        delays = {c.hash: 0.05 * (len(commits) - i) for i, c in enumerate(commits)}
        repository = FakeRepository(commits, delays=delays)
        text = _run(_dispatcher(tmp_path, repository, StubSummarizer()), "generate-project-summary", {"commitCount": 10})

        expected = [(str(i), c.hash) for i, c in enumerate(commits, start=1)]
        assert _ENTRY_RE.findall(text) == expected
        assert repository.completed != [c.hash for c in commits]

        report = _saved_path(text).read_text(encoding="utf-8")
        assert _ENTRY_RE.findall(report) == expected


# ---------------------------------------------------------------------------
# Routing and limits
# ---------------------------------------------------------------------------


class TestGitTools:
    def test_unknown_tool(self, tmp_path):
        assert _run(_dispatcher(tmp_path, FakeRepository([])), "drop-table") == "Error: Unknown tool: drop-table"

    def test_default_limit(self, tmp_path):
        repository = FakeRepository(_commits(1))
        _run(_dispatcher(tmp_path, repository), "list-commits")
        assert repository.log_limits == [50]

    def test_limit_clamped_to_max_commits(self, tmp_path):
        repository = FakeRepository(_commits(5))
        text = _run(_dispatcher(tmp_path, repository, max_commits=2), "list-commits", {"limit": 500})
        assert repository.log_limits == [2]
        assert text.startswith("# Git Log (2 commits)")

    def test_show_diff_with_no_changes(self, tmp_path):
        text = _run(_dispatcher(tmp_path, FakeRepository(_commits(1))), "show-diff", {"fromCommit": "HEAD"})
        assert text == "No differences found."

    def test_commit_detail(self, tmp_path):
        repository = FakeRepository(_commits(2))
        text = _run(_dispatcher(tmp_path, repository), "commit-detail", {"commitHash": "HEAD"})
        assert text.startswith("# Commit Information")
        assert repository.commits[0].hash in text

    def test_backend_error_is_returned_as_text(self, tmp_path):
        text = _run(_dispatcher(tmp_path, FakeRepository(_commits(1))), "commit-detail", {"commitHash": "abcdef1"})
        assert text == "Error: Commit not found: abcdef1"

    def test_authors_and_stats(self, tmp_path):
        dispatcher = _dispatcher(tmp_path, FakeRepository(_commits(3)))
        assert "1. **Alice** <alice@example.com> - 3 commits" in _run(dispatcher, "list-authors")
        stats = _run(dispatcher, "repository-stats")
        assert "**Total Commits:** 3" in stats
        assert "**Repository Path:** /repo" in stats

    def test_unexpected_exception_is_contained(self, tmp_path, mocker):
        repository = FakeRepository(_commits(1))
        mocker.patch.object(repository, "stats", side_effect=RuntimeError("boom"))
        assert _run(_dispatcher(tmp_path, repository), "repository-stats") == "Error: boom"

    def test_timeout(self, tmp_path):
        commits = _commits(1)
        repository = FakeRepository(commits, delays={"HEAD": 0.5})
        text = _run(_dispatcher(tmp_path, repository, timeout=0.05), "commit-detail", {"commitHash": "HEAD"})
        assert text == "Error: Tool 'commit-detail' timed out after 0.05s"


class TestAnalysisTools:
    @pytest.mark.parametrize(
        "name, arguments",
        [("analyze-commit", {"commitHash": "HEAD"}), ("generate-project-summary", {})],
    )
    def test_unconfigured_fails_before_git(self, tmp_path, name, arguments):
        repository = FakeRepository(_commits(2))
        text = _run(_dispatcher(tmp_path, repository), name, arguments)
        assert text.startswith("Error: AI analysis not available")
        assert sum(repository.calls.values()) == 0

    def test_analyze_commit_without_saving(self, tmp_path):
        repository = FakeRepository(_commits(1))
        text = _run(_dispatcher(tmp_path, repository, StubSummarizer()), "analyze-commit", {"commitHash": "HEAD"})
        assert text == f"# Commit Analysis: {repository.commits[0].short_hash}\n\nplaceholder summary"
        assert not (tmp_path / "summaries").exists()

    def test_analyze_commit_saves_named_report(self, tmp_path):
        repository = FakeRepository(_commits(1))
        text = _run(
            _dispatcher(tmp_path, repository, StubSummarizer()),
            "analyze-commit",
            {"commitHash": "HEAD", "generateSummary": True, "outputFile": "release-notes"},
        )
        path = _saved_path(text)
        assert path == tmp_path / "summaries" / "release-notes.md"
        assert "placeholder summary" in path.read_text(encoding="utf-8")

    def test_analyze_commit_default_report_name(self, tmp_path):
        repository = FakeRepository(_commits(1))
        text = _run(
            _dispatcher(tmp_path, repository, StubSummarizer()),
            "analyze-commit",
            {"commitHash": "HEAD", "generateSummary": True},
        )
        assert re.fullmatch(rf"commit-{repository.commits[0].short_hash}-\d+\.md", _saved_path(text).name)

    def test_project_summary_with_no_commits(self, tmp_path):
        summarizer = StubSummarizer()
        text = _run(_dispatcher(tmp_path, FakeRepository([]), summarizer), "generate-project-summary", {})
        assert text == "Error: No commits found in repository"
        assert summarizer.calls == 0

    def test_project_summary_commit_count_clamped(self, tmp_path):
        repository = FakeRepository(_commits(8))
        _run(_dispatcher(tmp_path, repository, StubSummarizer(), max_commits=3), "generate-project-summary", {})
        assert repository.log_limits == [3]
        assert repository.calls["show"] == 3

    def test_unwritable_output_directory(self, tmp_path):
        blocker = tmp_path / "summaries"
        blocker.write_text("not a directory")
        text = _run(_dispatcher(tmp_path, FakeRepository(_commits(1)), StubSummarizer()), "generate-project-summary")
        assert text.startswith("Error: Output directory")
