"""Markdown rendering of tool results.

Every tool answers with a single text block; these helpers build it from the
git records so handlers stay free of string assembly.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from gitlog_core.git.models import Author, Commit, CommitDetail, DiffOutcome, FileDiff, RepositoryStats

# Report headings for the analysis tools, keyed by output language.
HEADINGS: dict[str, dict[str, str]] = {
    "en": {
        "commit_analysis": "Commit Analysis",
        "project_summary": "Project Impact Summary",
        "date": "Date",
        "message": "Commit Message",
        "analysis": "Analysis",
        "commits": "Commits",
        "commits_analyzed": "Commits Analyzed",
        "summary": "Summary",
    },
    "id": {
        "commit_analysis": "Analisis Commit",
        "project_summary": "Ringkasan Dampak Proyek",
        "date": "Tanggal",
        "message": "Pesan Commit",
        "analysis": "Analisis",
        "commits": "Daftar Commit",
        "commits_analyzed": "Commits Dianalisis",
        "summary": "Ringkasan",
    },
}


def headings(language: str) -> dict[str, str]:
    return HEADINGS.get(language, HEADINGS["en"])


def format_commit_list(commits: list[Commit]) -> str:
    entries = []
    for commit in commits:
        entry = (
            f"**{commit.short_hash}** - {commit.message}\n"
            f"Author: {commit.author_name} <{commit.author_email}>\n"
            f"Date: {commit.date}\n"
        )
        if commit.refs:
            entry += f"Refs: {commit.refs}\n"
        entries.append(entry)
    return f"# Git Log ({len(commits)} commits)\n\n" + "\n".join(entries)


def format_diff(diffs: list[FileDiff]) -> str:
    if not diffs:
        return "No differences found."
    sections = [
        f"## {d.file}\n**Changes:** {d.changes} (+{d.insertions}/-{d.deletions})\n\n```diff\n{d.patch.rstrip()}\n```"
        for d in diffs
    ]
    return "# Git Diff\n\n" + "\n\n".join(sections)


def _outcome_note(detail: CommitDetail) -> str:
    if detail.outcome is DiffOutcome.ROOT_COMMIT:
        return "_Root commit: changes shown against the empty tree._\n\n"
    if detail.outcome is DiffOutcome.UNAVAILABLE:
        return "_Changes for this commit could not be determined._\n\n"
    return ""


def format_commit_detail(detail: CommitDetail) -> str:
    commit = detail.commit
    files = "\n".join(f"- {f}" for f in detail.files_changed)
    return (
        "# Commit Information\n\n"
        f"**Hash:** {commit.hash}\n"
        f"**Author:** {commit.author_name} <{commit.author_email}>\n"
        f"**Date:** {commit.date}\n"
        + (f"**Refs:** {commit.refs}\n" if commit.refs else "")
        + f"**Message:**\n{commit.message}\n\n"
        f"**Files Changed ({len(detail.files_changed)}):**\n{files}\n\n"
        + _outcome_note(detail)
        + f"**Diff:**\n```diff\n{detail.diff.rstrip()}\n```"
    )


def format_authors(authors: list[Author]) -> str:
    lines = [f"{i}. **{a.name}** <{a.email}> - {a.commits} commits" for i, a in enumerate(authors, start=1)]
    return "# Repository Authors\n\n" + "\n".join(lines)


def format_stats(stats: RepositoryStats, repository_path: str | Path) -> str:
    return (
        "# Repository Statistics\n\n"
        f"**Total Commits:** {stats.total_commits}\n"
        f"**Total Authors:** {stats.total_authors}\n"
        f"**First Commit:** {stats.first_commit}\n"
        f"**Last Commit:** {stats.last_commit}\n"
        f"**Branches:** {', '.join(stats.branches)}\n"
        f"**Repository Path:** {repository_path}"
    )


def format_commit_analysis(detail: CommitDetail, analysis: str, language: str) -> str:
    return f"# {headings(language)['commit_analysis']}: {detail.commit.short_hash}\n\n{analysis}"


def commit_analysis_report(detail: CommitDetail, analysis: str, language: str, generated_at: datetime) -> str:
    """Body of the markdown file written when a commit analysis is persisted."""
    h = headings(language)
    commit = detail.commit
    return (
        f"# {h['commit_analysis']}: {commit.hash}\n\n"
        f"**{h['date']}:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"**Commit Hash:** {commit.hash}\n"
        f"**Author:** {commit.author_name}\n"
        f"**{h['message']}:** {commit.message}\n\n"
        f"## {h['analysis']}\n\n{analysis}"
    )


def format_numbered_commits(details: list[CommitDetail]) -> str:
    """Numbered commit list, 1..N in the order given (newest first from git log)."""
    entries = []
    for i, detail in enumerate(details, start=1):
        commit = detail.commit
        files = ", ".join(detail.files_changed) or "(none)"
        entries.append(
            f"{i}. commit {commit.hash} ({commit.refs or 'none'})\n"
            f"   Author: {commit.author_name} <{commit.author_email}>\n"
            f"   Date:   {commit.date}\n"
            f"   Message: {commit.message.splitlines()[0] if commit.message else ''}\n"
            f"   File changes: {files}"
        )
    return "\n\n".join(entries)


def format_project_summary(details: list[CommitDetail], summary: str, language: str) -> str:
    h = headings(language)
    return (
        f"# {h['project_summary']}\n\n"
        f"## {h['commits']}\n\n{format_numbered_commits(details)}\n\n"
        f"## {h['summary']}\n\n{summary}"
    )


def project_summary_report(
    details: list[CommitDetail],
    summary: str,
    language: str,
    repository_path: str | Path,
    generated_at: datetime,
) -> str:
    """Body of the markdown file written for every project summary."""
    h = headings(language)
    return (
        f"# {h['project_summary']}\n\n"
        f"**{h['date']}:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"**{h['commits_analyzed']}:** {len(details)}\n"
        f"**Repository:** {repository_path}\n\n"
        f"## {h['commits']}\n\n{format_numbered_commits(details)}\n\n"
        f"## {h['summary']}\n\n{summary}"
    )
