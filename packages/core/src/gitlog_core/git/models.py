"""Records returned by the git backend.

Plain dataclasses so the dispatcher and the summarizers never see raw git
output, and tests can build fixtures without a repository.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


@dataclass
class Commit:
    hash: str
    date: str  # author date, ISO-8601 as printed by git (%aI)
    message: str
    author_name: str
    author_email: str
    refs: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass
class FileDiff:
    """Change statistics and patch text for one file in a diff range."""

    file: str
    insertions: int
    deletions: int
    patch: str = ""

    @property
    def changes(self) -> int:
        return self.insertions + self.deletions


class DiffOutcome(enum.Enum):
    """How a commit's diff was obtained.

    Lets callers tell "no changes" apart from "could not determine".
    """

    DIFFED = "diffed"  # diffed against the first parent
    ROOT_COMMIT = "root_commit"  # no parent; shown against the empty tree
    UNAVAILABLE = "unavailable"


@dataclass
class CommitDetail:
    commit: Commit
    files_changed: list[str] = field(default_factory=list)
    diff: str = ""
    outcome: DiffOutcome = DiffOutcome.DIFFED


@dataclass
class Author:
    name: str
    email: str
    commits: int


@dataclass
class RepositoryStats:
    total_commits: int
    total_authors: int
    first_commit: str
    last_commit: str
    branches: list[str] = field(default_factory=list)
