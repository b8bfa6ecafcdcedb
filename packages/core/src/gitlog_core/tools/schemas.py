"""Argument records for the seven tools.

Each tool's loosely typed argument bag is parsed into exactly one of these
records before anything else happens. Wire names are camelCase (aliases);
Python attributes are snake_case. A failed parse raises ValidationError
naming the offending wire field.
"""

from __future__ import annotations

import enum
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional, Union

import pydantic
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

from gitlog_core.errors import UnknownToolError, ValidationError
from gitlog_core.utils.sanitize import sanitize_input
from gitlog_core.utils.validation import is_valid_commit_reference, is_valid_filename, is_valid_path


class ToolName(str, enum.Enum):
    LIST_COMMITS = "list-commits"
    SHOW_DIFF = "show-diff"
    COMMIT_DETAIL = "commit-detail"
    ANALYZE_COMMIT = "analyze-commit"
    REPOSITORY_STATS = "repository-stats"
    LIST_AUTHORS = "list-authors"
    GENERATE_PROJECT_SUMMARY = "generate-project-summary"


def is_valid_date(value: str) -> bool:
    """Return True for an ISO-8601 date or datetime such as ``2024-01-15``.

    Narrower than git's own approxidate: ``2024/01/15`` and ``Jan 15 2024``
    are rejected so every accepted value means the same thing to git.
    """
    try:
        datetime.fromisoformat(value)
        return True
    except ValueError:
        return False


def _blank_as_missing(value):
    return None if value == "" else value


def _check_reference(value: str) -> str:
    if not is_valid_commit_reference(value):
        raise ValueError("Invalid commit hash format")
    return value


def _check_filename(value: str) -> str:
    if not is_valid_filename(value):
        raise ValueError("Invalid output filename")
    return value


def _check_date(value: str) -> str:
    if not is_valid_date(value):
        raise ValueError("Invalid date format, expected ISO-8601 such as 2024-01-15")
    return value


CommitReference = Annotated[str, AfterValidator(_check_reference)]
OutputFilename = Annotated[str, AfterValidator(_check_filename)]
DateString = Annotated[str, AfterValidator(_check_date)]

# Optional string arguments: an empty string means the argument was not given.
OptionalReference = Annotated[Optional[CommitReference], BeforeValidator(_blank_as_missing)]
OptionalFilename = Annotated[Optional[OutputFilename], BeforeValidator(_blank_as_missing)]
OptionalDate = Annotated[Optional[DateString], BeforeValidator(_blank_as_missing)]
OptionalAuthor = Annotated[
    Optional[Annotated[str, StringConstraints(max_length=100)]], BeforeValidator(_blank_as_missing)
]
OptionalPath = Annotated[Optional[str], BeforeValidator(_blank_as_missing)]


class ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ListCommitsArgs(ToolArgs):
    limit: Optional[int] = Field(default=None, ge=1, le=1000, description="Maximum number of commits to return")
    since: OptionalDate = Field(default=None, description="Show commits since this ISO-8601 date, e.g. 2024-01-15")
    until: OptionalDate = Field(default=None, description="Show commits until this ISO-8601 date, e.g. 2024-01-31")
    author: OptionalAuthor = Field(default=None, description="Filter commits by author name")


class ShowDiffArgs(ToolArgs):
    commit_hash: OptionalReference = Field(
        default=None, alias="commitHash", description="Show diff for this commit against its parent"
    )
    from_commit: OptionalReference = Field(
        default=None, alias="fromCommit", description="Starting commit for diff comparison"
    )
    to_commit: OptionalReference = Field(
        default=None, alias="toCommit", description="Ending commit for diff comparison"
    )
    file_path: OptionalPath = Field(default=None, alias="filePath", description="Limit the diff to this file")

    @field_validator("file_path")
    @classmethod
    def check_file_path(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return value
        root = (info.context or {}).get("repository_root", ".")
        if not is_valid_path(sanitize_input(value), str(root)):
            raise ValueError("Invalid file path")
        return value


class CommitDetailArgs(ToolArgs):
    commit_hash: CommitReference = Field(
        alias="commitHash", description="Commit hash or reference (HEAD, branch, tag)"
    )


class AnalyzeCommitArgs(ToolArgs):
    commit_hash: CommitReference = Field(alias="commitHash", description="Commit hash or reference to analyze")
    generate_summary: bool = Field(
        default=False, alias="generateSummary", description="Also write the analysis to a markdown file"
    )
    output_file: OptionalFilename = Field(
        default=None, alias="outputFile", description="Filename for the summary, without extension"
    )


class RepositoryStatsArgs(ToolArgs):
    pass


class ListAuthorsArgs(ToolArgs):
    pass


class ProjectSummaryArgs(ToolArgs):
    commit_count: int = Field(
        default=10, ge=1, le=50, alias="commitCount", description="Number of recent commits to analyze"
    )
    output_file: OptionalFilename = Field(
        default=None, alias="outputFile", description="Filename for the summary, without extension"
    )


ToolArguments = Union[
    ListCommitsArgs,
    ShowDiffArgs,
    CommitDetailArgs,
    AnalyzeCommitArgs,
    RepositoryStatsArgs,
    ListAuthorsArgs,
    ProjectSummaryArgs,
]

TOOL_ARGUMENTS: dict[ToolName, type[ToolArgs]] = {
    ToolName.LIST_COMMITS: ListCommitsArgs,
    ToolName.SHOW_DIFF: ShowDiffArgs,
    ToolName.COMMIT_DETAIL: CommitDetailArgs,
    ToolName.ANALYZE_COMMIT: AnalyzeCommitArgs,
    ToolName.REPOSITORY_STATS: RepositoryStatsArgs,
    ToolName.LIST_AUTHORS: ListAuthorsArgs,
    ToolName.GENERATE_PROJECT_SUMMARY: ProjectSummaryArgs,
}

TOOL_DESCRIPTIONS: dict[ToolName, str] = {
    ToolName.LIST_COMMITS: "Get git commit history with optional filtering",
    ToolName.SHOW_DIFF: "Get git diff for a commit, a commit range, or a single file",
    ToolName.COMMIT_DETAIL: "Get author, message, changed files and diff for one commit",
    ToolName.ANALYZE_COMMIT: "Analyze a commit using AI and generate insights in the configured language",
    ToolName.REPOSITORY_STATS: "Get repository statistics including total commits, authors, and branches",
    ToolName.LIST_AUTHORS: "Get the list of all authors who have committed to the repository",
    ToolName.GENERATE_PROJECT_SUMMARY: "Generate an AI-powered project impact summary for recent commits",
}

# Tools that need a configured completion backend.
AI_TOOLS = frozenset({ToolName.ANALYZE_COMMIT, ToolName.GENERATE_PROJECT_SUMMARY})


def input_schema(tool: ToolName) -> dict:
    """JSON schema of a tool's arguments, using the camelCase wire names."""
    return TOOL_ARGUMENTS[tool].model_json_schema(by_alias=True)


def parse_arguments(name: str, arguments, repository_root: str | Path = ".") -> tuple[ToolName, ToolArguments]:
    """Turn a tool name and raw argument bag into a validated argument record.

    Raises UnknownToolError for names outside the fixed set, and
    ValidationError naming the first offending field otherwise.
    """
    try:
        tool = ToolName(name)
    except ValueError:
        raise UnknownToolError(str(name))

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationError("arguments", "expected an object")

    try:
        record = TOOL_ARGUMENTS[tool].model_validate(arguments, context={"repository_root": str(repository_root)})
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "arguments"
        message = first["msg"].removeprefix("Value error, ")
        raise ValidationError(field, message) from None
    return tool, record
