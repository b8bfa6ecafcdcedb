"""git CLI backend.

Every operation shells out to ``git`` with an argument list (never a shell
string) inside the configured repository. User-supplied refs are resolved to
full object ids with ``rev-parse --end-of-options`` before they are placed on
any other command line, so a ref can never be read as an option.
"""

from __future__ import annotations

import io
import logging
import re
import subprocess
from pathlib import Path

from gitlog_core.errors import GitBackendError, ValidationError
from gitlog_core.git.models import Author, Commit, CommitDetail, DiffOutcome, FileDiff, RepositoryStats
from gitlog_core.utils.sanitize import sanitize_input
from gitlog_core.utils.validation import is_valid_commit_reference, is_valid_path

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 50
DEFAULT_TIMEOUT = 30

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_SUBJECT_FORMAT = _FIELD_SEP.join(["%H", "%aI", "%s", "%an", "%ae", "%D"]) + _RECORD_SEP
_BODY_FORMAT = _FIELD_SEP.join(["%H", "%aI", "%B", "%an", "%ae", "%D"]) + _RECORD_SEP
_SHORTLOG_RE = re.compile(r"^\s*(\d+)\s+(.+?)\s+<(.+)>\s*$")
_DIFF_HEADER = "diff --git "
_QUOTED_HEADER_RE = re.compile(r'"a/((?:[^"\\]|\\.)*)" ')
_C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}
UNAVAILABLE_DIFF = "(diff unavailable for this commit)"


def _parse_commits(output: str) -> list[Commit]:
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        parts = record.split(_FIELD_SEP)
        if len(parts) != 6:
            logger.debug("Skipping unparseable log record: %r", record[:80])
            continue
        sha, date, message, name, email, refs = parts
        commits.append(
            Commit(
                hash=sha,
                date=date,
                message=message.strip(),
                author_name=name,
                author_email=email,
                refs=refs.strip(),
            )
        )
    return commits


def _unquote_path(quoted: str) -> str:
    """Undo git's C-style quoting of a path (the text between the quotes)."""
    raw = bytearray()
    i = 0
    while i < len(quoted):
        char = quoted[i]
        if char == "\\" and i + 1 < len(quoted):
            escape = quoted[i + 1]
            if escape in _C_ESCAPES:
                raw.append(_C_ESCAPES[escape])
                i += 2
                continue
            octal = quoted[i + 1 : i + 4]
            if len(octal) == 3 and all(c in "01234567" for c in octal):
                raw.append(int(octal, 8))
                i += 4
                continue
        raw += char.encode("utf-8")
        i += 1
    return raw.decode("utf-8", errors="replace")


def _header_path(line: str) -> str | None:
    """Return the a/ path of a ``diff --git`` header line, unquoted."""
    rest = line[len(_DIFF_HEADER) :].rstrip("\n")
    quoted = _QUOTED_HEADER_RE.match(rest)
    if quoted:
        return _unquote_path(quoted.group(1))
    if rest.startswith("a/"):
        # "a/<path> b/<path>"; both halves are the same path under --no-renames.
        rest = rest[2:]
        return rest[: (len(rest) - 3) // 2]
    return None


def _split_patch(patch: str) -> dict[str, str]:
    """Split a multi-file patch into per-file chunks keyed by unquoted path.

    Relies on ``--no-renames`` so the a/ and b/ paths in each header match.
    """
    chunks: dict[str, list[str]] = {}
    current: list[str] | None = None
    # StringIO splits on "\n" only; patch bodies may hold other line breaks.
    for line in io.StringIO(patch):
        if line.startswith(_DIFF_HEADER):
            name = _header_path(line)
            if name is not None:
                current = chunks.setdefault(name, [])
        if current is not None:
            current.append(line)
    return {name: "".join(lines) for name, lines in chunks.items()}


def _parse_numstat(output: str) -> list[tuple[int, int, str]]:
    """Parse ``--numstat -z`` output, where paths are NUL-terminated and never quoted."""
    stats = []
    for record in output.split("\0"):
        parts = record.split("\t", 2)
        if len(parts) < 3:
            continue
        # Binary files report "-" for both counts.
        insertions = int(parts[0]) if parts[0].isdigit() else 0
        deletions = int(parts[1]) if parts[1].isdigit() else 0
        stats.append((insertions, deletions, parts[2]))
    return stats


def _split_names(output: str) -> list[str]:
    """Parse ``--name-only -z`` output.

    ``git show --format=`` may emit a blank separator line before the names.
    """
    return [name for name in output.lstrip("\n").split("\0") if name.strip()]


class GitRepository:
    """Read-only view of one local git repository."""

    def __init__(self, path: str | Path = ".", timeout: float = DEFAULT_TIMEOUT):
        self.path = Path(path).resolve()
        self.timeout = timeout

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def is_git_repository(self) -> bool:
        try:
            return self._git("rev-parse", "--is-inside-work-tree").strip() == "true"
        except GitBackendError:
            return False

    def log(
        self,
        limit: int = DEFAULT_LOG_LIMIT,
        since: str | None = None,
        until: str | None = None,
        author: str | None = None,
    ) -> list[Commit]:
        """Return up to ``limit`` commits reachable from HEAD, newest first."""
        self._ensure_repository()
        args = ["log", f"--max-count={int(limit)}", f"--pretty=format:{_SUBJECT_FORMAT}"]
        if since:
            args.append(f"--since={since}")
        if until:
            args.append(f"--until={until}")
        if author:
            safe_author = sanitize_input(author)
            if safe_author:
                args.append(f"--author={safe_author}")
        args.append("--")
        return _parse_commits(self._git(*args))

    def diff(
        self,
        commit_hash: str | None = None,
        from_commit: str | None = None,
        to_commit: str | None = None,
        file_path: str | None = None,
    ) -> list[FileDiff]:
        """Return per-file changes for a commit or a range.

        Range selection: ``commit_hash`` against its parent; ``from..to``;
        ``from..HEAD`` when only ``from_commit`` is given; ``to``'s parent to
        ``to`` when only ``to_commit`` is given; otherwise ``HEAD^..HEAD``.
        """
        self._ensure_repository()
        if commit_hash:
            head = self.resolve(commit_hash, field="commitHash")
            base = self._parent_or_empty_tree(head)
        elif from_commit and to_commit:
            base = self.resolve(from_commit, field="fromCommit")
            head = self.resolve(to_commit, field="toCommit")
        elif from_commit:
            base = self.resolve(from_commit, field="fromCommit")
            head = self.resolve("HEAD")
        elif to_commit:
            head = self.resolve(to_commit, field="toCommit")
            base = self._parent_or_empty_tree(head)
        else:
            head = self.resolve("HEAD")
            base = self._parent_or_empty_tree(head)

        range_args = [base, head]
        if file_path:
            safe_path = sanitize_input(file_path)
            if not is_valid_path(safe_path, str(self.path)):
                raise ValidationError("filePath", "Invalid file path")
            range_args += ["--", safe_path]

        numstat = self._git("diff", "--no-renames", "--numstat", "-z", *range_args)
        patches = _split_patch(self._git("diff", "--no-renames", *range_args))
        return [
            FileDiff(file=name, insertions=ins, deletions=dels, patch=patches.get(name, ""))
            for ins, dels, name in _parse_numstat(numstat)
        ]

    def show(self, ref: str) -> CommitDetail:
        """Return metadata, changed files and diff for one commit.

        The diff is taken against the first parent; a root commit is shown
        against the empty tree; anything else that fails leaves the detail
        marked UNAVAILABLE rather than raising.
        """
        self._ensure_repository()
        sha = self.resolve(ref, field="commitHash")
        commits = _parse_commits(self._git("log", "-1", f"--pretty=format:{_BODY_FORMAT}", sha, "--"))
        if not commits:
            raise GitBackendError(f"Commit not found: {ref}")
        files, diff, outcome = self._changes(sha)
        files_changed = _split_names(files)
        return CommitDetail(commit=commits[0], files_changed=files_changed, diff=diff, outcome=outcome)

    def shortlog(self) -> list[Author]:
        """Return every author across all refs, most commits first."""
        self._ensure_repository()
        output = self._git("shortlog", "-sne", "--all")
        authors = []
        for line in output.splitlines():
            match = _SHORTLOG_RE.match(line)
            if match:
                authors.append(
                    Author(name=match.group(2).strip(), email=match.group(3).strip(), commits=int(match.group(1)))
                )
        return sorted(authors, key=lambda a: a.commits, reverse=True)

    def stats(self) -> RepositoryStats:
        self._ensure_repository()
        total_commits = int(self._git("rev-list", "--count", "HEAD").strip() or 0)
        authors = self.shortlog()
        roots = self._git("rev-list", "--max-parents=0", "HEAD").split()
        last_commit = self._git("rev-parse", "HEAD").strip()
        branches = [b.strip() for b in self._git("branch", "--format=%(refname:short)").splitlines() if b.strip()]
        return RepositoryStats(
            total_commits=total_commits,
            total_authors=len(authors),
            first_commit=roots[0] if roots else "",
            last_commit=last_commit,
            branches=branches,
        )

    def commit_exists(self, ref: str) -> bool:
        if not is_valid_commit_reference(ref):
            return False
        try:
            self.resolve(ref)
            return True
        except GitBackendError:
            return False

    def resolve(self, ref: str, field: str = "commitHash") -> str:
        """Validate ``ref`` and return the full object id of the commit it names."""
        if not is_valid_commit_reference(ref):
            raise ValidationError(field, "Invalid commit hash format")
        try:
            return self._git("rev-parse", "--verify", "--quiet", "--end-of-options", f"{ref}^{{commit}}").strip()
        except GitBackendError:
            raise GitBackendError(f"Commit not found: {ref}")

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _ensure_repository(self) -> None:
        if not self.is_git_repository():
            raise GitBackendError(f"{self.path} is not a git repository")

    def _changes(self, sha: str) -> tuple[str, str, DiffOutcome]:
        """Return (changed file names, patch, outcome) for one commit."""
        try:
            files = self._git("diff", "--no-renames", "--name-only", "-z", f"{sha}^", sha)
            diff = self._git("diff", "--no-renames", f"{sha}^", sha)
            return files, diff, DiffOutcome.DIFFED
        except GitBackendError as e:
            error = e

        try:
            if self._is_root(sha):
                files = self._git("show", "--no-renames", "--format=", "--name-only", "-z", sha)
                diff = self._git("show", "--no-renames", "--format=", sha)
                return files, diff, DiffOutcome.ROOT_COMMIT
        except GitBackendError as e:
            error = e

        logger.warning("Could not determine changes for %s: %s", sha[:8], error)
        return "", UNAVAILABLE_DIFF, DiffOutcome.UNAVAILABLE

    def _is_root(self, sha: str) -> bool:
        return len(self._git("rev-list", "--parents", "-n", "1", sha).split()) == 1

    def _parent_or_empty_tree(self, sha: str) -> str:
        if self._is_root(sha):
            # stdin is empty, so this hashes the empty tree for either object format.
            return self._git("hash-object", "-t", "tree", "--stdin").strip()
        return f"{sha}^"

    def _git(self, *args: str) -> str:
        command = ["git", "-c", "core.quotepath=off", *args]
        logger.debug("Running %s in %s", " ".join(command), self.path)
        try:
            result = subprocess.run(
                command,
                cwd=self.path,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise GitBackendError(f"git {args[0]} timed out after {self.timeout}s")
        except OSError as e:
            raise GitBackendError(f"Could not run git in {self.path}: {e}")

        if result.returncode != 0:
            stderr = result.stderr.strip() or "unknown error"
            raise GitBackendError(f"git {args[0]} failed: {stderr}", status=result.returncode)
        return result.stdout
