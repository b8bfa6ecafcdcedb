"""Input predicates applied to caller-supplied values before they reach git,
the filesystem, or the completion API.

Every predicate is total: it returns False for anything it does not accept,
including non-string input, and never raises.
"""

from __future__ import annotations

import os
import re

SYMBOLIC_REFS = frozenset({"HEAD", "ORIG_HEAD", "FETCH_HEAD", "MERGE_HEAD"})
API_KEY_PREFIX = "sk-"

# All patterns are applied with fullmatch.
_COMMIT_HASH_RE = re.compile(r"[a-f0-9]{7,40}", re.IGNORECASE)
# Branch names, tags and other refs: accepts feature/foo-1.2, rejects HEAD~1.
_GIT_REFERENCE_RE = re.compile(r"[A-Za-z0-9._/-]+")
_MAX_REFERENCE_LENGTH = 100
_SAFE_FILENAME_RE = re.compile(r"[A-Za-z0-9._-]+")
_API_KEY_RE = re.compile(rf"{re.escape(API_KEY_PREFIX)}[A-Za-z0-9_-]+")
_MODEL_ID_RE = re.compile(r"[A-Za-z0-9/_-]+")


def is_valid_commit_reference(value) -> bool:
    """Return True for a symbolic ref, a 7-40 char hex hash, or a ref-like token."""
    if not isinstance(value, str) or not value:
        return False
    if value in SYMBOLIC_REFS:
        return True
    if _COMMIT_HASH_RE.fullmatch(value):
        return True
    return len(value) <= _MAX_REFERENCE_LENGTH and bool(_GIT_REFERENCE_RE.fullmatch(value))


def is_valid_filename(value) -> bool:
    """Return True for a bare report filename with no separators or traversal."""
    if not isinstance(value, str) or not value:
        return False
    if ".." in value or "/" in value or "\\" in value:
        return False
    return bool(_SAFE_FILENAME_RE.fullmatch(value))


def is_valid_path(input_path, base_path) -> bool:
    """Return True if ``input_path`` resolved against ``base_path`` stays inside it.

    Containment is checked per path segment, so ``/base-evil`` is not
    considered to be under ``/base``.
    """
    if not isinstance(input_path, str) or not input_path:
        return False
    try:
        resolved_base = os.path.realpath(os.path.abspath(base_path))
        resolved = os.path.realpath(os.path.join(resolved_base, input_path))
        return os.path.commonpath([resolved, resolved_base]) == resolved_base
    except (OSError, TypeError, ValueError):
        return False


def is_valid_api_key(value) -> bool:
    return (
        isinstance(value, str)
        and len(value) > 10
        and value.startswith(API_KEY_PREFIX)
        and bool(_API_KEY_RE.fullmatch(value))
    )


def is_valid_model_id(value) -> bool:
    return isinstance(value, str) and bool(value) and bool(_MODEL_ID_RE.fullmatch(value))
