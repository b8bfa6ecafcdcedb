from __future__ import annotations

import re

_SHELL_METACHARS_RE = re.compile(r"[;&|`$(){}\[\]]")


def sanitize_input(value) -> str:
    """Strip shell metacharacters and ``..`` sequences from a free-text field.

    Returns an empty string for non-string or empty input. Only the two-dot
    sequence is removed, so ``../../etc/passwd`` becomes ``//etc/passwd``.
    """
    if not isinstance(value, str) or not value:
        return ""
    cleaned = _SHELL_METACHARS_RE.sub("", value)
    cleaned = cleaned.replace("..", "")
    return cleaned.strip()
