"""Report data model.

Decoupled from gitlog_core's dispatcher: the dispatcher hands over plain
strings and the store layer decides how a report is named and persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Report:
    """A rendered analysis ready to be written out.

    ``filename`` is the caller-supplied name without extension; when absent
    the store uses ``default_filename()``.
    """

    kind: str  # "commit" | "project"
    identifier: str  # short commit hash, or "summary" for project reports
    title: str
    body: str
    filename: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def default_filename(self) -> str:
        timestamp = int(self.created_at.timestamp() * 1000)
        return f"{self.kind}-{self.identifier}-{timestamp}"

    @property
    def resolved_filename(self) -> str:
        return self.filename or self.default_filename()
