"""Abstract report store interface.

The dispatcher depends on BaseReportStore rather than a concrete backend, so
where reports end up can change without touching tool handlers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from gitlog_reports.models import Report


class BaseReportStore(ABC):
    """Pluggable persistence for analysis reports."""

    @abstractmethod
    def save(self, report: Report) -> Path:
        """Persist a report and return where it was written.

        Raises OutputDirectoryError if the destination is not usable.
        """

    def write(self, kind: str, identifier: str, title: str, body: str, filename: str | None = None) -> Path:
        """Build a Report from plain values and save it.

        Lets gitlog_core persist reports without importing this package.
        """
        return self.save(Report(kind=kind, identifier=identifier, title=title, body=body, filename=filename))
