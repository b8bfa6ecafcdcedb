"""MarkdownReportStore: writes each report as a UTF-8 ``.md`` file.

Files land in ``{output_directory}/{filename}.md``. The directory is created
and write-checked before every save; a failed check aborts the write.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitlog_core.errors import OutputDirectoryError, ValidationError
from gitlog_core.utils.fs import ensure_safe_directory
from gitlog_core.utils.validation import is_valid_filename
from gitlog_reports.base import BaseReportStore
from gitlog_reports.models import Report

logger = logging.getLogger(__name__)


class MarkdownReportStore(BaseReportStore):
    def __init__(self, output_directory: str | Path = "./summaries"):
        self.output_directory = Path(output_directory)

    def save(self, report: Report) -> Path:
        filename = report.resolved_filename
        if not is_valid_filename(filename):
            raise ValidationError("outputFile", "Invalid output filename")
        if not ensure_safe_directory(self.output_directory):
            raise OutputDirectoryError(f"Output directory {self.output_directory} is not writable")

        path = self.output_directory / f"{filename}.md"
        try:
            path.write_text(report.body, encoding="utf-8")
        except OSError as e:
            raise OutputDirectoryError(f"Could not write report to {path}: {e}") from e
        logger.info("Wrote %s report to %s", report.kind, path)
        return path
