from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_MARKER_NAME = ".write-test"


def ensure_safe_directory(path: str | Path) -> bool:
    """Create ``path`` if missing and prove it is writable with a marker file.

    Never raises: any filesystem failure is logged and reported as False.
    Two concurrent checks on the same directory can race on the marker file;
    report directories are low-contention so this is not locked.
    """
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        marker = directory / _MARKER_NAME
        marker.write_text("test", encoding="utf-8")
        marker.unlink()
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Output directory %s is not usable: %s", directory, e)
        return False
