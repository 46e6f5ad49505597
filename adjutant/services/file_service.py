"""File persistence -- write one generated file to disk.

``write_file`` never raises: every outcome is reported as a ``WriteResult``
so HTTP callers and the build agent can decide what a failure means.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    success: bool
    error: str | None = None
    validation_failed: bool = False  # True when the request itself was malformed


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_file(file_path: str | Path | None, content: str | None) -> WriteResult:
    """Create parent directories and write *content* to *file_path*.

    *file_path* must be absolute.  Existing files are overwritten.
    """
    if not file_path or content is None:
        return WriteResult(False, "Missing filePath or content", validation_failed=True)
    path = Path(file_path)
    if not path.is_absolute():
        return WriteResult(False, f"filePath must be absolute: {file_path}", validation_failed=True)

    try:
        await asyncio.to_thread(_write, path, content)
    except OSError as exc:
        logger.warning("Write failed  path=%s  error=%s", path, exc)
        return WriteResult(False, f"Failed to write {path}: {exc.strerror or exc}")

    logger.debug("Wrote %s (%d chars)", path, len(content))
    return WriteResult(True)
