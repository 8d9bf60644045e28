from __future__ import annotations

import os
import secrets
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from any_script_mcp.executor.errors import ScriptIOError
from any_script_mcp.models.tool import ToolConfig

logger = structlog.get_logger()

SCRIPT_MODE = 0o700


def script_filename() -> str:
    """Unique per call: millisecond timestamp plus a random suffix."""
    return f"script-{time.time_ns() // 1_000_000}-{secrets.token_hex(6)}.sh"


def write_script(body: str, directory: str | None = None) -> Path:
    """Write ``body`` verbatim to a new owner-only executable file."""
    path = Path(directory or tempfile.gettempdir()) / script_filename()
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, SCRIPT_MODE)
    except OSError as exc:
        raise ScriptIOError(f"Failed to create script file {path}: {exc}") from exc
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
        # The umask may have narrowed the mode given to os.open.
        os.chmod(path, SCRIPT_MODE)
    except OSError as exc:
        path.unlink(missing_ok=True)
        raise ScriptIOError(f"Failed to write script file {path}: {exc}") from exc
    return path


@contextmanager
def materialize_script(tool: ToolConfig, directory: str | None = None) -> Iterator[Path]:
    """Yield the path of ``tool.run`` written to disk; the file is removed on exit."""
    path = write_script(tool.run, directory)
    logger.debug("script.written", tool=tool.name, path=str(path))
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("script.removed", tool=tool.name, path=str(path))
