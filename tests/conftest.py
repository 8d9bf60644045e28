from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog against a captured stderr; undo that."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str, str], str]:
    """Write YAML text to ``tmp_path/<name>`` and return the path as a string."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content)
        return str(path)

    return _write
