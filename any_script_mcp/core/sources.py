from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "any-script-mcp"
CONFIG_FILE_NAME = "config.yaml"


def default_config_path() -> str:
    """Return ``$XDG_CONFIG_HOME/any-script-mcp/config.yaml``.

    Falls back to ``~/.config`` when XDG_CONFIG_HOME is unset or empty.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return os.path.join(config_home, APP_DIR_NAME, CONFIG_FILE_NAME)


def resolve_config_paths(raw: str | None) -> list[str]:
    """Split a path list into candidate config files, in order.

    ``raw`` is the value of ANY_SCRIPT_MCP_CONFIG, separated by ``os.pathsep``.
    When it is None the default path is used instead. Empty segments are
    dropped; existence is not checked here.
    """
    value = default_config_path() if raw is None else raw
    return [segment for segment in value.split(os.pathsep) if segment]
