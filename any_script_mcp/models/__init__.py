from __future__ import annotations

from any_script_mcp.models.settings import Settings
from any_script_mcp.models.tool import (
    DEFAULT_SHELL,
    DEFAULT_TIMEOUT_MS,
    Config,
    ConfigDocument,
    InputValue,
    ToolConfig,
    ToolInput,
)

__all__ = [
    "DEFAULT_SHELL",
    "DEFAULT_TIMEOUT_MS",
    "Config",
    "ConfigDocument",
    "InputValue",
    "Settings",
    "ToolConfig",
    "ToolInput",
]
