from __future__ import annotations

from any_script_mcp.core.errors import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    MultipleConfigErrors,
    SourceError,
    ValidationIssue,
)
from any_script_mcp.core.loader import load_config, load_config_from_env, load_source
from any_script_mcp.core.sources import default_config_path, resolve_config_paths

__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "MultipleConfigErrors",
    "SourceError",
    "ValidationIssue",
    "default_config_path",
    "load_config",
    "load_config_from_env",
    "load_source",
    "resolve_config_paths",
]
