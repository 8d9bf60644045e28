from __future__ import annotations

from any_script_mcp.executor.environment import build_environment, input_env_name
from any_script_mcp.executor.errors import (
    NonZeroExitError,
    OutputTooLargeError,
    ScriptExecutionError,
    ScriptIOError,
    ScriptTimeoutError,
)
from any_script_mcp.executor.runner import ScriptRunner, execute_tool, resolve_command
from any_script_mcp.executor.script import materialize_script

__all__ = [
    "NonZeroExitError",
    "OutputTooLargeError",
    "ScriptExecutionError",
    "ScriptIOError",
    "ScriptRunner",
    "ScriptTimeoutError",
    "build_environment",
    "execute_tool",
    "input_env_name",
    "materialize_script",
    "resolve_command",
]
