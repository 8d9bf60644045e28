from __future__ import annotations


class ScriptExecutionError(Exception):
    """Base class for failures of a single tool invocation."""


class ScriptTimeoutError(ScriptExecutionError):
    def __init__(self, tool: str, timeout_ms: int) -> None:
        super().__init__(f"Tool '{tool}' timed out after {timeout_ms}ms")
        self.tool = tool
        self.timeout_ms = timeout_ms


class NonZeroExitError(ScriptExecutionError):
    """The script ran and exited with a failure status."""

    def __init__(self, tool: str, exit_code: int, stderr: str = "") -> None:
        message = f"Tool '{tool}' failed with exit code {exit_code}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr


class ScriptIOError(ScriptExecutionError):
    """The script file could not be written or the process could not be spawned."""


class OutputTooLargeError(ScriptExecutionError):
    def __init__(self, tool: str, limit: int) -> None:
        super().__init__(f"Tool '{tool}' produced more than {limit} bytes of output")
        self.tool = tool
        self.limit = limit
