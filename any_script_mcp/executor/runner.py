from __future__ import annotations

import asyncio
import contextlib
import os
import signal
import time
from collections.abc import Mapping

import structlog
from structlog.typing import FilteringBoundLogger

from any_script_mcp.executor.environment import build_environment
from any_script_mcp.executor.errors import (
    NonZeroExitError,
    OutputTooLargeError,
    ScriptIOError,
    ScriptTimeoutError,
)
from any_script_mcp.executor.script import materialize_script
from any_script_mcp.models.settings import DEFAULT_MAX_OUTPUT_BYTES
from any_script_mcp.models.tool import InputValue, ToolConfig

logger = structlog.get_logger()

SCRIPT_PLACEHOLDER = "{0}"
_READ_CHUNK = 64 * 1024


def resolve_command(shell: str, script_path: str) -> str:
    """Substitute every ``{0}`` in the shell template with the script path."""
    return shell.replace(SCRIPT_PLACEHOLDER, script_path)


def _signal_group(pgid: int, sig: signal.Signals) -> None:
    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(pgid, sig)


async def _read_capped(
    stream: asyncio.StreamReader, limit: int, drain: bool = False
) -> tuple[bytes, bool]:
    """Read a stream keeping at most ``limit`` bytes.

    Returns the data and whether the limit was exceeded. Reading stops at the
    limit unless ``drain`` is set, in which case the rest is read and dropped.
    """
    buf = bytearray()
    overflow = False
    while chunk := await stream.read(_READ_CHUNK):
        if overflow:
            continue
        if len(buf) + len(chunk) > limit:
            buf.extend(chunk[: limit - len(buf)])
            overflow = True
            if not drain:
                break
        else:
            buf.extend(chunk)
    return bytes(buf), overflow


class ScriptRunner:
    """Runs one tool invocation as a child process of the system shell.

    Every call gets its own script file, environment and process group, so
    concurrent calls share nothing but the read-only tool config.
    """

    def __init__(
        self,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        base_env: Mapping[str, str] | None = None,
        script_dir: str | None = None,
        kill_grace_seconds: float = 1.0,
    ) -> None:
        self._max_output_bytes = max_output_bytes
        self._base_env = dict(base_env) if base_env is not None else None
        self._script_dir = script_dir
        self._kill_grace_seconds = kill_grace_seconds

    async def run(self, tool: ToolConfig, inputs: Mapping[str, InputValue]) -> str:
        """Execute ``tool`` with already-validated inputs and return its raw stdout.

        Raises ScriptTimeoutError, NonZeroExitError, OutputTooLargeError or
        ScriptIOError. The script file is removed before this returns or raises.
        """
        log = logger.bind(tool=tool.name)
        env = build_environment(inputs, self._base_env)

        with materialize_script(tool, self._script_dir) as script_path:
            command = resolve_command(tool.shell, str(script_path))
            try:
                proc = await asyncio.create_subprocess_shell(
                    command,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=env,
                    start_new_session=True,
                )
            except (OSError, ValueError) as exc:
                # ValueError: NUL bytes or lone surrogates in input values.
                log.error("script.spawn_failed", error=str(exc))
                raise ScriptIOError(f"Failed to start tool '{tool.name}': {exc}") from exc

            started = time.monotonic()
            log.info("script.started", pid=proc.pid, timeout_ms=tool.timeout)
            finished = False
            try:
                stdout, stderr = await asyncio.wait_for(
                    self._collect(proc, tool, log), timeout=tool.timeout / 1000
                )
                finished = True
            except asyncio.TimeoutError:
                log.warning("script.timeout", pid=proc.pid, timeout_ms=tool.timeout)
                raise ScriptTimeoutError(tool.name, tool.timeout) from None
            finally:
                if not finished:
                    await self._terminate(proc)

        duration_ms = int((time.monotonic() - started) * 1000)
        if proc.returncode != 0:
            log.warning(
                "script.failed", exit_code=proc.returncode, duration_ms=duration_ms
            )
            raise NonZeroExitError(tool.name, proc.returncode or 0, stderr)

        log.info("script.completed", duration_ms=duration_ms, stdout_bytes=len(stdout))
        return stdout

    async def _collect(
        self,
        proc: asyncio.subprocess.Process,
        tool: ToolConfig,
        log: FilteringBoundLogger,
    ) -> tuple[str, str]:
        assert proc.stdout is not None and proc.stderr is not None
        limit = self._max_output_bytes
        stderr_task = asyncio.ensure_future(_read_capped(proc.stderr, limit, drain=True))
        try:
            stdout, overflow = await _read_capped(proc.stdout, limit)
            if overflow:
                log.warning("script.output_too_large", limit=limit)
                raise OutputTooLargeError(tool.name, limit)
            stderr, _ = await stderr_task
            await proc.wait()
        finally:
            stderr_task.cancel()
        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        """Stop the whole process group of ``proc`` and reap it."""
        _signal_group(proc.pid, signal.SIGTERM)
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(proc.wait(), timeout=self._kill_grace_seconds)
        # Descendants can outlive or ignore SIGTERM.
        _signal_group(proc.pid, signal.SIGKILL)
        await proc.wait()


_default_runner = ScriptRunner()


async def execute_tool(tool: ToolConfig, inputs: Mapping[str, InputValue]) -> str:
    """Run ``tool`` with the default runner."""
    return await _default_runner.run(tool, inputs)
