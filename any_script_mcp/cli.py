from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import structlog
import typer

from any_script_mcp.config import configure_logging
from any_script_mcp.core.errors import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    MultipleConfigErrors,
)
from any_script_mcp.core.loader import load_config
from any_script_mcp.core.sources import resolve_config_paths
from any_script_mcp.executor.runner import ScriptRunner
from any_script_mcp.models.settings import Settings
from any_script_mcp.models.tool import Config
from any_script_mcp.schema import generate_config_schema
from any_script_mcp.server import serve_stdio

app = typer.Typer(
    name="any-script-mcp",
    help="Expose shell scripts declared in YAML as MCP tools",
    no_args_is_help=False,
)
logger = structlog.get_logger()


def format_config_error(error: ConfigError, indent: str = "") -> str:
    """Render a config error as a multi-line diagnostic."""
    if isinstance(error, ConfigLoadError):
        return f"{indent}Failed to load {error.path}: {error.message}"
    if isinstance(error, ConfigValidationError):
        lines = [f"{indent}Invalid configuration in {error.path}:"]
        lines += [f"{indent}  - {issue}" for issue in error.issues]
        return "\n".join(lines)
    if isinstance(error, MultipleConfigErrors):
        lines = [f"{indent}Failed to load {len(error.errors)} configuration files:"]
        lines += [format_config_error(entry.error, indent + "  ") for entry in error.errors]
        return "\n".join(lines)
    return f"{indent}{error}"


def _setup(settings: Settings) -> None:
    configure_logging(
        level=getattr(logging, settings.log_level), json_output=settings.log_json
    )


def _load_or_exit(paths: list[str]) -> Config:
    try:
        return load_config(paths)
    except ConfigError as exc:
        typer.echo(format_config_error(exc), err=True)
        raise typer.Exit(code=1)


def _candidate_paths(settings: Settings, paths: list[str] | None) -> list[str]:
    return list(paths) if paths else resolve_config_paths(settings.config)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """Start the stdio MCP server when no command is given."""
    if ctx.invoked_subcommand is None:
        serve()


@app.command()
def serve() -> None:
    """Load tools from ANY_SCRIPT_MCP_CONFIG and serve them over stdio."""
    settings = Settings()
    _setup(settings)
    config = _load_or_exit(_candidate_paths(settings, None))
    logger.info("cli.serving", tools=config.names())
    runner = ScriptRunner(max_output_bytes=settings.max_output_bytes)
    asyncio.run(serve_stdio(config, runner))


@app.command()
def validate(
    paths: Optional[list[str]] = typer.Argument(
        None, help="Config files to check (defaults to ANY_SCRIPT_MCP_CONFIG)"
    ),
) -> None:
    """Validate config files without serving."""
    settings = Settings()
    _setup(settings)
    config = _load_or_exit(_candidate_paths(settings, paths))
    typer.echo(f"Loaded {len(config)} tools")
    for name in config.names():
        typer.echo(f"  {name}")


@app.command(name="list")
def list_cmd(
    paths: Optional[list[str]] = typer.Argument(
        None, help="Config files to read (defaults to ANY_SCRIPT_MCP_CONFIG)"
    ),
) -> None:
    """List the tools that would be served."""
    settings = Settings()
    _setup(settings)
    config = _load_or_exit(_candidate_paths(settings, paths))
    for tool in config.tools:
        typer.echo(f"  {tool.name}: {tool.description}")


@app.command()
def schema(
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write schema to this file"),
) -> None:
    """Print the JSON schema of the config file format."""
    text = json.dumps(generate_config_schema(), indent=2) + "\n"
    if output is None:
        typer.echo(text, nl=False)
        return
    Path(output).write_text(text)
    typer.echo(f"Schema written to {output}")


def main() -> None:
    """CLI entrypoint."""
    app()
