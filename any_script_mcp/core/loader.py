from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError
from structlog.typing import FilteringBoundLogger

from any_script_mcp.core.errors import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    MultipleConfigErrors,
    SourceError,
    ValidationIssue,
)
from any_script_mcp.core.sources import resolve_config_paths
from any_script_mcp.models.settings import Settings
from any_script_mcp.models.tool import Config, ConfigDocument, ToolConfig

logger = structlog.get_logger()

NOT_FOUND_MESSAGE = "Configuration file not found"
NO_CONFIG_MESSAGE = "No configuration files found"


def _issues_from(exc: ValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            field_path=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in exc.errors()
    ]


def _add_first_wins(
    merged: dict[str, ToolConfig], tools: Iterable[ToolConfig], log: FilteringBoundLogger
) -> None:
    for tool in tools:
        if tool.name in merged:
            log.debug("config.tool_shadowed", tool=tool.name)
            continue
        merged[tool.name] = tool


def load_source(path: str) -> Config:
    """Read, parse and validate one config file.

    Raises ConfigLoadError when the file cannot be read or is not valid YAML,
    and ConfigValidationError when the document does not match the schema.
    A name repeated within the file keeps its first definition.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigLoadError(path, NOT_FOUND_MESSAGE) from None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(path, str(exc)) from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path, str(exc)) from exc

    try:
        document = ConfigDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(path, _issues_from(exc)) from exc

    declared: dict[str, ToolConfig] = {}
    _add_first_wins(declared, document.tools, logger.bind(path=path))
    return Config(tools=list(declared.values()))


def load_config(paths: Iterable[str]) -> Config:
    """Load every source in order and merge their tools.

    The first source to declare a tool name wins; later duplicates are
    dropped. Failing sources are skipped as long as at least one tool was
    loaded. Otherwise the single failure is raised as-is, several failures
    are raised as MultipleConfigErrors, and no failures at all raise a
    ConfigLoadError for the first candidate path.
    """
    candidates = list(paths)
    merged: dict[str, ToolConfig] = {}
    errors: list[SourceError] = []

    for path in candidates:
        log = logger.bind(path=path)
        try:
            source = load_source(path)
        except ConfigError as exc:
            log.warning("config.source_failed", kind=exc.kind, error=str(exc))
            errors.append(SourceError(path=path, error=exc))
            continue

        _add_first_wins(merged, source.tools, log)
        log.info("config.source_loaded", tools=len(source.tools))

    if merged:
        logger.info("config.loaded", tools=len(merged), failed_sources=len(errors))
        return Config(tools=list(merged.values()))

    if len(errors) == 1:
        raise errors[0].error
    if len(errors) > 1:
        raise MultipleConfigErrors(errors)

    raise ConfigLoadError(candidates[0] if candidates else "unknown", NO_CONFIG_MESSAGE)


def load_config_from_env(settings: Settings | None = None) -> Config:
    """Resolve sources from ANY_SCRIPT_MCP_CONFIG (or the default path) and load them."""
    settings = settings or Settings()
    return load_config(resolve_config_paths(settings.config))
