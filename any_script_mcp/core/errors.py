from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal


@dataclass(frozen=True)
class ValidationIssue:
    """One schema violation inside a config source."""

    field_path: str
    message: str

    def __str__(self) -> str:
        return f"{self.field_path}: {self.message}" if self.field_path else self.message


@dataclass(frozen=True)
class SourceError:
    """A failed config source paired with the error it produced."""

    path: str
    error: ConfigError


class ConfigError(Exception):
    """Base class for configuration loading failures."""

    kind: ClassVar[Literal["load_error", "validation_error", "multiple_errors"]]


class ConfigLoadError(ConfigError):
    """A source could not be read or is not a well-formed YAML document."""

    kind = "load_error"

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class ConfigValidationError(ConfigError):
    """A source is well-formed YAML but does not match the tool-config schema."""

    kind = "validation_error"

    def __init__(self, path: str, issues: list[ValidationIssue]) -> None:
        summary = "; ".join(str(issue) for issue in issues)
        super().__init__(f"{path}: invalid configuration ({summary})")
        self.path = path
        self.issues = issues


class MultipleConfigErrors(ConfigError):
    """Every source failed; one entry per source in the order they were tried."""

    kind = "multiple_errors"

    def __init__(self, errors: list[SourceError]) -> None:
        super().__init__(f"{len(errors)} configuration sources failed to load")
        self.errors = errors
