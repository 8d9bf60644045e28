from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StringConstraints,
    model_validator,
)

# Tool names and input names share the same constraint.
NAME_PATTERN = r"^[A-Za-z0-9_-]+$"

DEFAULT_SHELL = "bash -e {0}"
DEFAULT_TIMEOUT_MS = 300_000

Name = Annotated[str, StringConstraints(pattern=NAME_PATTERN)]

# Scalar values a caller may pass for an input. bool is listed first so YAML
# booleans are not coerced into numbers.
InputValue = Union[bool, int, float, str]

_PYTHON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "boolean": (bool,),
}


def matches_input_type(input_type: str, value: object) -> bool:
    """Check a scalar against a declared input type (bools are never numbers)."""
    if isinstance(value, bool):
        return input_type == "boolean"
    return isinstance(value, _PYTHON_TYPES[input_type])


class ToolInput(BaseModel):
    """A single typed argument of a tool."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["string", "number", "boolean"]
    description: str
    required: StrictBool = True
    default: InputValue | None = None

    @model_validator(mode="after")
    def _validate_default_type(self) -> ToolInput:
        if self.default is not None and not matches_input_type(self.type, self.default):
            raise ValueError(
                f"default {self.default!r} does not match input type '{self.type}'"
            )
        return self

    @property
    def is_optional(self) -> bool:
        """A default makes the argument optional regardless of ``required``."""
        return self.default is not None or not self.required


class ToolConfig(BaseModel):
    """A tool declared in a config source: metadata plus the script backing it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Name
    description: str
    inputs: dict[Name, ToolInput] = Field(default_factory=dict)
    run: str
    shell: str = DEFAULT_SHELL
    timeout: StrictInt = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Timeout in milliseconds")


class ConfigDocument(BaseModel):
    """Top-level shape of a single YAML config file."""

    model_config = ConfigDict(extra="forbid")

    tools: list[ToolConfig]


class Config(BaseModel):
    """Merged, immutable set of tools served for the lifetime of the process."""

    model_config = ConfigDict(frozen=True)

    tools: list[ToolConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_names(self) -> Config:
        seen: set[str] = set()
        for tool in self.tools:
            if tool.name in seen:
                raise ValueError(f"Duplicate tool name '{tool.name}'")
            seen.add(tool.name)
        return self

    def get(self, name: str) -> ToolConfig:
        """Get a tool by name. Raises KeyError if not found."""
        for tool in self.tools:
            if tool.name == name:
                return tool
        raise KeyError(f"Unknown tool: '{name}'. Available: {self.names()}")

    def names(self) -> list[str]:
        return [tool.name for tool in self.tools]

    def __len__(self) -> int:
        return len(self.tools)

    def __contains__(self, name: object) -> bool:
        return any(tool.name == name for tool in self.tools)
