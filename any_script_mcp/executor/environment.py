from __future__ import annotations

import json
import os
from collections.abc import Mapping

from any_script_mcp.models.tool import InputValue

INPUT_ENV_PREFIX = "INPUTS__"
INPUTS_JSON_ENV = "INPUTS_JSON"


def input_env_name(name: str) -> str:
    """``user-name`` -> ``INPUTS__USER_NAME``."""
    return INPUT_ENV_PREFIX + name.upper().replace("-", "_")


def format_input_value(value: InputValue) -> str:
    """Render a scalar the way a shell script expects to compare it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_environment(
    inputs: Mapping[str, InputValue],
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the child environment for one invocation.

    Returns a new mapping: ``base`` (the current process environment by
    default) plus one ``INPUTS__<NAME>`` string per input and ``INPUTS_JSON``
    holding the whole input map with its original types.
    """
    env = dict(os.environ if base is None else base)
    for name, value in inputs.items():
        env[input_env_name(name)] = format_input_value(value)
    env[INPUTS_JSON_ENV] = json.dumps(dict(inputs))
    return env
