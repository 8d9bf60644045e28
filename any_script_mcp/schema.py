from __future__ import annotations

from typing import Any

from any_script_mcp.models.tool import ConfigDocument

SCHEMA_ID = "https://raw.githubusercontent.com/izumin5210/any-script-mcp/main/config.schema.json"


def generate_config_schema() -> dict[str, Any]:
    """JSON schema of the YAML config file, for editor completion and validation."""
    schema = ConfigDocument.model_json_schema()
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "$id": SCHEMA_ID,
        "title": "Any Script MCP Configuration",
        "description": (
            "Configuration schema for any-script-mcp - MCP server that exposes "
            "arbitrary CLI tools and shell scripts as MCP Tools via YAML configuration"
        ),
        **{key: value for key, value in schema.items() if key != "title"},
    }
