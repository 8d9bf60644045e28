"""Tests for the Typer CLI."""
from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from any_script_mcp.cli import app, format_config_error
from any_script_mcp.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MultipleConfigErrors,
    SourceError,
    ValidationIssue,
)

runner = CliRunner()

_VALID_YAML = """\
tools:
  - name: echo
    description: Echo a message
    inputs:
      message:
        type: string
        description: Message
    run: echo "$INPUTS__MESSAGE"
  - name: date
    description: Print the date
    run: date
"""

_INVALID_YAML = """\
tools:
  - name: "bad name"
    description: Bad
    run: echo bad
"""


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.delenv("ANY_SCRIPT_MCP_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("ANY_SCRIPT_MCP_LOG_LEVEL", "ERROR")


class TestFormatConfigError:
    def test_load_error(self):
        text = format_config_error(ConfigLoadError("/a.yaml", "Configuration file not found"))
        assert text == "Failed to load /a.yaml: Configuration file not found"

    def test_validation_error(self):
        error = ConfigValidationError(
            "/a.yaml", [ValidationIssue("tools.0.name", "String should match pattern")]
        )
        assert format_config_error(error).splitlines() == [
            "Invalid configuration in /a.yaml:",
            "  - tools.0.name: String should match pattern",
        ]

    def test_multiple_errors_are_nested(self):
        error = MultipleConfigErrors(
            [
                SourceError("/a.yaml", ConfigLoadError("/a.yaml", "Configuration file not found")),
                SourceError("/b.yaml", ConfigValidationError("/b.yaml", [ValidationIssue("tools", "Field required")])),
            ]
        )
        assert format_config_error(error).splitlines() == [
            "Failed to load 2 configuration files:",
            "  Failed to load /a.yaml: Configuration file not found",
            "  Invalid configuration in /b.yaml:",
            "    - tools: Field required",
        ]


class TestValidateCommand:
    def test_valid_file(self, write_config):
        path = write_config("tools.yaml", _VALID_YAML)
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 0
        assert "Loaded 2 tools" in result.stdout
        assert "echo" in result.stdout

    def test_reads_env_paths(self, write_config, monkeypatch):
        path = write_config("tools.yaml", _VALID_YAML)
        monkeypatch.setenv("ANY_SCRIPT_MCP_CONFIG", os.pathsep.join(["/missing.yaml", path]))
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "Loaded 2 tools" in result.stdout

    def test_invalid_file(self, write_config):
        path = write_config("bad.yaml", _INVALID_YAML)
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 1
        assert f"Invalid configuration in {path}" in result.output
        assert "tools.0.name" in result.output

    def test_missing_default_config(self):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert "Configuration file not found" in result.output


class TestListCommand:
    def test_lists_tools_in_order(self, write_config):
        path = write_config("tools.yaml", _VALID_YAML)
        result = runner.invoke(app, ["list", path])
        assert result.exit_code == 0
        assert result.stdout.index("echo: Echo a message") < result.stdout.index("date: Print the date")


class TestSchemaCommand:
    def test_prints_schema(self):
        result = runner.invoke(app, ["schema"])
        assert result.exit_code == 0
        schema = json.loads(result.stdout)
        assert schema["title"] == "Any Script MCP Configuration"

    def test_writes_schema_file(self, tmp_path: Path):
        output = tmp_path / "config.schema.json"
        result = runner.invoke(app, ["schema", "--output", str(output)])
        assert result.exit_code == 0
        assert json.loads(output.read_text())["$schema"].startswith("http://json-schema.org/draft-07")


class TestServeCommand:
    def test_serves_loaded_config(self, write_config, monkeypatch):
        path = write_config("tools.yaml", _VALID_YAML)
        monkeypatch.setenv("ANY_SCRIPT_MCP_CONFIG", path)
        with patch("any_script_mcp.cli.serve_stdio", new_callable=AsyncMock) as mock_serve:
            result = runner.invoke(app, ["serve"])
        assert result.exit_code == 0
        mock_serve.assert_awaited_once()
        config = mock_serve.await_args.args[0]
        assert config.names() == ["echo", "date"]

    def test_no_command_serves(self, write_config, monkeypatch):
        path = write_config("tools.yaml", _VALID_YAML)
        monkeypatch.setenv("ANY_SCRIPT_MCP_CONFIG", path)
        with patch("any_script_mcp.cli.serve_stdio", new_callable=AsyncMock) as mock_serve:
            result = runner.invoke(app, [])
        assert result.exit_code == 0
        mock_serve.assert_awaited_once()

    def test_startup_failure_exits_nonzero(self, write_config, monkeypatch):
        bad = write_config("bad.yaml", _INVALID_YAML)
        monkeypatch.setenv("ANY_SCRIPT_MCP_CONFIG", os.pathsep.join(["/missing.yaml", bad]))
        with patch("any_script_mcp.cli.serve_stdio", new_callable=AsyncMock) as mock_serve:
            result = runner.invoke(app, ["serve"])
        assert result.exit_code == 1
        assert "Failed to load 2 configuration files" in result.output
        mock_serve.assert_not_awaited()

    def test_max_output_bytes_from_env(self, write_config, monkeypatch):
        path = write_config("tools.yaml", _VALID_YAML)
        monkeypatch.setenv("ANY_SCRIPT_MCP_CONFIG", path)
        monkeypatch.setenv("ANY_SCRIPT_MCP_MAX_OUTPUT_BYTES", "2048")
        with patch("any_script_mcp.cli.serve_stdio", new_callable=AsyncMock) as mock_serve:
            runner.invoke(app, ["serve"])
        script_runner = mock_serve.await_args.args[1]
        assert script_runner._max_output_bytes == 2048
