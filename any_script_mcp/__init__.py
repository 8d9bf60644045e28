"""any-script-mcp: serve shell scripts declared in YAML as MCP tools."""
from __future__ import annotations

__version__ = "1.0.0"
