from __future__ import annotations

from typing import Any, Optional, Union

import structlog
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from any_script_mcp.executor.errors import ScriptExecutionError
from any_script_mcp.executor.runner import ScriptRunner
from any_script_mcp.models.tool import Config, InputValue, ToolConfig

logger = structlog.get_logger()

SERVER_NAME = "any-script-mcp"

_JSON_TYPES = {"string": "string", "number": "number", "boolean": "boolean"}
_ARG_TYPES: dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "boolean": StrictBool,
}


def build_input_schema(tool: ToolConfig) -> dict[str, Any]:
    """JSON schema advertised to MCP clients for a tool's arguments."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, tool_input in tool.inputs.items():
        prop: dict[str, Any] = {"type": _JSON_TYPES[tool_input.type], "description": tool_input.description}
        if tool_input.default is not None:
            prop["default"] = tool_input.default
        properties[name] = prop
        if not tool_input.is_optional:
            required.append(name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def build_arguments_model(tool: ToolConfig) -> type[BaseModel]:
    """Build a pydantic model that validates caller arguments for ``tool``.

    Input names may contain hyphens, so fields are positional and carry the
    input name as their alias.
    """
    fields: dict[str, Any] = {}
    for index, (name, tool_input) in enumerate(tool.inputs.items()):
        annotation = _ARG_TYPES[tool_input.type]
        if tool_input.default is not None:
            field = Field(default=tool_input.default, alias=name, description=tool_input.description)
        elif not tool_input.required:
            annotation = Optional[annotation]
            field = Field(default=None, alias=name, description=tool_input.description)
        else:
            field = Field(alias=name, description=tool_input.description)
        fields[f"arg_{index}"] = (annotation, field)

    return create_model(
        f"{tool.name}_arguments",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


def validate_arguments(
    model: type[BaseModel], arguments: dict[str, Any] | None
) -> dict[str, InputValue]:
    """Validate raw arguments and return them keyed by input name.

    Defaults are filled in; optional inputs that were not supplied are left out.
    """
    parsed = model.model_validate(arguments or {})
    values: dict[str, InputValue] = {}
    for field_name, info in model.model_fields.items():
        value = getattr(parsed, field_name)
        if value is not None:
            values[info.alias or field_name] = value
    return values


def strip_final_newline(output: str) -> str:
    if output.endswith("\r\n"):
        return output[:-2]
    if output.endswith("\n"):
        return output[:-1]
    return output


def create_server(config: Config, runner: ScriptRunner | None = None) -> Server:
    """Create an MCP server exposing every tool in ``config``."""
    runner = runner or ScriptRunner()
    server: Server = Server(SERVER_NAME)
    argument_models = {tool.name: build_arguments_model(tool) for tool in config.tools}

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                title=tool.name,
                description=tool.description,
                inputSchema=build_input_schema(tool),
            )
            for tool in config.tools
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        if name not in config:
            raise ValueError(f"Unknown tool: '{name}'")
        tool = config.get(name)
        try:
            inputs = validate_arguments(argument_models[name], arguments)
        except ValidationError as exc:
            raise ValueError(f"Invalid arguments for tool '{name}': {exc}") from exc

        try:
            output = await runner.run(tool, inputs)
        except ScriptExecutionError as exc:
            logger.warning("tool.failed", tool=name, error=str(exc))
            return [types.TextContent(type="text", text=f"Error: {exc}")]
        return [types.TextContent(type="text", text=strip_final_newline(output))]

    logger.info("server.tools_registered", count=len(config))
    return server


async def serve_stdio(config: Config, runner: ScriptRunner | None = None) -> None:
    """Serve ``config`` over the MCP stdio transport until the client disconnects."""
    server = create_server(config, runner)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("server.started", transport="stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("server.stopped")
