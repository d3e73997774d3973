"""MCP server exposing delegated tasks to the orchestrator."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from delegateAgent import __version__
from delegateAgent.config.schema import REPLY_TOOL_NAME, TaskConfig
from delegateAgent.execution import ExecutionEngine, ExecutionResult, PausedResult
from delegateAgent.utils.error_handler import DelegateError, InvalidSession

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "delegate-agent"

EMPTY_OBJECT_SCHEMA = {"type": "object", "properties": {}}


class ToolCallError(Exception):
    """Raised from the call_tool handler; the SDK turns it into an error result."""
    pass


def format_pause(result: PausedResult) -> str:
    return (
        "[PAUSED] The task needs more information before it can continue.\n"
        f"Question: {result.question}\n"
        f"Session ID: {result.session_id}\n"
        f"Answer by calling the '{REPLY_TOOL_NAME}' tool with "
        f"session_id={result.session_id} and your answer as payload."
    )


def format_result(result: ExecutionResult) -> List[TextContent]:
    if isinstance(result, PausedResult):
        text = format_pause(result)
    else:
        text = result.text
    return [TextContent(type="text", text=text)]


def parse_session_id(arguments: Dict[str, Any]) -> int:
    """Read the reply tool's session id.

    Raises:
        InvalidSession: Missing or non-integer session id
    """
    value = arguments.get("session_id")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidSession(
            f"'{REPLY_TOOL_NAME}' requires an integer session_id",
            {"session_id": value},
        )
    return value


async def dispatch_tool_call(engine: ExecutionEngine, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """
    Route one orchestrator tool call to the engine.

    Raises:
        ToolCallError: The call failed; the message is the text shown to the orchestrator
    """
    arguments = arguments or {}

    try:
        if name == REPLY_TOOL_NAME and engine.interactive_enabled:
            session_id = parse_session_id(arguments)
            result = await engine.resume(session_id, arguments.get("payload"))
        else:
            result = await engine.execute(name, arguments)
    except DelegateError as e:
        LOGGER.error(f"Tool '{name}' failed: {e}")
        raise ToolCallError(e.to_text()) from e
    except Exception as e:
        LOGGER.exception(f"Unexpected error in tool '{name}'")
        raise ToolCallError(f"Error executing '{name}': {e}") from e

    return format_result(result)


def build_server(tasks: Sequence[TaskConfig], engine: ExecutionEngine) -> Server:
    """Create the MCP server for tasks that have an execution context.

    Args:
        tasks: Configured tasks, in config order
        engine: Initialized execution engine
    """
    server = Server(SERVER_NAME, version=__version__)

    exposed = []
    for task in tasks:
        if not engine.has_context(task.name):
            LOGGER.warning(f"  Skipping tool registration: {task.name} (no execution context)")
            continue
        exposed.append(
            Tool(
                name=task.name,
                description=task.description,
                inputSchema=task.arguments or dict(EMPTY_OBJECT_SCHEMA),
            )
        )
        LOGGER.info(f"  ✓ Registered tool: {task.name}")

    if engine.interactive_enabled:
        LOGGER.info(f"  Interactive tasks present, '{REPLY_TOOL_NAME}' callback enabled")

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return list(exposed)

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        return await dispatch_tool_call(engine, name, arguments)

    return server


async def serve_stdio(server: Server) -> None:
    """Serve MCP over this process's stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        LOGGER.info("MCP server started with stdio transport")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
