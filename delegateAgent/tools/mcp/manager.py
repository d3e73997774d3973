"""Downstream MCP server manager.

Owns every connection to a downstream tool-providing server and mediates
all access to them: discovery filtered by a whitelist, namespaced-name
resolution, and proxied tool calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from delegateAgent.config.schema import NAMESPACE_SEPARATOR, ServerConfig
from delegateAgent.utils.error_handler import CapabilityUnavailable, ExecutionFailed, InvalidToolName

from .connection import ConnectionStatus, MCPConnection, create_connection

LOGGER = logging.getLogger(__name__)

DEFAULT_STARTUP_TIMEOUT = 30.0

Whitelist = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class NamespacedTool:
    """Read-only view of a downstream tool under its namespaced name."""

    namespaced_name: str
    original_name: str
    server_id: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCallResult:
    """Downstream tool result, passed through unchanged."""

    content: List[Any]
    is_error: bool = False

    @property
    def text(self) -> str:
        """Join text blocks; non-text blocks are JSON-encoded."""
        parts = []
        for item in self.content:
            if getattr(item, "type", None) == "text" and hasattr(item, "text"):
                parts.append(item.text)
            elif hasattr(item, "model_dump"):
                parts.append(json.dumps(item.model_dump(mode="json", exclude_none=True), ensure_ascii=False))
            else:
                parts.append(json.dumps(item, ensure_ascii=False, default=str))
        return "\n".join(parts)


def namespace_tool_name(server_id: str, tool_name: str) -> str:
    """Build the composite identifier for a server's tool."""
    return f"{server_id}{NAMESPACE_SEPARATOR}{tool_name}"


def split_tool_name(namespaced_name: str) -> Tuple[str, str]:
    """Split a composite identifier on the first separator.

    Raises:
        InvalidToolName: If the separator is missing or either part is empty
    """
    server_id, sep, tool_name = namespaced_name.partition(NAMESPACE_SEPARATOR)
    if not sep or not server_id or not tool_name:
        raise InvalidToolName(
            f"Invalid namespaced tool name: {namespaced_name}",
            {"tool": namespaced_name},
        )
    return server_id, tool_name


class MCPServerManager:
    """
    Manages lifecycle of downstream MCP servers.

    Features:
    - Concurrent startup: every server connects in parallel, failures are
      isolated per server
    - Health tracking: process exits update the connection status in place
    - Proxying: all tool calls go through ``call_tool``
    """

    def __init__(self, startup_timeout: float = DEFAULT_STARTUP_TIMEOUT):
        """
        Initialize an empty manager.

        Args:
            startup_timeout: Seconds allowed for one server's connect + discovery
        """
        self.startup_timeout = startup_timeout
        self._connections: Dict[str, MCPConnection] = {}  # server_id -> connection

    async def initialize(self, server_configs: Mapping[str, ServerConfig]) -> None:
        """
        Connect to all configured servers and discover their tools.

        Returns only after every attempt settled. A server that fails to
        connect is kept with ``failed`` status.

        Args:
            server_configs: server id -> ServerConfig
        """
        LOGGER.info(f"Initialising {len(server_configs)} MCP connection(s)...")

        await asyncio.gather(
            *(self._connect_server(server_id, cfg) for server_id, cfg in server_configs.items())
        )

        connected = len(self.list_connected_servers())
        LOGGER.info(f"MCP initialisation complete: {connected}/{len(server_configs)} connected")

    async def _connect_server(self, server_id: str, cfg: ServerConfig) -> None:
        LOGGER.debug(f"  Connecting to MCP server: {server_id} (mode: {cfg.transport})")
        connection = create_connection(server_id, cfg)
        self._connections[server_id] = connection

        try:
            await asyncio.wait_for(connection.start(), timeout=self.startup_timeout)
            LOGGER.info(f"  ✓ MCP server connected: {server_id} ({len(connection.tools)} tools)")
        except asyncio.TimeoutError:
            connection.status = ConnectionStatus.FAILED
            LOGGER.error(f"  ✗ MCP server startup timeout: {server_id}")
        except Exception as e:
            connection.status = ConnectionStatus.FAILED
            LOGGER.error(f"  ✗ Failed to connect to MCP server '{server_id}': {e}")

    def available_tools(self, whitelist: Whitelist) -> List[NamespacedTool]:
        """
        Namespaced view of whitelisted tools on connected servers.

        Pairs referencing an unavailable server or an unknown tool are
        skipped with a warning.

        Args:
            whitelist: server id -> permitted original tool names

        Returns:
            NamespacedTool list in whitelist order
        """
        result = []

        for server_id, tool_names in whitelist.items():
            connection = self._connections.get(server_id)
            if connection is None or not connection.is_connected:
                LOGGER.warning(f"  Skipping unavailable MCP server: {server_id}")
                continue

            for tool_name in tool_names:
                tool = connection.get_tool(tool_name)
                if tool is None:
                    LOGGER.warning(f"  Tool not found on server '{server_id}': {tool_name}")
                    continue

                result.append(
                    NamespacedTool(
                        namespaced_name=namespace_tool_name(server_id, tool_name),
                        original_name=tool_name,
                        server_id=server_id,
                        description=tool.description or "",
                        input_schema=dict(tool.inputSchema or {}),
                    )
                )

        return result

    async def call_tool(self, namespaced_name: str, arguments: Dict[str, Any]) -> ToolCallResult:
        """
        Call a tool by its namespaced name.

        Raises:
            InvalidToolName: Malformed composite identifier
            CapabilityUnavailable: Unknown server, or server not connected
            ExecutionFailed: Transport-level failure
        """
        server_id, tool_name = split_tool_name(namespaced_name)

        connection = self._connections.get(server_id)
        if connection is None:
            raise CapabilityUnavailable(
                f"Unknown MCP server: {server_id}",
                {"server_id": server_id, "status": "unknown"},
            )
        if not connection.is_connected:
            raise CapabilityUnavailable(
                f"MCP server unavailable: {server_id} (status: {connection.status.value})",
                {"server_id": server_id, "status": connection.status.value},
            )

        try:
            result = await connection.call_tool(tool_name, arguments)
        except Exception as e:
            LOGGER.error(f"MCP tool call failed: {namespaced_name}: {e}")
            raise ExecutionFailed(
                f"MCP tool call failed: {e}",
                {"server_id": server_id, "tool": tool_name},
            ) from e

        return ToolCallResult(content=list(result.content), is_error=bool(result.isError))

    def has_all_required_servers(self, whitelist: Whitelist) -> bool:
        """True iff every server in the whitelist is connected."""
        return all(
            server_id in self._connections and self._connections[server_id].is_connected
            for server_id in whitelist
        )

    async def shutdown(self):
        """
        Close every connection and terminate spawned processes.

        Errors are logged, never raised.
        """
        if not self._connections:
            return

        LOGGER.info(f"Shutting down {len(self._connections)} MCP server(s)...")

        for server_id, connection in self._connections.items():
            try:
                await connection.close()
                LOGGER.info(f"  ✓ Closed: {server_id}")
            except Exception as e:
                LOGGER.error(f"  ✗ Failed to close {server_id}: {e}")

        self._connections.clear()

    def get_connection(self, server_id: str) -> Optional[MCPConnection]:
        """Return the connection entry for a server, whatever its status."""
        return self._connections.get(server_id)

    def list_configured_servers(self) -> list:
        """List all server IDs that have a connection entry."""
        return list(self._connections.keys())

    def list_connected_servers(self) -> list:
        """List server IDs whose status is connected."""
        return [server_id for server_id, conn in self._connections.items() if conn.is_connected]
