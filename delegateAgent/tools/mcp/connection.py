"""MCP server connection implementations (stdio and SSE modes)."""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from mcp import ClientSession, types
from mcp.client.sse import sse_client

from delegateAgent.config.schema import ServerConfig

from .transport import ExitEvent, process_client

LOGGER = logging.getLogger(__name__)

CLOSE_TIMEOUT = 10.0


class ConnectionStatus(str, Enum):
    """Liveness of a downstream connection.

    Transitions only move forward: a connection becomes ``connected`` once,
    and from there may end ``failed`` or ``disconnected``.
    """

    CONNECTED = "connected"
    FAILED = "failed"
    DISCONNECTED = "disconnected"


class MCPConnection(ABC):
    """Abstract base class for MCP server connections.

    Each connection runs one owner task that opens the transport and the
    client session, and later closes them. anyio cancel scopes inside the SDK
    must be entered and exited by the same task, which is why ``start`` and
    ``close`` only signal that task instead of entering contexts themselves.
    """

    def __init__(self, server_id: str, config: ServerConfig):
        self.server_id = server_id
        self.config = config
        self.status = ConnectionStatus.DISCONNECTED
        self.tools: List[types.Tool] = []
        self._session: Optional[ClientSession] = None
        self._runner: Optional[asyncio.Task] = None
        self._closing = asyncio.Event()

    @abstractmethod
    async def _open_transport(self, stack: AsyncExitStack) -> Tuple[Any, Any]:
        """Enter the transport context on ``stack`` and return (read, write) streams."""

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED

    async def start(self) -> None:
        """Connect, initialize the session and discover tools.

        Raises:
            Exception: Whatever the transport or discovery raised; the
                connection is left in ``failed`` status.
        """
        ready = asyncio.get_running_loop().create_future()
        self._runner = asyncio.create_task(self._run(ready), name=f"mcp-{self.server_id}")

        try:
            await ready
        except BaseException:
            self.status = ConnectionStatus.FAILED
            await self._stop_runner(cancel=True)
            raise

        self.status = ConnectionStatus.CONNECTED
        LOGGER.debug(f"  Connection established for server: {self.server_id} ({len(self.tools)} tools)")

    async def _run(self, ready: asyncio.Future) -> None:
        try:
            async with AsyncExitStack() as stack:
                read_stream, write_stream = await self._open_transport(stack)
                session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
                await session.initialize()
                result = await session.list_tools()

                self.tools = list(result.tools)
                self._session = session
                ready.set_result(None)

                await self._closing.wait()
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
            else:
                LOGGER.warning(f"  Connection task for {self.server_id} ended with error: {e}")
        finally:
            self._session = None

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        """Call a tool on the server and return the raw MCP result."""
        if self._session is None:
            raise RuntimeError(f"Server not initialized: {self.server_id}")

        LOGGER.debug(f"  Calling tool: {tool_name} on server {self.server_id}")
        return await self._session.call_tool(tool_name, arguments)

    def get_tool(self, tool_name: str) -> Optional[types.Tool]:
        """Return the discovered tool with this name, if any."""
        for tool in self.tools:
            if tool.name == tool_name:
                return tool
        return None

    def handle_event(self, event: ExitEvent) -> None:
        """Apply a process exit event to this connection's status."""
        if self.status is not ConnectionStatus.CONNECTED:
            LOGGER.debug(f"  Exit event for {self.server_id} ignored (status: {self.status.value})")
            return

        if event.returncode is not None and event.returncode > 0:
            LOGGER.error(f"MCP server '{self.server_id}' crashed (exit code {event.returncode})")
            self.status = ConnectionStatus.FAILED
        else:
            LOGGER.warning(f"MCP server '{self.server_id}' exited (exit code {event.returncode})")
            self.status = ConnectionStatus.DISCONNECTED

    async def close(self) -> None:
        """Close the session and transport."""
        if self.status is ConnectionStatus.CONNECTED:
            self.status = ConnectionStatus.DISCONNECTED
        await self._stop_runner()
        LOGGER.debug(f"  Closed connection for server: {self.server_id}")

    async def _stop_runner(self, cancel: bool = False) -> None:
        if self._runner is None:
            return

        self._closing.set()
        if cancel and not self._runner.done():
            self._runner.cancel()
        try:
            await asyncio.wait_for(self._runner, timeout=CLOSE_TIMEOUT)
        except asyncio.CancelledError:
            if not cancel:
                raise
        except asyncio.TimeoutError:
            LOGGER.warning(f"  Timed out closing connection for {self.server_id}")
        finally:
            self._runner = None
            self._session = None


class StdioMCPConnection(MCPConnection):
    """MCP connection to a spawned local process over stdio."""

    async def _open_transport(self, stack: AsyncExitStack) -> Tuple[Any, Any]:
        full_env = os.environ.copy()
        full_env.update(self.config.env)

        return await stack.enter_async_context(
            process_client(
                server_id=self.server_id,
                command=self.config.command,
                args=self.config.args,
                env=full_env,
                on_exit=self.handle_event,
            )
        )


class SSEMCPConnection(MCPConnection):
    """MCP connection to a remote endpoint using SSE (Server-Sent Events) over HTTP."""

    async def _open_transport(self, stack: AsyncExitStack) -> Tuple[Any, Any]:
        LOGGER.debug(f"  Connecting to SSE endpoint: {self.config.url}")
        return await stack.enter_async_context(sse_client(self.config.url))


def create_connection(server_id: str, config: ServerConfig) -> MCPConnection:
    """Factory function to create appropriate connection type."""
    if config.transport == "stdio":
        return StdioMCPConnection(server_id, config)
    elif config.transport == "sse":
        return SSEMCPConnection(server_id, config)
    else:
        raise ValueError(f"Unknown connection mode: {config.transport}")
