"""Runtime assembly: downstream servers, execution engine and MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from mcp.server import Server

from delegateAgent.config import DelegateConfig, Settings
from delegateAgent.execution import ExecutionEngine, SessionManager
from delegateAgent.models import ProviderRegistry
from delegateAgent.server import build_server
from delegateAgent.tools.mcp import MCPServerManager

LOGGER = logging.getLogger(__name__)


@dataclass
class Application:
    """Assembled runtime, ready to serve."""

    config: DelegateConfig
    manager: MCPServerManager
    engine: ExecutionEngine
    sessions: SessionManager
    server: Server

    async def shutdown(self) -> None:
        """Close every downstream connection."""
        await self.manager.shutdown()


async def build_application(
    config: DelegateConfig,
    settings: Settings,
    registry: Optional[ProviderRegistry] = None,
) -> Application:
    """Connect downstream servers, build task contexts and the MCP server.

    Args:
        config: Validated config file
        settings: Process settings (loop bounds, timeouts)
        registry: Provider registry; a default one is created when omitted

    Returns:
        Application
    """
    execution = settings.execution

    manager = MCPServerManager(startup_timeout=execution.startup_timeout)
    await manager.initialize(config.mcps)

    sessions = SessionManager(ring_size=execution.session_ring_size)
    engine = ExecutionEngine(
        registry or ProviderRegistry(),
        sessions,
        max_steps=execution.max_steps,
        execution_timeout=execution.execution_timeout,
    )

    try:
        await engine.initialize(config.tools, manager, config.providers)
        server = build_server(config.tools, engine)
    except BaseException:
        await manager.shutdown()
        raise

    LOGGER.info(
        f"Application built: {len(manager.list_connected_servers())} server(s), "
        f"{len(engine.context_names())} tool(s)"
    )
    return Application(config=config, manager=manager, engine=engine, sessions=sessions, server=server)
