"""Pytest fixtures for MCP tests."""

import asyncio

import pytest

pytest.importorskip("mcp")


async def _wait_for_status(connection, status, timeout: float = 5.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while connection.status is not status:
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError(f"status stayed {connection.status.value}, expected {status.value}")
        await asyncio.sleep(0.05)


@pytest.fixture
def test_mcp_config(test_server_config):
    """One good server and one that cannot start."""
    from delegateAgent.config.schema import ServerConfig

    return {
        "test_stdio": test_server_config,
        "broken": ServerConfig(command="/nonexistent/definitely-not-a-server"),
    }


@pytest.fixture
async def mcp_manager(test_mcp_config):
    """Initialized manager; shut down after the test."""
    from delegateAgent.tools.mcp import MCPServerManager

    manager = MCPServerManager(startup_timeout=30)
    await manager.initialize(test_mcp_config)
    yield manager

    # Cleanup
    await manager.shutdown()


@pytest.fixture
def wait_for_status():
    """Poll until a connection reaches a given status."""
    return _wait_for_status
