"""Test MCP server manager."""

import pytest


@pytest.mark.asyncio
async def test_manager_initialization(mcp_manager):
    """Every configured server gets an entry; only the good one connects."""
    from delegateAgent.tools.mcp import ConnectionStatus

    assert sorted(mcp_manager.list_configured_servers()) == ["broken", "test_stdio"]
    assert mcp_manager.list_connected_servers() == ["test_stdio"]
    assert mcp_manager.get_connection("broken").status is ConnectionStatus.FAILED


@pytest.mark.asyncio
async def test_available_tools_filters_whitelist(mcp_manager):
    """Only whitelisted tools on connected servers are returned, namespaced."""
    tools = mcp_manager.available_tools(
        {
            "test_stdio": ["echo", "does_not_exist"],
            "broken": ["echo"],
            "unknown": ["echo"],
        }
    )

    assert [tool.namespaced_name for tool in tools] == ["test_stdio__echo"]
    echo = tools[0]
    assert echo.server_id == "test_stdio"
    assert echo.original_name == "echo"
    assert echo.description == "Echo back the input message"
    assert echo.input_schema["required"] == ["message"]


@pytest.mark.asyncio
async def test_call_tool(mcp_manager):
    """Namespaced call is proxied to the right server."""
    result = await mcp_manager.call_tool("test_stdio__add", {"a": 5, "b": 3})
    assert result.text == "5 + 3 = 8"
    assert result.is_error is False


@pytest.mark.asyncio
async def test_call_tool_invalid_name(mcp_manager):
    from delegateAgent.utils.error_handler import InvalidToolName

    for name in ["echo", "__echo", "test_stdio__"]:
        with pytest.raises(InvalidToolName):
            await mcp_manager.call_tool(name, {})


@pytest.mark.asyncio
async def test_call_tool_unavailable_server(mcp_manager):
    from delegateAgent.utils.error_handler import CapabilityUnavailable

    with pytest.raises(CapabilityUnavailable) as exc_info:
        await mcp_manager.call_tool("unknown__echo", {})
    assert exc_info.value.details["status"] == "unknown"

    with pytest.raises(CapabilityUnavailable) as exc_info:
        await mcp_manager.call_tool("broken__echo", {})
    assert exc_info.value.details == {"server_id": "broken", "status": "failed"}


@pytest.mark.asyncio
async def test_downstream_crash_makes_server_unavailable(mcp_manager, wait_for_status):
    """After the server process crashes, calls fail with CapabilityUnavailable."""
    from delegateAgent.tools.mcp import ConnectionStatus
    from delegateAgent.utils.error_handler import CapabilityUnavailable

    await mcp_manager.call_tool("test_stdio__crash", {})
    await wait_for_status(mcp_manager.get_connection("test_stdio"), ConnectionStatus.FAILED)

    with pytest.raises(CapabilityUnavailable) as exc_info:
        await mcp_manager.call_tool("test_stdio__echo", {"message": "hi"})
    assert exc_info.value.details["status"] == "failed"
    assert not mcp_manager.has_all_required_servers({"test_stdio": ["echo"]})


@pytest.mark.asyncio
async def test_has_all_required_servers(mcp_manager):
    """Pure predicate over the whitelist's server ids."""
    assert mcp_manager.has_all_required_servers({"test_stdio": ["echo"]})
    assert mcp_manager.has_all_required_servers({"test_stdio": ["echo"]})
    assert mcp_manager.has_all_required_servers({})
    assert not mcp_manager.has_all_required_servers({"test_stdio": [], "broken": []})
    assert not mcp_manager.has_all_required_servers({"unknown": []})


@pytest.mark.asyncio
async def test_manager_shutdown(mcp_manager):
    """Shutdown closes everything and clears the table."""
    connection = mcp_manager.get_connection("test_stdio")

    await mcp_manager.shutdown()

    assert mcp_manager.list_configured_servers() == []
    assert not connection.is_connected

    # Second shutdown is a no-op
    await mcp_manager.shutdown()


@pytest.mark.asyncio
async def test_startup_timeout_marks_failed(test_server_config):
    """A server that does not finish startup in time is marked failed."""
    from delegateAgent.tools.mcp import ConnectionStatus, MCPServerManager

    manager = MCPServerManager(startup_timeout=0.001)
    try:
        await manager.initialize({"slow": test_server_config})
        assert manager.get_connection("slow").status is ConnectionStatus.FAILED
        assert manager.list_connected_servers() == []
    finally:
        await manager.shutdown()


def test_split_tool_name():
    """Split happens on the first separator."""
    from delegateAgent.tools.mcp import namespace_tool_name, split_tool_name

    assert split_tool_name("fs__read_file") == ("fs", "read_file")
    assert split_tool_name("fs__read__file") == ("fs", "read__file")
    assert namespace_tool_name("fs", "read_file") == "fs__read_file"


def test_tool_call_result_text():
    from mcp.types import ImageContent, TextContent

    from delegateAgent.tools.mcp import ToolCallResult

    result = ToolCallResult(
        content=[
            TextContent(type="text", text="first"),
            TextContent(type="text", text="second"),
        ]
    )
    assert result.text == "first\nsecond"

    image = ToolCallResult(content=[ImageContent(type="image", data="aGk=", mimeType="image/png")])
    assert '"mimeType": "image/png"' in image.text
