"""MCP (Model Context Protocol) downstream integration for delegateAgent."""

from .connection import ConnectionStatus, MCPConnection, SSEMCPConnection, StdioMCPConnection, create_connection
from .manager import (
    MCPServerManager,
    NamespacedTool,
    ToolCallResult,
    namespace_tool_name,
    split_tool_name,
)
from .transport import ExitEvent
from .wrapper import MCPToolWrapper, wrap_tools

__all__ = [
    "ConnectionStatus",
    "MCPConnection",
    "SSEMCPConnection",
    "StdioMCPConnection",
    "create_connection",
    "MCPServerManager",
    "NamespacedTool",
    "ToolCallResult",
    "namespace_tool_name",
    "split_tool_name",
    "ExitEvent",
    "MCPToolWrapper",
    "wrap_tools",
]
