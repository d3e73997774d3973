"""Tools for delegated tasks: downstream MCP proxies and builtins."""

from .builtin import PAUSE_TOOL_NAME, ask_orchestrator
from .mcp import MCPServerManager, MCPToolWrapper, wrap_tools

__all__ = [
    "PAUSE_TOOL_NAME",
    "ask_orchestrator",
    "MCPServerManager",
    "MCPToolWrapper",
    "wrap_tools",
]
