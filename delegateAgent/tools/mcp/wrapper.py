"""MCP tool wrapper for LangChain BaseTool integration."""

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from langchain_core.tools import BaseTool
from pydantic import ConfigDict, Field

from delegateAgent.utils.logging_utils import log_tool_call, log_tool_result

if TYPE_CHECKING:
    from .manager import MCPServerManager, NamespacedTool

LOGGER = logging.getLogger(__name__)

EMPTY_OBJECT_SCHEMA = {"type": "object", "properties": {}}


class MCPToolWrapper(BaseTool):
    """
    LangChain BaseTool exposing one downstream tool under its namespaced name.

    Calls always go through ``MCPServerManager.call_tool``, never directly to
    a connection, so status checks and error translation apply.
    """

    server_id: str = Field(description="MCP server identifier")
    original_tool_name: str = Field(description="Original tool name on MCP server")
    manager: Any = Field(description="MCPServerManager instance", exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(
        self,
        server_id: str,
        tool_name: str,
        original_tool_name: str,
        description: str,
        manager: "MCPServerManager",
        input_schema: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize MCP tool wrapper.

        Args:
            server_id: MCP server identifier
            tool_name: Namespaced tool name seen by the model
            original_tool_name: Original tool name on MCP server
            description: Tool description
            manager: MCPServerManager instance
            input_schema: JSON schema for tool arguments
        """
        super().__init__(
            name=tool_name,
            description=description or f"MCP tool '{original_tool_name}' from server '{server_id}'",
            server_id=server_id,
            original_tool_name=original_tool_name,
            manager=manager,
        )

        # The model sees the downstream JSON schema as-is
        self.args_schema = input_schema or dict(EMPTY_OBJECT_SCHEMA)

    async def _arun(self, **kwargs) -> str:
        """
        Async execution of MCP tool.

        Failures are returned as text so the model can react to them within
        the loop instead of aborting the whole task.
        """
        log_tool_call(LOGGER, self.name, kwargs)

        try:
            result = await self.manager.call_tool(self.name, kwargs)
        except Exception as e:
            LOGGER.error(f"MCP tool execution failed: {self.name}: {e}")
            return f"Error: {e}"

        if result.is_error:
            LOGGER.warning(f"MCP tool returned error: {self.name}")

        text = result.text
        log_tool_result(LOGGER, self.name, text, success=not result.is_error)
        return text

    def _run(self, **kwargs) -> str:
        # Downstream sessions live on the server's event loop; a sync call
        # from another loop could not reach them.
        raise NotImplementedError(f"MCP tool '{self.name}' only supports async invocation")


def wrap_tools(tools: Iterable["NamespacedTool"], manager: "MCPServerManager") -> Dict[str, MCPToolWrapper]:
    """
    Create wrappers for namespaced tools.

    Returns:
        namespaced name -> MCPToolWrapper
    """
    wrapped = {}
    for tool in tools:
        wrapped[tool.namespaced_name] = MCPToolWrapper(
            server_id=tool.server_id,
            tool_name=tool.namespaced_name,
            original_tool_name=tool.original_name,
            description=tool.description,
            manager=manager,
            input_schema=tool.input_schema,
        )
        LOGGER.debug(f"    Wrapped tool: {tool.namespaced_name}")
    return wrapped
