"""Validated configuration models.

The config file has three sections:
- mcps: downstream MCP servers keyed by server id
- providers: optional provider aliases (endpoint, credentials, extra options)
- tools: composite tasks exposed to the orchestrator
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

# Separator between server id and tool name in namespaced tool identifiers
NAMESPACE_SEPARATOR = "__"

# Name of the callback tool the orchestrator uses to answer a paused task
REPLY_TOOL_NAME = "reply"


class ServerConfig(BaseModel):
    """Launch / transport descriptor for one downstream MCP server."""

    command: Optional[str] = Field(default=None, description="Command to spawn the MCP server")
    args: List[str] = Field(default_factory=list, description="Arguments for the command")
    env: Dict[str, str] = Field(default_factory=dict, description="Environment overrides")
    transport: Literal["stdio", "sse"] = Field(default="stdio", description="Transport type")
    url: Optional[str] = Field(default=None, description="Endpoint URL for SSE transport")

    @model_validator(mode="after")
    def _check_transport(self) -> "ServerConfig":
        if self.transport == "stdio" and not self.command:
            raise ValueError("stdio transport requires 'command'")
        if self.transport == "sse" and not self.url:
            raise ValueError("sse transport requires 'url'")
        return self


class ProviderConfig(BaseModel):
    """Named provider alias with endpoint and credentials."""

    provider: str = Field(description="Underlying provider name (openai, anthropic, ...)")
    endpoint: Optional[str] = Field(default=None, description="Base URL for the provider API")
    api_key: Optional[str] = Field(default=None, description="API key")
    options: Dict[str, Any] = Field(default_factory=dict, description="Extra model constructor options")


class TaskConfig(BaseModel):
    """A composite task: model + system prompt + tool whitelist."""

    name: str = Field(description="Tool name exposed to the orchestrator")
    description: str = Field(description="Tool description for the orchestrator")
    arguments: Optional[Dict[str, Any]] = Field(default=None, description="Input schema (JSON Schema)")
    internal_tools: Dict[str, List[str]] = Field(description="server id -> permitted tool names")
    provider: str = Field(description="Provider name or alias from the providers section")
    model: str = Field(description="Model identifier")
    system_prompt: Optional[str] = Field(default=None, description="Custom system prompt")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    interactive: bool = Field(default=False, description="Allow pausing to ask the orchestrator")


class DelegateConfig(BaseModel):
    """Root configuration."""

    mcps: Dict[str, ServerConfig] = Field(description="Downstream MCP servers")
    providers: Dict[str, ProviderConfig] = Field(default_factory=dict)
    tools: List[TaskConfig] = Field(description="Composite tools exposed to the orchestrator")

    @model_validator(mode="after")
    def _check_names(self) -> "DelegateConfig":
        for server_id in self.mcps:
            # a trailing "_" would make "<id>__<tool>" split at the wrong place
            if not server_id or NAMESPACE_SEPARATOR in server_id or server_id.endswith("_"):
                raise ValueError(
                    f"server id '{server_id}' must be non-empty, must not contain "
                    f"'{NAMESPACE_SEPARATOR}' and must not end with '_'"
                )

        seen = set()
        for task in self.tools:
            if task.name in seen:
                raise ValueError(f"duplicate tool name: {task.name}")
            if task.name == REPLY_TOOL_NAME:
                raise ValueError(f"tool name '{REPLY_TOOL_NAME}' is reserved")
            seen.add(task.name)

            for server_id, tool_names in task.internal_tools.items():
                for tool_name in tool_names:
                    if not tool_name or NAMESPACE_SEPARATOR in tool_name:
                        raise ValueError(
                            f"tool '{task.name}': internal tool '{server_id}.{tool_name}' "
                            f"must be non-empty and must not contain '{NAMESPACE_SEPARATOR}'"
                        )
        return self
