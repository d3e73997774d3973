"""Configuration: file schema, loader and process settings."""

from .loader import load_config, substitute_env_vars
from .schema import (
    NAMESPACE_SEPARATOR,
    REPLY_TOOL_NAME,
    DelegateConfig,
    ProviderConfig,
    ServerConfig,
    TaskConfig,
)
from .settings import ExecutionSettings, ObservabilitySettings, Settings, get_settings

__all__ = [
    "load_config",
    "substitute_env_vars",
    "NAMESPACE_SEPARATOR",
    "REPLY_TOOL_NAME",
    "DelegateConfig",
    "ProviderConfig",
    "ServerConfig",
    "TaskConfig",
    "ExecutionSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
