"""Shared utilities: logging setup and the error taxonomy."""

from .error_handler import (
    CapabilityUnavailable,
    ConfigError,
    DelegateError,
    ExecutionFailed,
    ExecutionTimedOut,
    InvalidSession,
    InvalidToolName,
    ProviderNotFound,
    ToolResolutionFailed,
    handle_model_error,
)
from .logging_utils import get_logger, log_tool_call, log_tool_result, setup_logging

__all__ = [
    "CapabilityUnavailable",
    "ConfigError",
    "DelegateError",
    "ExecutionFailed",
    "ExecutionTimedOut",
    "InvalidSession",
    "InvalidToolName",
    "ProviderNotFound",
    "ToolResolutionFailed",
    "handle_model_error",
    "get_logger",
    "log_tool_call",
    "log_tool_result",
    "setup_logging",
]
