"""Error taxonomy for delegated task execution.

Every failure that can reach the orchestrator is a ``DelegateError`` subclass
with a stable ``code``. The protocol server turns these into MCP error results,
so a task invocation never ends without a response.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class DelegateError(Exception):
    """Base exception for failures surfaced to the orchestrator."""

    code = "DELEGATE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"Error [{self.code}]: {self.message}"

    def to_text(self) -> str:
        """Render the error as text for an MCP tool result."""
        text = str(self)
        if self.details:
            text += f"\nDetails: {json.dumps(self.details, ensure_ascii=False, default=str)}"
        return text


class CapabilityUnavailable(DelegateError):
    """Downstream server unknown or not currently connected."""

    code = "MCP_UNAVAILABLE"


class InvalidToolName(DelegateError):
    """Composite tool identifier has no usable namespace separator."""

    code = "INVALID_TOOL_NAME"


class ToolResolutionFailed(DelegateError):
    """A task's tool whitelist cannot be satisfied, or the task has no context."""

    code = "TOOL_RESOLUTION_FAILED"


class ExecutionFailed(DelegateError):
    """The model call or a downstream transport failed."""

    code = "LLM_ERROR"


class ExecutionTimedOut(DelegateError):
    """The bounded loop ran past its wall-clock deadline."""

    code = "EXECUTION_TIMEOUT"


class InvalidSession(DelegateError):
    """Resume referenced a session id with no live session."""

    code = "INVALID_SESSION"


class ProviderNotFound(DelegateError):
    """No chat-model factory is registered or loadable for a provider name."""

    code = "PROVIDER_NOT_FOUND"


class ConfigError(Exception):
    """Configuration could not be read, substituted or validated."""
    pass


def handle_model_error(error: Exception) -> str:
    """Convert model invocation errors to short diagnostic messages.

    Args:
        error: Exception raised during model invocation

    Returns:
        Message suitable for the orchestrator
    """
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return f"Rate limited by provider: {error}"

    if "context_length" in error_str:
        return f"Conversation exceeds the model context window: {error}"

    if "invalid_api_key" in error_str or "authentication" in error_str or "401" in error_str:
        return f"Provider rejected the credentials: {error}"

    if "quota" in error_str or "insufficient" in error_str:
        return f"Provider quota exhausted: {error}"

    return f"Provider error: {error}"
