"""Task execution: bounded loop engine and pause sessions."""

from .engine import (
    CompletedResult,
    ExecutionContext,
    ExecutionEngine,
    ExecutionResult,
    PausedResult,
    build_prompt,
    build_reply_message,
)
from .session_manager import SessionManager, SessionState

__all__ = [
    "CompletedResult",
    "ExecutionContext",
    "ExecutionEngine",
    "ExecutionResult",
    "PausedResult",
    "build_prompt",
    "build_reply_message",
    "SessionManager",
    "SessionState",
]
