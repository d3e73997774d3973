"""Conditional routing for the delegated task loop."""

from __future__ import annotations

import logging
from typing import Literal

from delegateAgent.tools.builtin import PAUSE_TOOL_NAME

from .state import TaskState

LOGGER = logging.getLogger(__name__)


def agent_route(state: TaskState) -> Literal["pause", "tools", "end"]:
    """Route after the agent node.

    Order of checks:
    1. Pause tool requested (interactive runs only) -> pause
    2. Other tool calls and step budget left -> tools
    3. Otherwise (final answer, or step limit reached) -> end
    """
    messages = state.get("messages", [])
    tool_calls = getattr(messages[-1], "tool_calls", None) if messages else None

    if tool_calls and state.get("interactive", False):
        if any(call["name"] == PAUSE_TOOL_NAME for call in tool_calls):
            LOGGER.debug("Route agent -> pause: model asked the orchestrator")
            return "pause"

    if not tool_calls:
        LOGGER.debug("Route agent -> end: no tool calls")
        return "end"

    steps = state.get("steps", 0)
    max_steps = state.get("max_steps", 10)
    if steps >= max_steps:
        LOGGER.warning(f"Step limit reached ({steps}/{max_steps}), ending loop")
        return "end"

    LOGGER.debug(f"Route agent -> tools: {len(tool_calls)} tool call(s)")
    return "tools"
