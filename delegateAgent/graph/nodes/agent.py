"""Agent node: one model call per step."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage
from langchain_core.tools import BaseTool

from delegateAgent.utils.logging_utils import log_tool_call

if TYPE_CHECKING:
    from delegateAgent.graph.state import TaskState

LOGGER = logging.getLogger(__name__)


def build_agent_node(model: BaseChatModel, tools: Sequence[BaseTool], system_prompt: str):
    """Build the agent node.

    Args:
        model: Chat model for the task
        tools: Every tool the model may call (pause tool included)
        system_prompt: Prepended to the history on every call

    Returns:
        Callable: async agent node function
    """
    bound = model.bind_tools(list(tools)) if tools else model

    async def agent_node(state: TaskState) -> TaskState:
        steps = state.get("steps", 0) + 1
        LOGGER.debug(f"Agent step {steps}/{state.get('max_steps')}")

        prompt_messages = [SystemMessage(content=system_prompt), *state.get("messages", [])]
        output = await bound.ainvoke(prompt_messages)

        for call in getattr(output, "tool_calls", None) or []:
            log_tool_call(LOGGER, call["name"], call.get("args", {}))

        return {"messages": [output], "steps": steps}

    return agent_node
