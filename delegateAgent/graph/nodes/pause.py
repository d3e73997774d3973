"""Pause node: capture the question and the history at the pause point."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_core.messages import AIMessage

from delegateAgent.graph.message_utils import message_text
from delegateAgent.tools.builtin import PAUSE_TOOL_NAME

if TYPE_CHECKING:
    from delegateAgent.graph.state import TaskState

LOGGER = logging.getLogger(__name__)


async def pause_node(state: TaskState) -> TaskState:
    """Record the pause request.

    The tool-call message that asked the question is left out of the captured
    history, since no tool result will ever answer it. Text the model wrote
    alongside the call is kept as a plain AI message.
    """
    messages = list(state.get("messages", []))
    request = messages.pop()

    question = ""
    for call in request.tool_calls:
        if call["name"] == PAUSE_TOOL_NAME:
            question = str(call.get("args", {}).get("question", ""))
            break

    text = message_text(request)
    if text:
        messages.append(AIMessage(content=text))

    LOGGER.info(f"Task paused with question: {question}")
    return {"pause_question": question, "paused_messages": messages}
