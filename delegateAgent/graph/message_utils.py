"""Helpers for reading model output out of message histories."""

from __future__ import annotations

from typing import Any, List, Optional

from langchain_core.messages import AIMessage, BaseMessage


def message_text(message: BaseMessage) -> str:
    """Return the plain text of a message, joining text blocks of list content."""
    content: Any = message.content
    if isinstance(content, str):
        return content

    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def last_ai_message(messages: List[BaseMessage]) -> Optional[AIMessage]:
    for msg in reversed(messages):
        if isinstance(msg, AIMessage):
            return msg
    return None


def final_text(messages: List[BaseMessage]) -> str:
    """Text of the most recent AI message, or "" when the model said nothing."""
    msg = last_ai_message(messages)
    return message_text(msg) if msg is not None else ""
