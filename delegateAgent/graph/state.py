"""State definition for the delegated task loop."""

from __future__ import annotations

from typing import Annotated, List, Optional, TypedDict

from langchain_core.messages import BaseMessage
from langgraph.graph import add_messages


class TaskState(TypedDict, total=False):
    """State tracked across one bounded loop run.

    The system prompt is not part of ``messages``; the agent node prepends it
    on every call, so saved histories stay prompt-free.
    """

    # ========== Conversation ==========
    messages: Annotated[List[BaseMessage], add_messages]

    # ========== Execution control ==========
    steps: int       # Model calls made in this run
    max_steps: int   # Hard limit on model calls
    interactive: bool  # Pause requests are honoured

    # ========== Pause ==========
    pause_question: Optional[str]
    paused_messages: List[BaseMessage]  # History captured at the pause point
