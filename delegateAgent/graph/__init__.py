"""Task loop graph assembly exports."""

from .builder import build_task_graph
from .message_utils import final_text, message_text
from .prompts import DEFAULT_SYSTEM_PROMPT, build_system_prompt
from .routing import agent_route
from .state import TaskState

__all__ = [
    "build_task_graph",
    "final_text",
    "message_text",
    "DEFAULT_SYSTEM_PROMPT",
    "build_system_prompt",
    "agent_route",
    "TaskState",
]
