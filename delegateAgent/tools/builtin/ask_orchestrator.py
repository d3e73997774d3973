"""ask_orchestrator tool - the delegated agent asks its caller for input."""

from langchain_core.tools import tool
from pydantic import BaseModel, Field

PAUSE_TOOL_NAME = "ask_orchestrator"


class AskOrchestratorInput(BaseModel):
    """Input for the ask_orchestrator tool."""

    question: str = Field(..., description="The question for the orchestrator")


@tool(PAUSE_TOOL_NAME, args_schema=AskOrchestratorInput)
def ask_orchestrator(question: str) -> str:
    """Ask the orchestrating agent a question and wait for its answer.

    Use this when you cannot finish the task without information only the
    caller has: a missing parameter, a choice between options, or a
    confirmation. The task pauses and continues once the answer arrives.

    Args:
        question: A clear, specific question
    """
    # The graph routes this call to its pause node before any tool runs,
    # so this body is only reached when the tool is used outside a task graph.
    return f"(no orchestrator attached) {question}"
