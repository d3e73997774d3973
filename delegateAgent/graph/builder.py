"""Factory for the per-task LangGraph state machine."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.tools import BaseTool
from langgraph.graph import END, START, StateGraph
from langgraph.prebuilt import ToolNode

from delegateAgent.graph.nodes import build_agent_node, pause_node
from delegateAgent.graph.routing import agent_route
from delegateAgent.graph.state import TaskState

LOGGER = logging.getLogger(__name__)


def build_task_graph(
    model: BaseChatModel,
    tools: Sequence[BaseTool],
    system_prompt: str,
    pause_tool: Optional[BaseTool] = None,
):
    """Compose the bounded tool-calling loop for one task.

        START → agent ⇄ tools
                  ↓
                pause → END
                  ↓
                 END

    The pause tool is offered to the model but never executed: routing sends
    its calls to the pause node, which ends the run.

    Args:
        model: Chat model for the task
        tools: Downstream tool wrappers
        system_prompt: Task system prompt
        pause_tool: Pause tool for interactive tasks

    Returns:
        Compiled graph
    """
    model_tools = list(tools)
    if pause_tool is not None:
        model_tools.append(pause_tool)

    graph = StateGraph(TaskState)

    graph.add_node("agent", build_agent_node(model, model_tools, system_prompt))
    graph.add_node("tools", ToolNode(list(tools)))
    graph.add_node("pause", pause_node)

    graph.add_edge(START, "agent")
    graph.add_conditional_edges(
        "agent",
        agent_route,
        {
            "pause": "pause",
            "tools": "tools",
            "end": END,
        },
    )
    graph.add_edge("tools", "agent")
    graph.add_edge("pause", END)

    LOGGER.debug(f"  Task graph built ({len(tools)} tools, pause={'on' if pause_tool else 'off'})")
    return graph.compile()
