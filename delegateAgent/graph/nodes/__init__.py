"""Graph nodes for the delegated task loop."""

from .agent import build_agent_node
from .pause import pause_node

__all__ = ["build_agent_node", "pause_node"]
