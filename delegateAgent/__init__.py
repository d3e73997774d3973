"""delegateAgent - delegate tool-heavy subtasks to a cheaper model over MCP."""

__version__ = "0.1.0"
