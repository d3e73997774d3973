"""Builtin tools available to delegated tasks."""

from .ask_orchestrator import PAUSE_TOOL_NAME, AskOrchestratorInput, ask_orchestrator

__all__ = ["PAUSE_TOOL_NAME", "AskOrchestratorInput", "ask_orchestrator"]
