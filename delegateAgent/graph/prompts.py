"""System prompts for delegated tasks."""

from typing import Optional

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant with access to tools.\n"
    "Use the available tools to complete the task. Be thorough and precise.\n"
    "When you have gathered enough information, provide a clear, concise answer."
)

INTERACTIVE_PROMPT_SUFFIX = (
    "\n\nIf you cannot complete the task without more information from the caller, "
    "call the ask_orchestrator tool with one clear question. Do not guess missing "
    "required details."
)


def build_system_prompt(custom_prompt: Optional[str] = None, interactive: bool = False) -> str:
    """Pick the task's system prompt, adding pause guidance for interactive tasks."""
    prompt = custom_prompt or DEFAULT_SYSTEM_PROMPT
    if interactive:
        prompt += INTERACTIVE_PROMPT_SUFFIX
    return prompt
