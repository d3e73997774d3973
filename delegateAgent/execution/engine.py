"""Execution engine for delegated tasks.

Builds one execution context per configured task at startup, then runs the
bounded tool-calling loop for ``execute`` and ``resume`` calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage

from delegateAgent.config.schema import ProviderConfig, TaskConfig
from delegateAgent.graph import build_system_prompt, build_task_graph, final_text
from delegateAgent.models import ProviderRegistry
from delegateAgent.tools.builtin import ask_orchestrator
from delegateAgent.tools.mcp import MCPServerManager, MCPToolWrapper, wrap_tools
from delegateAgent.utils.error_handler import (
    DelegateError,
    ExecutionFailed,
    ExecutionTimedOut,
    InvalidSession,
    ToolResolutionFailed,
    handle_model_error,
)

from .session_manager import SessionManager

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10
DEFAULT_EXECUTION_TIMEOUT = 60.0


@dataclass
class ExecutionContext:
    """Everything needed to run one task, built once at startup."""

    name: str
    model: BaseChatModel
    system_prompt: str
    tools: Dict[str, MCPToolWrapper]
    temperature: float
    interactive: bool
    graph: Any


@dataclass
class CompletedResult:
    text: str
    step_count: int
    messages: List[BaseMessage] = field(default_factory=list)
    type: Literal["complete"] = "complete"


@dataclass
class PausedResult:
    session_id: int
    question: str
    type: Literal["pause"] = "pause"


ExecutionResult = Union[CompletedResult, PausedResult]


def build_prompt(arguments: Any) -> str:
    """Render caller arguments as one ``key: value`` line per argument."""
    if not isinstance(arguments, Mapping):
        return str(arguments)

    lines = []
    for key, value in arguments.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, ensure_ascii=False)
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


def build_reply_message(question: str, payload: Any) -> HumanMessage:
    """Synthetic message carrying the orchestrator's answer to a pause question."""
    reply = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, default=str)
    return HumanMessage(content=f'The orchestrator answered your question "{question}":\n{reply}')


class ExecutionEngine:
    """
    Runs delegated tasks against their cached execution contexts.

    Features:
    - Context cache: model, prompt and tools resolved once per task
    - Bounded loop: at most ``max_steps`` model calls under one deadline
    - Pause/resume: interactive tasks may stop to ask the orchestrator a
      question and continue from the saved history later
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        session_manager: SessionManager,
        max_steps: int = DEFAULT_MAX_STEPS,
        execution_timeout: float = DEFAULT_EXECUTION_TIMEOUT,
    ):
        self.registry = registry
        self.session_manager = session_manager
        self.max_steps = max_steps
        self.execution_timeout = execution_timeout
        self._contexts: Dict[str, ExecutionContext] = {}
        self._initialized = False

    async def initialize(
        self,
        task_configs: Sequence[TaskConfig],
        manager: MCPServerManager,
        provider_configs: Optional[Mapping[str, ProviderConfig]] = None,
    ) -> None:
        """
        Build execution contexts for every task whose servers are connected.

        Tasks that cannot be built are logged and left without a context.
        Calling this more than once has no effect.
        """
        if self._initialized:
            LOGGER.warning("Execution engine already initialized, ignoring")
            return
        self._initialized = True

        LOGGER.info(f"Initialising execution contexts for {len(task_configs)} task(s)...")

        for task in task_configs:
            try:
                if not manager.has_all_required_servers(task.internal_tools):
                    raise ToolResolutionFailed(
                        f"Required MCP servers unavailable for tool: {task.name}",
                        {"tool": task.name, "servers": list(task.internal_tools)},
                    )
                self._contexts[task.name] = self._build_context(task, manager, provider_configs or {})
                LOGGER.info(f"  ✓ Execution context ready: {task.name}")
            except ToolResolutionFailed as e:
                LOGGER.warning(f"  ✗ Skipping context for '{task.name}': {e.message}")
            except Exception as e:
                LOGGER.error(f"  ✗ Failed to build execution context for '{task.name}': {e}")

        LOGGER.info(f"Execution engine initialised: {len(self._contexts)}/{len(task_configs)} context(s)")

    def _build_context(
        self,
        task: TaskConfig,
        manager: MCPServerManager,
        provider_configs: Mapping[str, ProviderConfig],
    ) -> ExecutionContext:
        alias = provider_configs.get(task.provider)
        if alias is not None:
            model = self.registry.resolve(
                alias.provider,
                task.model,
                api_key=alias.api_key,
                base_url=alias.endpoint,
                temperature=task.temperature,
                options=alias.options,
            )
        else:
            model = self.registry.resolve(task.provider, task.model, temperature=task.temperature)
        LOGGER.debug(f"  Model resolved for '{task.name}': {task.provider}:{task.model}")

        tools = wrap_tools(manager.available_tools(task.internal_tools), manager)
        LOGGER.debug(f"  {len(tools)} internal tool(s) wrapped for '{task.name}'")

        system_prompt = build_system_prompt(task.system_prompt, task.interactive)
        graph = build_task_graph(
            model,
            list(tools.values()),
            system_prompt,
            pause_tool=ask_orchestrator if task.interactive else None,
        )

        return ExecutionContext(
            name=task.name,
            model=model,
            system_prompt=system_prompt,
            tools=tools,
            temperature=task.temperature,
            interactive=task.interactive,
            graph=graph,
        )

    async def execute(self, task_name: str, arguments: Any) -> ExecutionResult:
        """
        Run a task from scratch.

        Raises:
            ToolResolutionFailed: The task has no execution context
            ExecutionTimedOut: The loop ran past its deadline
            ExecutionFailed: The model or a transport failed
        """
        context = self._get_context(task_name)
        LOGGER.info(f"Executing task: {task_name}")

        messages = [HumanMessage(content=build_prompt(arguments))]
        return await self._run_loop(context, messages, arguments)

    async def resume(self, session_id: int, payload: Any) -> ExecutionResult:
        """
        Continue a paused task with the orchestrator's reply.

        The loop restarts with a fresh step budget and deadline.

        Raises:
            InvalidSession: No live session with this id
        """
        session = self.session_manager.get_session(session_id)
        if session is None:
            raise InvalidSession(f"Unknown session: {session_id}", {"session_id": session_id})

        context = self._get_context(session.task_name)
        messages = [*session.messages, build_reply_message(session.question, payload)]

        self.session_manager.resume_session(session_id, payload)
        LOGGER.info(f"Resuming task '{session.task_name}' from session {session_id}")

        return await self._run_loop(context, messages, session.original_args)

    async def _run_loop(
        self,
        context: ExecutionContext,
        messages: List[BaseMessage],
        arguments: Any,
    ) -> ExecutionResult:
        initial_state = {
            "messages": messages,
            "steps": 0,
            "max_steps": self.max_steps,
            "interactive": context.interactive,
            "pause_question": None,
            "paused_messages": [],
        }
        # agent + tools per step, plus the pause node
        run_config = {"recursion_limit": self.max_steps * 2 + 5}

        try:
            state = await asyncio.wait_for(
                context.graph.ainvoke(initial_state, config=run_config),
                timeout=self.execution_timeout,
            )
        except asyncio.TimeoutError:
            LOGGER.error(f"Execution timed out: {context.name} ({self.execution_timeout}s)")
            raise ExecutionTimedOut(
                f"Execution timed out after {self.execution_timeout}s",
                {"tool": context.name},
            )
        except DelegateError:
            raise
        except Exception as e:
            LOGGER.error(f"Task execution failed: {context.name}: {e}")
            raise ExecutionFailed(handle_model_error(e), {"tool": context.name}) from e

        if state.get("pause_question") is not None:
            session_id, _ = self.session_manager.create_session(
                context.name,
                arguments if isinstance(arguments, dict) else {"input": arguments},
                state.get("paused_messages", []),
                state["pause_question"],
            )
            return PausedResult(session_id=session_id, question=state["pause_question"])

        final_messages = state.get("messages", [])
        text = final_text(final_messages)
        step_count = state.get("steps", 0)
        LOGGER.info(f"Task complete: {context.name} ({step_count} step(s), {len(text)} chars)")
        return CompletedResult(text=text, step_count=step_count, messages=final_messages)

    def _get_context(self, task_name: str) -> ExecutionContext:
        context = self._contexts.get(task_name)
        if context is None:
            raise ToolResolutionFailed(
                f"No execution context for tool: {task_name}",
                {"tool": task_name},
            )
        return context

    def has_context(self, task_name: str) -> bool:
        return task_name in self._contexts

    def context_names(self) -> List[str]:
        return list(self._contexts)

    @property
    def interactive_enabled(self) -> bool:
        """True when any built context may pause."""
        return any(ctx.interactive for ctx in self._contexts.values())
