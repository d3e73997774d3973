"""Paused task sessions awaiting an orchestrator reply."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from langchain_core.messages import BaseMessage

LOGGER = logging.getLogger(__name__)

DEFAULT_RING_SIZE = 1000


@dataclass
class SessionState:
    """One paused task execution."""

    session_id: int
    task_name: str
    original_args: Dict[str, Any]
    messages: List[BaseMessage]
    question: str
    reply: asyncio.Future
    created_at: float = field(default_factory=time.time)


class SessionManager:
    """
    Table of paused sessions keyed by a recycled integer id.

    Ids come from a ring of ``ring_size`` slots. When the ring wraps onto a
    session that was never resumed, the old session is replaced and a warning
    is logged.
    """

    def __init__(self, ring_size: int = DEFAULT_RING_SIZE):
        if ring_size < 1:
            raise ValueError("ring_size must be positive")
        self.ring_size = ring_size
        self._counter = 0
        self._sessions: Dict[int, SessionState] = {}

    def create_session(
        self,
        task_name: str,
        original_args: Dict[str, Any],
        messages: List[BaseMessage],
        question: str,
    ) -> Tuple[int, asyncio.Future]:
        """
        Store a paused execution under the next ring id.

        Must be called while an event loop is running.

        Returns:
            (session id, future resolved with the reply payload on resume)
        """
        session_id = self._counter
        self._counter = (self._counter + 1) % self.ring_size

        if session_id in self._sessions:
            stale = self._sessions[session_id]
            LOGGER.warning(
                f"Overwriting stale session {session_id} (task '{stale.task_name}') due to id wraparound"
            )
            if not stale.reply.done():
                stale.reply.cancel()

        reply = asyncio.get_running_loop().create_future()
        self._sessions[session_id] = SessionState(
            session_id=session_id,
            task_name=task_name,
            original_args=original_args,
            messages=messages,
            question=question,
            reply=reply,
        )

        LOGGER.info(f"Session {session_id} created for task '{task_name}': {question}")
        return session_id, reply

    def resume_session(self, session_id: int, payload: Any) -> bool:
        """
        Deliver the reply to a paused session and remove it.

        Returns:
            False if no such session exists (nothing changes), True otherwise
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            LOGGER.warning(f"Attempted to resume unknown session {session_id}")
            return False

        if not session.reply.done():
            session.reply.set_result(payload)

        LOGGER.info(f"Session {session_id} resumed (task '{session.task_name}')")
        return True

    def get_session(self, session_id: int) -> Optional[SessionState]:
        return self._sessions.get(session_id)

    def has_session(self, session_id: int) -> bool:
        return session_id in self._sessions

    @property
    def active_count(self) -> int:
        """Number of sessions still waiting for a reply."""
        return len(self._sessions)
