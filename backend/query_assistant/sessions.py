"""In-memory registry of per-user assistants."""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from typing import Callable

from .assistant import QueryAssistant

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds one ``QueryAssistant`` per browser tab.

    Sessions idle for longer than ``ttl`` seconds are closed and dropped, and
    the least recently used session is dropped once ``max_sessions`` is hit.
    """

    def __init__(
        self,
        factory: Callable[[], QueryAssistant],
        *,
        ttl: float,
        max_sessions: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self.ttl = ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[QueryAssistant, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self) -> tuple[str, QueryAssistant]:
        self.evict_expired()
        while len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            logger.info("Session limit reached, dropping %s", oldest)
            self.remove(oldest)
        session_id = uuid.uuid4().hex
        assistant = self._factory()
        self._sessions[session_id] = (assistant, self._clock())
        logger.info("Session %s created", session_id)
        return session_id, assistant

    def get(self, session_id: str) -> QueryAssistant:
        """Return the session's assistant and mark it as used.

        Raises ``KeyError`` for unknown or expired sessions.
        """
        self.evict_expired()
        assistant, _ = self._sessions[session_id]
        self._sessions[session_id] = (assistant, self._clock())
        self._sessions.move_to_end(session_id)
        return assistant

    def remove(self, session_id: str) -> None:
        assistant, _ = self._sessions.pop(session_id)
        assistant.close()

    def evict_expired(self) -> int:
        cutoff = self._clock() - self.ttl
        expired = [sid for sid, (_, seen) in self._sessions.items() if seen < cutoff]
        for session_id in expired:
            self.remove(session_id)
        if expired:
            logger.info("Evicted %d idle sessions", len(expired))
        return len(expired)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)
