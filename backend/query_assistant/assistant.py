"""State machine behind the query assistant page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .debounce import Debouncer
from .service import CompletionError, QueryService

logger = logging.getLogger(__name__)

SUGGEST = "suggest"
ANSWER = "answer"
OPERATIONS = (SUGGEST, ANSWER)


class OperationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class _Operation:
    status: OperationStatus = OperationStatus.IDLE
    issued: int = 0


@dataclass(frozen=True)
class AssistantState:
    """Read-only view of an assistant at one point in time."""

    query: str
    suggestions: tuple[str, ...]
    selected_index: int | None
    final_answer: str
    status: Mapping[str, OperationStatus] = field(default_factory=dict)

    @property
    def is_loading(self) -> bool:
        return any(s is OperationStatus.PENDING for s in self.status.values())

    @property
    def effective_query(self) -> str:
        if self.selected_index is not None:
            return self.suggestions[self.selected_index]
        return self.query


class QueryAssistant:
    """Tracks the query, its suggestions and the final answer for one user.

    Each operation keeps its own status and a counter of issued requests.
    A response is applied only if it belongs to the latest request issued
    for its operation, so late replies never overwrite newer state.
    """

    def __init__(
        self,
        service: QueryService,
        *,
        debounce_seconds: float | None = None,
        min_query_length: int | None = None,
    ) -> None:
        settings = service.settings
        self._service = service
        self.min_query_length = (
            settings.min_query_length if min_query_length is None else min_query_length
        )
        delay = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debouncer = Debouncer(self.generate_suggestions, delay)
        self._operations = {name: _Operation() for name in OPERATIONS}

        self.query = ""
        self.suggestions: list[str] = []
        self.selected_index: int | None = None
        self.final_answer = ""

    @property
    def is_loading(self) -> bool:
        return any(op.status is OperationStatus.PENDING for op in self._operations.values())

    def status(self, operation: str) -> OperationStatus:
        return self._operations[operation].status

    def snapshot(self) -> AssistantState:
        return AssistantState(
            query=self.query,
            suggestions=tuple(self.suggestions),
            selected_index=self.selected_index,
            final_answer=self.final_answer,
            status=MappingProxyType(
                {name: op.status for name, op in self._operations.items()}
            ),
        )

    def set_query(self, text: str) -> None:
        """Store the query and (re)start the suggestion debounce window."""
        self.query = text
        if len(text.strip()) < self.min_query_length:
            self._debouncer.cancel()
            self._invalidate(SUGGEST)
            self._replace_suggestions([])
            return
        self._debouncer.trigger()

    def select_suggestion(self, index: int) -> None:
        if not 0 <= index < len(self.suggestions):
            raise IndexError(f"No suggestion at position {index}")
        self.selected_index = index
        self.set_query(self.suggestions[index])

    async def generate_suggestions(self) -> None:
        query = self.query
        if len(query.strip()) < self.min_query_length:
            self._replace_suggestions([])
            return

        token = self._begin(SUGGEST)
        try:
            suggestions = await self._service.asuggest(query)
        except CompletionError:
            logger.exception("Error generating suggestions")
            self._finish(SUGGEST, token, OperationStatus.FAILED)
            return

        if not self._is_current(SUGGEST, token):
            logger.debug("Discarding stale suggestions for %r", query)
            return
        self._replace_suggestions(suggestions)
        self._finish(SUGGEST, token, OperationStatus.SUCCEEDED)

    async def process_query(self) -> str:
        """Answer the selected suggestion, or the raw query if none is selected.

        Returns the effective query that was sent.
        """
        effective = self.snapshot().effective_query
        token = self._begin(ANSWER)
        try:
            answer = await self._service.aanswer(effective)
        except CompletionError:
            logger.exception("Error processing query")
            self._finish(ANSWER, token, OperationStatus.FAILED)
            return effective

        if self._is_current(ANSWER, token):
            self.final_answer = answer
            self._finish(ANSWER, token, OperationStatus.SUCCEEDED)
        return effective

    async def flush(self) -> None:
        """Wait for a scheduled suggestion refresh to complete."""
        await self._debouncer.flush()

    def close(self) -> None:
        self._debouncer.cancel()

    def _replace_suggestions(self, suggestions: list[str]) -> None:
        self.suggestions = list(suggestions)
        self.selected_index = None

    def _begin(self, operation: str) -> int:
        op = self._operations[operation]
        op.issued += 1
        op.status = OperationStatus.PENDING
        return op.issued

    def _is_current(self, operation: str, token: int) -> bool:
        return self._operations[operation].issued == token

    def _finish(self, operation: str, token: int, status: OperationStatus) -> None:
        if self._is_current(operation, token):
            self._operations[operation].status = status

    def _invalidate(self, operation: str) -> None:
        op = self._operations[operation]
        op.issued += 1
        if op.status is OperationStatus.PENDING:
            op.status = OperationStatus.IDLE
