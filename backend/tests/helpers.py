"""Fakes shared by the query assistant tests."""

import asyncio
from dataclasses import dataclass

from query_assistant.service import QueryService


class DummyChain:
    """Stands in for a LangChain runnable and records what it was sent.

    Replies are handed out in call order; the last one repeats. An exception
    instance as a reply is raised instead of returned.
    """

    def __init__(self, *replies, delays=()) -> None:
        self._replies = list(replies)
        self._delays = list(delays)
        self.calls: list[dict] = []

    def _next(self, inputs: dict):
        self.calls.append(inputs)
        return self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]

    def invoke(self, inputs: dict) -> str:
        reply = self._next(inputs)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def ainvoke(self, inputs: dict) -> str:
        reply = self._next(inputs)
        await asyncio.sleep(self._delays.pop(0) if self._delays else 0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@dataclass
class DummySettings:
    openai_api_key: str = "test-key"
    openai_model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    suggestions_count: int = 5
    min_query_length: int = 3
    debounce_seconds: float = 0.01
    session_ttl_seconds: float = 1800.0
    max_sessions: int = 1000
    log_level: str = "DEBUG"
    host: str = "127.0.0.1"
    port: int = 8000


def make_service(suggestion_chain=None, answer_chain=None, settings=None) -> QueryService:
    return QueryService(
        settings or DummySettings(),
        suggestion_chain=suggestion_chain or DummyChain("1. Foo\n2. Bar\n\n3. Baz"),
        answer_chain=answer_chain or DummyChain("The answer."),
    )
