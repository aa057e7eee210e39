"""Business logic for rephrasing and answering queries."""

from __future__ import annotations

import logging
import re

from .config import Settings, get_settings
from .llm import build_llm
from .prompts import build_answer_chain, build_suggestion_chain

logger = logging.getLogger(__name__)

_NUMBERING = re.compile(r"^\d+\.\s*")
_LINE_BREAK = re.compile(r"\r?\n")


class CompletionError(RuntimeError):
    """Raised when a call to the completion API fails for any reason."""


class QueryService:
    """Encapsulates the LangChain pipelines for suggestions and answers."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        suggestion_chain=None,
        answer_chain=None,
    ) -> None:
        self.settings = settings or get_settings()
        if suggestion_chain is None or answer_chain is None:
            llm = build_llm(self.settings)
            suggestion_chain = suggestion_chain or build_suggestion_chain(llm)
            answer_chain = answer_chain or build_answer_chain(llm)
        self._suggestion_chain = suggestion_chain
        self._answer_chain = answer_chain

    def suggest(self, query: str) -> list[str]:
        """Ask the model for clearer rephrasings of ``query`` synchronously."""
        try:
            text = self._suggestion_chain.invoke({"query": query})
        except Exception as exc:
            raise CompletionError("Unable to generate suggestions") from exc
        return parse_suggestions(text, self.settings.suggestions_count)

    async def asuggest(self, query: str) -> list[str]:
        """Ask the model for clearer rephrasings of ``query`` asynchronously."""
        try:
            text = await self._suggestion_chain.ainvoke({"query": query})
        except Exception as exc:
            raise CompletionError("Unable to generate suggestions") from exc
        return parse_suggestions(text, self.settings.suggestions_count)

    def answer(self, query: str) -> str:
        """Answer the effective query synchronously."""
        try:
            text = self._answer_chain.invoke({"query": query})
        except Exception as exc:
            raise CompletionError("Unable to process query") from exc
        return text or ""

    async def aanswer(self, query: str) -> str:
        """Answer the effective query asynchronously."""
        try:
            text = await self._answer_chain.ainvoke({"query": query})
        except Exception as exc:
            raise CompletionError("Unable to process query") from exc
        return text or ""


def parse_suggestions(text: str | None, limit: int | None = None) -> list[str]:
    """Turn the model's line-per-suggestion reply into an ordered list.

    Blank lines are dropped and a leading ``N.`` numbering prefix is removed
    from each remaining line. At most ``limit`` entries are kept.
    """

    suggestions: list[str] = []
    for line in _LINE_BREAK.split(text or ""):
        if not line.strip():
            continue
        suggestions.append(_NUMBERING.sub("", line))
        if limit is not None and len(suggestions) >= limit:
            break
    logger.debug("Parsed %d suggestions", len(suggestions))
    return suggestions
