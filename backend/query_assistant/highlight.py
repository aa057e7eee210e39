"""Keyword highlighting for queries and suggestions."""

from __future__ import annotations

import html
import re
from typing import NamedTuple

STOP_WORDS = frozenset(
    {"what", "how", "why", "when", "where", "which", "who", "the", "and", "that", "this"}
)

_WHITESPACE = re.compile(r"(\s+)")


class Token(NamedTuple):
    text: str
    is_keyword: bool


def tokenize(text: str) -> list[str]:
    """Split text into whitespace and non-whitespace runs, keeping both."""
    return [piece for piece in _WHITESPACE.split(text) if piece]


def is_keyword(token: str) -> bool:
    if not token or token.isspace():
        return False
    return len(token) > 3 and token.lower() not in STOP_WORDS


def highlight_keywords(text: str) -> list[Token]:
    """Return the tokens of ``text`` flagged as keyword or plain.

    Joining the token texts yields ``text`` unchanged.
    """
    return [Token(piece, is_keyword(piece)) for piece in tokenize(text)]


def keywords(text: str) -> list[str]:
    return [token.text for token in highlight_keywords(text) if token.is_keyword]


def render_html(text: str) -> str:
    """Render ``text`` as HTML spans, emphasising keywords."""
    parts = []
    for token in highlight_keywords(text):
        escaped = html.escape(token.text)
        if token.is_keyword:
            parts.append(f'<span class="keyword">{escaped}</span>')
        else:
            parts.append(f"<span>{escaped}</span>")
    return "".join(parts)
