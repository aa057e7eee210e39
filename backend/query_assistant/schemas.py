"""API request/response models."""

from typing import Annotated

from pydantic import BaseModel, Field

from .assistant import AssistantState, OperationStatus
from .highlight import render_html


class QueryRequest(BaseModel):
    """Raw or effective query text sent by the page."""

    query: Annotated[str, Field(default="", max_length=4000)]


class ProcessRequest(BaseModel):
    """Optional copy of the text the user sees when pressing the button."""

    query: Annotated[str | None, Field(default=None, max_length=4000)]


class SelectRequest(BaseModel):
    index: Annotated[int, Field(ge=0)]


class SuggestionResponse(BaseModel):
    """Rephrasings returned to the frontend."""

    suggestions: list[str]


class AnswerResponse(BaseModel):
    answer: str


class StateResponse(BaseModel):
    """Everything the page needs to redraw itself."""

    query: str
    query_html: str
    suggestions: list[str]
    suggestions_html: list[str]
    selected_index: int | None
    final_answer: str
    status: dict[str, OperationStatus]
    is_loading: bool

    @classmethod
    def from_state(cls, state: AssistantState) -> "StateResponse":
        return cls(
            query=state.query,
            query_html=render_html(state.query),
            suggestions=list(state.suggestions),
            suggestions_html=[render_html(s) for s in state.suggestions],
            selected_index=state.selected_index,
            final_answer=state.final_answer,
            status=dict(state.status),
            is_loading=state.is_loading,
        )


class SessionResponse(BaseModel):
    session_id: str
    state: StateResponse
