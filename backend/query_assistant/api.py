"""HTTP surface: the page, a server-side proxy and per-user sessions."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .assistant import QueryAssistant
from .config import Settings, get_settings
from .logging_setup import configure_logging
from .schemas import (
    AnswerResponse,
    QueryRequest,
    ProcessRequest,
    SelectRequest,
    SessionResponse,
    StateResponse,
    SuggestionResponse,
)
from .service import CompletionError, QueryService
from .sessions import SessionStore

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def create_app(
    settings: Settings | None = None,
    service: QueryService | None = None,
) -> FastAPI:
    """Build the application; the API key stays on the server."""
    settings = settings or get_settings()
    configure_logging(settings)
    service = service or QueryService(settings)
    sessions = SessionStore(
        lambda: QueryAssistant(service),
        ttl=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        sessions.close_all()

    app = FastAPI(title="Query Assistant", lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service
    app.state.sessions = sessions

    def _session(session_id: str) -> QueryAssistant:
        try:
            return sessions.get(session_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Unknown session") from None

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "index.html",
            {"debounce_ms": int(settings.debounce_seconds * 1000)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/suggestions", response_model=SuggestionResponse)
    async def suggestions(payload: QueryRequest) -> SuggestionResponse:
        if len(payload.query.strip()) < settings.min_query_length:
            return SuggestionResponse(suggestions=[])
        try:
            result = await service.asuggest(payload.query)
        except CompletionError as exc:
            logger.exception("Suggestion proxy call failed")
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return SuggestionResponse(suggestions=result)

    @app.post("/api/answer", response_model=AnswerResponse)
    async def answer(payload: QueryRequest) -> AnswerResponse:
        try:
            result = await service.aanswer(payload.query)
        except CompletionError as exc:
            logger.exception("Answer proxy call failed")
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return AnswerResponse(answer=result)

    @app.post("/api/sessions", response_model=SessionResponse, status_code=201)
    async def create_session() -> SessionResponse:
        session_id, assistant = sessions.create()
        return SessionResponse(
            session_id=session_id,
            state=StateResponse.from_state(assistant.snapshot()),
        )

    @app.get("/api/sessions/{session_id}", response_model=StateResponse)
    async def get_session(session_id: str) -> StateResponse:
        return StateResponse.from_state(_session(session_id).snapshot())

    @app.put("/api/sessions/{session_id}/query", response_model=StateResponse)
    async def set_query(session_id: str, payload: QueryRequest) -> StateResponse:
        assistant = _session(session_id)
        assistant.set_query(payload.query)
        return StateResponse.from_state(assistant.snapshot())

    @app.post("/api/sessions/{session_id}/select", response_model=StateResponse)
    async def select(session_id: str, payload: SelectRequest) -> StateResponse:
        assistant = _session(session_id)
        try:
            assistant.select_suggestion(payload.index)
        except IndexError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return StateResponse.from_state(assistant.snapshot())

    @app.post("/api/sessions/{session_id}/process", response_model=StateResponse)
    async def process(session_id: str, payload: ProcessRequest | None = None) -> StateResponse:
        assistant = _session(session_id)
        # The text on screen is the raw query, whatever order the updates arrived in.
        on_screen = payload.query if payload is not None else None
        if on_screen is not None and on_screen != assistant.query:
            assistant.set_query(on_screen)
        await assistant.process_query()
        return StateResponse.from_state(assistant.snapshot())

    @app.delete("/api/sessions/{session_id}", status_code=204)
    async def delete_session(session_id: str) -> None:
        _session(session_id)
        sessions.remove(session_id)
        logger.info("Session %s closed", session_id)

    return app


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
