"""
GroundRAG HTTP API
===================

FastAPI service around the pipeline and the session repository.

Endpoints:
    GET    /health
    GET    /sessions                 session summaries, newest first
    POST   /sessions                 create a session (seeded with a welcome message)
    GET    /sessions/{id}            messages of a session
    DELETE /sessions/{id}
    POST   /sessions/{id}/ask        answer a question and record the exchange

The pipeline is synchronous and CPU-bound apart from the embedder and
generator calls, so the handlers are plain ``def`` functions and run in
FastAPI's worker threadpool.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from groundrag.exceptions import EmbeddingError
from groundrag.pipeline import GroundRAGPipeline
from groundrag.schemas.answer import AnswerResult, HistoryMessage
from groundrag.schemas.session import Session, SessionMessage, SessionSummary
from groundrag.sessions.repository import SessionRepository

_log = logging.getLogger("groundrag.api")


class AskRequest(BaseModel):
    question: str = ""


def create_app(pipeline: GroundRAGPipeline, repository: SessionRepository) -> FastAPI:
    """Build the FastAPI app bound to a pipeline and a session repository."""
    app = FastAPI(title="GroundRAG API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    history_window = pipeline.config.generation.history_window

    @app.get("/health")
    def health() -> dict[str, str | int]:
        return {"status": "ok", "chunks": pipeline.chunk_store.size}

    @app.get("/sessions", response_model=list[SessionSummary])
    def list_sessions() -> list[SessionSummary]:
        return repository.list()

    @app.post("/sessions", response_model=Session)
    def create_session() -> Session:
        return repository.create()

    @app.get("/sessions/{session_id}", response_model=list[SessionMessage])
    def get_session(session_id: str) -> list[SessionMessage]:
        session = repository.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return session.messages

    @app.delete("/sessions/{session_id}")
    def delete_session(session_id: str) -> dict[str, bool]:
        if not repository.delete(session_id):
            raise HTTPException(status_code=404, detail="Session not found")
        return {"success": True}

    @app.post("/sessions/{session_id}/ask", response_model=AnswerResult)
    def ask(session_id: str, req: AskRequest) -> AnswerResult:
        question = req.question.strip()
        if not question:
            raise HTTPException(status_code=400, detail="Question is required.")

        session = repository.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found.")

        history = [
            HistoryMessage(sender=m.sender, text=m.text)
            for m in session.messages[-history_window:]
        ] if history_window else []

        try:
            result = pipeline.answer(question, recent_history=history)
        except EmbeddingError as exc:
            _log.exception("Query embedding failed")
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        if not result.refused:
            repository.append_exchange(session_id, question, result)
        return result

    return app


__all__ = ["create_app", "AskRequest"]
