"""
GroundRAG Data Schemas
=======================

Pydantic v2 models for the data that flows through the engine:

1. Chunk / LegalRef / ScoredChunk: corpus units and their per-query scores
2. AnswerResult / HistoryMessage: the retrieval entrypoint contract
3. Session / SessionMessage: chat sessions kept by the caller
"""

from groundrag.schemas.chunk import Chunk, LegalRef, ScoredChunk
from groundrag.schemas.answer import AnswerResult, HistoryMessage
from groundrag.schemas.session import Session, SessionMessage, SessionSummary

__all__ = [
    # Chunks
    "Chunk",
    "LegalRef",
    "ScoredChunk",
    # Answers
    "AnswerResult",
    "HistoryMessage",
    # Sessions
    "Session",
    "SessionMessage",
    "SessionSummary",
]
