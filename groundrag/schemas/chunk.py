"""
Chunk Schema
=============

Corpus chunks and the ephemeral per-query records derived from them.

Invariants:
    chunk.norm == max(1.0, ||chunk.embedding||)
    chunk.text_lower == chunk.text.lower()
    scored.score == w_sem * scored.semantic + w_lex * scored.lexical + scored.boost

Chunks are created once at startup and never mutated; they are shared
by every request. ScoredChunks are produced fresh for each query.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    """A unit of corpus text with its precomputed embedding and norm."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(description="Key of the chunk in the persisted corpus")
    text: str = Field(description="Raw chunk text")
    text_lower: str = Field(description="Cached lowercase text")
    embedding: np.ndarray = Field(description="Read-only float64 embedding vector")
    norm: float = Field(ge=1.0, description="L2 norm of the embedding, floored at 1")

    @model_validator(mode="after")
    def validate_lowercase(self) -> "Chunk":
        if self.text_lower != self.text.lower():
            raise ValueError(f"text_lower of chunk {self.key!r} is not text.lower()")
        return self


class LegalRef(BaseModel):
    """
    Article/clause citation parsed from a question.

    ``article`` is the pasal number with its optional letter ("28a");
    ``clause`` is the ayat number ("1").
    """
    model_config = ConfigDict(frozen=True)

    article: Optional[str] = None
    clause: Optional[str] = None


class ScoredChunk(BaseModel):
    """Per-query score breakdown of one chunk."""
    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    semantic: float = Field(description="Cosine similarity with the query")
    lexical: float = Field(ge=0.0, le=1.0, description="Token overlap score")
    boost: float = Field(default=0.0, description="Legal-reference boost")
    score: float = Field(description="Combined ranking score")
