"""
Hybrid Scorer
==============

Scores one chunk against one query by fusing three signals:

    score = w_sem * semantic + w_lex * lexical + boost

    - semantic: cosine similarity between query and chunk embeddings
    - lexical:  fraction of eligible query tokens found in the chunk
    - boost:    flat bonus when the chunk matches the question's
                pasal/ayat reference (see legal_ref.py)

Scoring is a pure function of (query, chunk): no hidden state, no I/O.
The query norm is computed once per request in ``Query.build`` rather
than once per chunk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from groundrag.schemas.chunk import Chunk, LegalRef, ScoredChunk

SEMANTIC_WEIGHT = 0.80
LEXICAL_WEIGHT = 0.20

# Anything that is not a letter, digit or whitespace. ``\w`` also covers
# the underscore, which is punctuation here.
_PUNCT_RE = re.compile(r"(?:[^\w\s]|_)+")
_SHORT_NUMBER_RE = re.compile(r"^[0-9]{1,2}$")


def tokenize(text: str) -> list[str]:
    """Lowercase, replace punctuation runs with a space, split on whitespace."""
    return _PUNCT_RE.sub(" ", text.lower()).split()


def vector_norm(vector: np.ndarray) -> float:
    """L2 norm floored at 1.0."""
    if vector.size == 0:
        return 1.0
    return max(1.0, float(np.linalg.norm(vector)))


def cosine_similarity(
    query: np.ndarray,
    query_norm: float,
    embedding: np.ndarray,
    embedding_norm: float,
) -> float:
    """
    Cosine similarity over the common prefix of two vectors.

    Both norms are floored at 1. Returns 0.0 when either vector is empty.
    """
    n = min(query.shape[0], embedding.shape[0])
    if n == 0:
        return 0.0
    dot = float(np.dot(query[:n], embedding[:n]))
    return dot / (max(1.0, query_norm) * max(1.0, embedding_norm))


def is_eligible_token(token: str) -> bool:
    """Tokens of 3+ chars count; 1–2 digit numbers count regardless of length."""
    return len(token) >= 3 or bool(_SHORT_NUMBER_RE.match(token))


def lexical_overlap(tokens: list[str], text_lower: str) -> float:
    """
    Token overlap of the query against a lowercase text, in [0, 1].

    A whole whitespace-delimited word match counts 1, a bare substring
    match counts 0.5.
    """
    hits = 0.0
    denom = 0
    for token in tokens:
        if not token or not is_eligible_token(token):
            continue
        denom += 1
        if re.search(rf"(?:^|\s){re.escape(token)}(?:\s|$)", text_lower):
            hits += 1.0
        elif token in text_lower:
            hits += 0.5
    return hits / max(1, denom)


@dataclass(frozen=True)
class Query:
    """
    Request-local view of the question.

    Built once per request; every chunk is scored against the same
    instance, so the query norm is computed once.
    """
    question: str
    tokens: list[str] = field(default_factory=list)
    embedding: np.ndarray = field(default_factory=lambda: np.zeros(0))
    norm: float = 1.0
    legal_ref: Optional[LegalRef] = None

    @classmethod
    def build(
        cls,
        question: str,
        embedding,
        legal_ref: Optional[LegalRef] = None,
    ) -> "Query":
        vector = np.asarray(embedding, dtype=np.float64).reshape(-1)
        return cls(
            question=question,
            tokens=tokenize(question),
            embedding=vector,
            norm=vector_norm(vector),
            legal_ref=legal_ref,
        )


def score_chunk(
    query: Query,
    chunk: Chunk,
    boost: float = 0.0,
    semantic_weight: float = SEMANTIC_WEIGHT,
    lexical_weight: float = LEXICAL_WEIGHT,
) -> ScoredChunk:
    """
    Combine semantic similarity, lexical overlap and the reference boost.

    Args:
        query: Request-local query.
        chunk: Corpus chunk.
        boost: Reference-match boost supplied by the caller.

    Returns:
        ScoredChunk with the individual signals preserved for logging.
    """
    semantic = cosine_similarity(query.embedding, query.norm, chunk.embedding, chunk.norm)
    lexical = lexical_overlap(query.tokens, chunk.text_lower)
    score = semantic_weight * semantic + lexical_weight * lexical + boost
    return ScoredChunk(
        chunk=chunk,
        semantic=semantic,
        lexical=lexical,
        boost=boost,
        score=score,
    )
