"""
Hybrid Ranker
==============

Brute-force ranking of every chunk in the store for one query.

Architecture:
    Query → [score every chunk (semantic + lexical + ref boost)]
          → legal-reference filter (with fallback) → stable sort

Key Design Decisions:
    - The corpus is hundreds to low-thousands of chunks, so a full scan
      is used; there is no ANN or inverted index
    - Sorting is stable: equal scores keep chunk-store insertion order
    - The reference filter degrades gracefully: if no chunk matches the
      cited pasal/ayat, the unfiltered ranking is returned
"""

from __future__ import annotations

import logging

from groundrag.ingest.chunk_store import ChunkStore
from groundrag.retrieve import legal_ref
from groundrag.retrieve.scorer import LEXICAL_WEIGHT, SEMANTIC_WEIGHT, Query, score_chunk
from groundrag.schemas.chunk import ScoredChunk

logger = logging.getLogger("groundrag.retrieve.hybrid")

LEGAL_REF_BOOST = 0.25


class HybridRanker:
    """
    Scores and ranks all chunks of a ChunkStore.

    Usage:
        ranker = HybridRanker(store)
        query = Query.build(question, embedding, extract_reference(question))
        ranked = ranker.rank(query)

    Args:
        chunk_store: Store holding the corpus.
        semantic_weight: Weight of the cosine similarity.
        lexical_weight: Weight of the lexical overlap.
        legal_ref_boost: Boost for chunks matching the question's reference.
    """

    def __init__(
        self,
        chunk_store: ChunkStore,
        semantic_weight: float = SEMANTIC_WEIGHT,
        lexical_weight: float = LEXICAL_WEIGHT,
        legal_ref_boost: float = LEGAL_REF_BOOST,
    ):
        self.chunk_store = chunk_store
        self.semantic_weight = semantic_weight
        self.lexical_weight = lexical_weight
        self.legal_ref_boost = legal_ref_boost

    @classmethod
    def from_config(cls, chunk_store: ChunkStore, config) -> "HybridRanker":
        rc = config.retrieval
        return cls(
            chunk_store,
            semantic_weight=rc.semantic_weight,
            lexical_weight=rc.lexical_weight,
            legal_ref_boost=rc.legal_ref_boost,
        )

    def score_all(self, query: Query) -> list[tuple[ScoredChunk, bool]]:
        """Score every chunk, returning each with its reference-match flag."""
        results = []
        for chunk in self.chunk_store.chunks:
            matched = legal_ref.matches(chunk.text_lower, query.legal_ref)
            scored = score_chunk(
                query,
                chunk,
                boost=self.legal_ref_boost if matched else 0.0,
                semantic_weight=self.semantic_weight,
                lexical_weight=self.lexical_weight,
            )
            results.append((scored, matched))
        return results

    def rank(self, query: Query) -> list[ScoredChunk]:
        """
        Rank all chunks for a query.

        Returns:
            ScoredChunks sorted by score descending. Empty only when the
            store is empty.
        """
        scored = self.score_all(query)
        candidates = [s for s, _ in scored]

        if query.legal_ref is not None:
            filtered = [s for s, matched in scored if matched]
            if filtered:
                candidates = filtered
            else:
                logger.debug(
                    f"No chunk matches {query.legal_ref}; keeping all {len(candidates)} candidates"
                )

        return sorted(candidates, key=lambda s: s.score, reverse=True)
