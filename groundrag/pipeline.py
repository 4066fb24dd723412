"""
GroundRAG End-to-End Pipeline
==============================

Orchestrates one question:
    Embed → Score & rank → Relevance gate → Context → Generate/verify → Result

This is the single retrieval entrypoint. It reads only immutable shared
data (the chunk store) and request-local data, so concurrent requests
need no locking. It never touches session state: the caller persists
whatever it needs from the returned ``AnswerResult``.

Usage:
    from groundrag.pipeline import GroundRAGPipeline

    pipeline = GroundRAGPipeline.from_config(config)
    result = pipeline.answer("apa isi pasal 28 ayat 1", recent_history=[])
    print(result.answer, result.used_generator)
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from groundrag.config import GroundRAGConfig, get_config
from groundrag.exceptions import EmbeddingError
from groundrag.generate.groq_generator import BaseGenerator, GroqGenerator
from groundrag.ingest.chunk_store import ChunkStore
from groundrag.ingest.embedder import QueryEmbedder
from groundrag.retrieve.gate import RelevanceGate
from groundrag.retrieve.hybrid import HybridRanker
from groundrag.retrieve.legal_ref import extract_reference
from groundrag.retrieve.scorer import Query
from groundrag.retrieve.snippet import SnippetExtractor
from groundrag.schemas.answer import AnswerResult, HistoryMessage
from groundrag.verify.grounding import GroundedAnswerer

logger = logging.getLogger("groundrag.pipeline")


class GroundRAGPipeline:
    """
    End-to-end retrieval-and-grounding orchestrator.

    Args:
        chunk_store: Loaded corpus.
        embedder: Anything with ``embed_query(text) -> vector``.
        generator: Black-box generator.
        config: GroundRAG configuration.
    """

    def __init__(
        self,
        chunk_store: ChunkStore,
        embedder,
        generator: BaseGenerator,
        config: Optional[GroundRAGConfig] = None,
    ):
        self.config = config or get_config()
        self.chunk_store = chunk_store
        self.embedder = embedder
        self.generator = generator

        self.ranker = HybridRanker.from_config(chunk_store, self.config)
        self.gate = RelevanceGate.from_config(self.config)
        self.extractor = SnippetExtractor.from_config(self.config)
        self.answerer = GroundedAnswerer.from_config(generator, self.extractor, self.config)

    @classmethod
    def from_config(cls, config: Optional[GroundRAGConfig] = None) -> "GroundRAGPipeline":
        """
        Load the corpus and build real embedder/generator backends.

        Raises:
            LoadError: If the persisted corpus is malformed.
        """
        config = config or get_config()
        store = ChunkStore.from_file(config.corpus_path)
        logger.info(f"Pipeline ready: {store.size} chunks, config {config.config_hash()}")
        return cls(
            chunk_store=store,
            embedder=QueryEmbedder.from_config(config),
            generator=GroqGenerator.from_config(config),
            config=config,
        )

    def refusal(self) -> AnswerResult:
        message = self.config.refusal_message
        return AnswerResult(
            answer=message,
            raw_answer=message,
            context_used="",
            used_generator=False,
            refused=True,
        )

    def _embed(self, question: str):
        try:
            return self.embedder.embed_query(question)
        except EmbeddingError:
            raise
        except Exception as exc:
            raise EmbeddingError(f"Query embedding failed: {exc}") from exc

    def answer(
        self,
        question: str,
        recent_history: Sequence[HistoryMessage] = (),
    ) -> AnswerResult:
        """
        Answer a question strictly from the corpus.

        Args:
            question: Non-empty question (validated by the caller).
            recent_history: Recent conversation; folded into the prompt only.

        Returns:
            AnswerResult. Refusals and extractive answers are normal results.

        Raises:
            EmbeddingError: If the query cannot be embedded.
        """
        t0 = time.time()
        query = Query.build(question, self._embed(question), extract_reference(question))

        ranked = self.ranker.rank(query)
        decision = self.gate.decide(ranked, query.tokens)
        top = decision.top

        logger.info(
            "RAG top: "
            f"question={question[:80]!r} threshold={decision.threshold} "
            f"top_score={round(top.score, 4) if top else 0} "
            f"semantic={round(top.semantic, 4) if top else 0} "
            f"lexical={round(top.lexical, 4) if top else 0}"
        )

        if not decision.answerable:
            return self.refusal()

        selected = ranked[:self.config.retrieval.top_k]
        context = self.extractor.build_context(question, selected)

        grounded = self.answerer.answer(
            question,
            context,
            top_chunk_text=top.chunk.text,
            history=recent_history,
        )

        logger.info(
            f"Answered in {(time.time() - t0) * 1000:.0f}ms "
            f"(used_generator={grounded.used_generator})"
        )
        return AnswerResult(
            answer=grounded.raw_answer,
            raw_answer=grounded.raw_answer,
            context_used=context,
            used_generator=grounded.used_generator,
        )
