"""
GroundRAG Test Configuration
=============================

Shared fixtures, fakes, and factories for the entire test suite.
No test touches the network: the embedder and generator are replaced
by deterministic fakes.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pytest

from groundrag.config import GroundRAGConfig
from groundrag.generate import prompts
from groundrag.generate.groq_generator import BaseGenerator
from groundrag.ingest.chunk_store import ChunkStore, load_chunks
from groundrag.pipeline import GroundRAGPipeline
from groundrag.schemas.chunk import Chunk


# ── Markers ─────────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "integration: multi-component tests")


# ── Fakes ───────────────────────────────────────────────────────

class FakeEmbedder:
    """Returns a fixed vector per known text, a default vector otherwise."""

    def __init__(self, vectors: dict[str, Sequence[float]] | None = None,
                 default: Sequence[float] = (0.0, 0.0, 1.0)):
        self.vectors = dict(vectors or {})
        self.default = list(default)
        self.calls: list[str] = []

    def embed_query(self, text: str) -> np.ndarray:
        self.calls.append(text)
        return np.asarray(self.vectors.get(text, self.default), dtype=np.float64)

    def embed(self, texts: list[str]) -> np.ndarray:
        return np.asarray([self.embed_query(t) for t in texts], dtype=np.float32)


class FailingEmbedder:
    def __init__(self, exc: Exception):
        self.exc = exc

    def embed_query(self, text: str) -> np.ndarray:
        raise self.exc


class FakeGenerator(BaseGenerator):
    """
    Scripted generator.

    Each call pops the next reply; exceptions in the script are raised.
    An exhausted script answers with the NOT_FOUND sentinel.
    """

    def __init__(self, replies: Sequence[Any] = ()):
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def generate(self, system_prompt, user_prompt, temperature=0.0, max_tokens=600) -> str:
        self.calls.append({
            "system": system_prompt,
            "user": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if not self.replies:
            return prompts.NOT_FOUND
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


# ── Factories ───────────────────────────────────────────────────

def make_chunk(
    text: str = "Default chunk text.",
    embedding: Sequence[float] = (1.0, 0.0, 0.0),
    key: str = "chunk_0",
) -> Chunk:
    """Factory for a single chunk built through the real loader."""
    return load_chunks({key: {"text": text, "embedding": list(embedding)}})[0]


def make_store(entries: Sequence[tuple[str, str, Sequence[float]]]) -> ChunkStore:
    """Factory for a store from (key, text, embedding) triples, order preserved."""
    return ChunkStore.from_mapping({
        key: {"text": text, "embedding": list(embedding)}
        for key, text, embedding in entries
    })


def make_pipeline(store: ChunkStore, embedder, generator, config: GroundRAGConfig | None = None):
    return GroundRAGPipeline(
        chunk_store=store,
        embedder=embedder,
        generator=generator,
        config=config or GroundRAGConfig(),
    )


# ── Fixtures ────────────────────────────────────────────────────

PASAL_28_TEXT = (
    "Pasal 28 ayat (1) menyatakan setiap orang berhak atas pengakuan, jaminan, "
    "perlindungan, dan kepastian hukum yang adil.\n"
    "Ketentuan ini berlaku bagi seluruh warga negara."
)

PASAL_29_TEXT = (
    "Pasal 29 ayat (2) menjamin kemerdekaan tiap-tiap penduduk untuk memeluk agamanya.\n"
    "Negara menjamin kebebasan beribadat."
)

SOVEREIGNTY_TEXT = (
    "Kedaulatan berada di tangan rakyat dan dilaksanakan menurut Undang-Undang Dasar.\n"
    "Indonesia adalah negara hukum."
)


@pytest.fixture
def config() -> GroundRAGConfig:
    """Default config."""
    return GroundRAGConfig()


@pytest.fixture
def legal_store() -> ChunkStore:
    """Small statute corpus with orthogonal embeddings."""
    return make_store([
        ("pasal28.txt", PASAL_28_TEXT, (1.0, 0.0, 0.0)),
        ("pasal29.txt", PASAL_29_TEXT, (0.0, 1.0, 0.0)),
        ("kedaulatan.txt", SOVEREIGNTY_TEXT, (0.0, 0.0, 1.0)),
    ])


@pytest.fixture
def empty_store() -> ChunkStore:
    return ChunkStore.from_mapping({})
