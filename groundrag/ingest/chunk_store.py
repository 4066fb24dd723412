"""
Chunk Store
============

In-memory collection of corpus chunks with precomputed embedding norms.

The persisted corpus is a JSON mapping:

    {
      "bab1.txt_chunk_0": {"text": "...", "embedding": [0.01, -0.2, ...]},
      ...
    }

Loading coerces every embedding value to float, computes its L2 norm
once (floored at 1.0 so a zero vector never divides by zero), and
lowercases the text once. Insertion order of the mapping is preserved;
the ranker relies on it to break score ties.

Data Flow:
    embeddings.json → load_chunks() → ChunkStore → HybridRanker
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np

from groundrag.exceptions import LoadError
from groundrag.retrieve.scorer import vector_norm
from groundrag.schemas.chunk import Chunk

logger = logging.getLogger("groundrag.ingest.chunk_store")


def _coerce_embedding(key: str, raw: Any) -> np.ndarray:
    """Convert a stored embedding into a read-only float64 vector."""
    if raw is None:
        raw = []
    if isinstance(raw, (str, bytes)) or not hasattr(raw, "__iter__"):
        raise LoadError(f"Embedding of chunk {key!r} is not a sequence")
    try:
        vector = np.asarray([float(v) for v in raw], dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise LoadError(f"Embedding of chunk {key!r} has a non-numeric value") from exc
    if not np.all(np.isfinite(vector)):
        raise LoadError(f"Embedding of chunk {key!r} contains NaN or infinite values")
    vector.flags.writeable = False
    return vector


def load_chunks(mapping: Any) -> list[Chunk]:
    """
    Build chunks from a persisted ``key → {text, embedding}`` mapping.

    Entries with missing or empty text are skipped.

    Args:
        mapping: Decoded corpus.

    Returns:
        Chunks in the mapping's insertion order.

    Raises:
        LoadError: If the corpus or one of its entries is malformed.
    """
    if not isinstance(mapping, Mapping):
        raise LoadError(
            f"Corpus must be a mapping of key -> {{text, embedding}}, got {type(mapping).__name__}"
        )

    chunks: list[Chunk] = []
    skipped = 0
    for key, entry in mapping.items():
        if not isinstance(entry, Mapping):
            raise LoadError(f"Corpus entry {key!r} is not a mapping")

        text = entry.get("text") or ""
        if not isinstance(text, str):
            raise LoadError(f"Text of chunk {key!r} is not a string")
        if not text:
            skipped += 1
            continue

        embedding = _coerce_embedding(str(key), entry.get("embedding"))
        chunks.append(Chunk(
            key=str(key),
            text=text,
            text_lower=text.lower(),
            embedding=embedding,
            norm=vector_norm(embedding),
        ))

    if skipped:
        logger.warning(f"Skipped {skipped} corpus entries with empty text")
    return chunks


class ChunkStore:
    """
    Immutable, ordered collection of chunks shared by all requests.

    Usage:
        store = ChunkStore.from_file("data/embeddings.json")
        for chunk in store.chunks:
            ...
    """

    def __init__(self, chunks: list[Chunk] | None = None):
        self._chunks: tuple[Chunk, ...] = tuple(chunks or ())

    @classmethod
    def from_mapping(cls, mapping: Any) -> "ChunkStore":
        """Build a store from an already-decoded corpus mapping."""
        return cls(load_chunks(mapping))

    @classmethod
    def from_file(cls, path: str | Path) -> "ChunkStore":
        """
        Load the persisted corpus from a JSON file.

        Raises:
            LoadError: If the file is missing, is not valid JSON, or is malformed.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise LoadError(f"Corpus file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise LoadError(f"Corpus file {path} is not valid JSON: {exc}") from exc

        store = cls.from_mapping(data)
        logger.info(f"Loaded {store.size} chunks from {path}")
        return store

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        return self._chunks

    @property
    def size(self) -> int:
        """Number of chunks in the store."""
        return len(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self):
        return iter(self._chunks)
