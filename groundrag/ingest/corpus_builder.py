"""
Corpus Builder
===============

Turns a directory of plain-text chunks into the persisted corpus the
chunk store loads at startup.

Two layouts are supported:
    - one chunk per file (key = file name), the default
    - fixed-size character windows (key = "{file}_chunk_{i}") when
      ``chunk_chars`` is set

Empty files are skipped.

Data Flow:
    docs/*.txt, docs/*.md → Corpus Builder → Embedder → embeddings.json
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from groundrag.ingest.embedder import QueryEmbedder
from groundrag.utils import save_json

logger = logging.getLogger("groundrag.ingest.corpus_builder")

SUPPORTED_SUFFIXES = (".txt", ".md")


def split_fixed(text: str, chunk_chars: int) -> list[str]:
    """Split text into consecutive windows of at most ``chunk_chars`` characters."""
    if chunk_chars <= 0:
        raise ValueError("chunk_chars must be positive")
    return [text[i:i + chunk_chars] for i in range(0, len(text), chunk_chars)]


def collect_chunks(docs_dir: str | Path, chunk_chars: Optional[int] = None) -> dict[str, str]:
    """
    Read chunk texts from a directory.

    Args:
        docs_dir: Directory containing .txt / .md files.
        chunk_chars: Optional window size for fixed-size chunking.

    Returns:
        Ordered mapping of chunk key → text.
    """
    docs_dir = Path(docs_dir)
    if not docs_dir.is_dir():
        raise FileNotFoundError(f"Documents directory not found: {docs_dir}")

    files = sorted(p for p in docs_dir.iterdir() if p.suffix in SUPPORTED_SUFFIXES)
    chunks: dict[str, str] = {}
    for path in files:
        if chunk_chars:
            raw = path.read_text(encoding="utf-8")
            for i, piece in enumerate(split_fixed(raw, chunk_chars)):
                if piece.strip():
                    chunks[f"{path.name}_chunk_{i}"] = piece
        else:
            text = path.read_text(encoding="utf-8").strip()
            if not text:
                logger.warning(f"{path.name} is empty, skipped")
                continue
            chunks[path.name] = text

    logger.info(f"Collected {len(chunks)} chunks from {len(files)} files in {docs_dir}")
    return chunks


def build_corpus(
    docs_dir: str | Path,
    output_path: str | Path,
    embedder: QueryEmbedder,
    chunk_chars: Optional[int] = None,
) -> int:
    """
    Embed every chunk of ``docs_dir`` and write the corpus JSON.

    Returns:
        Number of chunks written.
    """
    chunks = collect_chunks(docs_dir, chunk_chars=chunk_chars)
    if not chunks:
        raise ValueError(f"No non-empty .txt/.md files in {docs_dir}")

    keys = list(chunks)
    vectors = embedder.embed([chunks[k] for k in keys])

    corpus = {
        key: {"text": chunks[key], "embedding": [float(v) for v in vector]}
        for key, vector in zip(keys, vectors)
    }
    save_json(corpus, output_path)
    logger.info(f"Wrote {len(corpus)} chunks to {output_path}")
    return len(corpus)
