"""
GroundRAG error taxonomy.

Only ``LoadError`` and ``EmbeddingError`` may terminate a request
abnormally. ``GenerationError`` is always recovered inside the core by
the extractive fallback. A refusal is not an error at all: it is a
normal ``AnswerResult`` carrying the refusal text.
"""

from __future__ import annotations


class GroundRAGError(Exception):
    """Base class for all GroundRAG errors."""


class LoadError(GroundRAGError):
    """The persisted corpus is malformed. The service must not start."""


class EmbeddingError(GroundRAGError):
    """The query could not be embedded. Retrieval is impossible."""


class GenerationError(GroundRAGError):
    """The generator failed, timed out, or was rate limited."""
