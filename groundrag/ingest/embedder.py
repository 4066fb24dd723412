"""
Query Embedder
===============

Dense embedding generation for questions and corpus chunks.

Two Backends:
    - LOCAL:  sentence-transformers (all-MiniLM-L6-v2 by default),
              mean-pooled and L2-normalized
    - OPENAI: OpenAI embeddings API (text-embedding-3-small)

The query must be embedded with the same model that produced the
corpus embeddings. Dimensionality is otherwise opaque to the engine:
the scorer tolerates length mismatches by using the common prefix.

Any backend failure is raised as ``EmbeddingError``. Without a query
vector retrieval is impossible, so the request fails.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from groundrag.config import EmbeddingBackend
from groundrag.exceptions import EmbeddingError

logger = logging.getLogger("groundrag.ingest.embedder")


class QueryEmbedder:
    """
    Generates dense vector embeddings for questions and chunks.

    Usage:
        # Local model
        embedder = QueryEmbedder(backend="local")
        vector = embedder.embed_query("apa isi pasal 28 ayat 1")

        # OpenAI API
        embedder = QueryEmbedder(backend="openai", model_name="text-embedding-3-small",
                                 api_key="sk-...")

    Args:
        backend: "local" (sentence-transformers) or "openai".
        model_name: HuggingFace model ID or OpenAI embedding model name.
        api_key: OpenAI API key (openai backend only).
        batch_size: Batch size for encoding.
        device: PyTorch device ("cuda", "cpu", "auto").
    """

    def __init__(
        self,
        backend: EmbeddingBackend | str = EmbeddingBackend.LOCAL,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        api_key: Optional[str] = None,
        batch_size: int = 32,
        device: str = "auto",
    ):
        self.backend = EmbeddingBackend(backend)
        self.model_name = model_name
        self.api_key = api_key
        self.batch_size = batch_size
        self.device = device
        self._model = None
        self._client = None

    @classmethod
    def from_config(cls, config) -> "QueryEmbedder":
        """Create an embedder from a GroundRAGConfig."""
        ec = config.embedding
        return cls(
            backend=ec.backend,
            model_name=ec.model_name,
            api_key=config.openai_api_key,
            batch_size=ec.batch_size,
            device=ec.device,
        )

    def _load_model(self) -> None:
        """Lazy-load the sentence-transformers model (LOCAL backend only)."""
        if self._model is not None:
            return
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as exc:
            raise EmbeddingError(
                "sentence-transformers required for the local backend. "
                "Install with: pip install groundrag[local]"
            ) from exc

        device = self.device
        if device == "auto":
            import torch
            device = "cuda" if torch.cuda.is_available() else "cpu"

        logger.info(f"Loading embedding model: {self.model_name} on {device}")
        self._model = SentenceTransformer(self.model_name, device=device)
        logger.info(
            f"Embedding model loaded. Dimension: {self._model.get_sentence_embedding_dimension()}"
        )

    def _get_client(self):
        """Lazy-initialize the OpenAI client (OPENAI backend only)."""
        if self._client is None:
            if not self.api_key:
                raise EmbeddingError("OpenAI API key required for the openai embedding backend")
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def embed(self, texts: list[str]) -> np.ndarray:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed.

        Returns:
            numpy array of shape (len(texts), dimension), L2-normalized.

        Raises:
            EmbeddingError: If the backend is unavailable or the call fails.
        """
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)

        try:
            if self.backend == EmbeddingBackend.OPENAI:
                return self._embed_openai(texts)
            return self._embed_local(texts)
        except EmbeddingError:
            raise
        except Exception as exc:
            raise EmbeddingError(f"Embedding failed ({self.backend.value}): {exc}") from exc

    def _embed_openai(self, texts: list[str]) -> np.ndarray:
        client = self._get_client()
        all_embeddings = []

        for i in range(0, len(texts), self.batch_size):
            batch = texts[i:i + self.batch_size]
            logger.debug(f"Embedding batch {i // self.batch_size + 1}")
            response = client.embeddings.create(model=self.model_name, input=batch)
            all_embeddings.extend(item.embedding for item in response.data)

        embeddings = np.array(all_embeddings, dtype=np.float32)
        norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
        norms = np.maximum(norms, 1e-12)
        return embeddings / norms

    def _embed_local(self, texts: list[str]) -> np.ndarray:
        self._load_model()
        embeddings = self._model.encode(
            texts,
            batch_size=self.batch_size,
            show_progress_bar=len(texts) > 100,
            normalize_embeddings=True,
        )
        return np.asarray(embeddings, dtype=np.float32)

    def embed_query(self, query: str) -> np.ndarray:
        """
        Embed a single question.

        Returns:
            1-D numpy array (the embedding vector).

        Raises:
            EmbeddingError: If the backend is unavailable or the call fails.
        """
        return self.embed([query])[0]
