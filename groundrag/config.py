"""
GroundRAG Configuration System
===============================

Central configuration using Pydantic Settings. Supports:
- Environment variables (GROUNDRAG_ prefix, ``__`` for nested fields)
- .env file loading
- YAML config file overrides

The config produces a deterministic hash that is stamped on the
startup log line, so two runs can be compared for reproducibility.

Usage:
    from groundrag.config import get_config
    cfg = get_config()                        # loads from env / .env
    cfg = get_config("configs/strict.yaml")   # loads with YAML overrides
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_REFUSAL_MESSAGE = (
    "Maaf, pertanyaan tersebut tidak ditemukan atau tidak cukup relevan "
    "dalam materi PPKN yang tersedia."
)

DEFAULT_WELCOME_MESSAGE = (
    "Halo 👋\n\nAku adalah **PancaAI**, asisten AI untuk mata kuliah **PPKN**. "
    "Silakan ajukan pertanyaan pertamamu 😊"
)


# ── Embedding Backend ──────────────────────────────────────────────
class EmbeddingBackend(str, Enum):
    """
    Controls which backend embeds the query.

    - LOCAL:  sentence-transformers model on the local machine. Must be
              the same model that produced the corpus embeddings.
    - OPENAI: OpenAI embeddings API.
    """
    LOCAL = "local"
    OPENAI = "openai"


# ── Sub-configs ────────────────────────────────────────────────────
class RetrievalConfig(BaseModel):
    """Configuration for hybrid scoring and the relevance gate."""
    semantic_weight: float = Field(default=0.80, description="Weight of cosine similarity")
    lexical_weight: float = Field(default=0.20, description="Weight of lexical overlap")
    legal_ref_boost: float = Field(default=0.25, description="Flat boost for chunks matching a pasal/ayat reference")
    top_k: int = Field(default=3, ge=1, description="Chunks used to build the context")
    threshold: float = Field(default=0.45, description="Minimum top score for longer queries")
    short_query_threshold: float = Field(default=0.48, description="Minimum top score for short queries")
    short_query_max_tokens: int = Field(default=4, description="Queries with this many tokens or fewer are short")


class SnippetConfig(BaseModel):
    """Configuration for snippet extraction and context assembly."""
    max_lines: int = Field(default=6, ge=1, description="Window size in general mode")
    definition_max_lines: int = Field(default=8, ge=1, description="Window size for definition questions")
    context_separator: str = Field(default="\n\n---\n\n", description="Separator between context snippets")


class GenerationConfig(BaseModel):
    """Configuration for the generator and the two-pass grounding protocol."""
    model: str = Field(default="llama-3.3-70b-versatile", description="Groq model ID")
    base_url: str = Field(default="https://api.groq.com/openai/v1", description="OpenAI-compatible endpoint")
    temperature: float = Field(default=0.0, description="Sampling temperature for both passes")
    first_pass_max_tokens: int = Field(default=600, description="Token budget of the first pass")
    retry_max_tokens: int = Field(default=400, description="Token budget of the stricter retry")
    max_answer_chars: int = Field(default=2200, description="Candidates are truncated to this length before verification")
    history_window: int = Field(default=6, ge=0, description="Recent messages folded into the first prompt")
    requests_per_minute: int = Field(default=0, ge=0, description="Client-side rate limit (0 disables)")
    timeout_s: float = Field(default=60.0, description="Per-call timeout in seconds")
    retry_on_unverified: bool = Field(default=True, description="Issue the stricter retry before falling back to extraction")


class EmbeddingConfig(BaseModel):
    """Configuration for the query embedder."""
    backend: EmbeddingBackend = Field(default=EmbeddingBackend.LOCAL)
    model_name: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="sentence-transformers model ID or OpenAI embedding model",
    )
    device: str = Field(default="auto", description="Torch device for the local backend")
    batch_size: int = Field(default=32, description="Batch size when embedding a corpus")


# ── Main Config ────────────────────────────────────────────────────
class GroundRAGConfig(BaseSettings):
    """
    Root configuration for GroundRAG.

    Loads from environment variables (GROUNDRAG_ prefix) and .env file.
    Can be extended with YAML overrides via `get_config(yaml_path)`.

    Example:
        export GROUNDRAG_CORPUS_PATH=data/embeddings.json
        export GROUNDRAG_RETRIEVAL__THRESHOLD=0.5
    """
    model_config = SettingsConfigDict(
        env_prefix="GROUNDRAG_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Top-level settings ─────────────────────────────────────────
    corpus_path: Path = Field(default=Path("./data/embeddings.json"), description="Persisted chunk corpus")
    sessions_path: Path = Field(default=Path("./data/sessions.json"), description="Chat session file")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")
    refusal_message: str = Field(default=DEFAULT_REFUSAL_MESSAGE)
    welcome_message: str = Field(default=DEFAULT_WELCOME_MESSAGE)

    # ── Provider credentials ───────────────────────────────────────
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key (openai embedding backend)")

    # ── Sub-configs ────────────────────────────────────────────────
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    snippet: SnippetConfig = Field(default_factory=SnippetConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)

    def config_hash(self) -> str:
        """
        Produce a deterministic SHA-256 hash of the configuration.

        Credentials are excluded so the hash can be logged safely.
        """
        config_dict = self.model_dump(mode="json", exclude={"groq_api_key", "openai_api_key"})
        canonical = json.dumps(config_dict, sort_keys=True, default=str)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


# ── Config Loading ─────────────────────────────────────────────────
def get_config(yaml_path: Optional[str] = None) -> GroundRAGConfig:
    """
    Load GroundRAG configuration.

    Args:
        yaml_path: Optional path to a YAML config file for overrides.

    Returns:
        Fully resolved GroundRAGConfig instance.
    """
    if yaml_path:
        import yaml
        with open(yaml_path, encoding="utf-8") as f:
            overrides = yaml.safe_load(f) or {}
        return GroundRAGConfig(**overrides)
    return GroundRAGConfig()
