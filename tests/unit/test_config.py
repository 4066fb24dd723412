"""Tests for configuration loading: defaults, env overrides, YAML, hashing."""

from __future__ import annotations

from pathlib import Path

import pytest

from groundrag.config import (
    DEFAULT_REFUSAL_MESSAGE,
    EmbeddingBackend,
    GroundRAGConfig,
    get_config,
)


@pytest.mark.unit
class TestDefaults:

    def test_retrieval_defaults(self, config):
        rc = config.retrieval
        assert (rc.semantic_weight, rc.lexical_weight) == (0.80, 0.20)
        assert rc.legal_ref_boost == 0.25
        assert rc.top_k == 3
        assert (rc.threshold, rc.short_query_threshold, rc.short_query_max_tokens) == (0.45, 0.48, 4)

    def test_generation_defaults(self, config):
        gc = config.generation
        assert gc.temperature == 0.0
        assert (gc.first_pass_max_tokens, gc.retry_max_tokens) == (600, 400)
        assert gc.max_answer_chars == 2200
        assert gc.history_window == 6

    def test_snippet_defaults(self, config):
        assert config.snippet.max_lines == 6
        assert config.snippet.definition_max_lines == 8
        assert config.snippet.context_separator == "\n\n---\n\n"

    def test_messages(self, config):
        assert config.refusal_message == DEFAULT_REFUSAL_MESSAGE
        assert config.embedding.backend == EmbeddingBackend.LOCAL


@pytest.mark.unit
class TestOverrides:

    def test_env_nested_override(self, monkeypatch):
        monkeypatch.setenv("GROUNDRAG_RETRIEVAL__THRESHOLD", "0.5")
        monkeypatch.setenv("GROUNDRAG_CORPUS_PATH", "/srv/corpus.json")
        config = GroundRAGConfig()
        assert config.retrieval.threshold == 0.5
        assert config.corpus_path == Path("/srv/corpus.json")

    def test_yaml_override(self, tmp_path):
        path = tmp_path / "strict.yaml"
        path.write_text(
            "retrieval:\n"
            "  threshold: 0.6\n"
            "generation:\n"
            "  retry_on_unverified: false\n"
            "log_format: json\n",
            encoding="utf-8",
        )
        config = get_config(str(path))
        assert config.retrieval.threshold == 0.6
        assert config.retrieval.top_k == 3
        assert config.generation.retry_on_unverified is False
        assert config.log_format == "json"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert get_config(str(path)).retrieval.threshold == 0.45


@pytest.mark.unit
class TestConfigHash:

    def test_deterministic(self):
        assert GroundRAGConfig().config_hash() == GroundRAGConfig().config_hash()

    def test_changes_with_settings(self):
        changed = GroundRAGConfig(retrieval={"threshold": 0.3})
        assert changed.config_hash() != GroundRAGConfig().config_hash()

    def test_credentials_excluded(self):
        a = GroundRAGConfig(groq_api_key="gsk_a")
        b = GroundRAGConfig(groq_api_key="gsk_b")
        assert a.config_hash() == b.config_hash()
