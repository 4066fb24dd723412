"""
Groq Generator Tests
=====================

The provider client is mocked; these tests only pin down how provider
failures surface and how the request is shaped.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from groundrag.config import GroundRAGConfig
from groundrag.exceptions import GenerationError
from groundrag.generate.groq_generator import GroqGenerator


def _response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _generator_with_client(client) -> GroqGenerator:
    gen = GroqGenerator(api_key="gsk_test")
    gen._client = client
    return gen


@pytest.mark.unit
class TestGroqGenerator:

    def test_model_alias_resolved(self):
        assert GroqGenerator(api_key="k", model="llama-3.1-8b").model == "llama-3.1-8b-instant"
        assert GroqGenerator(api_key="k", model="custom-model").model == "custom-model"

    def test_missing_key_raises_generation_error(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with pytest.raises(GenerationError):
            GroqGenerator(api_key="").generate("sys", "user")

    def test_request_shape(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _response("  jawaban  ")
        gen = _generator_with_client(client)

        assert gen.generate("sistem", "pengguna", temperature=0.0, max_tokens=400) == "jawaban"

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 400
        assert kwargs["messages"] == [
            {"role": "system", "content": "sistem"},
            {"role": "user", "content": "pengguna"},
        ]

    def test_provider_failure_wrapped(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = TimeoutError("read timeout")
        gen = _generator_with_client(client)

        with pytest.raises(GenerationError, match="read timeout"):
            gen.generate("sys", "user")

    def test_empty_content(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _response(None)
        assert _generator_with_client(client).generate("sys", "user") == ""

    def test_no_choices(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        assert _generator_with_client(client).generate("sys", "user") == ""

    def test_malformed_response_wrapped(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace()])
        with pytest.raises(GenerationError):
            _generator_with_client(client).generate("sys", "user")

    def test_from_config(self):
        config = GroundRAGConfig(groq_api_key="gsk_cfg")
        config.generation.model = "llama-3.1-8b"
        config.generation.requests_per_minute = 30
        gen = GroqGenerator.from_config(config)
        assert gen.api_key == "gsk_cfg"
        assert gen.model == "llama-3.1-8b-instant"
        assert gen.rpm == 30
