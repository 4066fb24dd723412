"""
Groq Generator: Answer Generation via the Groq Inference API
===========================================================

Runs open-source LLMs (Llama 3.3 70B by default) through Groq's
OpenAI-compatible endpoint with the ``openai`` client.

Every provider failure (rate limiting, timeouts, auth, transport) is
raised as ``GenerationError``. The grounding protocol catches it and
falls back to extraction, so a generator outage never fails a request.

Usage
-----
    export GROUNDRAG_GROQ_API_KEY="gsk_..."
    from groundrag.generate.groq_generator import GroqGenerator
    generator = GroqGenerator()
    text = generator.generate("system", "user prompt", max_tokens=600)

Free tier: https://console.groq.com/docs/rate-limits
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod

from groundrag.exceptions import GenerationError

logger = logging.getLogger("groundrag.generate.groq_generator")


# ── Available Groq models ───────────────────────────────────────
GROQ_MODELS = {
    "llama-3.3-70b": "llama-3.3-70b-versatile",
    "llama-3.1-8b": "llama-3.1-8b-instant",
}


class BaseGenerator(ABC):
    """
    Interface of the black-box generator: prompt in, text out.

    Implementations must raise ``GenerationError`` on any failure.
    """

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 600,
    ) -> str:
        ...


class GroqGenerator(BaseGenerator):
    """
    Chat-completion generator backed by Groq.

    Args:
        api_key: Groq API key. Falls back to GROQ_API_KEY env var.
        model: Model identifier. Use short name or full model ID.
        base_url: OpenAI-compatible endpoint.
        requests_per_minute: Client-side rate limit (0 disables).
        timeout_s: Per-call timeout.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "llama-3.3-70b",
        base_url: str = "https://api.groq.com/openai/v1",
        requests_per_minute: int = 0,
        timeout_s: float = 60.0,
    ):
        self.api_key = api_key or os.environ.get("GROQ_API_KEY", "")
        self.model = GROQ_MODELS.get(model, model)
        self.base_url = base_url
        self.rpm = requests_per_minute
        self.timeout_s = timeout_s
        self._client = None
        self._last_call_time = 0.0

    @classmethod
    def from_config(cls, config) -> "GroqGenerator":
        gc = config.generation
        return cls(
            api_key=config.groq_api_key or "",
            model=gc.model,
            base_url=gc.base_url,
            requests_per_minute=gc.requests_per_minute,
            timeout_s=gc.timeout_s,
        )

    # ── Client ─────────────────────────────────────────────────

    def _get_client(self):
        """Lazy-initialize OpenAI-compatible client for Groq."""
        if self._client is None:
            if not self.api_key:
                raise GenerationError(
                    "Groq API key required. Set GROUNDRAG_GROQ_API_KEY or GROQ_API_KEY. "
                    "Get free key at: https://console.groq.com/"
                )
            from openai import OpenAI
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_s,
                max_retries=0,
            )
        return self._client

    # ── Rate limiting ──────────────────────────────────────────

    def _rate_limit(self) -> None:
        """Simple interval-based rate limiter."""
        if self.rpm <= 0:
            return
        min_interval = 60.0 / self.rpm
        elapsed = time.time() - self._last_call_time
        if elapsed < min_interval:
            time.sleep(min_interval - elapsed)
        self._last_call_time = time.time()

    # ── Public interface ───────────────────────────────────────

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 600,
    ) -> str:
        client = self._get_client()
        self._rate_limit()

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
            if not response.choices:
                return ""
            content = response.choices[0].message.content
        except Exception as exc:
            raise GenerationError(f"Groq API call failed: {exc}") from exc

        return (content or "").strip()
