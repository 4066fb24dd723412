"""
Grounding Verifier
===================

Fail-closed verbatim check for generated answers:

    ACCEPT ⟺ norm(answer) ≠ "" ∧ norm(answer) ⊆ norm(context)

where norm collapses whitespace runs to one space and trims. Matching
is a case-sensitive substring test: a verbatim quotation must keep its
capitalization. There is no fuzzy matching.

Two-pass protocol (``GroundedAnswerer``):
    1. Strict "quote verbatim or say TIDAK DITEMUKAN" prompt; the
       candidate is truncated to ``max_answer_chars`` before checking
    2. The sentinel counts as unverified
    3. On rejection, a stricter retry prompt with a smaller budget
    4. Both rejected → extractive snippet of the top chunk
    5. Any generator failure → extractive snippet immediately, no retry

The returned answer is therefore always either a verified substring of
the context or an excerpt of a retrieved chunk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from groundrag.exceptions import GenerationError
from groundrag.generate import prompts
from groundrag.generate.groq_generator import BaseGenerator
from groundrag.retrieve.snippet import SnippetExtractor
from groundrag.schemas.answer import HistoryMessage
from groundrag.utils import normalize_whitespace

logger = logging.getLogger("groundrag.verify.grounding")


def normalize_for_check(text: str) -> str:
    """Drop carriage returns, collapse whitespace, trim."""
    return normalize_whitespace(str(text or "").replace("\r", ""))


def is_grounded(answer: str, context: str) -> bool:
    """True iff the normalized answer is a non-empty substring of the normalized context."""
    a = normalize_for_check(answer)
    if not a:
        return False
    return a in normalize_for_check(context)


def clamp_answer(answer: str, max_chars: int = 2200) -> str:
    """Strip, then truncate to ``max_chars`` and strip again."""
    a = (answer or "").strip()
    if len(a) <= max_chars:
        return a
    return a[:max_chars].strip()


@dataclass(frozen=True)
class GroundedAnswer:
    raw_answer: str
    used_generator: bool


class GroundedAnswerer:
    """
    Runs the generate → verify → retry → fallback protocol.

    Args:
        generator: Black-box generator.
        extractor: Snippet extractor used for the fallback answer.
        temperature: Sampling temperature for both passes.
        first_pass_max_tokens: Token budget of the first pass.
        retry_max_tokens: Token budget of the retry pass.
        max_answer_chars: Candidates are truncated to this length.
        history_window: Recent messages folded into the first prompt.
        retry_on_unverified: Issue the retry pass before falling back.
    """

    def __init__(
        self,
        generator: BaseGenerator,
        extractor: SnippetExtractor,
        temperature: float = 0.0,
        first_pass_max_tokens: int = 600,
        retry_max_tokens: int = 400,
        max_answer_chars: int = 2200,
        history_window: int = 6,
        retry_on_unverified: bool = True,
    ):
        self.generator = generator
        self.extractor = extractor
        self.temperature = temperature
        self.first_pass_max_tokens = first_pass_max_tokens
        self.retry_max_tokens = retry_max_tokens
        self.max_answer_chars = max_answer_chars
        self.history_window = history_window
        self.retry_on_unverified = retry_on_unverified

    @classmethod
    def from_config(cls, generator: BaseGenerator, extractor: SnippetExtractor, config) -> "GroundedAnswerer":
        gc = config.generation
        return cls(
            generator,
            extractor,
            temperature=gc.temperature,
            first_pass_max_tokens=gc.first_pass_max_tokens,
            retry_max_tokens=gc.retry_max_tokens,
            max_answer_chars=gc.max_answer_chars,
            history_window=gc.history_window,
            retry_on_unverified=gc.retry_on_unverified,
        )

    def _candidate(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        text = self.generator.generate(
            system_prompt,
            user_prompt,
            temperature=self.temperature,
            max_tokens=max_tokens,
        )
        return clamp_answer(text or prompts.NOT_FOUND, self.max_answer_chars)

    def _verified(self, candidate: str, context: str) -> bool:
        if candidate == prompts.NOT_FOUND:
            return False
        return is_grounded(candidate, context)

    def fallback(self, question: str, top_chunk_text: str) -> GroundedAnswer:
        """Extractive answer from the top-ranked chunk."""
        return GroundedAnswer(
            raw_answer=self.extractor.extract(question, top_chunk_text),
            used_generator=False,
        )

    def answer(
        self,
        question: str,
        context: str,
        top_chunk_text: str,
        history: Sequence[HistoryMessage] = (),
    ) -> GroundedAnswer:
        """
        Produce a grounded answer for an approved question.

        Args:
            question: User question.
            context: Assembled snippet context (the grounding text).
            top_chunk_text: Raw text of the top-ranked chunk, for the fallback.
            history: Recent conversation, advisory only.
        """
        history_text = prompts.format_history(history, self.history_window)
        try:
            first = self._candidate(
                prompts.FIRST_PASS_SYSTEM,
                prompts.first_pass_prompt(question, context, history_text),
                self.first_pass_max_tokens,
            )
            if self._verified(first, context):
                logger.debug("First-pass answer verified")
                return GroundedAnswer(raw_answer=first, used_generator=True)

            if self.retry_on_unverified:
                logger.debug("First-pass answer rejected, retrying with stricter prompt")
                second = self._candidate(
                    prompts.RETRY_SYSTEM,
                    prompts.retry_prompt(question, context),
                    self.retry_max_tokens,
                )
                if self._verified(second, context):
                    logger.debug("Retry answer verified")
                    return GroundedAnswer(raw_answer=second, used_generator=True)
        except GenerationError as exc:
            logger.error(f"Generator failed, using extractive fallback: {exc}")
            return self.fallback(question, top_chunk_text)
        except Exception as exc:
            logger.error(f"Unexpected generator error, using extractive fallback: {exc!r}")
            return self.fallback(question, top_chunk_text)

        logger.info("Generated answers not grounded in context, using extractive fallback")
        return self.fallback(question, top_chunk_text)
