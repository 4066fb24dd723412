"""
Answer Schema
==============

The only data the retrieval core hands back to its caller. The core
never writes session state; the caller persists what it needs from
an AnswerResult.

Field aliases match the JSON contract of the HTTP service
(``rawAnswer``, ``contextUsed``, ``usedGenerator``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HistoryMessage(BaseModel):
    """One entry of the recent conversation folded into the prompt."""
    sender: Literal["user", "ai"]
    text: str


class AnswerResult(BaseModel):
    """
    Result of one question.

    Guarantee: ``raw_answer`` is either the refusal message or a string
    whose whitespace-normalized form is contained in a retrieved chunk.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    answer: str = Field(description="Answer shown to the user")
    raw_answer: str = Field(alias="rawAnswer", description="Verbatim answer before display cleanup")
    context_used: str = Field(default="", alias="contextUsed", description="Grounding context; empty on refusal")
    used_generator: bool = Field(default=False, alias="usedGenerator", description="True when a verified generated answer was returned")
    refused: bool = Field(default=False, description="True when the relevance gate refused the question")
