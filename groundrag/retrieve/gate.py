"""
Relevance Gate
===============

Decides, per request, whether the system may answer at all.

    ANSWERABLE ⟺ a top chunk exists ∧ top.score is finite ∧ top.score ≥ threshold(query)

Short queries (≤ 4 tokens by default) are lexically ambiguous and
prone to spuriously high cosine similarity, so they face the stricter
threshold. REFUSED is terminal for the request: no generation call
is made and the caller receives the fixed refusal message.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from groundrag.schemas.chunk import ScoredChunk

logger = logging.getLogger("groundrag.retrieve.gate")


class GateState(str, Enum):
    ANSWERABLE = "answerable"
    REFUSED = "refused"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    threshold: float
    top: Optional[ScoredChunk] = None

    @property
    def answerable(self) -> bool:
        return self.state == GateState.ANSWERABLE


class RelevanceGate:
    """
    Threshold gate over the ranked candidates.

    Args:
        threshold: Minimum top score for longer queries.
        short_query_threshold: Minimum top score for short queries.
        short_query_max_tokens: Token count at or below which a query is short.
    """

    def __init__(
        self,
        threshold: float = 0.45,
        short_query_threshold: float = 0.48,
        short_query_max_tokens: int = 4,
    ):
        self.threshold = threshold
        self.short_query_threshold = short_query_threshold
        self.short_query_max_tokens = short_query_max_tokens

    @classmethod
    def from_config(cls, config) -> "RelevanceGate":
        rc = config.retrieval
        return cls(
            threshold=rc.threshold,
            short_query_threshold=rc.short_query_threshold,
            short_query_max_tokens=rc.short_query_max_tokens,
        )

    def threshold_for(self, tokens: list[str]) -> float:
        if len(tokens) <= self.short_query_max_tokens:
            return self.short_query_threshold
        return self.threshold

    def decide(self, ranked: list[ScoredChunk], tokens: list[str]) -> GateDecision:
        """
        Approve or refuse a request.

        Args:
            ranked: Candidates sorted by score descending.
            tokens: Tokenized question.
        """
        threshold = self.threshold_for(tokens)
        top = ranked[0] if ranked else None
        if top is None or not math.isfinite(top.score) or top.score < threshold:
            logger.debug(
                f"Refused: top score {round(top.score, 4) if top else None} below threshold {threshold}"
            )
            return GateDecision(state=GateState.REFUSED, threshold=threshold, top=top)
        return GateDecision(state=GateState.ANSWERABLE, threshold=threshold, top=top)
