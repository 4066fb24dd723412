"""
Snippet Extractor
==================

Locates the most defensible excerpt inside a chunk. Excerpts are built
from whole trimmed lines of the chunk, so every snippet is (modulo
whitespace) a literal piece of corpus text.

Two modes:
    - Definition mode (questions like "apa yang dimaksud dengan ..."):
      anchor on the first line mentioning an acronym from the question,
      or failing that a "disingkat (menjadi)" line; take 3 lines before
      through 2 lines after the anchor
    - General mode: anchor on the line with the highest lexical overlap
      with the question; take a window starting 2 lines before it

Noise lines (URLs, campus domains, study-program footers, page ranges,
horizontal rules) never appear in a snippet but do not stop the scan.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from groundrag.retrieve.scorer import lexical_overlap, tokenize
from groundrag.schemas.chunk import ScoredChunk

logger = logging.getLogger("groundrag.retrieve.snippet")

DEFINITION_PHRASES = (
    "apa yang dimaksud",
    "pengertian",
    "definisi",
    "yang dimaksud",
)

CONTEXT_SEPARATOR = "\n\n---\n\n"

_ACRONYM_RE = re.compile(r"[A-Z]{4,}(?:\s+[A-Z]{2,})*")
_ABBREVIATED_AS_RE = re.compile(r"disingkat\s+menjadi", re.IGNORECASE)
_ABBREVIATED_RE = re.compile(r"\bdisingkat\b", re.IGNORECASE)

_URL_RE = re.compile(r"www\.|http|\.ac\.id", re.IGNORECASE)
_LABEL_RE = re.compile(r"program studi", re.IGNORECASE)
_PAGE_RANGE_RE = re.compile(r"^\d{1,3}-\d{1,3}\b")
_RULE_RE = re.compile(r"^[-_=]{3,}$")


# ── Line helpers ───────────────────────────────────────────────────

def is_noise_line(line: str) -> bool:
    """Whether a line is boilerplate that must never be quoted."""
    stripped = (line or "").strip()
    if not stripped:
        return True
    if _URL_RE.search(stripped) or _LABEL_RE.search(stripped):
        return True
    if _PAGE_RANGE_RE.match(stripped):
        return True
    if _RULE_RE.match(stripped):
        return True
    return False


def split_lines(text: str) -> list[str]:
    """Trimmed, non-empty lines of a text."""
    raw_lines = (text or "").replace("\r", "").split("\n")
    return [line.strip() for line in raw_lines if line.strip()]


def _window(lines: list[str], start: int, end: int, max_lines: int) -> list[str]:
    picked = []
    for line in lines[start:end]:
        if is_noise_line(line):
            continue
        picked.append(line)
        if len(picked) >= max_lines:
            break
    return picked


# ── Question classification ────────────────────────────────────────

def is_definition_question(question: str) -> bool:
    q = question.lower()
    return any(phrase in q for phrase in DEFINITION_PHRASES)


def extract_acronyms(question: str) -> list[str]:
    """All-caps terms of 4+ letters (optionally multi-word), in question order."""
    seen: dict[str, None] = {}
    for match in _ACRONYM_RE.findall(question or ""):
        term = match.strip()
        if term:
            seen.setdefault(term, None)
    return list(seen)


# ── Extraction ─────────────────────────────────────────────────────

def extract_definition_snippet(question: str, text: str, max_lines: int = 8) -> Optional[str]:
    """
    Definition-mode excerpt.

    Returns:
        The excerpt, or None when the question is not a definition
        question or no anchor line exists. Callers fall back to
        ``extract_best_snippet``.
    """
    if not is_definition_question(question):
        return None

    lines = split_lines(text)
    if not lines:
        return None

    idx = -1
    for acronym in extract_acronyms(question):
        needle = acronym.lower()
        idx = next((i for i, line in enumerate(lines) if needle in line.lower()), -1)
        if idx != -1:
            break

    if idx == -1:
        idx = next((i for i, line in enumerate(lines) if _ABBREVIATED_AS_RE.search(line)), -1)
    if idx == -1:
        idx = next((i for i, line in enumerate(lines) if _ABBREVIATED_RE.search(line)), -1)
    if idx == -1:
        return None

    picked = _window(lines, max(0, idx - 3), min(len(lines), idx + 3), max_lines)
    return "\n".join(picked).strip() if picked else None


def extract_best_snippet(question: str, text: str, max_lines: int = 6) -> str:
    """
    General-mode excerpt anchored on the best lexically matching line.

    Ties keep the first line seen. If every line is noise the first
    ``max_lines`` lines are returned as a last resort.
    """
    tokens = tokenize(question)
    lines = split_lines(text)
    if not lines:
        return (text or "").strip()

    best_idx = 0
    best_score = -1.0
    for i, line in enumerate(lines):
        if is_noise_line(line):
            continue
        score = lexical_overlap(tokens, line.lower())
        if score > best_score:
            best_score = score
            best_idx = i

    if best_score < 0:
        return "\n".join(lines[:max_lines])

    picked = _window(lines, max(0, best_idx - 2), min(len(lines), best_idx + max_lines), max_lines)
    return "\n".join(picked or [lines[best_idx]]).strip()


class SnippetExtractor:
    """
    Picks the extraction mode per question and assembles the context.

    Usage:
        extractor = SnippetExtractor()
        snippet = extractor.extract(question, chunk.text)
        context = extractor.build_context(question, ranked[:3])

    Args:
        max_lines: Window size in general mode.
        definition_max_lines: Window size for definition questions.
        separator: Separator between context snippets.
    """

    def __init__(
        self,
        max_lines: int = 6,
        definition_max_lines: int = 8,
        separator: str = CONTEXT_SEPARATOR,
    ):
        self.max_lines = max_lines
        self.definition_max_lines = definition_max_lines
        self.separator = separator

    @classmethod
    def from_config(cls, config) -> "SnippetExtractor":
        sc = config.snippet
        return cls(
            max_lines=sc.max_lines,
            definition_max_lines=sc.definition_max_lines,
            separator=sc.context_separator,
        )

    def extract(self, question: str, text: str) -> str:
        """Definition mode first, general mode as the fallback."""
        snippet = extract_definition_snippet(question, text, self.definition_max_lines)
        if snippet:
            return snippet
        if is_definition_question(question):
            logger.debug("No definition anchor found, using the general window")
            max_lines = self.definition_max_lines
        else:
            max_lines = self.max_lines
        return extract_best_snippet(question, text, max_lines)

    def build_context(self, question: str, ranked: Sequence[ScoredChunk]) -> str:
        """One snippet per ranked chunk, joined by the separator."""
        return self.separator.join(self.extract(question, s.chunk.text) for s in ranked)
