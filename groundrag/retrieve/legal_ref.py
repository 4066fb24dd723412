"""
Legal Reference Matcher
========================

Detects Indonesian statute citations ("pasal 28a ayat (1)") in a
question and decides which chunks cite the same article and clause.

    extract_reference("apa isi pasal 28 ayat 1")
        → LegalRef(article="28", clause="1")

    matches("... pasal 28 ayat (1) menyatakan ...", ref) → True

Matching chunks receive a flat boost. When a reference is present the
candidate set is narrowed to matching chunks, unless none match, in
which case the unfiltered set is kept: an over-specific or malformed
citation must never empty the result.
"""

from __future__ import annotations

import re
from typing import Optional

from groundrag.schemas.chunk import LegalRef

_ARTICLE_RE = re.compile(r"\bpasal\s+(\d+)\s*([a-z])?\b", re.IGNORECASE)
_CLAUSE_RE = re.compile(r"\bayat\s*\(?\s*(\d+)\s*\)?\b", re.IGNORECASE)
_ARTICLE_LETTER_RE = re.compile(r"(\d+)([a-z])$", re.IGNORECASE)


def extract_reference(question: str) -> Optional[LegalRef]:
    """
    Parse the first pasal/ayat citation of a question.

    Returns:
        LegalRef, or None when the question cites neither.
    """
    q = question.lower()
    article_match = _ARTICLE_RE.search(q)
    clause_match = _CLAUSE_RE.search(q)
    if not article_match and not clause_match:
        return None

    article = None
    if article_match:
        article = article_match.group(1) + (article_match.group(2) or "")
    clause = clause_match.group(1) if clause_match else None
    return LegalRef(article=article, clause=clause)


def matches(text_lower: str, ref: Optional[LegalRef]) -> bool:
    """
    Whether a lowercase chunk text cites the referenced article and clause.

    Absent sub-fields are satisfied; no reference never matches.
    """
    if ref is None:
        return False
    ok = True

    if ref.article:
        spaced = _ARTICLE_LETTER_RE.sub(r"\1 \2", ref.article)
        ok = ok and (f"pasal {ref.article}" in text_lower or f"pasal {spaced}" in text_lower)

    if ref.clause:
        ok = ok and (f"ayat ({ref.clause})" in text_lower or f"ayat {ref.clause}" in text_lower)

    return ok
