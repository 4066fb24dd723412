"""
GroundRAG: Verbatim-Grounded Question Answering over a Fixed Corpus
=====================================================================

GroundRAG answers questions strictly from a pre-chunked, pre-embedded
corpus. It refuses when no passage is relevant enough, and it never
surfaces a generated answer that is not a literal substring of the
retrieved passages.

Architecture Overview:
    Query → Score (semantic + lexical + legal ref) → Gate → Snippets
          → Generate → Verify (verbatim) → Answer | Extractive fallback

Modules:
    - ingest:    Corpus loading, chunk store, query embedding
    - retrieve:  Scoring, legal-reference matching, relevance gate, snippets
    - generate:  Generator adapters (Groq) and prompts
    - verify:    Verbatim grounding check + two-pass answer protocol
    - sessions:  Chat session repository (outside the retrieval core)
    - pipeline:  End-to-end orchestrator
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
