"""
GroundRAG Retrieval Core
=========================

    - scorer.py:    semantic + lexical scoring of one chunk
    - legal_ref.py: pasal/ayat citation extraction and matching
    - hybrid.py:    brute-force ranking with reference filtering
    - gate.py:      relevance gate (answer or refuse)
    - snippet.py:   excerpt extraction and context assembly
"""
