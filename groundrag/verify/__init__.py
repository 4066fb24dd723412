"""
GroundRAG Verification
=======================

    - grounding.py: verbatim substring check and the two-pass
                    generate/verify/retry/fallback protocol
"""
