"""
Allow running GroundRAG as a module: ``python -m groundrag``.

This delegates to the CLI entry point so that both
``groundrag`` (console script) and ``python -m groundrag``
behave identically.
"""

from groundrag.cli import main

if __name__ == "__main__":
    main()
