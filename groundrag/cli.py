"""
GroundRAG CLI
==============

Command-line interface for building the corpus, asking questions and
serving the HTTP API.

Usage:
    python -m groundrag build-corpus --docs docsTxt/ --output data/embeddings.json
    python -m groundrag ask "apa isi pasal 28 ayat 1"
    python -m groundrag serve --port 3001
"""

from __future__ import annotations

import argparse
import json
import sys

from groundrag.config import get_config
from groundrag.exceptions import EmbeddingError, LoadError
from groundrag.utils import setup_logging


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="groundrag",
        description="GroundRAG: verbatim-grounded question answering",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    parser.add_argument("--verbose", "-v", action="store_true")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ── build-corpus ────────────────────────────────────────────
    build_parser = subparsers.add_parser("build-corpus", help="Embed chunk files into the corpus JSON")
    build_parser.add_argument("--docs", required=True, help="Directory of .txt/.md chunk files")
    build_parser.add_argument("--output", default=None, help="Output corpus path (default: config corpus_path)")
    build_parser.add_argument("--chunk-chars", type=int, default=None,
                              help="Split files into fixed-size character windows")

    # ── ask ─────────────────────────────────────────────────────
    ask_parser = subparsers.add_parser("ask", help="Answer one question from the corpus")
    ask_parser.add_argument("question", help="Question to answer")
    ask_parser.add_argument("--json", action="store_true", help="Print the full result as JSON")

    # ── serve ───────────────────────────────────────────────────
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=3001)

    args = parser.parse_args(argv)
    config = get_config(args.config)
    setup_logging(level="DEBUG" if args.verbose else config.log_level, format_style=config.log_format)

    if args.command == "build-corpus":
        cmd_build_corpus(args, config)
    elif args.command == "ask":
        cmd_ask(args, config)
    elif args.command == "serve":
        cmd_serve(args, config)
    else:
        parser.print_help()
        sys.exit(1)


def _load_pipeline(config):
    from groundrag.pipeline import GroundRAGPipeline

    try:
        return GroundRAGPipeline.from_config(config)
    except LoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def cmd_build_corpus(args, config):
    """Embed every chunk file and write the corpus."""
    from groundrag.ingest.corpus_builder import build_corpus
    from groundrag.ingest.embedder import QueryEmbedder

    output = args.output or config.corpus_path
    count = build_corpus(
        args.docs,
        output,
        QueryEmbedder.from_config(config),
        chunk_chars=args.chunk_chars,
    )
    print(f"Wrote {count} chunks to {output}")


def cmd_ask(args, config):
    """Answer a single question."""
    pipeline = _load_pipeline(config)
    try:
        result = pipeline.answer(args.question)
    except EmbeddingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.model_dump(by_alias=True), indent=2, ensure_ascii=False))
        return

    print(result.answer)
    source = "generator (verified)" if result.used_generator else "extractive"
    if not result.refused:
        print(f"\n  [{source}]")


def cmd_serve(args, config):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from groundrag.api import create_app
    from groundrag.sessions.repository import JsonSessionRepository

    pipeline = _load_pipeline(config)
    repository = JsonSessionRepository(config.sessions_path, welcome_message=config.welcome_message)
    app = create_app(pipeline, repository)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
