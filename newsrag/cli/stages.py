"""Command-line runner for the pipeline stages.

Usage::

    python -m newsrag.cli scrape --publication faker --limit 20
    python -m newsrag.cli chunk --publication faker --version 1 --words-per-chunk 128
    python -m newsrag.cli embed --publication faker --version 1
    python -m newsrag.cli ask "Mitä Helsingissä tapahtui eilen?" [--stream]

Each command builds the same :class:`PipelineContext` the web server uses,
runs one stage and prints a short summary.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from newsrag.config.settings import Settings
from newsrag.pipeline.context import PipelineContext, build_context
from newsrag.utils.concurrency import ItemOutcome, PoolReport
from newsrag.utils.errors import NewsRagError
from newsrag.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _print_report(title: str, report: PoolReport) -> None:
    print(f"{title} complete:")
    print(f"  Items:      {report.total}")
    print(f"  Succeeded:  {report.count(ItemOutcome.SUCCEEDED)}")
    print(f"  Skipped:    {report.count(ItemOutcome.SKIPPED)}")
    print(f"  Failed:     {report.count(ItemOutcome.FAILED)}")


async def _handle_scrape(args: argparse.Namespace, context: PipelineContext) -> int:
    context.require_publication(args.publication)
    print(f"Scraping {args.limit} latest items of '{args.publication}'")
    report = await context.scraper.scrape(args.publication, args.limit)
    _print_report("Scrape", report)
    return 0


async def _handle_chunk(args: argparse.Namespace, context: PipelineContext) -> int:
    context.require_publication(args.publication)
    print(f"Chunking '{args.publication}' at version {args.version} "
          f"({args.words_per_chunk} words per chunk)")
    report = await context.chunker.chunk(args.publication, args.version, args.words_per_chunk)
    _print_report("Chunking", report)
    return 0


async def _handle_embed(args: argparse.Namespace, context: PipelineContext) -> int:
    context.require_publication(args.publication)
    print(f"Embedding '{args.publication}' chunks at version {args.version}")
    report = await context.embedder.embed(args.publication, args.version)
    _print_report("Embedding", report)
    return 0


async def _handle_ask(args: argparse.Namespace, context: PipelineContext) -> int:
    if args.stream:
        async for delta in context.search.answer_stream(args.query):
            print(delta, end="", flush=True)
        print()
        return 0

    result = await context.search.answer(args.query)
    print(result.answer)
    if result.stories:
        print("\nStories:")
        for story in result.stories:
            headline = story.headline or "(no headline)"
            print(f"  [{story.publication}] {headline}")
            print(f"      {story.href}")
    return 0


_HANDLERS = {
    "scrape": _handle_scrape,
    "chunk": _handle_chunk,
    "embed": _handle_embed,
    "ask": _handle_ask,
}


async def _run(args: argparse.Namespace, context: PipelineContext) -> int:
    await context.startup()
    try:
        return await _HANDLERS[args.command](args, context)
    finally:
        await context.aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the pipeline CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m newsrag.cli",
        description="Run the newsrag pipeline stages without the web server.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Pipeline stages")

    # -- scrape --
    scrape_parser = subparsers.add_parser("scrape", help="Scrape the latest stories")
    scrape_parser.add_argument("--publication", required=True, help="Publication name")
    scrape_parser.add_argument("--limit", type=int, default=20,
                               help="How many latest items to list (default: 20)")

    # -- chunk --
    chunk_parser = subparsers.add_parser("chunk", help="Chunk stored stories")
    chunk_parser.add_argument("--publication", required=True, help="Publication name")
    chunk_parser.add_argument("--version", required=True, type=int, help="Chunking version")
    chunk_parser.add_argument("--words-per-chunk", dest="words_per_chunk", type=int,
                              default=128, help="Word budget per chunk (default: 128)")

    # -- embed --
    embed_parser = subparsers.add_parser("embed", help="Embed stored chunks")
    embed_parser.add_argument("--publication", required=True, help="Publication name")
    embed_parser.add_argument("--version", required=True, type=int, help="Chunking version")

    # -- ask --
    ask_parser = subparsers.add_parser("ask", help="Ask a question about the news")
    ask_parser.add_argument("query", help="The question")
    ask_parser.add_argument("--stream", action="store_true",
                            help="Stream the answer with inline citations")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None, context: PipelineContext | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "scrape" and args.limit < 1:
        parser.error("--limit must be >= 1")
    if args.command == "chunk" and args.words_per_chunk < 1:
        parser.error("--words-per-chunk must be >= 1")

    if context is None:
        app_settings = Settings()
        configure_logging(log_level=app_settings.log_level, app_env=app_settings.app_env)
        context = build_context(app_settings)

    try:
        return asyncio.run(_run(args, context))
    except NewsRagError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
