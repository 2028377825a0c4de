# src/main.py - v2
"""CLI entry point: analyze, search, similar, stats commands.

Usage:
    smartsaver analyze --text "2 idli with sambar" [--image meal.jpg]
    smartsaver search <query>
    smartsaver similar <query> [--limit N]
    smartsaver stats

Results go to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any

from smartsaver.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ANALYSIS_FAILED = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_ERROR

    try:
        from smartsaver.config.settings import load_settings
        from smartsaver.logging.logger import setup_logging_from_settings

        settings = load_settings()
        setup_logging_from_settings(settings, verbose=args.verbose, stream=sys.stderr)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_ERROR


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="smartsaver",
        description=f"Smart Saver v{__version__} - cached AI nutrition analysis",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze a meal")
    p_analyze.add_argument("--text", default=None, help="Free-text meal description")
    p_analyze.add_argument(
        "--transcript", default=None, help="Voice transcript of the meal",
    )
    p_analyze.add_argument("--image", type=Path, default=None, help="Meal photo")
    p_analyze.add_argument(
        "--meal-type", default=None,
        choices=["breakfast", "lunch", "dinner", "snack"],
        help="Meal type hint",
    )
    p_analyze.add_argument(
        "--skip-cache", action="store_true",
        help="Force a fresh AI analysis",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- search ---
    p_search = subparsers.add_parser("search", help="AI food suggestions")
    p_search.add_argument("query", help="Partial food name")
    p_search.set_defaults(func=_cmd_search)

    # --- similar ---
    p_similar = subparsers.add_parser(
        "similar", help="Previously analyzed foods matching a query",
    )
    p_similar.add_argument("query", help="Food name or words")
    p_similar.add_argument("--limit", type=int, default=None, help="Max results")
    p_similar.set_defaults(func=_cmd_similar)

    # --- stats ---
    p_stats = subparsers.add_parser("stats", help="Show cache statistics")
    p_stats.add_argument("--top", type=int, default=5, help="Top foods to list")
    p_stats.set_defaults(func=_cmd_stats)

    return parser


async def _cmd_analyze(args: argparse.Namespace, settings: Any) -> int:
    """Analyze one meal and print the outcome."""
    from smartsaver.api.facade import SmartSaver
    from smartsaver.api.models import AnalysisRequest

    image_bytes = None
    image_mime = None
    if args.image is not None:
        if not args.image.is_file():
            logger.error("File not found: %s", args.image)
            return EXIT_ERROR
        image_bytes = args.image.read_bytes()
        image_mime = mimetypes.guess_type(args.image.name)[0]

    request = AnalysisRequest(
        text=args.text,
        audio_transcript=args.transcript,
        image_bytes=image_bytes,
        image_mime=image_mime,
        meal_type_hint=args.meal_type,
        skip_cache=args.skip_cache,
    )

    saver = SmartSaver.from_settings(settings)
    try:
        outcome = await saver.analyze(request)
    finally:
        await saver.aclose()

    _print_json(outcome.model_dump(by_alias=True, exclude_none=True))
    return EXIT_OK if outcome.success else EXIT_ANALYSIS_FAILED


async def _cmd_search(args: argparse.Namespace, settings: Any) -> int:
    from smartsaver.api.facade import SmartSaver

    saver = SmartSaver.from_settings(settings)
    try:
        suggestions = await saver.search_suggestions(args.query)
    finally:
        await saver.aclose()
    _print_json([s.model_dump(by_alias=True) for s in suggestions])
    return EXIT_OK


async def _cmd_similar(args: argparse.Namespace, settings: Any) -> int:
    from smartsaver.api.facade import SmartSaver

    saver = SmartSaver.from_settings(settings)
    try:
        suggestions = await saver.similar_cached(args.query, args.limit)
    finally:
        await saver.aclose()
    _print_json([s.model_dump(by_alias=True) for s in suggestions])
    return EXIT_OK


async def _cmd_stats(args: argparse.Namespace, settings: Any) -> int:
    """Display cache popularity statistics."""
    from smartsaver.cache.cache_factory import create_cache_store

    store = create_cache_store(settings)
    try:
        stats = await store.stats(top_n=args.top)
    finally:
        store.close()

    print(f"\nCache statistics ({settings.cache_backend}):")
    print(f"  Cached foods:      {stats.record_count}")
    print(f"  Total hits:        {stats.total_hits}")
    print(f"  AI calls saved:    {stats.inference_calls_saved}")
    for provider, count in sorted(stats.by_provider.items()):
        print(f"  From {provider + ':':13s}{count}")
    if stats.top_foods:
        print("  Top foods:")
        for food in stats.top_foods:
            print(f"    {food.hit_count:5d}  {food.food_name}")
    return EXIT_OK


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


if __name__ == "__main__":
    sys.exit(main())
