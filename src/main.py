# src/main.py — v3
"""CLI entry point: enrich, collect and cache maintenance commands.

Usage:
    salesintel enrich <company> --requester <name> [--refresh]
    salesintel collect <company> [--sources organic,news] [--refresh] [--max-cost USD]
    salesintel status <company>
    salesintel cache stats
    salesintel cache list [--pattern GLOB] [--category CATEGORY]
    salesintel cache inspect <key>
    salesintel cache clear
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from salesintel.config.settings import Settings, load_settings
from salesintel.core.errors import PipelineError
from salesintel.logging.logger import setup_logging
from salesintel.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except PipelineError as exc:
        from salesintel.api.models import ErrorResponse

        print(ErrorResponse.from_error(exc).model_dump_json(indent=2))
        return 2
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="salesintel",
        description=f"salesintel v{__version__} — Sales research aggregation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- enrich ---
    p_enrich = subparsers.add_parser(
        "enrich", help="Collect, analyze and persist intelligence for a company",
    )
    p_enrich.add_argument("company", help="Company name or domain")
    p_enrich.add_argument("-r", "--requester", required=True, help="Requesting user")
    p_enrich.add_argument("--request-id", default=None, help="Correlation id")
    p_enrich.add_argument(
        "--refresh", action="store_true", help="Bypass cached results",
    )
    p_enrich.set_defaults(func=_cmd_enrich)

    # --- collect ---
    p_collect = subparsers.add_parser(
        "collect", help="Collect raw source data for a company",
    )
    p_collect.add_argument("company", help="Company name or domain")
    p_collect.add_argument(
        "--sources", default=None,
        help="Comma-separated source keys (default: ENABLED_SOURCES)",
    )
    p_collect.add_argument(
        "--refresh", action="store_true", help="Bypass cached results",
    )
    p_collect.add_argument(
        "--max-cost", type=float, default=None,
        help="USD budget for new upstream calls; cached sources are free",
    )
    p_collect.set_defaults(func=_cmd_collect)

    # --- status ---
    p_status = subparsers.add_parser(
        "status", help="Show which sources are cached for a company",
    )
    p_status.add_argument("company", help="Company name or domain")
    p_status.set_defaults(func=_cmd_status)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or maintain the cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)

    cache_sub.add_parser("stats", help="Entry counts and sizes").set_defaults(func=_cmd_cache_stats)

    p_list = cache_sub.add_parser("list", help="List cache keys")
    p_list.add_argument("--pattern", default="*", help="Glob pattern (default: *)")
    p_list.add_argument("--category", default=None, help="Only this category")
    p_list.set_defaults(func=_cmd_cache_list)

    p_inspect = cache_sub.add_parser("inspect", help="Show one entry")
    p_inspect.add_argument("key", help="Cache key")
    p_inspect.set_defaults(func=_cmd_cache_inspect)

    cache_sub.add_parser("clear", help="Delete every entry").set_defaults(func=_cmd_cache_clear)

    return parser


async def _cmd_enrich(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.api.facade import SalesIntelligenceService

    async with SalesIntelligenceService(settings) as service:
        response = await service.enrich(
            args.company, args.requester,
            request_id=args.request_id, force_refresh=args.refresh,
        )
    print(response.model_dump_json(indent=2))
    return 0


async def _cmd_collect(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.api.facade import SalesIntelligenceService

    sources = [s.strip() for s in args.sources.split(",")] if args.sources else None
    async with SalesIntelligenceService(settings) as service:
        collection = await service.collect(
            args.company, sources, force_refresh=args.refresh, max_cost=args.max_cost,
        )
    print(collection.model_dump_json(indent=2))
    return 0 if collection.succeeded else 1


async def _cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.api.facade import SalesIntelligenceService

    async with SalesIntelligenceService(settings) as service:
        availability = await service.source_availability(args.company)
    print(json.dumps({
        **availability.model_dump(mode="json"),
        "overall": round(availability.overall, 3),
    }, indent=2))
    return 0


async def _cmd_cache_stats(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.cache.cache_factory import create_typed_cache

    store = create_typed_cache(settings)
    try:
        stats = await store.stats()
    finally:
        await store.close()
    print(stats.model_dump_json(indent=2))
    return 0 if stats.healthy else 1


async def _cmd_cache_list(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.cache.cache_factory import create_typed_cache

    store = create_typed_cache(settings)
    try:
        keys = await store.list_keys(args.pattern, args.category)
    finally:
        await store.close()
    for key in keys:
        print(key)
    return 0


async def _cmd_cache_inspect(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.cache.cache_factory import create_typed_cache

    store = create_typed_cache(settings)
    try:
        inspection = await store.inspect(args.key)
    finally:
        await store.close()
    if inspection is None:
        logger.error("Key not found: %s", args.key)
        return 1
    print(inspection.model_dump_json(indent=2))
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, settings: Settings) -> int:
    from salesintel.cache.cache_factory import create_typed_cache

    store = create_typed_cache(settings)
    try:
        deleted = await store.clear()
    finally:
        await store.close()
    print(json.dumps({"deleted": deleted}))
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file or None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
