#!/usr/bin/env python3
"""
Diagram Search - Command Line

Runs one search session against the configured provider pool and prints
the accumulated results.

Usage:
    # Search and load two extra pages
    python -m diagram_search "network diagram" --more 2

    # Pool health only
    python -m diagram_search --status

    # Put every credential back into rotation
    python -m diagram_search --reset-credentials

    # Query suggestions
    python -m diagram_search "flow" --suggest

Environment Variables:
    DIAGRAM_SEARCH_API_KEYS: Comma-separated provider keys
    DIAGRAM_SEARCH_ENGINE_ID: Programmable Search Engine id
    DIAGRAM_SEARCH_LOG_LEVEL: Logging level (default: WARNING)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from diagram_search.application.search.suggestions import get_search_suggestions
from diagram_search.config import SearchSettings
from diagram_search.container import create_container
from diagram_search.core.exceptions import DiagramSearchError

logger = logging.getLogger("diagram_search")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diagram-search",
        description="Search for diagram images with credential rotation and offline fallback",
    )
    parser.add_argument("query", nargs="?", default="", help="Search query")
    parser.add_argument(
        "--more",
        type=int,
        default=0,
        help="Number of additional pages to load (default: 0)",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print credential pool status only, without searching",
    )
    parser.add_argument(
        "--reset-credentials",
        action="store_true",
        help="Reset every credential to available before searching",
    )
    parser.add_argument("--suggest", action="store_true", help="Print suggestions for the query")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


async def run(args: argparse.Namespace, settings: SearchSettings) -> int:
    container = create_container(settings)
    aggregator = container.aggregator()
    cache = container.cache()
    cache.start_sweeper(settings.sweep_interval)
    output: dict = {}

    try:
        if args.reset_credentials:
            output["reset"] = aggregator.reset_all_credentials().to_dict()

        if args.query and not args.status:
            await aggregator.search(args.query)
            for _ in range(max(0, args.more)):
                if not aggregator.has_more:
                    break
                await aggregator.load_more()

            snapshot = aggregator.snapshot()
            output["search"] = {
                "query": snapshot.query,
                "state": snapshot.state.value,
                "has_more": snapshot.has_more,
                "stale": snapshot.stale,
                "from_fallback": snapshot.from_fallback,
                "error": str(snapshot.error) if snapshot.error else None,
                "results": [item.to_dict() for item in snapshot.results],
            }

        output["pool"] = aggregator.get_pool_status().to_dict()
    finally:
        await cache.stop_sweeper()
        await container.provider().close()

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        _print_text(output, quota_notice=aggregator.show_quota_notice)

    search = output.get("search")
    return 1 if search and search["state"] == "error" else 0


def _print_text(output: dict, quota_notice: bool) -> None:
    search = output.get("search")
    if search:
        print(f"Query: {search['query']}  [{search['state']}]")
        if search["error"]:
            print(f"Error: {search['error']}")
        if search["from_fallback"]:
            print("Showing offline results" + (": search quota exhausted" if quota_notice else ""))
        if search["stale"]:
            print("Some results are from an expired cache")
        for i, item in enumerate(search["results"], start=1):
            print(f"{i:3}. {item['title']}")
            print(f"     {item['image_location']}")
        print(f"{len(search['results'])} result(s), more available: {search['has_more']}")

    pool = output.get("pool")
    if pool:
        print(
            f"Credentials: {pool['available_credentials']}/{pool['total_credentials']} "
            f"available ({pool['health']})"
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = SearchSettings.from_env().validate()
    except DiagramSearchError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    level = logging.DEBUG if args.verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.suggest:
        for suggestion in get_search_suggestions(args.query):
            print(suggestion)
        return 0

    if not settings.live_search_enabled:
        logger.warning("Live search not configured; results will come from offline collections")

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
